"""
Run the API server:
  python -m bookshelf.server
"""

import uvicorn

from bookshelf.core.config import settings


def main() -> None:
    uvicorn.run(
        "bookshelf.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    main()
