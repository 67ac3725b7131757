"""
Create a user (e.g. first admin). Run from project root:
  python -m bookshelf.scripts.create_user USERNAME EMAIL PASSWORD [role]
Example:
  python -m bookshelf.scripts.create_user admin admin@example.com your-secure-password admin
"""
import argparse
import sys

from pydantic import ValidationError

from bookshelf.core.config import settings
from bookshelf.core.database import SessionLocal, engine, init_db
from bookshelf.core.logging_setup import configure_logging
from bookshelf.schemas.auth import RegisterRequest
from bookshelf.services.auth import AuthError, register_user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Bookshelf user.")
    parser.add_argument("username", help="Username (3-30 letters, digits or underscores)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help="Password (8-128 chars)")
    parser.add_argument("role", nargs="?", default="user", choices=["user", "admin"])
    args = parser.parse_args(argv)

    configure_logging(settings.LOG_LEVEL)
    try:
        request = RegisterRequest(
            username=args.username,
            email=args.email,
            password=args.password,
            role=args.role,
        )
    except ValidationError as e:
        for err in e.errors():
            field = ".".join(str(p) for p in err["loc"])
            print(f"{field}: {err['msg']}", file=sys.stderr)
        return 1

    if settings.DB_AUTO_CREATE_TABLES:
        init_db(engine)
    db = SessionLocal()
    try:
        user = register_user(db, request.username, request.email, request.password, request.role)
    except AuthError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created user '{user.username}' with role '{user.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
