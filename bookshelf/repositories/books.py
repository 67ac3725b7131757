"""Book persistence: listing, CRUD, filter values and cached statistics."""

import logging
import time
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy import case, distinct, func, select
from sqlalchemy.orm import Session

from bookshelf.core.cache import TTLCache
from bookshelf.models.book import Book
from bookshelf.repositories.book_query import BookFilters, build_book_query
from bookshelf.repositories.dialects import QueryDialect
from bookshelf.schemas.books import BookStats

logger = logging.getLogger(__name__)

RECENT_BOOKS_DAYS = 30

WRITABLE_FIELDS = frozenset({"title", "author", "genre", "published_year"})


class NoFieldsToUpdateError(Exception):
    """Raised when an update carries no writable fields."""

    def __init__(self, message: str = "No fields to update"):
        self.message = message
        super().__init__(message)


class BookRepository:
    """
    Book queries for one session.

    Every write commits and then invalidates the stats cache, so the next stats()
    call recomputes instead of serving pre-write numbers.
    """

    def __init__(self, session: Session, dialect: QueryDialect, stats_cache: TTLCache[BookStats]):
        self.session = session
        self.dialect = dialect
        self.stats_cache = stats_cache

    def list_books(self, filters: BookFilters) -> tuple[list[Book], int]:
        """Return (page rows, total matching rows); both share one condition list."""
        query = build_book_query(filters, self.dialect)
        page_stmt = query.page_statement()
        if logger.isEnabledFor(logging.DEBUG):
            sql, params = self.dialect.render(page_stmt)
            logger.debug("Book listing query", extra={"sql": sql, "params": params})

        started = time.perf_counter()
        total = self.session.scalar(query.count_statement()) or 0
        rows = list(self.session.scalars(page_stmt))
        logger.debug(
            "Listed books",
            extra={
                "total": total,
                "returned": len(rows),
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        return rows, total

    def get(self, book_id: int) -> Book | None:
        return self.session.get(Book, book_id)

    def create(self, fields: dict[str, Any]) -> Book:
        values = {k: v for k, v in fields.items() if k in WRITABLE_FIELDS}
        book = self.dialect.insert(self.session, Book, values)
        self.session.commit()
        self.stats_cache.invalidate()
        logger.info("Book created", extra={"book_id": book.id})
        return book

    def update(self, book_id: int, fields: dict[str, Any]) -> Book | None:
        """Write only the given fields. Empty fields is a client error, not a no-op."""
        values = {k: v for k, v in fields.items() if k in WRITABLE_FIELDS}
        if not values:
            raise NoFieldsToUpdateError()
        book = self.dialect.update(self.session, Book, book_id, values)
        if book is None:
            self.session.rollback()
            return None
        self.session.commit()
        self.stats_cache.invalidate()
        logger.info("Book updated", extra={"book_id": book_id, "fields": sorted(values)})
        return book

    def delete(self, book_id: int) -> bool:
        deleted = self.dialect.delete(self.session, Book, book_id)
        if not deleted:
            self.session.rollback()
            return False
        self.session.commit()
        self.stats_cache.invalidate()
        logger.info("Book deleted", extra={"book_id": book_id})
        return True

    def distinct_genres(self) -> list[str]:
        stmt = (
            select(Book.genre)
            .where(Book.genre.is_not(None), Book.genre != "")
            .distinct()
            .order_by(Book.genre)
        )
        return list(self.session.scalars(stmt))

    def distinct_authors(self) -> list[str]:
        stmt = select(Book.author).distinct().order_by(Book.author)
        return list(self.session.scalars(stmt))

    def stats(self) -> BookStats:
        return self.stats_cache.get_or_compute(self._compute_stats)

    def _compute_stats(self) -> BookStats:
        cutoff = datetime.now(UTC) - timedelta(days=RECENT_BOOKS_DAYS)
        stmt = select(
            func.count(Book.id),
            func.count(distinct(Book.author)),
            func.count(distinct(Book.genre)),
            func.coalesce(func.sum(case((Book.created_at >= cutoff, 1), else_=0)), 0),
        )
        total_books, total_authors, total_genres, recent_books = self.session.execute(stmt).one()
        logger.debug("Recomputed book stats", extra={"total_books": total_books})
        return BookStats(
            total_books=total_books,
            total_authors=total_authors,
            total_genres=total_genres,
            recent_books=int(recent_books),
        )
