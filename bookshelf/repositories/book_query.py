"""Filtered, paginated book listing statements."""

import math
from dataclasses import dataclass, field

from sqlalchemy import ColumnElement, Select, and_, func, or_, select

from bookshelf.models.book import Book
from bookshelf.repositories.dialects import QueryDialect

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass(frozen=True)
class BookFilters:
    """
    Typed book listing filter.

    genre/author: a single value means substring match, a list means exact membership.
    """

    search: str | None = None
    genre: str | list[str] | None = None
    author: str | list[str] | None = None
    year: int | None = None
    limit: int = DEFAULT_LIMIT
    offset: int = 0


@dataclass(frozen=True)
class PageInfo:
    page: int
    total_pages: int
    has_next: bool
    has_prev: bool


@dataclass(frozen=True)
class BookQuery:
    """Count and page statements built from one shared condition list."""

    conditions: tuple[ColumnElement[bool], ...] = field(default_factory=tuple)
    limit: int = DEFAULT_LIMIT
    offset: int = 0

    def _where(self) -> ColumnElement[bool] | None:
        if not self.conditions:
            return None
        return and_(*self.conditions)

    def count_statement(self) -> Select:
        stmt = select(func.count()).select_from(Book)
        where = self._where()
        return stmt if where is None else stmt.where(where)

    def page_statement(self) -> Select:
        stmt = select(Book)
        where = self._where()
        if where is not None:
            stmt = stmt.where(where)
        # id breaks created_at ties so paging is a strict total order.
        return (
            stmt.order_by(Book.created_at.desc(), Book.id.desc())
            .limit(self.limit)
            .offset(self.offset)
        )


def _dimension(column, value: str | list[str] | None, dialect: QueryDialect) -> ColumnElement[bool] | None:
    if value is None:
        return None
    if isinstance(value, list):
        if not value:
            return None
        return column.in_(value)
    return dialect.contains(column, value)


def build_book_query(filters: BookFilters, dialect: QueryDialect) -> BookQuery:
    """AND together every filter dimension that is present."""
    conditions: list[ColumnElement[bool]] = []
    if filters.search:
        conditions.append(
            or_(
                dialect.contains(Book.title, filters.search),
                dialect.contains(Book.author, filters.search),
            )
        )
    for column, value in ((Book.genre, filters.genre), (Book.author, filters.author)):
        condition = _dimension(column, value, dialect)
        if condition is not None:
            conditions.append(condition)
    if filters.year is not None:
        conditions.append(Book.published_year == filters.year)
    return BookQuery(conditions=tuple(conditions), limit=filters.limit, offset=filters.offset)


def paginate(total: int, limit: int, offset: int) -> PageInfo:
    page = offset // limit + 1
    total_pages = math.ceil(total / limit)
    return PageInfo(
        page=page,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )
