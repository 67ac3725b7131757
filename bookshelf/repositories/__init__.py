"""Data access for books."""

from bookshelf.repositories.book_query import BookFilters, BookQuery, build_book_query, paginate
from bookshelf.repositories.books import BookRepository, NoFieldsToUpdateError
from bookshelf.repositories.dialects import (
    MySQLDialect,
    PostgresDialect,
    QueryDialect,
    get_query_dialect,
)

__all__ = [
    "BookFilters",
    "BookQuery",
    "BookRepository",
    "MySQLDialect",
    "NoFieldsToUpdateError",
    "PostgresDialect",
    "QueryDialect",
    "build_book_query",
    "get_query_dialect",
    "paginate",
]
