"""Tests for listing statement construction, dialect rendering and page math."""

import unittest

from bookshelf.repositories.book_query import BookFilters, build_book_query, paginate
from bookshelf.repositories.dialects import (
    MySQLDialect,
    PostgresDialect,
    escape_like,
    get_query_dialect,
)


class TestEscapeLike(unittest.TestCase):
    def test_metacharacters_match_literally(self) -> None:
        self.assertEqual(escape_like("100%_a/b"), "100/%/_a//b")

    def test_plain_text_unchanged(self) -> None:
        self.assertEqual(escape_like("Dune"), "Dune")


class TestDialectSelection(unittest.TestCase):
    def test_backend_names(self) -> None:
        self.assertIsInstance(get_query_dialect("postgresql"), PostgresDialect)
        self.assertIsInstance(get_query_dialect("mysql"), MySQLDialect)
        self.assertIsInstance(get_query_dialect("mariadb"), MySQLDialect)
        self.assertIsInstance(get_query_dialect("sqlite"), MySQLDialect)

    def test_unknown_backend_rejected(self) -> None:
        with self.assertRaises(ValueError):
            get_query_dialect("oracle")


class TestBuildBookQuery(unittest.TestCase):
    filters = BookFilters(search="dune", genre=["Sci-Fi", "Fantasy"], author="Herbert", year=1965)

    def test_no_filters_is_unconditional(self) -> None:
        query = build_book_query(BookFilters(), PostgresDialect())
        self.assertEqual(query.conditions, ())
        sql, _ = PostgresDialect().render(query.count_statement())
        self.assertNotIn("WHERE", sql)

    def test_postgres_rendering(self) -> None:
        dialect = PostgresDialect()
        sql, params = dialect.render(build_book_query(self.filters, dialect).page_statement())
        self.assertIn("ILIKE $1", sql)
        self.assertIn("IN (", sql)
        self.assertNotIn("?", sql)
        self.assertIn("ORDER BY books.created_at DESC, books.id DESC", sql)
        self.assertIn("%dune%", params)
        self.assertIn("%Herbert%", params)
        self.assertIn("Sci-Fi", params)
        self.assertIn("Fantasy", params)
        self.assertIn(1965, params)
        # search twice, author, two genres, year, limit, offset
        self.assertEqual(len(params), 8)

    def test_mysql_rendering(self) -> None:
        dialect = MySQLDialect()
        sql, params = dialect.render(build_book_query(self.filters, dialect).page_statement())
        self.assertIn("LIKE ?", sql)
        self.assertNotIn("ILIKE", sql)
        self.assertNotIn("$1", sql)
        self.assertEqual(len(params), 8)

    def test_count_and_page_share_conditions(self) -> None:
        dialect = MySQLDialect()
        query = build_book_query(self.filters, dialect)
        count_sql, count_params = dialect.render(query.count_statement())
        _, page_params = dialect.render(query.page_statement())
        self.assertIn("count(*)", count_sql.lower())
        self.assertNotIn("LIMIT", count_sql)
        self.assertEqual(page_params[: len(count_params)], count_params)

    def test_scalar_genre_is_substring_match(self) -> None:
        dialect = PostgresDialect()
        query = build_book_query(BookFilters(genre="sci"), dialect)
        sql, params = dialect.render(query.count_statement())
        self.assertIn("books.genre ILIKE", sql)
        self.assertEqual(params, ["%sci%"])

    def test_empty_list_adds_no_condition(self) -> None:
        query = build_book_query(BookFilters(author=[]), MySQLDialect())
        self.assertEqual(query.conditions, ())


class TestPaginate(unittest.TestCase):
    def test_last_partial_page(self) -> None:
        info = paginate(total=25, limit=10, offset=20)
        self.assertEqual(info.page, 3)
        self.assertEqual(info.total_pages, 3)
        self.assertFalse(info.has_next)
        self.assertTrue(info.has_prev)

    def test_first_page(self) -> None:
        info = paginate(total=25, limit=10, offset=0)
        self.assertEqual(info.page, 1)
        self.assertTrue(info.has_next)
        self.assertFalse(info.has_prev)

    def test_empty_result(self) -> None:
        info = paginate(total=0, limit=10, offset=0)
        self.assertEqual(info.total_pages, 0)
        self.assertFalse(info.has_next)
        self.assertFalse(info.has_prev)
