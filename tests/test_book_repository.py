"""Repository tests against in-memory SQLite, once per query dialect."""

import unittest

from starlette.datastructures import QueryParams

from bookshelf.repositories.book_query import BookFilters, paginate
from bookshelf.repositories.books import BookRepository, NoFieldsToUpdateError
from bookshelf.repositories.dialects import MySQLDialect, PostgresDialect
from bookshelf.services.book_filters import parse_book_filters
from tests.support import SQLITE_HAS_RETURNING, DatabaseTestCase

DUNE = {"title": "Dune", "author": "Herbert", "genre": "Sci-Fi", "published_year": 1965}


class BookRepositoryTests:
    """Shared cases; subclasses pick the dialect."""

    dialect_class = MySQLDialect

    def setUp(self) -> None:
        super().setUp()
        self.repo = BookRepository(self.session, self.dialect_class(), self.stats_cache)

    def listing(self, query: str):
        return self.repo.list_books(parse_book_filters(QueryParams(query)))

    def test_create_assigns_id_and_timestamps(self) -> None:
        book = self.repo.create(DUNE)
        self.assertIsNotNone(book.id)
        self.assertEqual(book.title, "Dune")
        self.assertIsNotNone(book.created_at)
        self.assertIsNotNone(book.updated_at)

    def test_create_ignores_server_assigned_fields(self) -> None:
        book = self.repo.create({**DUNE, "id": 999, "created_at": "1999-01-01"})
        self.assertNotEqual(book.id, 999)

    def test_dune_filter_scenario(self) -> None:
        book = self.repo.create(DUNE)
        self.repo.create({"title": "The Hobbit", "author": "Tolkien", "genre": "Fantasy"})

        rows, total = self.listing("search=dune")
        self.assertEqual(total, 1)
        self.assertEqual([r.id for r in rows], [book.id])

        rows, total = self.listing("genre=Sci-Fi&genre=Fantasy")
        self.assertEqual(total, 2)
        self.assertIn(book.id, [r.id for r in rows])

        rows, total = self.listing("year=1966")
        self.assertEqual(total, 0)
        self.assertEqual(rows, [])

    def test_search_matches_author_case_insensitively(self) -> None:
        book = self.repo.create(DUNE)
        rows, _ = self.listing("search=HERB")
        self.assertEqual([r.id for r in rows], [book.id])

    def test_like_metacharacters_in_search_are_literal(self) -> None:
        self.repo.create(DUNE)
        rows, total = self.listing("search=%25")
        self.assertEqual(total, 0)
        self.assertEqual(rows, [])

    def test_total_matches_independent_count(self) -> None:
        genres = ["Sci-Fi", "Science", "Fantasy", None, "Noir", "sci-fi classics"]
        for i in range(18):
            self.repo.create({"title": f"Book {i}", "author": f"Author {i % 4}", "genre": genres[i % len(genres)]})
        everything, _ = self.repo.list_books(BookFilters(limit=100))

        _, total = self.repo.list_books(BookFilters(genre="sci", limit=5))
        expected = sum(1 for b in everything if b.genre and "sci" in b.genre.lower())
        self.assertEqual(total, expected)

        _, total = self.repo.list_books(BookFilters(genre="sci", author=["Author 1", "Author 2"], limit=5))
        expected = sum(
            1
            for b in everything
            if b.genre and "sci" in b.genre.lower() and b.author in ("Author 1", "Author 2")
        )
        self.assertEqual(total, expected)

    def test_pages_concatenate_to_full_ordered_set(self) -> None:
        created = [self.repo.create({"title": f"Book {i}", "author": "Writer"}) for i in range(25)]
        expected = [b.id for b in sorted(created, key=lambda b: (b.created_at, b.id), reverse=True)]

        seen: list[int] = []
        for page in (1, 2, 3):
            rows, total = self.listing(f"page={page}&limit=10")
            self.assertEqual(total, 25)
            seen.extend(r.id for r in rows)
        self.assertEqual(seen, expected)

        rows, total = self.listing("page=3&limit=10")
        self.assertEqual(len(rows), 5)
        self.assertEqual([r.id for r in rows], expected[-5:])
        info = paginate(total, 10, 20)
        self.assertFalse(info.has_next)
        self.assertTrue(info.has_prev)

    def test_page_past_the_end_still_reports_total(self) -> None:
        self.repo.create(DUNE)
        rows, total = self.listing("page=5&limit=10")
        self.assertEqual(rows, [])
        self.assertEqual(total, 1)

    def test_update_partial_fields(self) -> None:
        book = self.repo.create(DUNE)
        updated = self.repo.update(book.id, {"genre": "Classic"})
        self.assertEqual(updated.genre, "Classic")
        self.assertEqual(updated.title, "Dune")
        self.assertEqual(self.repo.get(book.id).genre, "Classic")

    def test_update_with_no_fields_fails(self) -> None:
        book = self.repo.create(DUNE)
        with self.assertRaises(NoFieldsToUpdateError) as ctx:
            self.repo.update(book.id, {})
        self.assertEqual(ctx.exception.message, "No fields to update")

    def test_update_missing_book_returns_none(self) -> None:
        self.assertIsNone(self.repo.update(12345, {"title": "x"}))

    def test_delete_twice(self) -> None:
        book = self.repo.create(DUNE)
        self.assertTrue(self.repo.delete(book.id))
        self.assertFalse(self.repo.delete(book.id))
        self.assertIsNone(self.repo.get(book.id))

    def test_distinct_filter_values_sorted(self) -> None:
        self.repo.create({"title": "A", "author": "Zelazny", "genre": "Fantasy"})
        self.repo.create({"title": "B", "author": "Asimov", "genre": "Sci-Fi"})
        self.repo.create({"title": "C", "author": "Asimov", "genre": None})
        self.assertEqual(self.repo.distinct_genres(), ["Fantasy", "Sci-Fi"])
        self.assertEqual(self.repo.distinct_authors(), ["Asimov", "Zelazny"])

    def test_deleting_last_noir_book_removes_genre(self) -> None:
        noir = self.repo.create({"title": "The Big Sleep", "author": "Chandler", "genre": "Noir"})
        self.repo.create(DUNE)
        self.assertIn("Noir", self.repo.distinct_genres())
        self.repo.delete(noir.id)
        self.assertNotIn("Noir", self.repo.distinct_genres())

    def test_stats_counts(self) -> None:
        self.repo.create(DUNE)
        self.repo.create({"title": "Children of Dune", "author": "Herbert", "genre": "Sci-Fi"})
        self.repo.create({"title": "Emma", "author": "Austen"})
        stats = self.repo.stats()
        self.assertEqual(stats.total_books, 3)
        self.assertEqual(stats.total_authors, 2)
        self.assertEqual(stats.total_genres, 1)
        self.assertEqual(stats.recent_books, 3)

    def test_writes_invalidate_stats_cache(self) -> None:
        self.assertEqual(self.repo.stats().total_books, 0)
        book = self.repo.create(DUNE)
        self.assertEqual(self.repo.stats().total_books, 1)
        self.repo.update(book.id, {"author": "Frank Herbert"})
        self.assertEqual(self.repo.stats().total_authors, 1)
        self.repo.delete(book.id)
        self.assertEqual(self.repo.stats().total_books, 0)

    def test_failed_update_keeps_cached_stats(self) -> None:
        self.repo.stats()
        self.repo.update(999, {"title": "x"})
        self.assertIsNotNone(self.stats_cache.get())


class TestBookRepositoryMySQLDialect(BookRepositoryTests, DatabaseTestCase):
    dialect_class = MySQLDialect


@unittest.skipUnless(SQLITE_HAS_RETURNING, "SQLite without RETURNING support")
class TestBookRepositoryPostgresDialect(BookRepositoryTests, DatabaseTestCase):
    dialect_class = PostgresDialect
