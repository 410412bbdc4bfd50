"""
Integration tests for BM25BookSearch.

These are real integration tests (no mocks) that verify the BM25 search
functionality with actual Book entities and the rank-bm25 library.
"""

import pytest

from library_app.domain.entities import Book
from library_app.infrastructure.search import BM25BookSearch


@pytest.fixture
def sample_books():
    """Create a small collection of books for testing."""
    return [
        Book.create_new("9780134685991", "Effective Java", ["Joshua Bloch"], 2018, "Programming"),
        Book.create_new("9781491950357", "Designing Data-Intensive Applications",
                        ["Martin Kleppmann"], 2017, "Databases"),
        Book.create_new("9780132350884", "Clean Code", ["Robert C. Martin"], 2008, "Craftsmanship"),
        Book.create_new("9780061120084", "To Kill a Mockingbird", ["Harper Lee"], 1960, "Fiction"),
        Book.create_new("9780451524935", "Nineteen Eighty-Four", ["George Orwell"], 1949, "Dystopia"),
        Book.create_new("9780262033848", "Introduction to Algorithms",
                        ["Thomas H. Cormen"], 2009, "Algorithms"),
    ]


@pytest.fixture
def index(sample_books):
    search = BM25BookSearch()
    search.build_index(sample_books)
    return search


class TestIndexBuilding:
    """Tests for build_index() and is_ready()."""

    def test_new_index_not_ready(self):
        assert BM25BookSearch().is_ready() is False

    def test_ready_after_build(self, index):
        assert index.is_ready() is True

    def test_empty_build_resets(self, index):
        index.build_index([])

        assert index.is_ready() is False
        assert index.search("java") == []


class TestSearch:
    """Tests for search()."""

    def test_finds_by_title(self, index):
        results = index.search("mockingbird")

        assert len(results) == 1
        assert results[0].book.title == "To Kill a Mockingbird"
        assert results[0].rank == 1
        assert results[0].score > 0

    def test_finds_by_author(self, index):
        results = index.search("orwell")

        assert [r.book.title for r in results] == ["Nineteen Eighty-Four"]

    def test_case_insensitive(self, index):
        assert index.search("JAVA")[0].book.title == "Effective Java"

    def test_unrelated_query_returns_nothing(self, index):
        assert index.search("quantum chromodynamics") == []

    def test_ranks_are_sequential(self, index):
        results = index.search("clean code java algorithms")

        assert [r.rank for r in results] == list(range(1, len(results) + 1))
        assert all(a.score >= b.score for a, b in zip(results, results[1:]))

    def test_max_results(self, index):
        assert len(index.search("clean code java algorithms", max_results=2)) == 2

    def test_available_only(self, sample_books):
        search = BM25BookSearch()
        search.build_index([
            book.with_availability(False) if book.title == "Effective Java" else book
            for book in sample_books
        ])

        assert search.search("java", available_only=True) == []
        assert len(search.search("java")) == 1

    def test_empty_query_rejected(self, index):
        with pytest.raises(ValueError, match="cannot be empty"):
            index.search("   ")

    def test_invalid_max_results(self, index):
        with pytest.raises(ValueError, match="max_results"):
            index.search("java", max_results=0)
