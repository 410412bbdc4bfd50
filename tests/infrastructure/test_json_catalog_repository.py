"""
Tests for JsonCatalogRepository.

Validates the JSON file implementation of the CatalogRepository protocol:
round-trips, missing files, rejection of bad snapshots and atomic writes.

Test Pattern: AAA (Arrange-Act-Assert)
"""

import json
import os
from datetime import datetime, timedelta, UTC

import pytest

from library_app.domain.catalog import Catalog
from library_app.domain.entities import Book, Librarian, Student
from library_app.domain.results import CatalogIntegrityError
from library_app.infrastructure.persistence import JsonCatalogRepository

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=UTC)


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def repo(tmp_path):
    """Repository writing into a per-test temporary directory."""
    return JsonCatalogRepository(tmp_path / "nested" / "catalog.json")


@pytest.fixture
def catalog():
    book = Book.create_new("9780132350884", "Clean Code", ["Robert C. Martin"], 2008, "Programming")
    other = Book.create_new("9780134685991", "Effective Java", ["Joshua Bloch"], 2018, "Programming")
    alice = Student.create_new("Alice", "Computer Science", "student123")
    bob = Librarian.create_new("Bob", "EMP001", "admin123")

    c = Catalog.empty().add_book(book).catalog.add_book(other).catalog
    c = c.add_user(alice).catalog.add_user(bob).catalog
    c = c.loan_book(book.isbn, alice.id, T0).catalog
    c = c.reserve_book(book.isbn, bob.id, T0 + timedelta(hours=2)).catalog
    return c


# ============================================================================
# TESTS
# ============================================================================

class TestInitialization:
    """Tests for repository construction."""

    def test_creates_parent_directory(self, repo):
        assert repo.path.parent.is_dir()

    def test_missing_file_loads_empty_catalog(self, repo):
        assert not repo.exists()
        assert repo.load() == Catalog.empty()


class TestSaveAndLoad:
    """Tests for save() and load()."""

    def test_round_trip(self, repo, catalog):
        # Act
        repo.save(catalog)
        loaded = repo.load()

        # Assert
        assert repo.exists()
        assert loaded == catalog

    def test_save_overwrites(self, repo, catalog):
        repo.save(Catalog.empty())
        repo.save(catalog)

        assert repo.load() == catalog

    def test_file_is_readable_json(self, repo, catalog):
        repo.save(catalog)

        document = json.loads(repo.path.read_text(encoding="utf-8"))
        assert len(document["books"]) == 2

    def test_no_temporary_files_left(self, repo, catalog):
        repo.save(catalog)

        assert os.listdir(repo.path.parent) == [repo.path.name]


class TestAtomicity:
    """A failed save leaves the previous snapshot intact."""

    def test_failed_replace_keeps_old_snapshot(self, repo, catalog, monkeypatch):
        # Arrange
        repo.save(catalog)
        before = repo.path.read_text(encoding="utf-8")

        def failing_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", failing_replace)

        # Act
        with pytest.raises(RuntimeError, match="Failed to save catalog"):
            repo.save(Catalog.empty())

        # Assert
        assert repo.path.read_text(encoding="utf-8") == before
        assert os.listdir(repo.path.parent) == [repo.path.name]


class TestRejection:
    """Bad files are reported, never silently repaired."""

    def test_corrupt_file(self, repo):
        repo.path.write_text("{ definitely not json", encoding="utf-8")

        with pytest.raises(ValueError):
            repo.load()

    def test_inconsistent_snapshot(self, repo, catalog):
        repo.save(catalog)
        document = json.loads(repo.path.read_text(encoding="utf-8"))
        document["books"][0]["is_available"] = True
        repo.path.write_text(json.dumps(document), encoding="utf-8")

        with pytest.raises(CatalogIntegrityError):
            repo.load()
