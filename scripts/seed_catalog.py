#!/usr/bin/env python3
"""
Catalog Seeding Script.

This script builds a small demo catalog (books of several genres, one user of
each type and a handful of loans, returns and reservations) and saves it to
the configured storage backend.

Usage:
    python -m scripts.seed_catalog
    python -m scripts.seed_catalog --storage json --path data/catalog.json --force
"""

import argparse
import logging
import sys
from datetime import datetime, timedelta, UTC
from pathlib import Path
from typing import Optional

from library_app import dependencies
from library_app.domain.catalog import Catalog
from library_app.domain.entities import Book, Faculty, Librarian, Student
from library_app.domain.results import OperationResult
from library_app.domain.value_objects import ISBN

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

DEMO_BOOKS = [
    ("9780134685991", "Effective Java", ["Joshua Bloch"], 2018, "Programming"),
    ("9781491950357", "Designing Data-Intensive Applications", ["Martin Kleppmann"], 2017, "Data"),
    ("9780132350884", "Clean Code", ["Robert C. Martin"], 2008, "Programming"),
    ("9780262033848", "Introduction to Algorithms",
     ["Thomas H. Cormen", "Charles E. Leiserson", "Ronald L. Rivest", "Clifford Stein"], 2009, "Algorithms"),
    ("9780201633610", "Design Patterns",
     ["Erich Gamma", "Richard Helm", "Ralph Johnson", "John Vlissides"], 1994, "Programming"),
    ("9780061120084", "To Kill a Mockingbird", ["Harper Lee"], 1960, "Fiction"),
]


def _applied(result: OperationResult) -> Catalog:
    """Continue with the new catalog, failing loudly if the step was rejected."""
    if result.failed:
        raise RuntimeError(f"Seeding step rejected: {result.error}")
    return result.catalog


def build_demo_catalog(now: Optional[datetime] = None) -> Catalog:
    """
    Build the demo catalog.

    The transaction history spans the last three weeks relative to `now`, so
    one of the loans is already overdue.
    """
    now = now or datetime.now(UTC)
    catalog = Catalog.empty()

    for isbn, title, authors, year, genre in DEMO_BOOKS:
        catalog = _applied(catalog.add_book(Book.create_new(isbn, title, authors, year, genre)))

    alice = Student.create_new("Alice", "Computer Science", "student123")
    smith = Faculty.create_new("Dr. Smith", "Engineering", "faculty123")
    bob = Librarian.create_new("Bob", "EMP001", "admin123")
    for user in (alice, smith, bob):
        catalog = _applied(catalog.add_user(user))

    effective_java = ISBN.apply(DEMO_BOOKS[0][0])
    ddia = ISBN.apply(DEMO_BOOKS[1][0])
    clean_code = ISBN.apply(DEMO_BOOKS[2][0])

    catalog = _applied(catalog.loan_book(ddia, smith.id, now - timedelta(days=21)))
    catalog = _applied(catalog.loan_book(effective_java, alice.id, now - timedelta(days=18)))
    catalog = _applied(catalog.return_book(ddia, smith.id, now - timedelta(days=10)))
    catalog = _applied(catalog.loan_book(clean_code, smith.id, now - timedelta(days=3)))
    catalog = _applied(catalog.reserve_book(clean_code, alice.id, now - timedelta(days=2)))
    catalog = _applied(catalog.loan_book(ddia, alice.id, now - timedelta(days=1)))

    return catalog


def main(storage: str, path: Optional[Path] = None, force: bool = False) -> Catalog:
    """
    Main entry point for the seeding script.

    Args:
        storage: Storage backend ("sqlite" or "json")
        path: Optional storage location overriding the configured one
        force: Overwrite an existing snapshot

    Returns:
        The catalog that is now stored
    """
    repository = dependencies.build_repository(storage, path)

    if repository.exists() and not force:
        logger.info("A catalog is already stored, keeping it (use --force to overwrite)")
        return repository.load()

    catalog = build_demo_catalog()
    repository.save(catalog)
    logger.info("Seeded demo catalog: %r", catalog)
    return catalog


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the library catalog with demo data")
    parser.add_argument(
        "--storage", "-s",
        type=str,
        choices=dependencies.STORAGE_BACKENDS,
        default=dependencies.STORAGE,
        help="Storage backend (default: LIBRARY_STORAGE or sqlite)"
    )
    parser.add_argument(
        "--path", "-p",
        type=Path,
        default=None,
        help="Storage file (default: LIBRARY_DB_PATH / LIBRARY_JSON_PATH)"
    )
    parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Overwrite an existing catalog"
    )

    args = parser.parse_args()
    try:
        main(args.storage, args.path, args.force)
    except (RuntimeError, ValueError) as e:
        logger.error(f"Seeding failed: {e}")
        sys.exit(1)
