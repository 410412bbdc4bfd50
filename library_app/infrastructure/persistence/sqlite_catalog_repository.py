"""
SQLite implementation of the CatalogRepository port.

This adapter stores a catalog snapshot in three tables (books, users,
transactions). A save replaces the whole snapshot inside a single SQL
transaction, so a failed save leaves the previous snapshot intact.
"""

import json
import logging
import sqlite3
from contextlib import closing
from datetime import datetime, UTC
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from library_app.domain.catalog import Catalog
from library_app.domain.entities import Book, Transaction, User
from library_app.domain.ports import CatalogRepository
from library_app.domain.value_objects import ISBN
from library_app.infrastructure.serialization import converters, schemas

logger = logging.getLogger(__name__)

_user_adapter: TypeAdapter = TypeAdapter(schemas.UserSchema)
_transaction_adapter: TypeAdapter = TypeAdapter(schemas.TransactionSchema)


class SqliteCatalogRepository(CatalogRepository):
    """
    Books are stored column by column. Users and transaction snapshots are
    stored as JSON payloads in the shared snapshot format, next to the
    columns needed to order and inspect them.
    """

    def __init__(self, db_path: Path) -> None:
        """
        Initialize the repository with a database path
        """
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection with row factory."""
        conn = sqlite3.connect(str(self._db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        """Create the tables if they don't exist."""
        with closing(self._get_connection()) as conn, conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS books (
                    position INTEGER PRIMARY KEY,
                    isbn TEXT NOT NULL UNIQUE,
                    title TEXT NOT NULL,
                    authors TEXT NOT NULL,
                    publication_year INTEGER NOT NULL,
                    genre TEXT NOT NULL,
                    is_available INTEGER NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    position INTEGER PRIMARY KEY,
                    id TEXT NOT NULL UNIQUE,
                    kind TEXT NOT NULL,
                    name TEXT NOT NULL,
                    payload TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS transactions (
                    seq INTEGER PRIMARY KEY,
                    kind TEXT NOT NULL,
                    isbn TEXT NOT NULL,
                    user_id TEXT NOT NULL,
                    timestamp TEXT NOT NULL,
                    payload TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS snapshot_meta (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    version INTEGER NOT NULL,
                    saved_at TEXT NOT NULL
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_transactions_isbn ON transactions(isbn)"
            )

    @staticmethod
    def _book_to_row(position: int, book: Book) -> dict:
        """Convert a Book entity to a database row dict."""
        return {
            "position": position,
            "isbn": book.isbn.value,
            "title": book.title,
            "authors": json.dumps(list(book.authors)),
            "publication_year": book.publication_year,
            "genre": book.genre,
            "is_available": int(book.is_available),
        }

    @staticmethod
    def _row_to_book(row: sqlite3.Row) -> Book:
        """Convert a database row to a Book entity."""
        return Book(
            isbn=ISBN.apply(row["isbn"]),
            title=row["title"],
            authors=tuple(json.loads(row["authors"])),
            publication_year=row["publication_year"],
            genre=row["genre"],
            is_available=bool(row["is_available"]),
        )

    @staticmethod
    def _user_to_row(position: int, user: User) -> dict:
        return {
            "position": position,
            "id": str(user.id),
            "kind": user.user_type.value,
            "name": user.name,
            "payload": converters.domain_user_to_schema(user).model_dump_json(),
        }

    @staticmethod
    def _transaction_to_row(seq: int, tx: Transaction) -> dict:
        return {
            "seq": seq,
            "kind": tx.kind.value,
            "isbn": tx.book.isbn.value,
            "user_id": str(tx.user.id),
            "timestamp": tx.timestamp.isoformat(),
            "payload": converters.domain_transaction_to_schema(tx).model_dump_json(),
        }

    def exists(self) -> bool:
        """Check whether a snapshot has been saved."""
        with closing(self._get_connection()) as conn:
            row = conn.execute("SELECT COUNT(*) AS cnt FROM snapshot_meta").fetchone()
            return row["cnt"] > 0

    def save(self, catalog: Catalog) -> None:
        """Replace the stored snapshot with the given catalog."""
        book_rows = [
            self._book_to_row(position, book)
            for position, book in enumerate(catalog.books.values())
        ]
        user_rows = [
            self._user_to_row(position, user)
            for position, user in enumerate(catalog.users.values())
        ]
        transaction_rows = [
            self._transaction_to_row(seq, tx)
            for seq, tx in enumerate(catalog.transactions)
        ]

        try:
            with closing(self._get_connection()) as conn, conn:
                conn.execute("DELETE FROM books")
                conn.execute("DELETE FROM users")
                conn.execute("DELETE FROM transactions")
                conn.executemany("""
                    INSERT INTO books
                    (position, isbn, title, authors, publication_year, genre, is_available)
                    VALUES
                    (:position, :isbn, :title, :authors, :publication_year, :genre, :is_available)
                """, book_rows)
                conn.executemany("""
                    INSERT INTO users (position, id, kind, name, payload)
                    VALUES (:position, :id, :kind, :name, :payload)
                """, user_rows)
                conn.executemany("""
                    INSERT INTO transactions (seq, kind, isbn, user_id, timestamp, payload)
                    VALUES (:seq, :kind, :isbn, :user_id, :timestamp, :payload)
                """, transaction_rows)
                conn.execute("""
                    INSERT INTO snapshot_meta (id, version, saved_at) VALUES (1, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        version=excluded.version,
                        saved_at=excluded.saved_at
                """, (schemas.SNAPSHOT_VERSION, datetime.now(UTC).isoformat()))

        except sqlite3.IntegrityError as e:
            raise ValueError(f"Catalog violates storage constraints: {e}") from e
        except sqlite3.Error as e:
            raise RuntimeError(f"Database error while saving catalog: {e}") from e

        logger.info(
            "Saved catalog to %s (%s books, %s users, %s transactions)",
            self._db_path, len(book_rows), len(user_rows), len(transaction_rows),
        )

    def load(self) -> Catalog:
        """Restore the stored catalog, or an empty one if nothing was saved."""
        try:
            with closing(self._get_connection()) as conn:
                book_rows = conn.execute("SELECT * FROM books ORDER BY position").fetchall()
                user_rows = conn.execute("SELECT * FROM users ORDER BY position").fetchall()
                transaction_rows = conn.execute(
                    "SELECT * FROM transactions ORDER BY seq"
                ).fetchall()
        except sqlite3.Error as e:
            raise RuntimeError(f"Database error while loading catalog: {e}") from e

        try:
            books = [self._row_to_book(row) for row in book_rows]
            users = [
                converters.schema_user_to_domain(_user_adapter.validate_json(row["payload"]))
                for row in user_rows
            ]
            transactions = [
                converters.schema_transaction_to_domain(
                    _transaction_adapter.validate_json(row["payload"])
                )
                for row in transaction_rows
            ]
        except ValidationError as e:
            raise ValueError(f"Stored catalog payload is malformed: {e}") from e

        catalog = Catalog.from_snapshot(books, users, transactions)
        logger.info("Loaded catalog from %s: %r", self._db_path, catalog)
        return catalog
