"""
Domain service for library analytics.

Everything here is a read-only aggregation over a Catalog: totals for a
statistics screen, popularity rankings, recent trends and simple
history-based recommendations. Nothing is cached; each call recomputes
from the catalog it is given.
"""

import logging
from collections import Counter
from datetime import datetime, timedelta, UTC
from typing import Dict, List, Optional, Tuple

from library_app.domain import queries
from library_app.domain.catalog import Catalog
from library_app.domain.entities import Book, TransactionKind
from library_app.domain.value_objects import ISBN, LibraryReport, UserID

logger = logging.getLogger(__name__)

TRENDING_LIMIT = 10


class AnalyticsService:
    """
    Computes reports and rankings from a catalog's collections.

    The service is stateless; it only reads the catalog passed to each
    method.
    """

    def generate_report(self, catalog: Catalog) -> LibraryReport:
        """
        Summarize the catalog.

        Genres are grouped by their normalized (lowercase) form.
        """
        books = list(catalog.books.values())
        available = sum(1 for book in books if book.is_available)

        books_by_genre: Dict[str, int] = dict(
            Counter(book.normalized_genre for book in books)
        )
        users_by_type: Dict[str, int] = {
            user_type.label: count
            for user_type, count in Counter(
                user.user_type for user in catalog.users.values()
            ).items()
        }
        reservations = sum(
            1 for tx in catalog.transactions if tx.kind is TransactionKind.RESERVATION
        )

        return LibraryReport(
            total_books=len(books),
            available_books=available,
            loaned_books=len(books) - available,
            total_users=len(catalog.users),
            active_loans=len(queries.outstanding_loans(catalog)),
            total_reservations=reservations,
            books_by_genre=books_by_genre,
            users_by_type=users_by_type,
        )

    def most_popular_books(self, catalog: Catalog, limit: int = 5) -> List[Tuple[Book, int]]:
        """
        Rank catalogued books by how many times they were loaned.

        Ties are broken by title. Books never loaned are left out.
        """
        counts = self._loan_counts(catalog)
        ranked = [
            (book, counts[isbn])
            for isbn, book in catalog.books.items()
            if counts.get(isbn)
        ]
        ranked.sort(key=lambda pair: (-pair[1], pair[0].title))
        return ranked[:limit]

    def most_active_users(self, catalog: Catalog, limit: int = 5) -> List[Tuple[str, int]]:
        """Rank current users by number of loans, as (name, count) pairs."""
        counts = Counter(
            tx.user.id for tx in catalog.transactions if tx.kind is TransactionKind.LOAN
        )
        ranked = [(user.name, counts.get(user.id, 0)) for user in catalog.users.values()]
        ranked.sort(key=lambda pair: (-pair[1], pair[0]))
        return ranked[:limit]

    def trending_books(
        self,
        catalog: Catalog,
        days: int = 30,
        now: Optional[datetime] = None,
    ) -> List[Book]:
        """
        Available books loaned most often within the last `days` days.

        At most TRENDING_LIMIT books, most loaned first.
        """
        now = now or datetime.now(UTC)
        cutoff = now - timedelta(days=days)
        counts = self._loan_counts(catalog, since=cutoff)

        trending: List[Book] = []
        for isbn, _ in sorted(counts.items(), key=lambda item: -item[1])[:TRENDING_LIMIT]:
            book = catalog.books.get(isbn)
            if book is not None and book.is_available:
                trending.append(book)
        return trending

    def recommend_books(
        self,
        catalog: Catalog,
        user_id: UserID,
        limit: int = 5,
    ) -> List[Book]:
        """
        Suggest available books based on a user's loan history.

        Each candidate scores the share of the user's past loans in its
        genre plus the share by each of its authors. Books the user already
        borrowed and books scoring zero are skipped.
        """
        history = [
            tx.book for tx in catalog.transactions
            if tx.kind is TransactionKind.LOAN and tx.user.id == user_id
        ]
        if not history:
            logger.debug("No loan history for %s, nothing to recommend", user_id)
            return []

        total = float(len(history))
        genre_share = {
            genre: count / total
            for genre, count in Counter(book.normalized_genre for book in history).items()
        }
        author_share = {
            author: count / total
            for author, count in Counter(
                author for book in history for author in book.authors
            ).items()
        }
        already_read = {book.isbn for book in history}

        scored: List[Tuple[Book, float]] = []
        for book in queries.books_available(catalog):
            if book.isbn in already_read:
                continue
            score = genre_share.get(book.normalized_genre, 0.0) + sum(
                author_share.get(author, 0.0) for author in book.authors
            )
            if score > 0:
                scored.append((book, score))

        scored.sort(key=lambda pair: (-pair[1], pair[0].title))
        return [book for book, _ in scored[:limit]]

    @staticmethod
    def _loan_counts(catalog: Catalog, since: Optional[datetime] = None) -> Dict[ISBN, int]:
        return dict(Counter(
            tx.book.isbn
            for tx in catalog.transactions
            if tx.kind is TransactionKind.LOAN and (since is None or tx.timestamp > since)
        ))
