#!/usr/bin/env python3
"""
Library Report Script.

Loads the stored catalog and prints summary statistics, popularity rankings,
trending books and overdue loans. Optionally runs a ranked keyword search or
recommends books for a user.

Usage:
    python -m scripts.library_report
    python -m scripts.library_report --search "clean code" --recommend-for Alice
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from library_app import dependencies
from library_app.domain import queries
from library_app.domain.catalog import Catalog
from library_app.infrastructure.search import BM25BookSearch

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def format_report(
    catalog: Catalog,
    search_text: Optional[str] = None,
    recommend_for: Optional[str] = None,
    top: int = 5,
) -> List[str]:
    """
    Render the report as a list of lines.

    Args:
        catalog: Catalog to report on
        search_text: Optional keyword query for a ranked search
        recommend_for: Optional user name to recommend books to
        top: Length of the ranking sections
    """
    analytics = dependencies.get_analytics_service()
    report = analytics.generate_report(catalog)

    lines = [
        "=== Library Statistics ===",
        f"Books: {report.total_books} ({report.available_books} available, "
        f"{report.loaned_books} on loan)",
        f"Users: {report.total_users}",
        f"Active loans: {report.active_loans}",
        f"Reservations: {report.total_reservations}",
        "Books by genre:",
    ]
    lines.extend(f"  {genre}: {count}" for genre, count in sorted(report.books_by_genre.items()))
    lines.append("Users by type:")
    lines.extend(f"  {label}: {count}" for label, count in sorted(report.users_by_type.items()))

    lines.append("")
    lines.append("=== Most Popular Books ===")
    for book, count in analytics.most_popular_books(catalog, limit=top):
        lines.append(f"  {book.title} ({count} loans)")

    lines.append("")
    lines.append("=== Most Active Users ===")
    for name, count in analytics.most_active_users(catalog, limit=top):
        lines.append(f"  {name} ({count} loans)")

    lines.append("")
    lines.append("=== Trending (last 30 days) ===")
    for book in analytics.trending_books(catalog):
        lines.append(f"  {book.title}")

    lines.append("")
    lines.append("=== Overdue Loans ===")
    for loan in queries.overdue_loans(catalog):
        fees = queries.calculate_overdue_fees(catalog, loan.user.id)
        lines.append(
            f"  {loan.book.title} - {loan.user.name}, due {loan.due_date:%Y-%m-%d} "
            f"(fees owed: ${fees:.2f})"
        )

    if search_text:
        index = BM25BookSearch()
        index.build_index(list(catalog.books.values()))
        lines.append("")
        lines.append(f"=== Search: {search_text!r} ===")
        for result in index.search(search_text, max_results=top):
            lines.append(f"  {result.rank}. {result.book.title} (score {result.score:.3f})")

    if recommend_for:
        user = next((u for u in catalog.users.values() if u.name == recommend_for), None)
        lines.append("")
        lines.append(f"=== Recommendations for {recommend_for} ===")
        if user is None:
            lines.append("  Unknown user")
        else:
            for book in analytics.recommend_books(catalog, user.id, limit=top):
                lines.append(f"  {book.title} by {', '.join(book.authors)}")

    return lines


def main(
    storage: str,
    path: Optional[Path] = None,
    search_text: Optional[str] = None,
    recommend_for: Optional[str] = None,
) -> None:
    """Load the stored catalog and print the report."""
    repository = dependencies.build_repository(storage, path)
    if not repository.exists():
        logger.warning("No stored catalog found, run scripts.seed_catalog first")

    catalog = repository.load()
    for line in format_report(catalog, search_text, recommend_for):
        print(line)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Print library statistics")
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
        "--search", "-q",
        type=str,
        default=None,
        help="Keyword query ranked with BM25"
    )
    parser.add_argument(
        "--recommend-for", "-r",
        type=str,
        default=None,
        help="Name of a user to recommend books to"
    )

    args = parser.parse_args()
    try:
        main(args.storage, args.path, args.search, args.recommend_for)
    except (RuntimeError, ValueError) as e:
        logger.error(f"Report failed: {e}")
        sys.exit(1)
