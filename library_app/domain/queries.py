"""
Read-only views over a Catalog.

These helpers are what the reporting and console layers consume. None of
them mutate the catalog; they derive answers from the book map and the
transaction log.
"""

from datetime import datetime, UTC
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple

from .entities import (
    Book,
    Loan,
    OVERDUE_FEE_RATES,
    Transaction,
    TransactionKind,
    User,
)
from .value_objects import ISBN, SearchQuery, UserID

if TYPE_CHECKING:
    from .catalog import Catalog


def outstanding_loans_in(transactions: Sequence[Transaction]) -> List[Loan]:
    """
    Find every Loan in a log that has no later matching Return.

    A Return matches the loans made earlier in the log for the same
    (isbn, user id). Results keep log order.
    """
    open_loans: Dict[Tuple[ISBN, UserID], List[Tuple[int, Loan]]] = {}

    for position, tx in enumerate(transactions):
        key = (tx.book.isbn, tx.user.id)
        if tx.kind is TransactionKind.LOAN:
            open_loans.setdefault(key, []).append((position, tx))
        elif tx.kind is TransactionKind.RETURN:
            open_loans.pop(key, None)

    positioned = [entry for entries in open_loans.values() for entry in entries]
    positioned.sort(key=lambda entry: entry[0])
    return [loan for _, loan in positioned]


def outstanding_loans(catalog: "Catalog") -> List[Loan]:
    """All outstanding loans in the catalog, in log order."""
    return outstanding_loans_in(catalog.transactions)


def books_available(catalog: "Catalog") -> List[Book]:
    """Books that can be loaned right now, in insertion order."""
    return [book for book in catalog.books.values() if book.is_available]


def active_loans_for(catalog: "Catalog", user_id: UserID) -> List[Loan]:
    """A user's outstanding loans, oldest first."""
    loans = [loan for loan in outstanding_loans(catalog) if loan.user.id == user_id]
    return sorted(loans, key=lambda loan: loan.timestamp)


def outstanding_loan_for(catalog: "Catalog", isbn: ISBN) -> Optional[Loan]:
    """
    The loan currently keeping a book out of the library, if any.

    The most recent Loan for the ISBN is outstanding unless a later Return
    by the same user exists.
    """
    for position in range(len(catalog.transactions) - 1, -1, -1):
        tx = catalog.transactions[position]
        if tx.kind is TransactionKind.LOAN and tx.book.isbn == isbn:
            returned = any(
                later.kind is TransactionKind.RETURN
                and later.book.isbn == isbn
                and later.user.id == tx.user.id
                for later in catalog.transactions[position + 1:]
            )
            return None if returned else tx
    return None


def overdue_loans(catalog: "Catalog", now: Optional[datetime] = None) -> List[Loan]:
    """Outstanding loans whose due date has passed."""
    now = now or datetime.now(UTC)
    return [loan for loan in outstanding_loans(catalog) if loan.is_overdue(now)]


def last_borrower_of(catalog: "Catalog", isbn: ISBN) -> Optional[User]:
    """Snapshot of the user behind the most recent loan of a book."""
    for tx in reversed(catalog.transactions):
        if tx.kind is TransactionKind.LOAN and tx.book.isbn == isbn:
            return tx.user
    return None


def calculate_overdue_fees(
    catalog: "Catalog",
    user_id: UserID,
    now: Optional[datetime] = None,
) -> float:
    """
    Fees owed by a user for outstanding overdue loans.

    Each overdue loan costs the user's daily rate times the whole days
    elapsed since the due date.
    """
    user = catalog.users.get(user_id)
    if user is None:
        return 0.0

    now = now or datetime.now(UTC)
    rate = OVERDUE_FEE_RATES[user.user_type]
    total = 0.0
    for loan in active_loans_for(catalog, user_id):
        if loan.is_overdue(now):
            days_overdue = (now - loan.due_date).days
            total += days_overdue * rate
    return total


def search(catalog: "Catalog", query: SearchQuery) -> List[Book]:
    """
    Find books matching every criterion set on the query.

    String criteria are case-insensitive substring matches. Results keep
    the catalog's insertion order.
    """
    return [book for book in catalog.books.values() if _matches(book, query)]


def _contains(haystack: str, needle: str) -> bool:
    return needle.lower() in haystack.lower()


def _matches(book: Book, query: SearchQuery) -> bool:
    if query.text and query.text.strip():
        needle = query.text.strip()
        if not (
            _contains(book.title, needle)
            or any(_contains(author, needle) for author in book.authors)
            or _contains(book.genre, needle)
        ):
            return False

    if query.title and not _contains(book.title, query.title.strip()):
        return False

    if query.author and not any(
        _contains(author, query.author.strip()) for author in book.authors
    ):
        return False

    if query.genre and not _contains(book.genre, query.genre.strip()):
        return False

    if query.available_only and not book.is_available:
        return False

    if query.min_year is not None and book.publication_year < query.min_year:
        return False

    if query.max_year is not None and book.publication_year > query.max_year:
        return False

    return True
