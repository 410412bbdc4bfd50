"""
The Catalog aggregate.

A Catalog holds every book, every user and the append-only transaction
log. It is immutable: each operation returns an OperationResult carrying
either a new Catalog (copy-on-write of the touched collections) or the
unchanged input together with the reason it was rejected.

Catalog operations do not check permissions. The calling layer gates them
with a Session (see session.py and CirculationService).
"""

from datetime import datetime, timedelta, UTC
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .entities import Book, Loan, Reservation, Return, Transaction, User
from .queries import outstanding_loans_in
from .results import CatalogIntegrityError, LibraryError, OperationResult
from .value_objects import ISBN, UserID

LOAN_PERIOD = timedelta(days=14)
"""How long a borrower may keep a book"""


class Catalog:
    """
    Aggregate root of the library: books, users and transactions.

    Attributes:
        books: Read-only ISBN -> Book mapping, in insertion order
        users: Read-only UserID -> User mapping, in insertion order
        transactions: Chronological, append-only tuple of transactions
    """

    __slots__ = ("_books", "_users", "_transactions")

    def __init__(
        self,
        books: Optional[Mapping[ISBN, Book]] = None,
        users: Optional[Mapping[UserID, User]] = None,
        transactions: Iterable[Transaction] = (),
    ) -> None:
        self._books: Mapping[ISBN, Book] = MappingProxyType(dict(books or {}))
        self._users: Mapping[UserID, User] = MappingProxyType(dict(users or {}))
        self._transactions: Tuple[Transaction, ...] = tuple(transactions)

    @property
    def books(self) -> Mapping[ISBN, Book]:
        return self._books

    @property
    def users(self) -> Mapping[UserID, User]:
        return self._users

    @property
    def transactions(self) -> Tuple[Transaction, ...]:
        return self._transactions

    def __eq__(self, other: object) -> bool:
        """Catalogs are equal when all three collections match, in order."""
        if not isinstance(other, Catalog):
            return NotImplemented
        return (
            list(self._books.items()) == list(other._books.items())
            and list(self._users.items()) == list(other._users.items())
            and self._transactions == other._transactions
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"Catalog(books={len(self._books)}, users={len(self._users)}, "
            f"transactions={len(self._transactions)})"
        )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def empty(cls) -> "Catalog":
        return cls()

    @classmethod
    def from_snapshot(
        cls,
        books: Iterable[Book],
        users: Iterable[User],
        transactions: Iterable[Transaction],
    ) -> "Catalog":
        """
        Build a catalog from stored collections, checking its invariants.

        Args:
            books: Books in insertion order
            users: Users in insertion order
            transactions: Transaction log in chronological order

        Returns:
            The validated catalog

        Raises:
            CatalogIntegrityError: If keys are duplicated, the log is out of
                order, a book is loaned twice, or an availability flag
                disagrees with the log
        """
        book_map: Dict[ISBN, Book] = {}
        for book in books:
            if book.isbn in book_map:
                raise CatalogIntegrityError(f"Duplicate ISBN in snapshot: {book.isbn}")
            book_map[book.isbn] = book

        user_map: Dict[UserID, User] = {}
        for user in users:
            if user.id in user_map:
                raise CatalogIntegrityError(f"Duplicate user ID in snapshot: {user.id}")
            user_map[user.id] = user

        catalog = cls(book_map, user_map, transactions)
        catalog.check_invariants()
        return catalog

    def check_invariants(self) -> None:
        """Raise CatalogIntegrityError if this catalog is inconsistent."""
        for previous, current in zip(self._transactions, self._transactions[1:]):
            if current.timestamp < previous.timestamp:
                raise CatalogIntegrityError(
                    "Transaction log is not in chronological order "
                    f"({current.timestamp.isoformat()} after {previous.timestamp.isoformat()})"
                )

        loaned: Dict[ISBN, Loan] = {}
        for loan in outstanding_loans_in(self._transactions):
            isbn = loan.book.isbn
            if isbn in loaned:
                raise CatalogIntegrityError(f"Book {isbn} has more than one outstanding loan")
            if isbn not in self._books:
                raise CatalogIntegrityError(f"Outstanding loan references unknown book {isbn}")
            loaned[isbn] = loan

        for isbn, book in self._books.items():
            if book.is_available == (isbn in loaned):
                raise CatalogIntegrityError(
                    f"Book {isbn} availability flag ({book.is_available}) "
                    "disagrees with the transaction log"
                )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _replace(
        self,
        books: Optional[Mapping[ISBN, Book]] = None,
        users: Optional[Mapping[UserID, User]] = None,
        transactions: Optional[Iterable[Transaction]] = None,
    ) -> "Catalog":
        return Catalog(
            books if books is not None else self._books,
            users if users is not None else self._users,
            transactions if transactions is not None else self._transactions,
        )

    def _reject(self, error: LibraryError) -> OperationResult:
        return OperationResult(catalog=self, error=error)

    def _outstanding_loans(self) -> List[Loan]:
        return outstanding_loans_in(self._transactions)

    def _has_outstanding_loan(self, isbn: ISBN, user_id: Optional[UserID] = None) -> bool:
        return any(
            loan.book.isbn == isbn and (user_id is None or loan.user.id == user_id)
            for loan in self._outstanding_loans()
        )

    def _timestamp(self, now: Optional[datetime]) -> Tuple[datetime, Optional[LibraryError]]:
        """Resolve `now`; it may not precede the last logged transaction."""
        now = now or datetime.now(UTC)
        if self._transactions and now < self._transactions[-1].timestamp:
            return now, LibraryError.state_conflict(
                f"Timestamp {now.isoformat()} is earlier than the last transaction "
                f"({self._transactions[-1].timestamp.isoformat()})"
            )
        return now, None

    def _lookup(self, isbn: ISBN, user_id: UserID) -> Tuple[Optional[Book], Optional[User], Optional[LibraryError]]:
        book = self._books.get(isbn)
        if book is None:
            return None, None, LibraryError.not_found(f"Book with ISBN '{isbn}' not found")
        user = self._users.get(user_id)
        if user is None:
            return book, None, LibraryError.not_found(f"User with id '{user_id}' not found")
        return book, user, None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_book(self, book: Book) -> OperationResult:
        """
        Insert a book; rejected if its ISBN is already catalogued.

        A new book has no loans, so it is always stored as available.
        """
        if book.isbn in self._books:
            return self._reject(
                LibraryError.conflict(f"Book with ISBN '{book.isbn}' already exists")
            )
        books = dict(self._books)
        books[book.isbn] = book if book.is_available else book.with_availability(True)
        return OperationResult(catalog=self._replace(books=books))

    def add_user(self, user: User) -> OperationResult:
        """Insert a user; rejected if the ID is already registered."""
        if user.id in self._users:
            return self._reject(
                LibraryError.conflict(f"User with id '{user.id}' already exists")
            )
        users = dict(self._users)
        users[user.id] = user
        return OperationResult(catalog=self._replace(users=users))

    def remove_book(self, isbn: ISBN) -> OperationResult:
        """Remove a book that is not currently on loan."""
        book = self._books.get(isbn)
        if book is None:
            return self._reject(LibraryError.not_found(f"Book with ISBN '{isbn}' not found"))
        if self._has_outstanding_loan(isbn):
            return self._reject(
                LibraryError.state_conflict(f"Cannot remove '{book.title}': it is currently on loan")
            )
        books = dict(self._books)
        del books[isbn]
        return OperationResult(catalog=self._replace(books=books))

    def remove_user(self, user_id: UserID) -> OperationResult:
        """Remove a user who has no outstanding loans."""
        user = self._users.get(user_id)
        if user is None:
            return self._reject(LibraryError.not_found(f"User with id '{user_id}' not found"))
        active = sum(1 for loan in self._outstanding_loans() if loan.user.id == user_id)
        if active:
            return self._reject(
                LibraryError.state_conflict(
                    f"Cannot remove {user.name}: they have {active} active loan(s)"
                )
            )
        users = dict(self._users)
        del users[user_id]
        return OperationResult(catalog=self._replace(users=users))

    def loan_book(
        self,
        isbn: ISBN,
        user_id: UserID,
        now: Optional[datetime] = None,
    ) -> OperationResult:
        """
        Lend a book to a user.

        On success a Loan due LOAN_PERIOD from `now` is appended and the
        stored book becomes unavailable.
        """
        book, user, error = self._lookup(isbn, user_id)
        if error is not None:
            return self._reject(error)

        if not book.is_available or self._has_outstanding_loan(isbn):
            return self._reject(
                LibraryError.state_conflict(f"Book '{book.title}' is not available")
            )

        now, error = self._timestamp(now)
        if error is not None:
            return self._reject(error)
        loaned_book = book.with_availability(False)
        loan = Loan(book=loaned_book, user=user, timestamp=now, due_date=now + LOAN_PERIOD)

        books = dict(self._books)
        books[isbn] = loaned_book
        return OperationResult(
            catalog=self._replace(books=books, transactions=self._transactions + (loan,)),
            transaction=loan,
        )

    def return_book(
        self,
        isbn: ISBN,
        user_id: UserID,
        now: Optional[datetime] = None,
    ) -> OperationResult:
        """Record the return of a book the user currently has on loan."""
        book, user, error = self._lookup(isbn, user_id)
        if error is not None:
            return self._reject(error)

        if not self._has_outstanding_loan(isbn, user_id):
            return self._reject(
                LibraryError.state_conflict(
                    f"{user.name} does not have '{book.title}' on loan"
                )
            )

        now, error = self._timestamp(now)
        if error is not None:
            return self._reject(error)
        returned_book = book.with_availability(True)
        returned = Return(book=returned_book, user=user, timestamp=now)

        books = dict(self._books)
        books[isbn] = returned_book
        return OperationResult(
            catalog=self._replace(books=books, transactions=self._transactions + (returned,)),
            transaction=returned,
        )

    def reserve_book(
        self,
        isbn: ISBN,
        user_id: UserID,
        now: Optional[datetime] = None,
    ) -> OperationResult:
        """
        Record a reservation.

        Reservations are advisory: availability is unchanged and no queue
        order is enforced.
        """
        book, user, error = self._lookup(isbn, user_id)
        if error is not None:
            return self._reject(error)

        now, error = self._timestamp(now)
        if error is not None:
            return self._reject(error)
        reservation = Reservation(book=book, user=user, timestamp=now)
        return OperationResult(
            catalog=self._replace(transactions=self._transactions + (reservation,)),
            transaction=reservation,
        )
