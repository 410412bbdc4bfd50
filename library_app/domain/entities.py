"""
Domain entities for the library catalog.

Entities are objects with a unique identity that runs through time and
different representations. They are the core building blocks of the domain.

Users and transactions are closed sets of variants. Each variant is its own
frozen dataclass carrying a tag (UserType / TransactionKind) so callers can
dispatch on the tag through fixed lookup tables instead of isinstance chains.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import ClassVar, Dict, Iterable, Optional, Tuple, Union

from .value_objects import AuthorName, BookTitle, Genre, ISBN, UserID


@dataclass(frozen=True)
class Book:
    """
    Represents a book in the catalog.

    Books are immutable value records: loaning or returning a book produces
    a new Book with a different availability flag.
    """

    isbn: ISBN
    """Unique key of the book within a catalog"""

    title: str
    """Book title"""

    authors: Tuple[str, ...]
    """Ordered author names (at least one)"""

    publication_year: int
    """Year of publication"""

    genre: str
    """Free-text genre (e.g. 'Programming', 'Fiction')"""

    is_available: bool = True
    """False while an outstanding loan exists for this ISBN"""

    def __post_init__(self) -> None:
        """Validate book data."""
        if not isinstance(self.isbn, ISBN):
            raise TypeError(f"isbn must be an ISBN, got {type(self.isbn).__name__}")

        if not self.title or not self.title.strip():
            raise ValueError("Book title cannot be empty")

        # Accept any iterable of names but store an immutable tuple
        object.__setattr__(self, "authors", tuple(self.authors))
        if not self.authors:
            raise ValueError("Book must have at least one author")

    @property
    def normalized_genre(self) -> str:
        return self.genre.strip().lower()

    def with_availability(self, is_available: bool) -> "Book":
        """Return a copy of this book with the given availability."""
        return replace(self, is_available=is_available)

    def get_searchable_text(self) -> str:
        """
        Get all searchable text for this book concatenated.

        This is used for building search indices.
        """
        return " ".join([self.title, " ".join(self.authors), self.genre])

    @staticmethod
    def create_new(
        isbn: str,
        title: str,
        authors: Iterable[str],
        publication_year: int,
        genre: str,
        is_available: bool = True,
    ) -> "Book":
        """
        Factory method that validates raw input before building a Book.

        Args:
            isbn: Raw ISBN string
            title: Raw title
            authors: Raw author names
            publication_year: Year of publication
            genre: Raw genre

        Returns:
            A new Book with trimmed, validated fields

        Raises:
            ValueError: With the first validation message encountered
        """
        isbn_value = ISBN.safe(isbn)
        if not isbn_value.ok:
            raise ValueError(isbn_value.error.message)

        title_value = BookTitle.safe(title)
        if not title_value.ok:
            raise ValueError(title_value.error.message)

        author_values = []
        for author in authors:
            author_value = AuthorName.safe(author)
            if not author_value.ok:
                raise ValueError(author_value.error.message)
            author_values.append(author_value.unwrap().value)

        genre_value = Genre.safe(genre)
        if not genre_value.ok:
            raise ValueError(genre_value.error.message)

        return Book(
            isbn=isbn_value.unwrap(),
            title=title_value.unwrap().value,
            authors=tuple(author_values),
            publication_year=publication_year,
            genre=genre_value.unwrap().value,
            is_available=is_available,
        )


class UserType(str, Enum):
    """Variant tag of a user; determines the permission set."""

    STUDENT = "student"
    FACULTY = "faculty"
    LIBRARIAN = "librarian"

    @property
    def label(self) -> str:
        return self.value.capitalize()


# Daily fee charged per overdue loan
OVERDUE_FEE_RATES: Dict[UserType, float] = {
    UserType.STUDENT: 0.50,
    UserType.FACULTY: 0.25,
    UserType.LIBRARIAN: 0.0,
}


def _validate_user(user: "User") -> None:
    if not isinstance(user.id, UserID):
        raise TypeError(f"id must be a UserID, got {type(user.id).__name__}")
    if not user.name or not user.name.strip():
        raise ValueError("User name cannot be empty")


@dataclass(frozen=True)
class Student:
    """A student borrower, identified by major."""

    user_type: ClassVar[UserType] = UserType.STUDENT

    id: UserID
    name: str
    major: str
    password: str

    def __post_init__(self) -> None:
        _validate_user(self)

    @property
    def detail(self) -> str:
        return self.major

    @staticmethod
    def create_new(name: str, major: str, password: str) -> "Student":
        """Create a student with a freshly generated random ID."""
        return Student(id=UserID.random(), name=name, major=major, password=password)


@dataclass(frozen=True)
class Faculty:
    """A faculty member, identified by department."""

    user_type: ClassVar[UserType] = UserType.FACULTY

    id: UserID
    name: str
    department: str
    password: str

    def __post_init__(self) -> None:
        _validate_user(self)

    @property
    def detail(self) -> str:
        return self.department

    @staticmethod
    def create_new(name: str, department: str, password: str) -> "Faculty":
        """Create a faculty member with a freshly generated random ID."""
        return Faculty(id=UserID.random(), name=name, department=department, password=password)


@dataclass(frozen=True)
class Librarian:
    """Library staff, identified by employee badge or location code."""

    user_type: ClassVar[UserType] = UserType.LIBRARIAN

    id: UserID
    name: str
    employee_id: str
    password: str

    def __post_init__(self) -> None:
        _validate_user(self)

    @property
    def detail(self) -> str:
        return self.employee_id

    @staticmethod
    def create_new(name: str, employee_id: str, password: str) -> "Librarian":
        """Create a librarian with a freshly generated random ID."""
        return Librarian(id=UserID.random(), name=name, employee_id=employee_id, password=password)


User = Union[Student, Faculty, Librarian]

USER_VARIANTS: Dict[UserType, type] = {
    UserType.STUDENT: Student,
    UserType.FACULTY: Faculty,
    UserType.LIBRARIAN: Librarian,
}


class TransactionKind(str, Enum):
    """Variant tag of a transaction."""

    LOAN = "loan"
    RETURN = "return"
    RESERVATION = "reservation"


@dataclass(frozen=True)
class Loan:
    """A book leaving the library with a user until the due date."""

    kind: ClassVar[TransactionKind] = TransactionKind.LOAN

    book: Book
    """Snapshot of the book at loan time"""

    user: User
    """Snapshot of the borrower at loan time"""

    timestamp: datetime
    """When the loan happened"""

    due_date: Optional[datetime] = None
    """When the book is expected back"""

    def is_overdue(self, now: datetime) -> bool:
        return self.due_date is not None and self.due_date < now


@dataclass(frozen=True)
class Return:
    """A book coming back; correlated to a prior Loan by (isbn, user id)."""

    kind: ClassVar[TransactionKind] = TransactionKind.RETURN

    book: Book
    user: User
    timestamp: datetime

    @property
    def due_date(self) -> Optional[datetime]:
        return None


@dataclass(frozen=True)
class Reservation:
    """An advisory request to borrow a book once it becomes available."""

    kind: ClassVar[TransactionKind] = TransactionKind.RESERVATION

    book: Book
    user: User
    timestamp: datetime

    @property
    def due_date(self) -> Optional[datetime]:
        return None


Transaction = Union[Loan, Return, Reservation]

TRANSACTION_VARIANTS: Dict[TransactionKind, type] = {
    TransactionKind.LOAN: Loan,
    TransactionKind.RETURN: Return,
    TransactionKind.RESERVATION: Reservation,
}


@dataclass(frozen=True)
class SearchResult:
    """
    A book matched by a ranked keyword search.

    It associates a book with how well it matched the query.
    """

    book: Book
    """The book that matched the query"""

    score: float
    """Relevance score (higher is better)"""

    rank: int
    """Position in the result list (1-indexed)"""

    def __post_init__(self) -> None:
        """Validate search result data."""
        if self.rank < 1:
            raise ValueError(f"rank must be >= 1, got {self.rank}")
