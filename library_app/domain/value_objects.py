"""
Value objects for the domain layer.

Value objects are immutable objects that represent descriptive aspects
of the domain with no conceptual identity.

Each identifier or text field gets its own nominal wrapper so that an ISBN
can never be passed where a Genre is expected, even though both wrap a
string. Every wrapper offers two constructors:

- apply(raw): trusted path, no validation (internal use, already-valid data)
- safe(raw): validating path, returns a Result with the value or a
  descriptive validation error
"""

import re
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .results import LibraryError, Result

_ISBN_PATTERN = re.compile(r"^[0-9\-X]+$")
_AUTHOR_PATTERN = re.compile(r"^[a-zA-Z\s\-\.]+$")

MAX_TITLE_LENGTH = 200
MAX_AUTHOR_LENGTH = 100
MAX_GENRE_LENGTH = 50
MIN_ISBN_LENGTH = 10


def _require_str(type_name: str, value: object) -> None:
    if not isinstance(value, str):
        raise TypeError(
            f"{type_name} wraps a str, got {type(value).__name__}"
        )


@dataclass(frozen=True, order=True)
class ISBN:
    """International Standard Book Number, the unique key of a book."""

    value: str

    def __post_init__(self) -> None:
        _require_str("ISBN", self.value)

    def __str__(self) -> str:
        return self.value

    @classmethod
    def apply(cls, value: str) -> "ISBN":
        return cls(value)

    @classmethod
    def safe(cls, value: str) -> Result["ISBN"]:
        if not value or not value.strip():
            return Result.failure(LibraryError.validation("ISBN cannot be empty"))
        trimmed = value.strip()
        if len(trimmed) < MIN_ISBN_LENGTH:
            return Result.failure(
                LibraryError.validation(
                    f"ISBN must be at least {MIN_ISBN_LENGTH} characters, got '{value}'"
                )
            )
        if not _ISBN_PATTERN.match(trimmed):
            return Result.failure(
                LibraryError.validation(
                    f"ISBN can only contain digits, hyphens, and X, got '{value}'"
                )
            )
        return Result.success(cls(trimmed))

    @property
    def check_digit(self) -> Optional[str]:
        return self.value[-1] if self.value else None

    @property
    def formatted(self) -> str:
        """Hyphenated display form for bare 13-digit ISBNs."""
        v = self.value
        if len(v) == 13 and v.isdigit():
            return f"{v[:3]}-{v[3:4]}-{v[4:6]}-{v[6:12]}-{v[12]}"
        return v


@dataclass(frozen=True, order=True)
class UserID:
    """UUID-backed user identifier, generated randomly at user creation."""

    value: uuid.UUID

    def __post_init__(self) -> None:
        if not isinstance(self.value, uuid.UUID):
            raise TypeError(
                f"UserID wraps a uuid.UUID, got {type(self.value).__name__}"
            )

    def __str__(self) -> str:
        return str(self.value)

    @classmethod
    def apply(cls, value: uuid.UUID) -> "UserID":
        return cls(value)

    @classmethod
    def safe(cls, value: str) -> Result["UserID"]:
        try:
            return Result.success(cls(uuid.UUID(value.strip())))
        except (ValueError, AttributeError):
            return Result.failure(
                LibraryError.validation(f"Invalid UUID format: {value}")
            )

    @classmethod
    def random(cls) -> "UserID":
        return cls(uuid.uuid4())

    @property
    def short_id(self) -> str:
        return str(self.value)[:8]


@dataclass(frozen=True, order=True)
class BookTitle:
    """A book title: non-empty, at most 200 characters."""

    value: str

    def __post_init__(self) -> None:
        _require_str("BookTitle", self.value)

    def __str__(self) -> str:
        return self.value

    @classmethod
    def apply(cls, value: str) -> "BookTitle":
        return cls(value)

    @classmethod
    def safe(cls, value: str) -> Result["BookTitle"]:
        if not value or not value.strip():
            return Result.failure(LibraryError.validation("Book title cannot be empty"))
        trimmed = value.strip()
        if len(trimmed) > MAX_TITLE_LENGTH:
            return Result.failure(
                LibraryError.validation(
                    f"Book title cannot exceed {MAX_TITLE_LENGTH} characters"
                )
            )
        return Result.success(cls(trimmed))

    @property
    def words(self) -> List[str]:
        return self.value.split()

    @property
    def word_count(self) -> int:
        return len(self.words)


@dataclass(frozen=True, order=True)
class AuthorName:
    """An author name: letters, spaces, hyphens and periods only."""

    value: str

    def __post_init__(self) -> None:
        _require_str("AuthorName", self.value)

    def __str__(self) -> str:
        return self.value

    @classmethod
    def apply(cls, value: str) -> "AuthorName":
        return cls(value)

    @classmethod
    def safe(cls, value: str) -> Result["AuthorName"]:
        if not value or not value.strip():
            return Result.failure(LibraryError.validation("Author name cannot be empty"))
        trimmed = value.strip()
        if len(trimmed) > MAX_AUTHOR_LENGTH:
            return Result.failure(
                LibraryError.validation(
                    f"Author name cannot exceed {MAX_AUTHOR_LENGTH} characters"
                )
            )
        if not _AUTHOR_PATTERN.match(trimmed):
            return Result.failure(
                LibraryError.validation(
                    "Author name can only contain letters, spaces, hyphens, and periods"
                )
            )
        return Result.success(cls(trimmed))

    @property
    def last_name(self) -> str:
        parts = self.value.split()
        return parts[-1] if len(parts) > 1 else self.value

    @property
    def first_name(self) -> str:
        parts = self.value.split()
        return parts[0] if len(parts) > 1 else ""

    @property
    def initials(self) -> str:
        return ".".join(part[0] for part in self.value.split())


@dataclass(frozen=True, order=True)
class Genre:
    """Free-text genre, compared and grouped in normalized (lowercase) form."""

    value: str

    def __post_init__(self) -> None:
        _require_str("Genre", self.value)

    def __str__(self) -> str:
        return self.value

    @classmethod
    def apply(cls, value: str) -> "Genre":
        return cls(value)

    @classmethod
    def safe(cls, value: str) -> Result["Genre"]:
        if not value or not value.strip():
            return Result.failure(LibraryError.validation("Genre cannot be empty"))
        trimmed = value.strip()
        if len(trimmed) > MAX_GENRE_LENGTH:
            return Result.failure(
                LibraryError.validation(
                    f"Genre cannot exceed {MAX_GENRE_LENGTH} characters"
                )
            )
        return Result.success(cls(trimmed))

    @property
    def normalized(self) -> str:
        return self.value.strip().lower()


@dataclass(frozen=True)
class SearchQuery:
    """
    Criteria for a catalog search.

    All criteria are optional but at least one must be set. String criteria
    are case-insensitive substring matches and are combined with AND.
    """

    text: Optional[str] = None
    """Matches title, any author, or genre"""

    title: Optional[str] = None
    """Substring of the book title"""

    author: Optional[str] = None
    """Substring of any author name"""

    genre: Optional[str] = None
    """Substring of the genre"""

    available_only: bool = False
    """Restrict results to books that can be loaned right now"""

    min_year: Optional[int] = None
    """Minimum publication year (inclusive)"""

    max_year: Optional[int] = None
    """Maximum publication year (inclusive)"""

    def __post_init__(self) -> None:
        """Validate query constraints."""
        if self.is_empty():
            raise ValueError("Search query must set at least one criterion")

        if self.min_year is not None and self.max_year is not None:
            if self.min_year > self.max_year:
                raise ValueError(
                    f"min_year ({self.min_year}) cannot be greater than "
                    f"max_year ({self.max_year})"
                )

    def is_empty(self) -> bool:
        """Check if no criterion is set."""
        text_fields = [self.text, self.title, self.author, self.genre]
        return (
            all(not value or not value.strip() for value in text_fields)
            and not self.available_only
            and self.min_year is None
            and self.max_year is None
        )


@dataclass(frozen=True)
class LibraryReport:
    """
    Summary statistics of a catalog.

    This value object captures the totals shown on the statistics screen.
    """

    total_books: int
    """Number of catalogued books"""

    available_books: int
    """Books that can be loaned right now"""

    loaned_books: int
    """Books currently out on loan"""

    total_users: int
    """Number of registered users"""

    active_loans: int
    """Outstanding loans in the transaction log"""

    total_reservations: int
    """Reservations ever recorded"""

    books_by_genre: Dict[str, int] = field(default_factory=dict)
    """Book count per normalized genre"""

    users_by_type: Dict[str, int] = field(default_factory=dict)
    """User count per variant label (Student, Faculty, Librarian)"""

    def __post_init__(self) -> None:
        """Validate report constraints."""
        # Invariant: every book is either available or loaned
        if self.available_books + self.loaned_books != self.total_books:
            raise ValueError(
                f"Invariant violated: available_books ({self.available_books}) + "
                f"loaned_books ({self.loaned_books}) must equal total_books ({self.total_books})"
            )
