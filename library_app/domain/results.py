"""
Result types for domain operations.

Catalog operations never raise for business failures. Instead they return
an explicit result that tells the caller whether the operation was applied
and, if not, why. This keeps "succeeded" distinct from "catalog unchanged".
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Generic, Optional, TypeVar

if TYPE_CHECKING:
    from .catalog import Catalog
    from .entities import Transaction

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Categories of recoverable domain failures."""

    VALIDATION = "validation"
    """Malformed value-type input (bad ISBN, title, author, genre...)"""

    CONFLICT = "conflict"
    """Duplicate key on insert (ISBN or user ID already present)"""

    NOT_FOUND = "not_found"
    """Referenced ISBN or user ID does not exist"""

    STATE_CONFLICT = "state_conflict"
    """Operation would violate a catalog invariant"""

    AUTHORIZATION = "authorization"
    """Session lacks the capability required by the operation"""

    AUTHENTICATION = "authentication"
    """Login credentials did not match any user"""


@dataclass(frozen=True)
class LibraryError:
    """A failure reason that can be reported to the user."""

    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"

    @classmethod
    def validation(cls, message: str) -> "LibraryError":
        return cls(ErrorKind.VALIDATION, message)

    @classmethod
    def conflict(cls, message: str) -> "LibraryError":
        return cls(ErrorKind.CONFLICT, message)

    @classmethod
    def not_found(cls, message: str) -> "LibraryError":
        return cls(ErrorKind.NOT_FOUND, message)

    @classmethod
    def state_conflict(cls, message: str) -> "LibraryError":
        return cls(ErrorKind.STATE_CONFLICT, message)

    @classmethod
    def authorization(cls, message: str) -> "LibraryError":
        return cls(ErrorKind.AUTHORIZATION, message)

    @classmethod
    def authentication(cls, message: str) -> "LibraryError":
        return cls(ErrorKind.AUTHENTICATION, message)


class LibraryOperationError(Exception):
    """Raised when a failed result is unwrapped."""

    def __init__(self, error: LibraryError) -> None:
        super().__init__(str(error))
        self.error = error


class CatalogIntegrityError(ValueError):
    """Raised when a catalog snapshot violates the aggregate invariants."""


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Either a value or a LibraryError.

    Use Result.success() / Result.failure() to build instances.
    """

    value: Optional[T] = None
    error: Optional[LibraryError] = None

    def __post_init__(self) -> None:
        if self.error is not None and self.value is not None:
            raise ValueError("Result cannot hold both a value and an error")

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: LibraryError) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value or raise LibraryOperationError."""
        if self.error is not None:
            raise LibraryOperationError(self.error)
        return self.value  # type: ignore[return-value]

    def unwrap_or(self, default: T) -> T:
        return default if self.error is not None else self.value  # type: ignore[return-value]


@dataclass(frozen=True)
class OperationResult:
    """
    Outcome of a catalog mutation.

    On success `catalog` is the new state and `error` is None. On failure
    `catalog` is the unchanged input state and `error` explains why.
    """

    catalog: "Catalog"
    """The catalog to continue with (new state, or the original on failure)"""

    error: Optional[LibraryError] = None
    """Why the operation was rejected, None when it was applied"""

    transaction: Optional["Transaction"] = None
    """The transaction appended by the operation, if any"""

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error is not None else None
