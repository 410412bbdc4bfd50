"""
Domain layer - Core business logic and entities.

This layer contains the value objects, entities, the Catalog aggregate,
sessions and permissions, and defines the ports (interfaces) that the
infrastructure layer must implement.

It has NO dependencies on external frameworks, databases, or file formats.
"""

from .catalog import Catalog, LOAN_PERIOD
from .entities import (
    Book,
    Faculty,
    Librarian,
    Loan,
    Reservation,
    Return,
    SearchResult,
    Student,
    Transaction,
    TransactionKind,
    User,
    UserType,
)
from .results import (
    CatalogIntegrityError,
    ErrorKind,
    LibraryError,
    LibraryOperationError,
    OperationResult,
    Result,
)
from .session import Capability, Session, has_permission, login, logout
from .value_objects import (
    AuthorName,
    BookTitle,
    Genre,
    ISBN,
    LibraryReport,
    SearchQuery,
    UserID,
)

__all__ = [
    # Aggregate
    "Catalog",
    "LOAN_PERIOD",
    # Entities
    "Book",
    "Student",
    "Faculty",
    "Librarian",
    "User",
    "UserType",
    "Loan",
    "Return",
    "Reservation",
    "Transaction",
    "TransactionKind",
    "SearchResult",
    # Value Objects
    "ISBN",
    "UserID",
    "BookTitle",
    "AuthorName",
    "Genre",
    "SearchQuery",
    "LibraryReport",
    # Results
    "ErrorKind",
    "LibraryError",
    "LibraryOperationError",
    "CatalogIntegrityError",
    "OperationResult",
    "Result",
    # Sessions
    "Capability",
    "Session",
    "has_permission",
    "login",
    "logout",
]
