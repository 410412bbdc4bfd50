"""
Converters between domain entities and snapshot schemas.

This module centralizes all conversion logic between the domain layer
and the stored representation, maintaining clean separation of concerns.
Every persistence adapter goes through these functions so the JSON file
and the SQLite payloads share one format.
"""

from uuid import UUID

from library_app.domain.catalog import Catalog
from library_app.domain.entities import (
    Book,
    Faculty,
    Librarian,
    Loan,
    Reservation,
    Return,
    Student,
    Transaction,
    TransactionKind,
    User,
    UserType,
)
from library_app.domain.value_objects import ISBN, UserID
from library_app.infrastructure.serialization import schemas


def domain_book_to_schema(book: Book) -> schemas.BookSchema:
    """
    Convert a domain Book to its stored schema.

    Args:
        book: Domain Book entity

    Returns:
        BookSchema model
    """
    return schemas.BookSchema(
        isbn=book.isbn.value,
        title=book.title,
        authors=list(book.authors),
        publication_year=book.publication_year,
        genre=book.genre,
        is_available=book.is_available,
    )


def schema_book_to_domain(book: schemas.BookSchema) -> Book:
    """
    Convert a stored BookSchema back to a domain Book.

    Stored ISBNs were validated when first catalogued, so the trusted
    constructor is used.
    """
    return Book(
        isbn=ISBN.apply(book.isbn),
        title=book.title,
        authors=tuple(book.authors),
        publication_year=book.publication_year,
        genre=book.genre,
        is_available=book.is_available,
    )


def domain_user_to_schema(user: User):
    """Convert a domain user variant to the matching schema variant."""
    user_id: UUID = user.id.value
    if user.user_type is UserType.STUDENT:
        return schemas.StudentSchema(
            id=user_id, name=user.name, major=user.major, password=user.password
        )
    if user.user_type is UserType.FACULTY:
        return schemas.FacultySchema(
            id=user_id, name=user.name, department=user.department, password=user.password
        )
    return schemas.LibrarianSchema(
        id=user_id, name=user.name, employee_id=user.employee_id, password=user.password
    )


def schema_user_to_domain(user) -> User:
    """Convert a stored user schema back to its domain variant."""
    user_id = UserID.apply(user.id)
    if user.kind == UserType.STUDENT.value:
        return Student(id=user_id, name=user.name, major=user.major, password=user.password)
    if user.kind == UserType.FACULTY.value:
        return Faculty(
            id=user_id, name=user.name, department=user.department, password=user.password
        )
    return Librarian(
        id=user_id, name=user.name, employee_id=user.employee_id, password=user.password
    )


def domain_transaction_to_schema(tx: Transaction):
    """Convert a domain transaction variant to the matching schema variant."""
    book = domain_book_to_schema(tx.book)
    user = domain_user_to_schema(tx.user)
    if tx.kind is TransactionKind.LOAN:
        return schemas.LoanSchema(
            book=book, user=user, timestamp=tx.timestamp, due_date=tx.due_date
        )
    if tx.kind is TransactionKind.RETURN:
        return schemas.ReturnSchema(book=book, user=user, timestamp=tx.timestamp)
    return schemas.ReservationSchema(book=book, user=user, timestamp=tx.timestamp)


def schema_transaction_to_domain(tx) -> Transaction:
    """Convert a stored transaction schema back to its domain variant."""
    book = schema_book_to_domain(tx.book)
    user = schema_user_to_domain(tx.user)
    if tx.kind == TransactionKind.LOAN.value:
        return Loan(book=book, user=user, timestamp=tx.timestamp, due_date=tx.due_date)
    if tx.kind == TransactionKind.RETURN.value:
        return Return(book=book, user=user, timestamp=tx.timestamp)
    return Reservation(book=book, user=user, timestamp=tx.timestamp)


def catalog_to_schema(catalog: Catalog) -> schemas.CatalogSchema:
    """
    Convert a Catalog to a snapshot schema.

    Args:
        catalog: The catalog to store

    Returns:
        CatalogSchema preserving book, user and transaction order
    """
    return schemas.CatalogSchema(
        books=[domain_book_to_schema(book) for book in catalog.books.values()],
        users=[domain_user_to_schema(user) for user in catalog.users.values()],
        transactions=[domain_transaction_to_schema(tx) for tx in catalog.transactions],
    )


def schema_to_catalog(snapshot: schemas.CatalogSchema) -> Catalog:
    """
    Rebuild a Catalog from a snapshot schema.

    Raises:
        CatalogIntegrityError: If the snapshot violates catalog invariants
    """
    return Catalog.from_snapshot(
        books=[schema_book_to_domain(book) for book in snapshot.books],
        users=[schema_user_to_domain(user) for user in snapshot.users],
        transactions=[schema_transaction_to_domain(tx) for tx in snapshot.transactions],
    )


def catalog_to_json(catalog: Catalog, indent: int | None = 2) -> str:
    """Serialize a catalog to a JSON document."""
    return catalog_to_schema(catalog).model_dump_json(indent=indent)


def catalog_from_json(document: str | bytes) -> Catalog:
    """
    Parse a JSON document produced by catalog_to_json.

    Raises:
        pydantic.ValidationError: If the document is malformed (a ValueError)
        CatalogIntegrityError: If the snapshot violates catalog invariants
    """
    return schema_to_catalog(schemas.CatalogSchema.model_validate_json(document))
