"""
Pydantic schemas for the stored catalog snapshot.

These models describe the on-disk shape of a catalog. They mirror the
domain types field by field; variants of users and transactions are
told apart by their `kind` discriminator.
"""

from datetime import datetime
from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import BaseModel, Field

SNAPSHOT_VERSION = 1


class BookSchema(BaseModel):
    """
    Stored representation of a Book.
    """
    isbn: str = Field(description="Unique ISBN of the book")
    title: str = Field(description="Book title")
    authors: list[str] = Field(min_length=1, description="Ordered author names")
    publication_year: int = Field(description="Year of publication")
    genre: str = Field(description="Free-text genre")
    is_available: bool = Field(default=True, description="False while on loan")


class StudentSchema(BaseModel):
    kind: Literal["student"] = "student"
    id: UUID
    name: str
    major: str
    password: str


class FacultySchema(BaseModel):
    kind: Literal["faculty"] = "faculty"
    id: UUID
    name: str
    department: str
    password: str


class LibrarianSchema(BaseModel):
    kind: Literal["librarian"] = "librarian"
    id: UUID
    name: str
    employee_id: str
    password: str


UserSchema = Annotated[
    Union[StudentSchema, FacultySchema, LibrarianSchema],
    Field(discriminator="kind"),
]


class LoanSchema(BaseModel):
    kind: Literal["loan"] = "loan"
    book: BookSchema = Field(description="Book snapshot at transaction time")
    user: UserSchema = Field(description="User snapshot at transaction time")
    timestamp: datetime
    due_date: datetime | None = None


class ReturnSchema(BaseModel):
    kind: Literal["return"] = "return"
    book: BookSchema
    user: UserSchema
    timestamp: datetime


class ReservationSchema(BaseModel):
    kind: Literal["reservation"] = "reservation"
    book: BookSchema
    user: UserSchema
    timestamp: datetime


TransactionSchema = Annotated[
    Union[LoanSchema, ReturnSchema, ReservationSchema],
    Field(discriminator="kind"),
]


class CatalogSchema(BaseModel):
    """
    Complete catalog snapshot.

    Lists keep insertion order for books and users and chronological order
    for transactions.
    """
    version: Literal[1] = Field(default=SNAPSHOT_VERSION, description="Snapshot format version")
    books: list[BookSchema] = Field(default_factory=list)
    users: list[UserSchema] = Field(default_factory=list)
    transactions: list[TransactionSchema] = Field(default_factory=list)
