"""
Tests for the read-only catalog views.
"""

from datetime import datetime, timedelta, UTC

import pytest

from library_app.domain import queries
from library_app.domain.catalog import Catalog
from library_app.domain.entities import Book, Faculty, Librarian, Student
from library_app.domain.value_objects import ISBN, SearchQuery, UserID

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=UTC)


@pytest.fixture
def books():
    return [
        Book.create_new("9780134685991", "Effective Java", ["Joshua Bloch"], 2018, "Programming"),
        Book.create_new("9781491950357", "Designing Data-Intensive Applications",
                        ["Martin Kleppmann"], 2017, "Data"),
        Book.create_new("9780132350884", "Clean Code", ["Robert C. Martin"], 2008, "Programming"),
        Book.create_new("9780061120084", "To Kill a Mockingbird", ["Harper Lee"], 1960, "Fiction"),
    ]


@pytest.fixture
def users():
    return [
        Student.create_new("Alice", "Computer Science", "student123"),
        Faculty.create_new("Dr. Smith", "Engineering", "faculty123"),
        Librarian.create_new("Bob", "EMP001", "admin123"),
    ]


@pytest.fixture
def catalog(books, users):
    """
    Alice has Effective Java (loaned T0) and Clean Code (loaned T0+2d).
    Dr. Smith borrowed and returned DDIA.
    """
    alice, smith, _ = users
    c = Catalog.empty()
    for book in books:
        c = c.add_book(book).catalog
    for user in users:
        c = c.add_user(user).catalog

    c = c.loan_book(books[1].isbn, smith.id, T0 - timedelta(days=5)).catalog
    c = c.loan_book(books[0].isbn, alice.id, T0).catalog
    c = c.return_book(books[1].isbn, smith.id, T0 + timedelta(days=1)).catalog
    c = c.loan_book(books[2].isbn, alice.id, T0 + timedelta(days=2)).catalog
    return c


class TestOutstandingLoans:
    """Tests for loan tracking views."""

    def test_outstanding_loans_in_log_order(self, catalog, books):
        loans = queries.outstanding_loans(catalog)

        assert [loan.book.isbn for loan in loans] == [books[0].isbn, books[2].isbn]

    def test_books_available(self, catalog, books):
        """Available books keep insertion order."""
        assert queries.books_available(catalog) == [
            catalog.books[books[1].isbn],
            catalog.books[books[3].isbn],
        ]

    def test_active_loans_for_user(self, catalog, users, books):
        alice, smith, bob = users

        assert [loan.book.title for loan in queries.active_loans_for(catalog, alice.id)] == [
            "Effective Java", "Clean Code",
        ]
        assert queries.active_loans_for(catalog, smith.id) == []
        assert queries.active_loans_for(catalog, UserID.random()) == []

    def test_outstanding_loan_for_book(self, catalog, books, users):
        loan = queries.outstanding_loan_for(catalog, books[0].isbn)

        assert loan.user == users[0]

    def test_returned_book_has_no_outstanding_loan(self, catalog, books):
        assert queries.outstanding_loan_for(catalog, books[1].isbn) is None

    def test_never_loaned_book(self, catalog, books):
        assert queries.outstanding_loan_for(catalog, books[3].isbn) is None

    def test_last_borrower_survives_return(self, catalog, books, users):
        """The last borrower is known even after the book came back."""
        assert queries.last_borrower_of(catalog, books[1].isbn) == users[1]
        assert queries.last_borrower_of(catalog, books[3].isbn) is None

    def test_loans_in_empty_log(self):
        assert queries.outstanding_loans_in(()) == []


class TestOverdue:
    """Tests for overdue detection and fees."""

    def test_no_overdue_loans_before_due_date(self, catalog):
        assert queries.overdue_loans(catalog, T0 + timedelta(days=13)) == []

    def test_overdue_loans(self, catalog, books):
        overdue = queries.overdue_loans(catalog, T0 + timedelta(days=15))

        assert [loan.book.isbn for loan in overdue] == [books[0].isbn]

    def test_student_fees(self, catalog, users):
        """Effective Java is 6 days late, Clean Code 4: 10 days at $0.50."""
        alice = users[0]
        now = T0 + timedelta(days=20)

        assert queries.calculate_overdue_fees(catalog, alice.id, now) == pytest.approx(5.0)

    def test_partial_day_not_charged(self, catalog, users):
        now = T0 + timedelta(days=14, hours=23)

        assert queries.calculate_overdue_fees(catalog, users[0].id, now) == 0.0

    def test_faculty_and_librarian_rates(self, books):
        smith = Faculty.create_new("Dr. Smith", "Engineering", "pw")
        bob = Librarian.create_new("Bob", "EMP001", "pw")
        c = Catalog.empty()
        for book in books[:2]:
            c = c.add_book(book).catalog
        c = c.add_user(smith).catalog.add_user(bob).catalog
        c = c.loan_book(books[0].isbn, smith.id, T0).catalog
        c = c.loan_book(books[1].isbn, bob.id, T0).catalog

        now = T0 + timedelta(days=24)

        assert queries.calculate_overdue_fees(c, smith.id, now) == pytest.approx(2.5)
        assert queries.calculate_overdue_fees(c, bob.id, now) == 0.0

    def test_unknown_user_owes_nothing(self, catalog):
        assert queries.calculate_overdue_fees(catalog, UserID.random(), T0) == 0.0


class TestSearch:
    """Tests for the catalog search view."""

    @staticmethod
    def _titles(catalog, text):
        return [book.title for book in queries.search(catalog, SearchQuery(text=text))]

    def test_text_matches_title_author_or_genre(self, catalog):
        assert self._titles(catalog, "clean") == ["Clean Code"]
        assert self._titles(catalog, "KLEPPMANN") == ["Designing Data-Intensive Applications"]
        assert self._titles(catalog, "fiction") == ["To Kill a Mockingbird"]

    def test_criteria_are_combined(self, catalog):
        query = SearchQuery(genre="programming", min_year=2010)

        assert [b.title for b in queries.search(catalog, query)] == ["Effective Java"]

    def test_available_only(self, catalog):
        query = SearchQuery(genre="Programming", available_only=True)

        assert queries.search(catalog, query) == []

    def test_author_criterion(self, catalog):
        query = SearchQuery(author="martin")

        assert {b.title for b in queries.search(catalog, query)} == {
            "Designing Data-Intensive Applications", "Clean Code",
        }

    def test_year_bounds_inclusive(self, catalog):
        query = SearchQuery(min_year=2008, max_year=2008)

        assert [b.isbn for b in queries.search(catalog, query)] == [ISBN("9780132350884")]

    def test_no_matches(self, catalog):
        assert queries.search(catalog, SearchQuery(title="nonexistent")) == []
