"""
Tests for sessions, login and the permission table.
"""

from datetime import datetime, UTC

import pytest

from library_app.domain.catalog import Catalog
from library_app.domain.entities import Faculty, Librarian, Student, UserType
from library_app.domain.results import ErrorKind
from library_app.domain.session import (
    Capability,
    PERMISSIONS,
    Session,
    has_permission,
    login,
    logout,
)


@pytest.fixture
def alice():
    return Student.create_new("Alice", "Computer Science", "student123")


@pytest.fixture
def bob():
    return Librarian.create_new("Bob", "EMP001", "admin123")


@pytest.fixture
def catalog(alice, bob):
    return Catalog.empty().add_user(alice).catalog.add_user(bob).catalog


class TestPermissionTable:
    """Tests for the capability sets of each user type."""

    def test_borrowers_share_capabilities(self):
        expected = {
            Capability.RESERVE,
            Capability.LOAN,
            Capability.RETURN,
            Capability.SEARCH,
            Capability.LIST_BOOKS,
        }

        assert PERMISSIONS[UserType.STUDENT] == expected
        assert PERMISSIONS[UserType.FACULTY] == expected

    def test_librarian_has_everything(self):
        assert PERMISSIONS[UserType.LIBRARIAN] == set(Capability)

    def test_student_cannot_manage_catalog(self, alice):
        session = Session.for_user(alice)

        for capability in (
            Capability.ADD_BOOK,
            Capability.REMOVE_BOOK,
            Capability.ADD_USER,
            Capability.REMOVE_USER,
            Capability.LIST_USERS,
            Capability.VIEW_TRANSACTIONS,
            Capability.VIEW_STATISTICS,
        ):
            assert not has_permission(session, capability)

    def test_permission_by_name(self, alice):
        session = Session.for_user(alice)

        assert has_permission(session, "loan")
        assert not has_permission(session, "add_book")

    def test_unknown_capability_denied(self, bob):
        """Names outside the capability set are never granted."""
        assert not has_permission(Session.for_user(bob), "launch_rockets")


class TestLogin:
    """Tests for login() and logout()."""

    def test_login_by_name(self, catalog, alice):
        now = datetime(2024, 3, 1, tzinfo=UTC)

        result = login(catalog, "Alice", "student123", now)

        assert result.ok
        session = result.unwrap()
        assert session.user_id == alice.id
        assert session.user_name == "Alice"
        assert session.user_type is UserType.STUDENT
        assert session.permissions == PERMISSIONS[UserType.STUDENT]
        assert session.login_time == now

    def test_login_by_uuid(self, catalog, bob):
        result = login(catalog, str(bob.id), "admin123")

        assert result.unwrap().user_type is UserType.LIBRARIAN

    def test_wrong_password(self, catalog):
        result = login(catalog, "Alice", "wrong")

        assert not result.ok
        assert result.error.kind is ErrorKind.AUTHENTICATION

    def test_unknown_user(self, catalog):
        assert login(catalog, "Mallory", "student123").error.kind is ErrorKind.AUTHENTICATION

    def test_name_match_is_exact(self, catalog):
        assert not login(catalog, "alice", "student123").ok

    def test_duplicate_names_pick_matching_credential(self, catalog):
        """Two users may share a name; the credential decides."""
        other = Faculty.create_new("Alice", "Physics", "faculty123")
        c = catalog.add_user(other).catalog

        session = login(c, "Alice", "faculty123").unwrap()

        assert session.user_id == other.id

    def test_uuid_shaped_name_falls_back_to_name(self, catalog):
        """An identifier that parses as a UUID but is nobody's ID still matches names."""
        lookalike = "123e4567-e89b-12d3-a456-426614174000"
        user = Student.create_new(lookalike, "Mathematics", "pw")
        c = catalog.add_user(user).catalog

        session = login(c, lookalike, "pw").unwrap()

        assert session.user_id == user.id

    def test_logout_is_harmless(self, catalog):
        session = login(catalog, "Bob", "admin123").unwrap()

        logout(session)

        assert has_permission(session, Capability.ADD_BOOK)
