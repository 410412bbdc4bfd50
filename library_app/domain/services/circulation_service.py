"""
Domain service for permission-gated catalog operations.

The Catalog aggregate deliberately does not know about sessions. This
service is the calling layer that sits between a console (or any other
driver) and the aggregate:

1. Check the session holds the capability the operation needs
2. Delegate to the Catalog, which returns a new state or a rejection
3. Log the outcome and, optionally, persist the new state

The service keeps no catalog state of its own. The driver owns the current
Catalog value and threads it through each call, replacing it with the
catalog carried by the returned OperationResult.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from library_app.domain import queries
from library_app.domain.catalog import Catalog
from library_app.domain.entities import Book, Loan, Transaction, User, UserType
from library_app.domain.ports import CatalogRepository
from library_app.domain.results import LibraryError, OperationResult, Result
from library_app.domain.session import Capability, Session, has_permission
from library_app.domain.value_objects import ISBN, SearchQuery, UserID

logger = logging.getLogger(__name__)


class CirculationService:
    """
    Runs catalog operations on behalf of an authenticated session.

    Usage:
        service = CirculationService(repository=sqlite_repo, autosave=True)
        result = service.loan_book(catalog, session, isbn)
        if result.succeeded:
            catalog = result.catalog
        else:
            print(result.error.message)
    """

    def __init__(
        self,
        repository: Optional[CatalogRepository] = None,
        autosave: bool = False,
    ) -> None:
        """
        Initialize the service.

        Args:
            repository: Optional port used to persist successful mutations
            autosave: Save the new catalog after every successful mutation
        """
        if autosave and repository is None:
            raise ValueError("autosave requires a repository")
        self._repository = repository
        self._autosave = autosave

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _deny(catalog: Catalog, session: Session, capability: Capability) -> OperationResult:
        logger.warning(
            "Denied %s for %s (%s)",
            capability.value, session.user_name, session.user_type.label,
        )
        return OperationResult(
            catalog=catalog,
            error=LibraryError.authorization(
                f"{session.user_type.label} accounts cannot perform '{capability.value}'"
            ),
        )

    @staticmethod
    def _other_user(
        catalog: Catalog,
        session: Session,
        user_id: Optional[UserID],
        operation: str,
    ) -> Optional[OperationResult]:
        """Only librarians may act for a user other than themselves."""
        if user_id is None or user_id == session.user_id or session.user_type is UserType.LIBRARIAN:
            return None
        logger.warning(
            "Denied %s for %s on behalf of %s (%s)",
            operation, session.user_name, user_id, session.user_type.label,
        )
        return OperationResult(
            catalog=catalog,
            error=LibraryError.authorization(
                f"{session.user_type.label} accounts can only {operation} for themselves"
            ),
        )

    def _finish(self, operation: str, session: Session, result: OperationResult) -> OperationResult:
        if result.failed:
            logger.info("%s by %s rejected: %s", operation, session.user_name, result.error)
            return result

        logger.info("%s by %s succeeded", operation, session.user_name)
        if self._autosave:
            self._repository.save(result.catalog)
        return result

    # ------------------------------------------------------------------
    # Gated mutations
    # ------------------------------------------------------------------

    def add_book(self, catalog: Catalog, session: Session, book: Book) -> OperationResult:
        if not has_permission(session, Capability.ADD_BOOK):
            return self._deny(catalog, session, Capability.ADD_BOOK)
        return self._finish("add_book", session, catalog.add_book(book))

    def add_user(self, catalog: Catalog, session: Session, user: User) -> OperationResult:
        if not has_permission(session, Capability.ADD_USER):
            return self._deny(catalog, session, Capability.ADD_USER)
        return self._finish("add_user", session, catalog.add_user(user))

    def remove_book(self, catalog: Catalog, session: Session, isbn: ISBN) -> OperationResult:
        if not has_permission(session, Capability.REMOVE_BOOK):
            return self._deny(catalog, session, Capability.REMOVE_BOOK)
        return self._finish("remove_book", session, catalog.remove_book(isbn))

    def remove_user(self, catalog: Catalog, session: Session, user_id: UserID) -> OperationResult:
        if not has_permission(session, Capability.REMOVE_USER):
            return self._deny(catalog, session, Capability.REMOVE_USER)
        return self._finish("remove_user", session, catalog.remove_user(user_id))

    def loan_book(
        self,
        catalog: Catalog,
        session: Session,
        isbn: ISBN,
        user_id: Optional[UserID] = None,
        now: Optional[datetime] = None,
    ) -> OperationResult:
        """Lend a book, to the session's own user unless user_id is given."""
        if not has_permission(session, Capability.LOAN):
            return self._deny(catalog, session, Capability.LOAN)
        denied = self._other_user(catalog, session, user_id, "loan")
        if denied is not None:
            return denied
        result = catalog.loan_book(isbn, user_id or session.user_id, now)
        return self._finish("loan", session, result)

    def return_book(
        self,
        catalog: Catalog,
        session: Session,
        isbn: ISBN,
        user_id: Optional[UserID] = None,
        now: Optional[datetime] = None,
    ) -> OperationResult:
        if not has_permission(session, Capability.RETURN):
            return self._deny(catalog, session, Capability.RETURN)
        denied = self._other_user(catalog, session, user_id, "return")
        if denied is not None:
            return denied
        result = catalog.return_book(isbn, user_id or session.user_id, now)
        return self._finish("return", session, result)

    def reserve_book(
        self,
        catalog: Catalog,
        session: Session,
        isbn: ISBN,
        user_id: Optional[UserID] = None,
        now: Optional[datetime] = None,
    ) -> OperationResult:
        if not has_permission(session, Capability.RESERVE):
            return self._deny(catalog, session, Capability.RESERVE)
        denied = self._other_user(catalog, session, user_id, "reserve")
        if denied is not None:
            return denied
        result = catalog.reserve_book(isbn, user_id or session.user_id, now)
        return self._finish("reserve", session, result)

    # ------------------------------------------------------------------
    # Gated views
    # ------------------------------------------------------------------

    def list_books(self, catalog: Catalog, session: Session) -> Result[List[Book]]:
        if not has_permission(session, Capability.LIST_BOOKS):
            return Result.failure(self._deny(catalog, session, Capability.LIST_BOOKS).error)
        return Result.success(list(catalog.books.values()))

    def search(self, catalog: Catalog, session: Session, query: SearchQuery) -> Result[List[Book]]:
        if not has_permission(session, Capability.SEARCH):
            return Result.failure(self._deny(catalog, session, Capability.SEARCH).error)
        return Result.success(queries.search(catalog, query))

    def list_users(self, catalog: Catalog, session: Session) -> Result[List[User]]:
        if not has_permission(session, Capability.LIST_USERS):
            return Result.failure(self._deny(catalog, session, Capability.LIST_USERS).error)
        return Result.success(list(catalog.users.values()))

    def view_transactions(
        self,
        catalog: Catalog,
        session: Session,
    ) -> Result[Tuple[Transaction, ...]]:
        if not has_permission(session, Capability.VIEW_TRANSACTIONS):
            return Result.failure(
                self._deny(catalog, session, Capability.VIEW_TRANSACTIONS).error
            )
        return Result.success(catalog.transactions)

    def my_loans(self, catalog: Catalog, session: Session) -> List[Loan]:
        """The session user's own outstanding loans; always allowed."""
        return queries.active_loans_for(catalog, session.user_id)
