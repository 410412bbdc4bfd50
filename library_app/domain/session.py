"""
Authenticated sessions and the capability table.

A Session is created at login and discarded at logout; it is never
persisted. Its permission set is derived purely from the user's variant.
"""

import hmac
import logging
from dataclasses import dataclass, field
from datetime import datetime, UTC
from enum import Enum
from typing import TYPE_CHECKING, Dict, FrozenSet, Optional, Union

from .entities import User, UserType
from .results import LibraryError, Result
from .value_objects import UserID

if TYPE_CHECKING:
    from .catalog import Catalog

logger = logging.getLogger(__name__)


class Capability(str, Enum):
    """Named permissions checked before gated operations."""

    ADD_BOOK = "add_book"
    ADD_USER = "add_user"
    RESERVE = "reserve"
    LIST_USERS = "list_users"
    VIEW_TRANSACTIONS = "view_transactions"
    VIEW_STATISTICS = "view_statistics"
    REMOVE_USER = "remove_user"
    REMOVE_BOOK = "remove_book"
    LOAN = "loan"
    RETURN = "return"
    SEARCH = "search"
    LIST_BOOKS = "list_books"


_BORROWER_CAPABILITIES: FrozenSet[Capability] = frozenset({
    Capability.RESERVE,
    Capability.LOAN,
    Capability.RETURN,
    Capability.SEARCH,
    Capability.LIST_BOOKS,
})

PERMISSIONS: Dict[UserType, FrozenSet[Capability]] = {
    UserType.STUDENT: _BORROWER_CAPABILITIES,
    UserType.FACULTY: _BORROWER_CAPABILITIES,
    UserType.LIBRARIAN: frozenset(Capability),
}


@dataclass(frozen=True)
class Session:
    """An authenticated actor and what it may do."""

    user_id: UserID
    user_name: str
    user_type: UserType
    permissions: FrozenSet[Capability]
    login_time: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def for_user(cls, user: User, now: Optional[datetime] = None) -> "Session":
        return cls(
            user_id=user.id,
            user_name=user.name,
            user_type=user.user_type,
            permissions=PERMISSIONS[user.user_type],
            login_time=now or datetime.now(UTC),
        )


def has_permission(session: Session, capability: Union[Capability, str]) -> bool:
    """True if the session holds the capability; unknown names are denied."""
    if not isinstance(capability, Capability):
        try:
            capability = Capability(capability)
        except ValueError:
            return False
    return capability in session.permissions


def _credential_matches(stored: str, supplied: str) -> bool:
    return hmac.compare_digest(stored.encode("utf-8"), supplied.encode("utf-8"))


def login(
    catalog: "Catalog",
    identifier: str,
    credential: str,
    now: Optional[datetime] = None,
) -> Result[Session]:
    """
    Authenticate against the catalog's users.

    `identifier` is either a user's exact display name or the string form of
    their UUID. A UUID-shaped identifier that matches no ID is also tried as
    a name. The credential must match exactly.
    """
    user_id = UserID.safe(identifier)
    for user in catalog.users.values():
        matched = (user_id.ok and user.id == user_id.value) or user.name == identifier
        if matched and _credential_matches(user.password, credential):
            session = Session.for_user(user, now)
            logger.info("User %s logged in as %s", user.name, user.user_type.label)
            return Result.success(session)

    logger.warning("Failed login attempt for identifier %r", identifier)
    return Result.failure(LibraryError.authentication("Invalid credentials"))


def logout(session: Session) -> None:
    logger.info("User %s logged out", session.user_name)
