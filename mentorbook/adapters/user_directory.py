"""
User-management collaborator backed by the application config.
"""

from dataclasses import dataclass
from typing import Iterable, List, Protocol

from ..domain.exceptions import NotFoundError
from ..domain.models import UserRole


@dataclass(frozen=True)
class UserSummary:
    id: str
    name: str
    role: UserRole
    email: str = ""


class UserDirectory(Protocol):
    """Protocol describing what the booking engine needs to know about users."""

    def exists_with_role(self, user_id: str, role: UserRole) -> bool:
        """Return True if the user exists and holds the role."""

    def get(self, user_id: str) -> UserSummary:
        """Return the user or raise NotFoundError."""


class ConfigUserDirectory:
    """
    In-process directory built from the ``users`` section of the config.

    The real account service lives outside this package; this adapter lets
    the CLI and the tests run against a fixed list of people.
    """

    def __init__(self, users: Iterable[UserSummary]):
        self._users = {user.id: user for user in users}

    @classmethod
    def from_config(cls, config) -> "ConfigUserDirectory":
        return cls(
            UserSummary(id=user.id, name=user.name, role=user.role, email=user.email)
            for user in config.users
        )

    def exists_with_role(self, user_id: str, role: UserRole) -> bool:
        user = self._users.get(user_id)
        return user is not None and user.role is role

    def get(self, user_id: str) -> UserSummary:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def list_by_role(self, role: UserRole) -> List[UserSummary]:
        return [user for user in self._users.values() if user.role is role]
