from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from werkzeug.security import check_password_hash, generate_password_hash


@dataclass(frozen=True, slots=True)
class UserIdentity:
    """
    Read-model of a user as seen by the authentication core.

    :ivar id: Stable user identifier.
    :ivar email: Normalized login email.
    :ivar first_name: Display attribute.
    :ivar last_name: Display attribute.
    """

    id: int
    email: str
    first_name: str = ""
    last_name: str = ""


class UserDirectory(Protocol):
    """Port resolving users by credentials or by identifier."""

    def authenticate(self, email: str, password: str) -> UserIdentity | None:
        """Return the user when ``email`` exists and ``password`` matches its hash."""
        ...

    def get(self, user_id: int) -> UserIdentity | None:
        """Return the user with ``user_id``, if any."""
        ...


class InMemoryUserDirectory(UserDirectory):
    """Dictionary-backed directory used in unit tests."""

    def __init__(self) -> None:
        self._users: dict[int, tuple[UserIdentity, str]] = {}
        self._seq = 0

    def add(self, email: str, password: str, *, first_name: str = "", last_name: str = "") -> UserIdentity:
        self._seq += 1
        identity = UserIdentity(
            id=self._seq,
            email=email.strip().lower(),
            first_name=first_name,
            last_name=last_name,
        )
        self._users[identity.id] = (identity, generate_password_hash(password))
        return identity

    def remove(self, user_id: int) -> None:
        self._users.pop(user_id, None)

    def authenticate(self, email: str, password: str) -> UserIdentity | None:
        normalized = email.strip().lower()
        for identity, password_hash in self._users.values():
            if identity.email == normalized and check_password_hash(password_hash, password):
                return identity
        return None

    def get(self, user_id: int) -> UserIdentity | None:
        entry = self._users.get(user_id)
        return entry[0] if entry else None
