"""User directory adapter over :class:`UserRepository`."""

from __future__ import annotations

from survey_basket.models.user import User
from survey_basket.repositories import UserRepository
from survey_basket.services._shared.ports import UserDirectory, UserIdentity


def _identity(user: User) -> UserIdentity:
    return UserIdentity(
        id=user.id,
        email=user.email,
        first_name=user.first_name or "",
        last_name=user.last_name or "",
    )


class SqlUserDirectory(UserDirectory):
    """Read-only lookups against the ``users`` table."""

    def __init__(self, repo: UserRepository | None = None) -> None:
        self._repo = repo or UserRepository()

    def authenticate(self, email: str, password: str) -> UserIdentity | None:
        user = self._repo.authenticate(email, password)
        return _identity(user) if user is not None else None

    def get(self, user_id: int) -> UserIdentity | None:
        user = self._repo.get(user_id)
        return _identity(user) if user is not None else None
