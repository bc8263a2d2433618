"""User lookups and credential checks."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from survey_basket.models.user import User
from survey_basket.repositories.base import BaseRepository


def _normalize(email: str) -> str:
    return email.strip().lower()


class UserRepository(BaseRepository[User]):
    """Persistence for :class:`User`; token handling lives in the ledgers."""

    model = User

    def get_by_email(self, email: str) -> User | None:
        """Case-insensitive lookup (emails are stored normalized)."""
        stmt = select(User).where(User.email == _normalize(email))
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str) -> bool:
        stmt = select(User.id).where(User.email == _normalize(email)).limit(1)
        return self.session.execute(stmt).first() is not None

    def create(self, *, email: str, password: str, first_name: str = "", last_name: str = "") -> User:
        """Stage a user with a hashed password and flush to obtain its id."""
        user = User(email=email, first_name=first_name, last_name=last_name)
        user.password = password
        return self.add(user)

    def authenticate(self, email: str, password: str) -> User | None:
        """
        Return the user owning ``email`` when ``password`` matches its hash.

        Unknown email and wrong password are indistinguishable to the caller.
        """
        user = self.get_by_email(email)
        if user is None or not user.verify_password(password):
            return None
        return user
