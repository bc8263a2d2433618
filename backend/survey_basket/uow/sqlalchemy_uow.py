"""
SQLAlchemy unit of work over the Flask-scoped session.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from survey_basket.core.extensions import db
from survey_basket.repositories import RefreshTokenRepository, UserRepository
from survey_basket.uow.base import UnitOfWork


class SQLAlchemyUnitOfWork(UnitOfWork):
    """
    Both repositories share ``session``; a failed commit is rolled back
    before the error propagates.

    :param session: Explicit session, defaults to ``db.session``.
    """

    def __init__(self, session: Session | None = None) -> None:
        self.session: Session = session if session is not None else db.session
        self.users = UserRepository(session=self.session)
        self.refresh_tokens = RefreshTokenRepository(session=self.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
