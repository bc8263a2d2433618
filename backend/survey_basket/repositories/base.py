"""Shared persistence helpers for the SQLAlchemy repositories.

Repositories only read and stage rows. Transactions belong to the unit of
work, so nothing here commits or rolls back.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar, cast

from sqlalchemy import select
from sqlalchemy.orm import Session

from survey_basket.core.extensions import db

E = TypeVar("E")  # mapped entity


class BaseRepository(Generic[E]):
    """
    Primary-key CRUD for one mapped class.

    Subclasses set :attr:`model`. Without an explicit session the repository
    follows ``db.session`` of the current application context.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session if self._session is not None else cast(Session, db.session)

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so generated columns (``id``) are populated."""
        self.session.add(instance)
        self.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        stmt = select(self.model).where(self.model.id == entity_id)  # type: ignore[attr-defined]
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def flush(self) -> None:
        self.session.flush()
