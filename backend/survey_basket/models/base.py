"""Declarative mixins shared by the auth models (typed SQLAlchemy 2.0)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from survey_basket.core.time import utcnow


class PKMixin:
    """Integer surrogate primary key named ``id``."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True)


class TimestampMixin:
    """
    Audit columns ``created_at`` / ``updated_at``.

    Values are stamped in UTC by the application; the server defaults only
    cover rows inserted outside the ORM (e.g. migrations or SQL consoles).
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )


class ReprMixin:
    """``<ClassName id=...>`` representation that never touches secrets."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={getattr(self, 'id', None)}>"
