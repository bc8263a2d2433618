"""Factory Boy base wired to the ``session`` fixture."""

from __future__ import annotations

import factory


class SQLAlchemySession:
    """Holder for the session the ``session`` fixture hands to factories."""

    _session = None

    @classmethod
    def set(cls, session):
        cls._session = session

    @classmethod
    def get(cls):
        if cls._session is None:
            raise RuntimeError("No factory session: request the 'session' fixture in this test.")
        return cls._session


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Persist through :meth:`SQLAlchemySession.get`, committing each object."""

    class Meta:
        abstract = True
        # Resolved lazily on every create
        sqlalchemy_session_factory = SQLAlchemySession.get
        # Committed rows stay visible to the test client's request sessions.
        sqlalchemy_session_persistence = "commit"
