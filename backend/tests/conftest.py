"""Pytest fixtures building the app once and resetting the schema per test.

Tests run against an in-memory SQLite database; Flask-SQLAlchemy keeps a
single shared connection for it, so every test starts from freshly created
tables and drops them afterwards.
"""

from __future__ import annotations

import os

import pytest
from survey_basket.core.config import TestingConfig
from survey_basket.core.extensions import db as _db  # Flask-SQLAlchemy instance
from survey_basket.factory import create_app  # application factory under test


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestingConfig` applied and logging
        noise reduced.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestingConfig, instance_relative_config=False)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="function")
def session(app):
    """Provide the Flask-scoped session over freshly created tables.

    Yields
    ------
    sqlalchemy.orm.scoping.scoped_session
        ``db.session`` inside a pushed application context.
    """
    with app.app_context():
        _db.create_all()
        try:
            yield _db.session
        finally:
            _db.session.remove()
            _db.drop_all()
            # A rebuilt service must not keep ledgers from a previous test
            app.extensions.pop("auth_service", None)


@pytest.fixture()
def client(app, session):
    """Return a Flask test client sharing the test database."""
    return app.test_client()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(request):
    """Wire Factory Boy's session helper to the ``session`` fixture when used."""
    from tests.factories import SQLAlchemySession

    if "session" in request.fixturenames:
        SQLAlchemySession.set(request.getfixturevalue("session"))
    yield
    SQLAlchemySession.set(None)
