"""Process-wide extension singletons bound to the app in :func:`init_app`."""

from __future__ import annotations

import redis  # type: ignore[import-untyped]
from flask import Flask
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

# Constraint names as they appear in the migrations.
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)

db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)
redis_client: redis.Redis | None = None


def init_app(app: Flask) -> None:
    """Bind db, migrations, JWT, the limiter and the optional Redis client to ``app``."""
    db.init_app(app)

    # Mapped classes must be registered before Flask-Migrate reads the metadata.
    from survey_basket import models as _models  # noqa: F401

    migrate.init_app(app, db)
    jwt.init_app(app)
    _register_jwt_callbacks()
    limiter.init_app(app)
    _init_redis(app)


def _init_redis(app: Flask) -> None:
    """Connect the optional Redis client; the ``redis`` ledger backend requires it.

    :raises RuntimeError: When ``REDIS_URL`` is set but the server is unreachable.
    """
    global redis_client
    url = app.config.get("REDIS_URL")
    if not url:
        redis_client = None
        app.extensions.pop("redis_client", None)
        return

    timeout = float(app.config.get("REDIS_SOCKET_TIMEOUT", 2.0))
    client = redis.Redis.from_url(url, socket_timeout=timeout, socket_connect_timeout=timeout)
    try:
        client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Failed to connect to Redis at {url!r}") from exc
    redis_client = client
    app.extensions["redis_client"] = client


def get_redis() -> redis.Redis:
    """Return the bound Redis client or fail loudly when none is configured."""
    if redis_client is None:
        raise RuntimeError("REDIS_URL is not configured for this application.")
    return redis_client


def _register_jwt_callbacks() -> None:
    """Render bearer-token failures as problem+json instead of ``{"msg": ...}``."""
    from survey_basket.core.errors import problem_response

    @jwt.unauthorized_loader
    def _missing_token(reason: str):
        return problem_response(status=401, code="unauthorized", message=reason)

    @jwt.invalid_token_loader
    def _invalid_token(reason: str):
        return problem_response(status=401, code="invalid_token", message=reason)

    @jwt.expired_token_loader
    def _expired_token(jwt_header, jwt_payload):
        return problem_response(status=401, code="token_expired", message="Token has expired")
