"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping, MutableMapping
from datetime import timedelta
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

LEDGER_BACKENDS: Final[frozenset[str]] = frozenset({"sql", "redis", "memory"})

# Load .env in development (no-op when absent)
load_dotenv()


class ConfigurationError(RuntimeError):
    """Raised at startup when a required setting is missing or malformed."""


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, ``default`` when unset."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    try:
        return int(val)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {val!r}") from exc


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing.
    JWT_SECRET_KEY: str
        HS256 signing key for access tokens. Required; startup fails when empty.
    JWT_ISSUER: str
        ``iss`` claim written to and required from access tokens.
    JWT_AUDIENCE: str
        ``aud`` claim written to and required from access tokens.
    JWT_ACCESS_TOKEN_MINUTES: int
        Access token lifetime in minutes.
    REFRESH_TOKEN_DAYS: int
        Refresh token lifetime in days.
    AUTH_LEDGER_BACKEND: str
        Refresh token store: ``sql`` (default), ``redis`` or ``memory``.
    AUTH_LOGIN_RATE_LIMIT: str
        Flask-Limiter expression applied to ``POST /auth/login``.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    REDIS_URL: str | None
        Redis connection string; required by the ``redis`` ledger backend.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "")
    JWT_ALGORITHM = "HS256"
    JWT_ISSUER = os.getenv("JWT_ISSUER", "survey-basket")
    JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "survey-basket-users")
    JWT_ACCESS_TOKEN_MINUTES = env_int("JWT_ACCESS_TOKEN_MINUTES", 30)
    REFRESH_TOKEN_DAYS = env_int("REFRESH_TOKEN_DAYS", 14)
    AUTH_LEDGER_BACKEND = os.getenv("AUTH_LEDGER_BACKEND", "sql")
    AUTH_LOGIN_RATE_LIMIT = os.getenv("AUTH_LOGIN_RATE_LIMIT", "5 per minute")

    # Rate limiting
    RATELIMIT_ENABLED = env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    SQLALCHEMY_ENGINE_OPTIONS: dict[str, Any] = {"pool_pre_ping": True}

    # Redis
    REDIS_URL = os.getenv("REDIS_URL") or None
    REDIS_SOCKET_TIMEOUT = 2.0

    # Reverse proxy (X-Forwarded-For feeds the login rate limiter key)
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables rate limiting.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Ships a fixed signing key so tests never depend on the environment.
    """

    TESTING = True
    DEBUG = False
    JWT_SECRET_KEY = "testing-signing-key-with-enough-entropy-0123456789"
    JWT_ISSUER = "survey-basket-tests"
    JWT_AUDIENCE = "survey-basket-tests-users"
    AUTH_LEDGER_BACKEND = "sql"
    RATELIMIT_ENABLED = False
    REDIS_URL = None
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ENGINE_OPTIONS: dict[str, Any] = {}
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments."""

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def finalize_auth_settings(config: MutableMapping[str, Any]) -> None:
    """Validate auth settings and derive the Flask-JWT-Extended keys.

    Parameters
    ----------
    config:
        The Flask ``app.config`` mapping, already loaded.

    Raises
    ------
    ConfigurationError
        When the signing key, issuer or audience is empty, a lifetime is not
        positive, or the ledger backend is unknown.
    """
    signing_key = str(config.get("JWT_SECRET_KEY") or "").strip()
    if not signing_key:
        raise ConfigurationError("JWT_SECRET_KEY is required and must not be empty.")

    for key in ("JWT_ISSUER", "JWT_AUDIENCE"):
        if not str(config.get(key) or "").strip():
            raise ConfigurationError(f"{key} is required and must not be empty.")

    access_minutes = int(config.get("JWT_ACCESS_TOKEN_MINUTES") or 0)
    refresh_days = int(config.get("REFRESH_TOKEN_DAYS") or 0)
    if access_minutes <= 0:
        raise ConfigurationError("JWT_ACCESS_TOKEN_MINUTES must be a positive integer.")
    if refresh_days <= 0:
        raise ConfigurationError("REFRESH_TOKEN_DAYS must be a positive integer.")

    backend = str(config.get("AUTH_LEDGER_BACKEND", "sql")).strip().lower()
    if backend not in LEDGER_BACKENDS:
        raise ConfigurationError(
            f"AUTH_LEDGER_BACKEND must be one of {sorted(LEDGER_BACKENDS)}, got {backend!r}."
        )
    if backend == "redis" and not config.get("REDIS_URL"):
        raise ConfigurationError("AUTH_LEDGER_BACKEND=redis requires REDIS_URL.")

    config["JWT_SECRET_KEY"] = signing_key
    config["AUTH_LEDGER_BACKEND"] = backend
    config["JWT_TOKEN_LOCATION"] = ["headers"]
    config["JWT_ENCODE_ISSUER"] = config["JWT_ISSUER"]
    config["JWT_DECODE_ISSUER"] = config["JWT_ISSUER"]
    config["JWT_ENCODE_AUDIENCE"] = config["JWT_AUDIENCE"]
    config["JWT_DECODE_AUDIENCE"] = config["JWT_AUDIENCE"]
    config["JWT_ACCESS_TOKEN_EXPIRES"] = timedelta(minutes=access_minutes)
    config["REFRESH_TOKEN_EXPIRES"] = timedelta(days=refresh_days)
