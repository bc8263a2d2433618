"""SQLAlchemy-backed adapters for the auth ports."""

from .sql_refresh_token_ledger import SqlRefreshTokenLedger
from .sql_user_directory import SqlUserDirectory

__all__ = ["SqlRefreshTokenLedger", "SqlUserDirectory"]
