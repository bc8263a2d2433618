"""
survey_basket.services._shared.ports
====================================

Collection of *ports* (hexagonal interfaces) that define the contracts
for token signing, refresh-token persistence and user lookup.

Modules
-------
- :mod:`token_signer`:
    Defines :class:`~.TokenSigner`, the abstraction for signing and validating access tokens.

- :mod:`refresh_token_ledger`:
    Defines :class:`~.RefreshTokenLedger`, :class:`~.RefreshTokenRecord`,
    :class:`~.Rotation` and :class:`~.RotationResult`.

- :mod:`user_directory`:
    Defines :class:`~.UserDirectory` and :class:`~.UserIdentity`.

Design Notes
------------
Concrete adapters (SQLAlchemy, Redis, Flask-JWT-Extended) live under
``survey_basket.infra``; the in-memory implementations here back unit tests
and the ``memory`` ledger backend.
"""

from __future__ import annotations

from .refresh_token_ledger import (
    InMemoryRefreshTokenLedger,
    RefreshTokenLedger,
    RefreshTokenRecord,
    Rotation,
    RotationResult,
    new_refresh_token_value,
)
from .token_signer import TokenSigner
from .user_directory import InMemoryUserDirectory, UserDirectory, UserIdentity

__all__ = [
    "TokenSigner",
    "RefreshTokenLedger",
    "RefreshTokenRecord",
    "Rotation",
    "RotationResult",
    "InMemoryRefreshTokenLedger",
    "new_refresh_token_value",
    "UserDirectory",
    "UserIdentity",
    "InMemoryUserDirectory",
]
