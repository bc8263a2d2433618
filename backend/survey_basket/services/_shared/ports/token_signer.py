from __future__ import annotations

from collections.abc import Mapping
from datetime import timedelta
from typing import Any, Protocol

from survey_basket.services._shared.result import Result


class TokenSigner(Protocol):
    """Port for issuing and validating signed access tokens."""

    def issue(
        self,
        subject: str,
        *,
        lifetime: timedelta,
        claims: Mapping[str, Any] | None = None,
    ) -> str:
        """
        Sign a new access token for ``subject``.

        The token carries at least ``sub``, a fresh ``jti``, ``iat``, ``exp``,
        ``iss`` and ``aud``, plus any extra ``claims``.
        """
        ...

    def validate(self, token: str, *, ignore_expiry: bool = False) -> Result[dict[str, Any]]:
        """
        Verify signature, issuer, audience and (unless ``ignore_expiry``) lifetime.

        :returns: Decoded claims, or an ``InvalidToken`` failure.
        """
        ...
