# survey_basket/services/auth/service.py
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from survey_basket.services._shared.ports.refresh_token_ledger import (
    RefreshTokenLedger,
    RefreshTokenRecord,
    RotationResult,
)
from survey_basket.services._shared.ports.token_signer import TokenSigner
from survey_basket.services._shared.ports.user_directory import UserDirectory, UserIdentity
from survey_basket.services._shared.result import Result
from survey_basket.services.auth.dto import (
    AuthTokenConfig,
    AuthTokensOut,
    LoginIn,
    RefreshIn,
    RevokeIn,
)
from survey_basket.services.auth.errors import AuthErrors

log = logging.getLogger(__name__)


class AuthService:
    """
    Authentication lifecycle service (login / refresh / revoke).

    Access tokens are signed and validated through a pluggable
    :class:`TokenSigner`; refresh tokens live in a :class:`RefreshTokenLedger`
    whose ``rotate`` is atomic, which makes every refresh token single-use.
    Expected failures are returned as :class:`Result` failures from
    :class:`AuthErrors`, never raised.
    """

    def __init__(
        self,
        *,
        token_signer: TokenSigner,
        refresh_ledger: RefreshTokenLedger,
        users: UserDirectory,
        token_cfg: AuthTokenConfig | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param token_signer: Adapter for issuing/validating access JWTs.
        :param refresh_ledger: Stateful store for refresh tokens (atomic rotation).
        :param users: User lookup collaborator (credential checks).
        :param token_cfg: Access/Refresh lifetime configuration.
        """
        self.tokens = token_signer
        self.ledger = refresh_ledger
        self.users = users
        self.cfg = token_cfg or AuthTokenConfig(
            access_expires=timedelta(minutes=30),
            refresh_expires=timedelta(days=14),
        )

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> Result[AuthTokensOut]:
        """
        Authenticate credentials and issue a fresh token pair.

        :param dto: Login input.
        :returns: Token pair, or ``InvalidCredentials``.
        """
        user = self.users.authenticate(dto.email, dto.password)
        if user is None:
            log.warning("auth.login.rejected")
            return Result.failure(AuthErrors.INVALID_CREDENTIALS)

        refresh = self.ledger.issue_for(user.id, self.cfg.refresh_expires)
        log.info("auth.login.ok user_id=%s", user.id)
        return Result.success(self._token_pair(user, refresh))

    # ------------------------------------------------------------------ #
    # Refresh with atomic rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> Result[AuthTokensOut]:
        """
        Rotate a refresh token and emit a new token pair.

        The access token only identifies the user, so it may be expired but
        must carry a valid signature. The refresh token is consumed by the
        rotation: a second attempt with the same value fails with
        ``RefreshTokenInvalid``.
        """
        claims = self.tokens.validate(dto.access_token, ignore_expiry=True)
        if claims.is_failure:
            return Result.failure(claims.error)

        user_id = self._coerce_user_id(claims.value.get("sub"))
        if user_id is None:
            return Result.failure(AuthErrors.INVALID_TOKEN)

        user = self.users.get(user_id)
        if user is None:
            return Result.failure(AuthErrors.USER_NOT_FOUND)

        current = self.ledger.find_active(user.id, dto.refresh_token)
        if current is None:
            return Result.failure(AuthErrors.REFRESH_TOKEN_NOT_FOUND)
        if not current.is_active:
            log.warning("auth.refresh.inactive user_id=%s", user.id)
            return Result.failure(AuthErrors.REFRESH_TOKEN_INVALID)

        rotation = self.ledger.rotate(user.id, dto.refresh_token, self.cfg.refresh_expires)
        if rotation.status is RotationResult.NOT_FOUND:
            return Result.failure(AuthErrors.REFRESH_TOKEN_NOT_FOUND)
        if rotation.status is not RotationResult.OK or rotation.replacement is None:
            # Lost a concurrent rotation, or the token expired in between.
            log.warning(
                "auth.refresh.rotation_rejected user_id=%s status=%s",
                user.id,
                rotation.status.name,
            )
            return Result.failure(AuthErrors.REFRESH_TOKEN_INVALID)

        log.info("auth.refresh.rotated user_id=%s", user.id)
        return Result.success(self._token_pair(user, rotation.replacement))

    # ------------------------------------------------------------------ #
    # Revoke (logout)
    # ------------------------------------------------------------------ #

    def revoke(self, dto: RevokeIn) -> Result[None]:
        """
        Revoke one of the caller's refresh tokens.

        Revoking an already revoked token is a successful no-op.
        """
        current = self.ledger.find_active(dto.user_id, dto.refresh_token)
        if current is None:
            return Result.failure(AuthErrors.REFRESH_TOKEN_NOT_FOUND)

        if not current.is_revoked:
            self.ledger.revoke(dto.refresh_token)
            log.info("auth.revoke.ok user_id=%s", dto.user_id)
        return Result.ok()

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def _token_pair(self, user: UserIdentity, refresh: RefreshTokenRecord) -> AuthTokensOut:
        claims: dict[str, Any] = {
            "email": user.email,
            "given_name": user.first_name,
            "family_name": user.last_name,
        }
        access = self.tokens.issue(
            str(user.id),
            lifetime=self.cfg.access_expires,
            claims=claims,
        )
        return AuthTokensOut(
            user_id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            access_token=access,
            expires_in=int(self.cfg.access_expires.total_seconds()),
            refresh_token=refresh.token,
            refresh_token_expiration=refresh.expires_at,
        )

    @staticmethod
    def _coerce_user_id(subject: Any) -> int | None:
        """Interpret the JWT subject as an integer user id, ``None`` if unusable."""
        if isinstance(subject, int) and not isinstance(subject, bool):
            return subject
        if isinstance(subject, str) and subject.isdigit():
            return int(subject)
        return None
