from __future__ import annotations

import logging

from enclave.services._shared.base import BaseService, ServiceContext
from enclave.services._shared.errors import (
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    RefreshTokenExpiredError,
)
from enclave.services._shared.ports import (
    PasswordHasher,
    RotationResult,
    SessionLedger,
    TokenIssuer,
)
from enclave.services.auth.dto import LoginIn, LogoutIn, RefreshIn, SessionOut
from enclave.services.identity.dto import UserPublicOut
from enclave.services.identity.service import to_public

logger = logging.getLogger(__name__)


class AuthService(BaseService):
    """
    Authentication lifecycle service (login / refresh / logout).

    Access tokens are signed and self-contained; they are never stored and
    stay valid until they expire. Refresh tokens are opaque and exist only as
    records in the :class:`SessionLedger`, which rotates them atomically:
    every successful refresh revokes the presented token and links it to its
    successor.

    :param token_issuer: Mints access and refresh tokens.
    :param session_ledger: Durable store of refresh sessions.
    :param password_hasher: Verifies credentials on login.
    :param revoke_on_reuse: Presenting an already rotated token revokes every
        live session of its owner.
    """

    def __init__(
        self,
        *,
        token_issuer: TokenIssuer,
        session_ledger: SessionLedger,
        password_hasher: PasswordHasher,
        revoke_on_reuse: bool = True,
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(ctx=ctx)
        self.tokens = token_issuer
        self.ledger = session_ledger
        self.hasher = password_hasher
        self.revoke_on_reuse = revoke_on_reuse

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> SessionOut:
        """
        Authenticate credentials and open a new session.

        Unknown email, deleted account and wrong password are reported with
        the same error so callers cannot tell which emails exist.

        :raises InvalidCredentialsError: Credentials do not match a live user.
        """
        with self.ro_uow() as uow:
            user = uow.users.get_by_email(dto.email)
            if user is None or not self.hasher.verify(dto.password, user.password_hash):
                raise InvalidCredentialsError()
            profile = to_public(user)

        session = self._open_session(profile)

        # Only a login that produced a session counts as the last login.
        with self.rw_uow() as uow:
            user = uow.users.get(profile.id)
            if user is not None:
                uow.users.touch_last_login(user, self.now_utc())
        logger.info("auth.login", extra={"user_id": profile.id})
        return session

    # ------------------------------------------------------------------ #
    # Refresh with atomic rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> SessionOut:
        """
        Rotate a refresh token and emit a new token pair.

        :raises InvalidRefreshTokenError: Token unknown, revoked, already
            rotated, lost a concurrent rotation, or its owner is gone.
        :raises RefreshTokenExpiredError: Token is past its expiry.
        """
        now = self.now_utc()
        record = self.ledger.get_by_token(dto.refresh_token)
        if record is None:
            raise InvalidRefreshTokenError()

        if record.is_revoked:
            if record.was_rotated and self.revoke_on_reuse:
                revoked = self.ledger.revoke_all_for_user(record.user_id, now=now)
                logger.warning(
                    "auth.reuse_detected",
                    extra={"user_id": record.user_id, "revoked_sessions": revoked},
                )
            raise InvalidRefreshTokenError()

        if record.is_expired(now):
            raise RefreshTokenExpiredError()

        with self.ro_uow() as uow:
            user = uow.users.get(record.user_id)
            if user is None:
                raise InvalidRefreshTokenError()
            profile = to_public(user)

        access_expires_at = self.tokens.access_token_expiry()
        refresh_expires_at = self.tokens.refresh_token_expiry()
        access_token = self.tokens.issue_access_token(profile, expires_at=access_expires_at)
        refresh_token = self.tokens.issue_refresh_token()

        result = self.ledger.rotate(
            old_token=record.token,
            new_token=refresh_token,
            new_expires_at=refresh_expires_at,
            now=now,
        )
        if result is RotationResult.EXPIRED:
            raise RefreshTokenExpiredError()
        if result is not RotationResult.OK:
            raise InvalidRefreshTokenError()

        logger.info("auth.refresh", extra={"user_id": profile.id})
        return SessionOut(
            access_token=access_token,
            refresh_token=refresh_token,
            access_token_expires_at=access_expires_at,
            refresh_token_expires_at=refresh_expires_at,
            user=profile,
        )

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """
        End the session behind ``dto.refresh_token``.

        Unknown or already revoked tokens are accepted silently so the call
        is idempotent.
        """
        now = self.now_utc()
        record = self.ledger.get_by_token(dto.refresh_token)
        if record is None:
            return
        self.ledger.revoke(record.token, now=now)
        revoked = 0
        if dto.all_sessions:
            revoked = self.ledger.revoke_all_for_user(record.user_id, now=now)
        logger.info("auth.logout", extra={"user_id": record.user_id, "revoked_sessions": revoked})

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _open_session(self, profile: UserPublicOut) -> SessionOut:
        """Record a new refresh session, then hand out the token pair."""
        access_expires_at = self.tokens.access_token_expiry()
        refresh_expires_at = self.tokens.refresh_token_expiry()
        refresh_token = self.tokens.issue_refresh_token()
        self.ledger.create(
            user_id=profile.id,
            token=refresh_token,
            expires_at=refresh_expires_at,
            issued_at=self.now_utc(),
        )
        access_token = self.tokens.issue_access_token(profile, expires_at=access_expires_at)
        return SessionOut(
            access_token=access_token,
            refresh_token=refresh_token,
            access_token_expires_at=access_expires_at,
            refresh_token_expires_at=refresh_expires_at,
            user=profile,
        )
