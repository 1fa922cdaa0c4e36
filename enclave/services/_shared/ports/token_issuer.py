from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, Protocol


class TokenSubject(Protocol):
    """Anything carrying the identity claims embedded in an access token."""

    id: str
    username: str
    email: str


class TokenIssuer(Protocol):
    """Port for minting access and refresh tokens."""

    def issue_access_token(self, user: TokenSubject, *, expires_at: datetime | None = None) -> str:
        """
        Return a signed, short-lived access token for ``user``.

        :param user: Subject whose id, username and email become claims.
        :param expires_at: Absolute expiry; defaults to :meth:`access_token_expiry`.
        """

    def issue_refresh_token(self) -> str:
        """Return a fresh opaque, unguessable refresh token."""

    def access_token_expiry(self) -> datetime:
        """Expiry for an access token issued now (UTC)."""

    def refresh_token_expiry(self) -> datetime:
        """Expiry for a refresh token issued now (UTC)."""


class StubTokenIssuer(TokenIssuer):
    """Deterministic token issuer used in unit tests."""

    def __init__(
        self,
        *,
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
    ) -> None:
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self._seq = 0
        self.issued: dict[str, dict[str, Any]] = {}

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    def issue_access_token(self, user: TokenSubject, *, expires_at: datetime | None = None) -> str:
        seq = self._next()
        token = f"access.{user.id}.{seq}"
        self.issued[token] = {
            "sub": user.id,
            "username": user.username,
            "email": user.email,
            "exp": expires_at or self.access_token_expiry(),
        }
        return token

    def issue_refresh_token(self) -> str:
        return f"refresh-{self._next()}"

    def access_token_expiry(self) -> datetime:
        return datetime.now(UTC) + self.access_ttl

    def refresh_token_expiry(self) -> datetime:
        return datetime.now(UTC) + self.refresh_ttl
