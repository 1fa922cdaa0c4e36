from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import cast

from flask_jwt_extended import create_access_token

from enclave.services._shared.ports import TokenIssuer, TokenSubject


@dataclass(slots=True)
class JWTTokenIssuer(TokenIssuer):
    """
    Adapter minting access tokens with Flask-JWT-Extended.

    Access tokens carry ``sub`` (user id), ``username`` and ``email`` and are
    signed with ``JWT_SECRET_KEY``. Refresh tokens are opaque random strings
    with no embedded meaning; the session ledger is their only authority.

    .. note::
       Issuing access tokens requires an active Flask app context.

    :param access_ttl: Access token lifetime.
    :param refresh_ttl: Refresh token lifetime.
    :param refresh_token_bytes: Entropy drawn per refresh token.
    """

    access_ttl: timedelta
    refresh_ttl: timedelta
    refresh_token_bytes: int = 64

    def issue_access_token(self, user: TokenSubject, *, expires_at: datetime | None = None) -> str:
        expires_at = expires_at or self.access_token_expiry()
        expires_delta = max(expires_at - datetime.now(UTC), timedelta(seconds=1))
        return cast(
            str,
            create_access_token(
                identity=str(user.id),
                additional_claims={"username": user.username, "email": user.email},
                expires_delta=expires_delta,
            ),
        )

    def issue_refresh_token(self) -> str:
        return secrets.token_urlsafe(self.refresh_token_bytes)

    def access_token_expiry(self) -> datetime:
        return datetime.now(UTC) + self.access_ttl

    def refresh_token_expiry(self) -> datetime:
        return datetime.now(UTC) + self.refresh_ttl
