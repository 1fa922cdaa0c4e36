"""Authentication helpers for tests."""

from __future__ import annotations

from datetime import timedelta

from flask_jwt_extended import create_access_token


def issue_token(identity: str, expires_delta: timedelta | None = None) -> str:
    """Generate a JWT for ``identity``.

    :param identity: Subject identifier to encode in the token.
    :param expires_delta: Optional expiry; the configured default otherwise.
    """

    return create_access_token(identity=identity, expires_delta=expires_delta)


def expired_token(identity: str) -> str:
    """Return an already expired JWT for ``identity``."""

    return create_access_token(identity=identity, expires_delta=timedelta(seconds=-1))


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
