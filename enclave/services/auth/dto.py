from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from enclave.services.identity.dto import UserPublicOut


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    :param email: Login email (any case).
    :param password: Raw password.
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    refresh_token: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    :param refresh_token: Refresh token of the session to end.
    :param all_sessions: Also revoke every other live session of its owner.
    """

    refresh_token: str
    all_sessions: bool = False


@dataclass(frozen=True, slots=True)
class SessionOut:
    """
    Result of a login or refresh.

    :param access_token: Signed, short-lived bearer token.
    :param refresh_token: Opaque token for the next rotation.
    :param access_token_expires_at: Access token expiry (UTC).
    :param refresh_token_expires_at: Refresh token expiry (UTC).
    :param user: Public view of the authenticated user.
    """

    access_token: str
    refresh_token: str
    access_token_expires_at: datetime
    refresh_token_expires_at: datetime
    user: UserPublicOut
