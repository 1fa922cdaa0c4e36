"""
DTOs for IdentityService.

They keep ORM models out of the service contract; outputs never carry the
password hash.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserRegisterIn:
    """
    Input DTO for user registration.

    :param username: Public handle, unique.
    :param email: Login email, unique (normalized to lowercase).
    :param password: Raw password, hashed before it is stored.
    :param display_name: Optional friendly name.
    """

    username: str
    email: str
    password: str
    display_name: str | None = None


@dataclass(frozen=True, slots=True)
class UserProfileUpdateIn:
    """
    Input DTO for profile edits.

    ``None`` leaves a field untouched; an empty string clears it.

    :param user_id: User whose profile changes.
    :param display_name: New display name.
    :param bio: New bio.
    :param profile_picture_url: New avatar URL.
    """

    user_id: str
    display_name: str | None = None
    bio: str | None = None
    profile_picture_url: str | None = None


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """
    Public-safe view of a user.

    :param id: User identifier.
    :param username: Public handle.
    :param email: Login email.
    :param display_name: Friendly name, if any.
    :param bio: Profile text, if any.
    :param profile_picture_url: Avatar URL, if any.
    :param created_at: Registration time (UTC).
    """

    id: str
    username: str
    email: str
    display_name: str | None = None
    bio: str | None = None
    profile_picture_url: str | None = None
    created_at: datetime | None = None
