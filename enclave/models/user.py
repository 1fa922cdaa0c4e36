"""User identity model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from enclave.core.extensions import db

from .base import PKMixin, ReprMixin, SoftDeleteMixin, TimestampMixin, UTCDateTime


class User(PKMixin, ReprMixin, TimestampMixin, SoftDeleteMixin, db.Model):
    """
    A registered person able to log in and join communities.

    Fields
    ------
    username : str
        Public handle, unique across the system.
    email : str
        Login email, stored trimmed and lowercased; unique.
    password_hash : str
        One-way hash produced by the configured password hasher.
    display_name : str | None
        Optional friendly name shown instead of the handle.
    bio : str | None
        Free-form profile text.
    profile_picture_url : str | None
        Link to an avatar image.
    is_email_verified : bool
        Whether the email address has been confirmed.
    last_login_at : datetime | None
        Moment of the last successful login.
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    profile_picture_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    is_email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_login_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("username", name="uq_users_username"),
    )

    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and sanity-check an email address.

        :param key: Field name (``email``).
        :param value: Raw email.
        :returns: Trimmed, lowercased email.
        :raises ValueError: If the value is missing or obviously malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("username")
    def _normalize_username(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Username is required.")
        return value.strip()
