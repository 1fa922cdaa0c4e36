"""
IdentityService
===============

Service for the ``User`` aggregate: registration and profile reads/edits.
Credential checks and token issuance belong to :class:`AuthService`.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from enclave.models.user import User
from enclave.repositories.user import UserRepository
from enclave.services._shared.base import BaseService, ServiceContext
from enclave.services._shared.errors import (
    EmailTakenError,
    UsernameTakenError,
    UserNotFoundError,
    violates,
)
from enclave.services._shared.ports import PasswordHasher
from enclave.services.identity.dto import UserProfileUpdateIn, UserPublicOut, UserRegisterIn

logger = logging.getLogger(__name__)


def to_public(user: User) -> UserPublicOut:
    return UserPublicOut(
        id=user.id,
        username=user.username,
        email=user.email,
        display_name=user.display_name,
        bio=user.bio,
        profile_picture_url=user.profile_picture_url,
        created_at=user.created_at,
    )


class IdentityService(BaseService):
    """
    Application service for the ``User`` aggregate.

    :param password_hasher: Hasher applied to passwords on registration.
    :param ctx: Optional request-scoped context.
    """

    def __init__(self, *, password_hasher: PasswordHasher, ctx: ServiceContext | None = None) -> None:
        super().__init__(ctx=ctx)
        self.hasher = password_hasher

    # --------------------------------------------------------------------- #
    # Registration
    # --------------------------------------------------------------------- #

    def register(self, dto: UserRegisterIn) -> UserPublicOut:
        """
        Register a new user.

        The explicit checks give precise errors in the common case; the
        unique constraints settle concurrent registrations with the same
        email or username.

        :param dto: Registration input.
        :returns: Public view of the created user.
        :raises EmailTakenError: Email already registered.
        :raises UsernameTakenError: Username already taken.
        """
        password_hash = self.hasher.hash(dto.password)

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users

            if repo.exists_by_email(dto.email):
                raise EmailTakenError()
            if repo.exists_by_username(dto.username):
                raise UsernameTakenError()

            user = User(
                username=dto.username,
                email=dto.email,
                password_hash=password_hash,
                display_name=dto.display_name,
            )
            try:
                repo.add(user)
            except IntegrityError as exc:
                if violates(exc, "uq_users_email", "users.email"):
                    raise EmailTakenError() from exc
                if violates(exc, "uq_users_username", "users.username"):
                    raise UsernameTakenError() from exc
                raise

            out = to_public(user)

        logger.info("identity.registered", extra={"user_id": out.id})
        return out

    # --------------------------------------------------------------------- #
    # Profile
    # --------------------------------------------------------------------- #

    def get_profile(self, user_id: str) -> UserPublicOut:
        """
        :raises UserNotFoundError: Missing or soft-deleted user.
        """
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise UserNotFoundError(user_id)
            return to_public(user)

    def update_profile(self, dto: UserProfileUpdateIn) -> UserPublicOut:
        """
        Apply the provided profile fields.

        :param dto: Fields to change; ``None`` keeps the current value.
        :returns: Updated public view.
        :raises UserNotFoundError: Missing or soft-deleted user.
        """
        changes = {
            name: (value.strip() or None)
            for name, value in (
                ("display_name", dto.display_name),
                ("bio", dto.bio),
                ("profile_picture_url", dto.profile_picture_url),
            )
            if value is not None
        }

        with self.rw_uow() as uow:
            user = uow.users.get(dto.user_id)
            if user is None:
                raise UserNotFoundError(dto.user_id)
            if changes:
                uow.users.update(user, **changes)
            out = to_public(user)

        return out
