"""User repository."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import select

from enclave.models.user import User
from enclave.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only access to :class:`User` rows.

    Lookups by email normalize the input the same way the model does.
    Credential checks and token handling live in the services.
    """

    model = User

    def _sortable_fields(self):
        return {
            "created_at": User.created_at,
            "username": User.username,
        }

    def _filterable_fields(self):
        return {
            "email": User.email,
            "username": User.username,
        }

    def _updatable_fields(self):
        return {"display_name", "bio", "profile_picture_url"}

    def get_by_email(self, email: str) -> User | None:
        """Fetch a live user by email (case-insensitive).

        :param email: Address as typed by the caller.
        :returns: Matching user or ``None``.
        """
        stmt = self._base_select().where(User.email == email.strip().lower())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def get_by_username(self, username: str) -> User | None:
        stmt = self._base_select().where(User.username == username.strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str) -> bool:
        stmt = select(User.id).where(User.email == email.strip().lower())
        return self.session.execute(stmt).first() is not None

    def exists_by_username(self, username: str) -> bool:
        stmt = select(User.id).where(User.username == username.strip())
        return self.session.execute(stmt).first() is not None

    def touch_last_login(self, user: User, when: datetime) -> None:
        user.last_login_at = when
        self.flush()
