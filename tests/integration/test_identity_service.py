"""Integration tests for IdentityService against SQLite."""

from __future__ import annotations

import pytest

from enclave.models.user import User
from enclave.services._shared.errors import EmailTakenError, UsernameTakenError, UserNotFoundError
from enclave.services._shared.ports import PlaintextPasswordHasher
from enclave.services.identity import (
    IdentityService,
    UserProfileUpdateIn,
    UserRegisterIn,
)

from tests.factories.user import UserFactory


@pytest.fixture()
def identity(db) -> IdentityService:
    return IdentityService(password_hasher=PlaintextPasswordHasher())


def test_register_stores_hash_and_normalized_email(identity, session) -> None:
    out = identity.register(
        UserRegisterIn(username="alice", email="  Alice@Example.COM ", password="s3cretpass")
    )

    stored = session.get(User, out.id)
    assert out.email == "alice@example.com"
    assert stored.password_hash == "plain$s3cretpass"
    assert len(out.id) == 32
    assert out.created_at is not None and out.created_at.tzinfo is not None


def test_register_rejects_taken_email_case_insensitively(identity) -> None:
    UserFactory(username="bob", email="bob@example.com")

    with pytest.raises(EmailTakenError):
        identity.register(UserRegisterIn(username="bobby", email="BOB@example.com", password="x" * 8))


def test_register_rejects_taken_username(identity) -> None:
    UserFactory(username="carol")

    with pytest.raises(UsernameTakenError):
        identity.register(UserRegisterIn(username="carol", email="c2@example.com", password="x" * 8))


def test_register_maps_unique_race_to_conflict(identity, monkeypatch) -> None:
    """Pre-checks that miss a concurrent insert still end in EmailTakenError."""

    UserFactory(username="dave", email="dave@example.com")
    from enclave.repositories.user import UserRepository

    monkeypatch.setattr(UserRepository, "exists_by_email", lambda self, email: False)

    with pytest.raises(EmailTakenError):
        identity.register(UserRegisterIn(username="dave2", email="dave@example.com", password="x" * 8))


def test_deleted_users_still_reserve_their_email(identity, session, user) -> None:
    user.mark_deleted(user.created_at)
    session.commit()

    with pytest.raises(EmailTakenError):
        identity.register(UserRegisterIn(username="fresh", email=user.email, password="x" * 8))


def test_get_profile(identity, user) -> None:
    out = identity.get_profile(user.id)
    assert out.username == user.username


def test_get_profile_hides_deleted_and_missing_users(identity, session, user) -> None:
    with pytest.raises(UserNotFoundError):
        identity.get_profile("0" * 32)

    user.mark_deleted(user.created_at)
    session.commit()
    with pytest.raises(UserNotFoundError):
        identity.get_profile(user.id)


def test_update_profile_keeps_none_and_clears_empty(identity, user) -> None:
    identity.update_profile(
        UserProfileUpdateIn(user_id=user.id, display_name="New Name", bio="Hello")
    )
    out = identity.update_profile(UserProfileUpdateIn(user_id=user.id, bio=""))

    assert out.display_name == "New Name"
    assert out.bio is None
