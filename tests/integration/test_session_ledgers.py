"""Contract tests shared by every SessionLedger implementation."""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime, timedelta

import fakeredis
import pytest

from enclave.infra.redis import RedisSessionLedger
from enclave.infra.sql import SQLAlchemySessionLedger
from enclave.services._shared.ports import InMemorySessionLedger, RotationResult


@pytest.fixture(params=["memory", "sql", "redis"])
def ledger(request, db):
    if request.param == "memory":
        return InMemorySessionLedger()
    if request.param == "sql":
        return SQLAlchemySessionLedger()
    return RedisSessionLedger(fakeredis.FakeRedis())


@pytest.fixture()
def now() -> datetime:
    return datetime.now(UTC)


def test_create_and_get(ledger, user, now) -> None:
    created = ledger.create(user_id=user.id, token="tok", expires_at=now + timedelta(days=7), issued_at=now)
    fetched = ledger.get_by_token("tok")

    assert fetched is not None
    assert fetched.id == created.id
    assert fetched.user_id == user.id
    assert not fetched.is_revoked
    assert fetched.replaced_by_token is None
    assert abs((fetched.expires_at - created.expires_at).total_seconds()) < 1
    assert fetched.expires_at.tzinfo is not None
    assert ledger.get_by_token("missing") is None


def test_rotate_links_successor(ledger, user, now) -> None:
    ledger.create(user_id=user.id, token="r0", expires_at=now + timedelta(days=7), issued_at=now)

    result = ledger.rotate(old_token="r0", new_token="r1", new_expires_at=now + timedelta(days=7), now=now)

    assert result is RotationResult.OK
    old = ledger.get_by_token("r0")
    assert old.is_revoked
    assert old.was_rotated
    assert old.replaced_by_token == "r1"
    new = ledger.get_by_token("r1")
    assert new.user_id == user.id
    assert not new.is_revoked


def test_rotate_outcomes(ledger, user, now) -> None:
    ledger.create(user_id=user.id, token="old", expires_at=now - timedelta(seconds=1), issued_at=now - timedelta(hours=1))
    ledger.create(user_id=user.id, token="live", expires_at=now + timedelta(days=1), issued_at=now)
    ledger.revoke("live", now=now)

    later = now + timedelta(days=1)
    assert ledger.rotate(old_token="missing", new_token="x1", new_expires_at=later, now=now) is RotationResult.NOT_FOUND
    assert ledger.rotate(old_token="old", new_token="x2", new_expires_at=later, now=now) is RotationResult.EXPIRED
    assert ledger.rotate(old_token="live", new_token="x3", new_expires_at=later, now=now) is RotationResult.REVOKED
    assert ledger.get_by_token("x2") is None
    assert ledger.get_by_token("x3") is None


def test_second_rotation_of_one_token_loses(ledger, user, now) -> None:
    ledger.create(user_id=user.id, token="r0", expires_at=now + timedelta(days=7), issued_at=now)
    later = now + timedelta(days=7)

    results = [
        ledger.rotate(old_token="r0", new_token="a", new_expires_at=later, now=now),
        ledger.rotate(old_token="r0", new_token="b", new_expires_at=later, now=now),
    ]

    assert results == [RotationResult.OK, RotationResult.REVOKED]
    assert ledger.get_by_token("b") is None


def test_revoke_reports_whether_it_changed_anything(ledger, user, now) -> None:
    ledger.create(user_id=user.id, token="tok", expires_at=now + timedelta(days=7), issued_at=now)

    assert ledger.revoke("tok", now=now) is True
    assert ledger.revoke("tok", now=now) is False
    assert ledger.revoke("missing", now=now) is False
    assert ledger.get_by_token("tok").revoked_at is not None


def test_revoke_all_for_user_counts_live_sessions(ledger, user, now) -> None:
    for token in ("a", "b", "c"):
        ledger.create(user_id=user.id, token=token, expires_at=now + timedelta(days=7), issued_at=now)
    ledger.revoke("a", now=now)

    assert ledger.revoke_all_for_user(user.id, now=now) == 2
    assert ledger.revoke_all_for_user(user.id, now=now) == 0
    assert all(ledger.get_by_token(t).is_revoked for t in ("a", "b", "c"))


def test_update_persists_revocation_fields(ledger, user, now) -> None:
    record = ledger.create(user_id=user.id, token="tok", expires_at=now + timedelta(days=7), issued_at=now)

    ledger.update(replace(record, is_revoked=True, revoked_at=now, replaced_by_token="next"))

    fetched = ledger.get_by_token("tok")
    assert fetched.is_revoked
    assert fetched.replaced_by_token == "next"


def test_update_unknown_record_raises(ledger, user, now) -> None:
    record = ledger.create(user_id=user.id, token="tok", expires_at=now + timedelta(days=7), issued_at=now)

    with pytest.raises(KeyError):
        ledger.update(replace(record, token="other"))


def test_redis_keys_expire_after_retention(db, now) -> None:
    r = fakeredis.FakeRedis()
    ledger = RedisSessionLedger(r, retention=timedelta(hours=1))
    ledger.create(user_id="u1", token="tok", expires_at=now + timedelta(hours=1), issued_at=now)

    ttl = r.ttl("rt:tok")
    assert 3600 < ttl <= 2 * 3600
    assert r.sismember("rt:u:u1", "tok")


def test_redis_user_index_expires_with_its_sessions(db, now) -> None:
    r = fakeredis.FakeRedis()
    ledger = RedisSessionLedger(r, retention=timedelta(hours=1))
    ledger.create(user_id="u1", token="tok", expires_at=now + timedelta(hours=1), issued_at=now)

    assert r.ttl("rt:u:u1") >= r.ttl("rt:tok") > 0

    ledger.rotate(old_token="tok", new_token="tok2", new_expires_at=now + timedelta(hours=3), now=now)

    assert r.ttl("rt:u:u1") >= r.ttl("rt:tok2") > 3 * 3600


def test_redis_user_index_drops_expired_sessions(db, now) -> None:
    r = fakeredis.FakeRedis()
    ledger = RedisSessionLedger(r)
    ledger.create(user_id="u1", token="gone", expires_at=now + timedelta(hours=1), issued_at=now)
    ledger.create(user_id="u1", token="kept", expires_at=now + timedelta(hours=1), issued_at=now)
    r.delete("rt:gone")

    assert ledger.revoke_all_for_user("u1", now=now) == 1
    assert not r.sismember("rt:u:u1", "gone")
    assert r.sismember("rt:u:u1", "kept")
