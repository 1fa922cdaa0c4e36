"""Unit tests for the in-process port doubles and the werkzeug hasher."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from enclave.infra.security import WerkzeugPasswordHasher
from enclave.services._shared.ports import (
    InMemorySessionLedger,
    PlaintextPasswordHasher,
    RotationResult,
    StubTokenIssuer,
)

from tests.factories import TEST_PASSWORD_METHOD


def test_werkzeug_hasher_round_trip() -> None:
    hasher = WerkzeugPasswordHasher(method=TEST_PASSWORD_METHOD)
    hashed = hasher.hash("correct horse")

    assert hashed != "correct horse"
    assert hasher.verify("correct horse", hashed)
    assert not hasher.verify("wrong horse", hashed)
    assert not hasher.verify("correct horse", "")


def test_werkzeug_hasher_rejects_empty_password() -> None:
    with pytest.raises(ValueError):
        WerkzeugPasswordHasher(method=TEST_PASSWORD_METHOD).hash("")


def test_plaintext_hasher() -> None:
    hasher = PlaintextPasswordHasher()
    assert hasher.verify("pw", hasher.hash("pw"))
    assert not hasher.verify("other", hasher.hash("pw"))


def test_stub_issuer_tokens_are_unique() -> None:
    issuer = StubTokenIssuer()
    assert issuer.issue_refresh_token() != issuer.issue_refresh_token()
    assert issuer.refresh_token_expiry() > issuer.access_token_expiry()


def test_in_memory_rotation_has_single_winner() -> None:
    ledger = InMemorySessionLedger()
    now = datetime.now(UTC)
    ledger.create(user_id="u1", token="r0", expires_at=now + timedelta(days=1), issued_at=now)

    first = ledger.rotate(old_token="r0", new_token="r1", new_expires_at=now + timedelta(days=1), now=now)
    second = ledger.rotate(old_token="r0", new_token="r2", new_expires_at=now + timedelta(days=1), now=now)

    assert first is RotationResult.OK
    assert second is RotationResult.REVOKED
    assert ledger.get_by_token("r2") is None
    assert ledger.get_by_token("r0").replaced_by_token == "r1"
