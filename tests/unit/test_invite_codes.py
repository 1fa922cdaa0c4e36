"""Unit tests for invite code generation."""

from __future__ import annotations

import re

from enclave.services.communities.invite_codes import generate_invite_code, normalize_invite_code


def test_codes_are_upper_case_alphanumeric() -> None:
    for _ in range(50):
        code = generate_invite_code()
        assert re.fullmatch(r"[A-Z0-9]+", code)
        assert 0 < len(code) <= 11


def test_codes_are_distinct() -> None:
    codes = {generate_invite_code() for _ in range(200)}
    assert len(codes) == 200


def test_normalize_trims_and_upper_cases() -> None:
    assert normalize_invite_code("  abC123 ") == "ABC123"
