"""Assertion helper utilities for tests."""

from __future__ import annotations

from typing import Any


def assert_json_keys(data: dict, required: set[str]) -> None:
    """Ensure that all required keys are present in ``data``."""

    missing = required - data.keys()
    assert not missing, f"Missing keys: {', '.join(sorted(missing))}"


def assert_problem(resp: Any, status: int, code: str) -> dict:
    """Check a problem+json response and return its body."""

    assert resp.status_code == status, resp.get_data(as_text=True)
    assert resp.mimetype == "application/problem+json"
    body = resp.get_json()
    assert body["status"] == status
    assert body["code"] == code
    assert body["request_id"]
    return body
