"""Tests for registration and profile endpoints."""

from __future__ import annotations

import pytest

from tests.helpers.api import register, register_and_login
from tests.helpers.assertions import assert_json_keys, assert_problem

USER_KEYS = {"id", "username", "email", "displayName", "bio", "profilePictureUrl", "createdAt"}


def test_register_returns_public_user(client) -> None:
    resp = client.post(
        "/api/v1/users/register",
        json={
            "username": "alice",
            "email": "Alice@Example.com",
            "password": "password123",
            "displayName": "Alice",
        },
    )

    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert_json_keys(data, USER_KEYS)
    assert data["email"] == "alice@example.com"
    assert data["displayName"] == "Alice"
    assert "password" not in data and "passwordHash" not in data


@pytest.mark.parametrize(
    ("payload", "code"),
    [
        ({"username": "bob", "email": "ALICE@example.com", "password": "password123"}, "email_taken"),
        ({"username": "alice", "email": "other@example.com", "password": "password123"}, "username_taken"),
    ],
)
def test_register_conflicts(client, payload, code) -> None:
    register(client, "alice")

    resp = client.post("/api/v1/users/register", json=payload)

    assert_problem(resp, 409, code)


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"username": "al", "email": "al@example.com", "password": "password123"},
        {"username": "   ", "email": "blank@example.com", "password": "password123"},
        {"username": "  al  ", "email": "al@example.com", "password": "password123"},
        {"username": "alice", "email": "not-an-email", "password": "password123"},
        {"username": "alice", "email": "alice@example.com", "password": "short"},
    ],
)
def test_register_validation(client, payload) -> None:
    resp = client.post("/api/v1/users/register", json=payload)

    body = assert_problem(resp, 422, "validation_error")
    assert body["details"]["errors"]


def test_get_me(client) -> None:
    _, headers = register_and_login(client, "alice")

    resp = client.get("/api/v1/users/me", headers=headers)

    assert resp.status_code == 200
    assert resp.get_json()["data"]["username"] == "alice"


def test_get_me_requires_token(client) -> None:
    assert_problem(client.get("/api/v1/users/me"), 401, "unauthorized")


def test_get_me_rejects_expired_token(client, expired_auth_header) -> None:
    assert_problem(client.get("/api/v1/users/me", headers=expired_auth_header), 401, "token_expired")


def test_patch_me_updates_only_given_fields(client) -> None:
    _, headers = register_and_login(client, "alice")
    client.patch("/api/v1/users/me", json={"displayName": "Alice", "bio": "Hello"}, headers=headers)

    resp = client.patch("/api/v1/users/me", json={"bio": "Updated"}, headers=headers)

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["displayName"] == "Alice"
    assert data["bio"] == "Updated"


def test_patch_me_blank_clears_field(client) -> None:
    _, headers = register_and_login(client, "alice")
    client.patch("/api/v1/users/me", json={"bio": "Hello"}, headers=headers)

    resp = client.patch("/api/v1/users/me", json={"bio": "   "}, headers=headers)

    assert resp.get_json()["data"]["bio"] is None


def test_patch_me_rejects_unknown_fields(client) -> None:
    _, headers = register_and_login(client, "alice")

    resp = client.patch("/api/v1/users/me", json={"email": "x@example.com"}, headers=headers)

    assert_problem(resp, 422, "validation_error")
