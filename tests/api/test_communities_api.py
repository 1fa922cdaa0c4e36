"""Tests for community endpoints."""

from __future__ import annotations

import pytest

from tests.helpers.api import register_and_login
from tests.helpers.assertions import assert_json_keys, assert_problem

BASE = "/api/v1/communities"
COMMUNITY_KEYS = {
    "id",
    "name",
    "description",
    "coverImageUrl",
    "privacy",
    "ownerId",
    "memberCount",
    "tags",
    "createdAt",
    "currentUserRole",
}


@pytest.fixture()
def alice(client):
    return register_and_login(client, "alice")


@pytest.fixture()
def bob(client):
    return register_and_login(client, "bob")


def create_community(client, headers, **overrides) -> dict:
    payload = {"name": "Book Club", "privacy": "Public", **overrides}
    resp = client.post(BASE, json=payload, headers=headers)
    assert resp.status_code == 201, resp.get_data(as_text=True)
    return resp.get_json()["data"]


def create_invite(client, headers, community_id: str, **payload) -> dict:
    resp = client.post(f"{BASE}/{community_id}/invites", json=payload, headers=headers)
    assert resp.status_code == 201, resp.get_data(as_text=True)
    return resp.get_json()["data"]


def test_create_community(client, alice) -> None:
    session, headers = alice

    data = create_community(
        client, headers, description="Monthly reads", coverImageUrl="https://img/x.png", tags=["books"]
    )

    assert_json_keys(data, COMMUNITY_KEYS)
    assert data["ownerId"] == session["user"]["id"]
    assert data["memberCount"] == 1
    assert data["currentUserRole"] == "Owner"
    assert data["privacy"] == "Public"
    assert data["tags"] == ["books"]


def test_create_community_defaults_to_public(client, alice) -> None:
    _, headers = alice

    resp = client.post(BASE, json={"name": "Defaults"}, headers=headers)

    assert resp.get_json()["data"]["privacy"] == "Public"


@pytest.mark.parametrize(
    "payload",
    [{}, {"name": ""}, {"name": "   ", "privacy": "Public"}, {"name": "x", "privacy": "Secret"}],
)
def test_create_community_validation(client, alice, payload) -> None:
    _, headers = alice

    assert_problem(client.post(BASE, json=payload, headers=headers), 422, "validation_error")


def test_create_community_requires_auth(client) -> None:
    assert_problem(client.post(BASE, json={"name": "Nope"}), 401, "unauthorized")


def test_public_listing_is_paginated_and_hides_private(client, alice) -> None:
    _, headers = alice
    for i in range(3):
        create_community(client, headers, name=f"Open {i}")
    create_community(client, headers, name="Hidden", privacy="Private")

    resp = client.get(f"{BASE}?page=1&limit=2")

    assert resp.status_code == 200
    body = resp.get_json()
    assert len(body["data"]) == 2
    assert body["meta"] == {"total": 3, "page": 1, "limit": 2, "hasPrev": False, "hasNext": True}
    assert all(c["privacy"] == "Public" for c in body["data"])


def test_public_listing_rejects_bad_page(client) -> None:
    assert_problem(client.get(f"{BASE}?page=0"), 422, "validation_error")


def test_join_and_leave_public_community(client, alice, bob) -> None:
    _, owner_headers = alice
    _, headers = bob
    community = create_community(client, owner_headers)

    joined = client.post(f"{BASE}/{community['id']}/join", json={}, headers=headers)
    again = client.post(f"{BASE}/{community['id']}/join", headers=headers)

    assert joined.status_code == 200
    assert joined.get_json()["data"]["memberCount"] == 2
    assert joined.get_json()["data"]["currentUserRole"] == "Member"
    assert_problem(again, 409, "already_member")

    left = client.post(f"{BASE}/{community['id']}/leave", headers=headers)
    assert left.status_code == 204
    assert client.get(f"{BASE}/{community['id']}").get_json()["data"]["memberCount"] == 1
    assert_problem(client.post(f"{BASE}/{community['id']}/leave", headers=headers), 403, "not_member")


def test_owner_cannot_leave(client, alice) -> None:
    _, headers = alice
    community = create_community(client, headers)

    assert_problem(client.post(f"{BASE}/{community['id']}/leave", headers=headers), 409, "owner_cannot_leave")


def test_private_community_invite_flow(client, alice, bob) -> None:
    _, owner_headers = alice
    _, headers = bob
    _, carol_headers = register_and_login(client, "carol")
    community = create_community(client, owner_headers, privacy="Private")
    invite = create_invite(client, owner_headers, community["id"], maxUses=1)

    assert invite["maxUses"] == 1
    assert invite["usesCount"] == 0
    assert invite["isActive"] is True
    assert_problem(client.post(f"{BASE}/{community['id']}/join", json={}, headers=headers), 400, "invite_required")
    assert_problem(
        client.post(f"{BASE}/{community['id']}/join", json={"inviteCode": "WRONG"}, headers=headers),
        400,
        "invalid_invite",
    )

    joined = client.post(
        f"{BASE}/{community['id']}/join", json={"inviteCode": invite["inviteCode"]}, headers=headers
    )
    exhausted = client.post(
        f"{BASE}/{community['id']}/join", json={"inviteCode": invite["inviteCode"]}, headers=carol_headers
    )

    assert joined.status_code == 200
    assert joined.get_json()["data"]["memberCount"] == 2
    assert_problem(exhausted, 400, "invite_exhausted")


def test_private_community_is_invisible_to_outsiders(client, alice, bob) -> None:
    _, owner_headers = alice
    _, headers = bob
    community = create_community(client, owner_headers, privacy="Private")

    assert client.get(f"{BASE}/{community['id']}", headers=owner_headers).status_code == 200
    assert_problem(client.get(f"{BASE}/{community['id']}", headers=headers), 404, "community_not_found")
    assert_problem(client.get(f"{BASE}/{community['id']}"), 404, "community_not_found")
    assert_problem(client.get(f"{BASE}/{community['id']}/members", headers=headers), 403, "not_member")


def test_get_unknown_community(client) -> None:
    assert_problem(client.get(f"{BASE}/{'0' * 32}"), 404, "community_not_found")


def test_my_communities(client, alice, bob) -> None:
    _, owner_headers = alice
    _, headers = bob
    mine = create_community(client, owner_headers, name="Alice's")
    theirs = create_community(client, headers, name="Bob's")
    client.post(f"{BASE}/{mine['id']}/join", headers=headers)

    resp = client.get(f"{BASE}/mine", headers=headers)

    assert resp.status_code == 200
    roles = {c["id"]: c["currentUserRole"] for c in resp.get_json()["data"]}
    assert roles == {mine["id"]: "Member", theirs["id"]: "Owner"}
    assert resp.get_json()["meta"]["total"] == 2


def test_role_updates(client, alice, bob) -> None:
    _, owner_headers = alice
    bob_session, headers = bob
    carol_session, carol_headers = register_and_login(client, "carol")
    community = create_community(client, owner_headers)
    for member_headers in (headers, carol_headers):
        client.post(f"{BASE}/{community['id']}/join", headers=member_headers)
    url = f"{BASE}/{community['id']}/members/role"

    promoted = client.put(url, json={"userId": bob_session["user"]["id"], "newRole": "Moderator"}, headers=owner_headers)
    assert promoted.status_code == 200
    assert promoted.get_json()["data"]["role"] == "Moderator"
    assert_json_keys(promoted.get_json()["data"], {"userId", "role", "joinedAt"})

    assert_problem(
        client.put(url, json={"userId": bob_session["user"]["id"], "newRole": "Member"}, headers=carol_headers),
        403,
        "insufficient_role",
    )
    assert_problem(
        client.put(url, json={"userId": carol_session["user"]["id"], "newRole": "Owner"}, headers=owner_headers),
        409,
        "ownership_transfer_unsupported",
    )
    assert_problem(
        client.put(url, json={"userId": "0" * 32, "newRole": "Moderator"}, headers=owner_headers),
        404,
        "target_not_member",
    )
    assert_problem(client.put(url, json={"userId": "x"}, headers=owner_headers), 422, "validation_error")


def test_members_listing(client, alice, bob) -> None:
    owner_session, owner_headers = alice
    bob_session, headers = bob
    community = create_community(client, owner_headers)
    client.post(f"{BASE}/{community['id']}/join", headers=headers)

    resp = client.get(f"{BASE}/{community['id']}/members", headers=headers)

    assert resp.status_code == 200
    assert [(m["userId"], m["role"]) for m in resp.get_json()["data"]] == [
        (owner_session["user"]["id"], "Owner"),
        (bob_session["user"]["id"], "Member"),
    ]


def test_invites_are_for_managers(client, alice, bob) -> None:
    _, owner_headers = alice
    _, headers = bob
    community = create_community(client, owner_headers)
    client.post(f"{BASE}/{community['id']}/join", headers=headers)
    create_invite(client, owner_headers, community["id"], expiresInDays=3)

    listed = client.get(f"{BASE}/{community['id']}/invites", headers=owner_headers)

    assert listed.status_code == 200
    assert len(listed.get_json()["data"]) == 1
    assert_problem(client.get(f"{BASE}/{community['id']}/invites", headers=headers), 403, "insufficient_role")
    assert_problem(
        client.post(f"{BASE}/{community['id']}/invites", json={}, headers=headers), 403, "insufficient_role"
    )
    assert_problem(
        client.post(f"{BASE}/{community['id']}/invites", json={"maxUses": 0}, headers=owner_headers),
        400,
        "invalid_invite_parameters",
    )


def test_community_name_is_trimmed(client, alice) -> None:
    _, headers = alice

    assert create_community(client, headers, name="  Book Club  ")["name"] == "Book Club"


@pytest.mark.parametrize(
    "payload",
    [{"expiresInDays": 10**9}, {"expiresInDays": 366}, {"maxUses": 10**12}],
)
def test_invite_limits_are_bounded(client, alice, payload) -> None:
    _, headers = alice
    community = create_community(client, headers)

    resp = client.post(f"{BASE}/{community['id']}/invites", json=payload, headers=headers)

    assert_problem(resp, 400, "invalid_invite_parameters")
