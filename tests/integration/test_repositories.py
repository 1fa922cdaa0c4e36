"""Repository behaviour that services rely on for correctness."""

from __future__ import annotations

from datetime import timedelta

import pytest

from enclave.models.base import utcnow
from enclave.models.community import Community, CommunityPrivacy, CommunityRole
from enclave.models.refresh_token import RefreshToken
from enclave.repositories import (
    CommunityInviteRepository,
    CommunityMemberRepository,
    CommunityRepository,
    Pagination,
    RefreshTokenRepository,
    UserRepository,
)

from tests.factories.community import (
    CommunityFactory,
    CommunityInviteFactory,
    CommunityMemberFactory,
)
from tests.factories.user import UserFactory


@pytest.fixture()
def invites(session) -> CommunityInviteRepository:
    return CommunityInviteRepository(session=session)


# ----------------------------------------------------------------------------
# Invites
# ----------------------------------------------------------------------------


def test_redeem_stops_at_max_uses(invites, session) -> None:
    invite = CommunityInviteFactory(max_uses=2)
    now = utcnow()

    results = [invites.redeem(invite.id, now=now) for _ in range(3)]

    assert results == [True, True, False]
    session.refresh(invite)
    assert invite.uses_count == 2


def test_redeem_unbounded_invite(invites, session) -> None:
    invite = CommunityInviteFactory(max_uses=None)
    now = utcnow()

    assert all(invites.redeem(invite.id, now=now) for _ in range(5))
    session.refresh(invite)
    assert invite.uses_count == 5


@pytest.mark.parametrize(
    "overrides",
    [
        {"is_active": False},
        {"expires_at": utcnow() - timedelta(seconds=1)},
        {"max_uses": 1, "uses_count": 1},
    ],
)
def test_redeem_refuses_unusable_invites(invites, session, overrides) -> None:
    invite = CommunityInviteFactory(**overrides)
    uses_before = invite.uses_count

    assert invites.redeem(invite.id, now=utcnow()) is False
    session.refresh(invite)
    assert invite.uses_count == uses_before


def test_list_invites_hides_inactive(invites) -> None:
    community = CommunityFactory()
    live = CommunityInviteFactory(community_id=community.id)
    CommunityInviteFactory(community_id=community.id, is_active=False)

    assert [i.id for i in invites.list_for_community(community.id)] == [live.id]
    assert len(invites.list_for_community(community.id, active_only=False)) == 2


# ----------------------------------------------------------------------------
# Communities and members
# ----------------------------------------------------------------------------


def test_adjust_member_count_is_relative(session) -> None:
    community = CommunityFactory(member_count=3)
    repo = CommunityRepository(session=session)

    assert repo.adjust_member_count(community, +1) == 4
    assert repo.adjust_member_count(community, -2) == 2
    assert community.member_count == 2


def test_adjust_member_count_sees_concurrent_changes(session) -> None:
    """The increment is applied in SQL, not on the loaded value."""

    community = CommunityFactory(member_count=1)
    repo = CommunityRepository(session=session)
    session.query(Community).filter_by(id=community.id).update({"member_count": 10})

    assert repo.adjust_member_count(community, +1) == 11


def test_list_public_orders_newest_first(session) -> None:
    now = utcnow()
    first = CommunityFactory(created_at=now - timedelta(hours=3))
    second = CommunityFactory(created_at=now - timedelta(hours=2))
    CommunityFactory(privacy=CommunityPrivacy.PRIVATE, created_at=now)
    gone = CommunityFactory(created_at=now - timedelta(hours=1))
    gone.mark_deleted(now)
    session.commit()

    page = CommunityRepository(session=session).list_public(Pagination(page=1, limit=10, sort=[]))

    assert [c.id for c in page.items] == [second.id, first.id]
    assert page.total == 2


def test_list_for_user_pairs_roles(session) -> None:
    user = UserFactory()
    owned = CommunityFactory(owner_id=user.id)
    joined = CommunityFactory()
    CommunityMemberFactory(community_id=owned.id, user_id=user.id, role=CommunityRole.OWNER)
    CommunityMemberFactory(community_id=joined.id, user_id=user.id)

    page = CommunityRepository(session=session).list_for_user(user.id, Pagination(1, 10, []))

    assert {(c.id, role) for c, role in page.items} == {
        (owned.id, CommunityRole.OWNER),
        (joined.id, CommunityRole.MEMBER),
    }
    assert page.total == 2


def test_memberships_ignore_soft_deleted_rows(session) -> None:
    member = CommunityMemberFactory()
    repo = CommunityMemberRepository(session=session)

    repo.soft_delete(member, utcnow())
    session.commit()

    assert repo.get_membership(member.community_id, member.user_id) is None
    assert repo.count_for_community(member.community_id) == 0


def test_partial_unique_index_allows_rejoin_after_leave(session) -> None:
    member = CommunityMemberFactory()
    repo = CommunityMemberRepository(session=session)
    repo.soft_delete(member, utcnow())

    again = CommunityMemberFactory(community_id=member.community_id, user_id=member.user_id)

    assert repo.get_membership(member.community_id, member.user_id).id == again.id


# ----------------------------------------------------------------------------
# Users and refresh tokens
# ----------------------------------------------------------------------------


def test_user_lookup_by_email_is_case_insensitive(session) -> None:
    user = UserFactory(email="Mixed.Case@Example.com")
    repo = UserRepository(session=session)

    assert user.email == "mixed.case@example.com"
    assert repo.get_by_email("  MIXED.case@example.COM ").id == user.id
    assert repo.exists_by_email("mixed.case@EXAMPLE.com")


def test_user_update_rejects_non_whitelisted_fields(session) -> None:
    user = UserFactory()

    with pytest.raises(ValueError):
        UserRepository(session=session).update(user, email="new@example.com")


def test_revoke_if_live_only_once(session) -> None:
    user = UserFactory()
    now = utcnow()
    session.add(RefreshToken(user_id=user.id, token="tok", expires_at=now + timedelta(days=1)))
    session.commit()
    repo = RefreshTokenRepository(session=session)

    assert repo.revoke_if_live("tok", when=now, replaced_by="next") is True
    assert repo.revoke_if_live("tok", when=now, replaced_by="other") is False
    session.expire_all()
    row = repo.get_by_token("tok")
    assert row.is_revoked and row.replaced_by_token == "next"


def test_deactivated_invite_cannot_be_redeemed(invites, session) -> None:
    invite = CommunityInviteFactory()

    invites.update(invite, is_active=False)
    session.commit()

    assert invites.redeem(invite.id, now=utcnow()) is False
    assert invites.list_for_community(invite.community_id) == []
