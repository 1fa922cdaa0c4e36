"""
CommunityService
================

Community lifecycle and membership: creation, invites, joining, leaving,
role changes and the read side (single community, listings, members,
invites).

Every command runs in one read-write unit of work. Counter and invite-use
changes are atomic SQL updates issued by the repositories, so the service
never does read-modify-write on shared numbers.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import cast

from sqlalchemy.exc import IntegrityError

from enclave.models.community import (
    Community,
    CommunityInvite,
    CommunityMember,
    CommunityPrivacy,
    CommunityRole,
)
from enclave.services._shared.base import BaseService, ServiceContext
from enclave.services._shared.dto import PageMeta
from enclave.services._shared.errors import (
    AlreadyMemberError,
    CommunityNotFoundError,
    InvalidInviteError,
    InvalidInviteParametersError,
    InviteExhaustedError,
    InviteExpiredError,
    InviteRequiredError,
    NotAMemberError,
    OwnerCannotLeaveError,
    ServiceError,
    violates,
)
from enclave.services._shared.policies.roles import RoleChange, check_role_change, ensure_manager
from enclave.services.communities._converters import (
    clean_tags,
    to_community_out,
    to_invite_out,
    to_member_out,
)
from enclave.services.communities.dto import (
    CommunityCreateIn,
    CommunityListIn,
    CommunityOut,
    CommunityPageOut,
    InviteCreateIn,
    InviteOut,
    JoinIn,
    LeaveIn,
    MemberOut,
    RoleUpdateIn,
)
from enclave.services.communities.invite_codes import generate_invite_code, normalize_invite_code
from enclave.uow.sqlalchemy_uow import SQLAlchemyRepositoryContainer

logger = logging.getLogger(__name__)


class CommunityService(BaseService):
    """
    Application service for communities and their memberships.

    :param code_factory: Source of new invite codes.
    :param ctx: Optional request-scoped context.
    """

    MAX_CODE_ATTEMPTS = 5
    MAX_INVITE_EXPIRY_DAYS = 365
    MAX_INVITE_USES = 1_000_000

    def __init__(
        self,
        *,
        code_factory: Callable[[], str] = generate_invite_code,
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(ctx=ctx)
        self.code_factory = code_factory

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #

    def create_community(self, dto: CommunityCreateIn) -> CommunityOut:
        """
        Create a community owned by ``dto.owner_id``.

        The community row (``member_count = 1``) and the owner's membership
        are written in the same transaction.
        """
        now = self.now_utc()
        with self.rw_uow() as uow:
            community = Community(
                name=dto.name,
                description=dto.description,
                cover_image_url=dto.cover_image_url,
                privacy=dto.privacy,
                owner_id=dto.owner_id,
                member_count=1,
                tags=clean_tags(dto.tags),
            )
            uow.communities.add(community)
            uow.members.add(
                CommunityMember(
                    community_id=community.id,
                    user_id=dto.owner_id,
                    role=CommunityRole.OWNER,
                    joined_at=now,
                )
            )
            out = to_community_out(community, CommunityRole.OWNER)

        logger.info(
            "community.created",
            extra={"community_id": out.id, "user_id": dto.owner_id, "privacy": out.privacy.value},
        )
        return out

    def create_invite(self, dto: InviteCreateIn) -> InviteOut:
        """
        Create an invite code for a community.

        :raises CommunityNotFoundError: Unknown community.
        :raises NotAMemberError: Requester has no active membership.
        :raises InsufficientRoleError: Requester is a plain member.
        :raises InvalidInviteParametersError: Limits outside
            ``1..MAX_INVITE_USES`` or ``1..MAX_INVITE_EXPIRY_DAYS``.
        """
        if dto.max_uses is not None and not 1 <= dto.max_uses <= self.MAX_INVITE_USES:
            raise InvalidInviteParametersError(
                f"max_uses must be between 1 and {self.MAX_INVITE_USES}"
            )
        if not 1 <= dto.expires_in_days <= self.MAX_INVITE_EXPIRY_DAYS:
            raise InvalidInviteParametersError(
                f"expires_in_days must be between 1 and {self.MAX_INVITE_EXPIRY_DAYS}"
            )

        now = self.now_utc()
        with self.rw_uow() as uow:
            community = self._require_community(uow, dto.community_id)
            membership = uow.members.get_membership(community.id, dto.requester_id)
            ensure_manager(membership.role if membership is not None else None)

            invite = CommunityInvite(
                community_id=community.id,
                invite_code=self._unique_code(uow),
                created_by_user_id=dto.requester_id,
                expires_at=now + timedelta(days=dto.expires_in_days),
                max_uses=dto.max_uses,
                uses_count=0,
                is_active=True,
            )
            uow.invites.add(invite)
            out = to_invite_out(invite)

        logger.info(
            "community.invite_created",
            extra={"community_id": out.community_id, "user_id": dto.requester_id, "invite_id": out.id},
        )
        return out

    def join_community(self, dto: JoinIn) -> CommunityOut:
        """
        Add ``dto.user_id`` to a community as a Member.

        For private communities the invite use is consumed before the
        membership row is written, all in one transaction; any later failure
        rolls the consumed use back.

        :raises CommunityNotFoundError: Unknown community.
        :raises AlreadyMemberError: An active membership already exists.
        :raises InviteRequiredError: Private community joined without a code.
        :raises InvalidInviteError: Unknown, inactive or foreign code.
        :raises InviteExpiredError: Code past its expiry.
        :raises InviteExhaustedError: Code has no uses left.
        """
        now = self.now_utc()
        with self.rw_uow() as uow:
            community = self._require_community(uow, dto.community_id)
            if uow.members.is_member(community.id, dto.user_id):
                raise AlreadyMemberError()

            if community.privacy is CommunityPrivacy.PRIVATE:
                self._redeem_invite(uow, community, dto.invite_code, now)

            try:
                uow.members.add(
                    CommunityMember(
                        community_id=community.id,
                        user_id=dto.user_id,
                        role=CommunityRole.MEMBER,
                        joined_at=now,
                    )
                )
            except IntegrityError as exc:
                if violates(exc, "uq_community_members_active", "community_members.community_id"):
                    raise AlreadyMemberError() from exc
                raise

            uow.communities.adjust_member_count(community, +1)
            out = to_community_out(community, CommunityRole.MEMBER)

        logger.info("community.joined", extra={"community_id": out.id, "user_id": dto.user_id})
        return out

    def leave_community(self, dto: LeaveIn) -> None:
        """
        Remove the caller's membership.

        :raises CommunityNotFoundError: Unknown community.
        :raises NotAMemberError: No active membership.
        :raises OwnerCannotLeaveError: The owner tried to leave.
        """
        now = self.now_utc()
        with self.rw_uow() as uow:
            community = self._require_community(uow, dto.community_id)
            membership = uow.members.get_membership(community.id, dto.user_id)
            if membership is None:
                raise NotAMemberError()
            if membership.role is CommunityRole.OWNER:
                raise OwnerCannotLeaveError()

            uow.members.soft_delete(membership, now)
            uow.communities.adjust_member_count(community, -1)

        logger.info("community.left", extra={"community_id": dto.community_id, "user_id": dto.user_id})

    def update_member_role(self, dto: RoleUpdateIn) -> MemberOut:
        """
        Change a member's role, subject to the ordered role rules.

        :raises CommunityNotFoundError: Unknown community.
        :raises NotAMemberError: Requester has no active membership.
        :raises InsufficientRoleError: Requester may not change this target.
        :raises OwnershipTransferUnsupportedError: ``new_role`` is Owner.
        :raises TargetNotAMemberError: Target has no active membership.
        """
        with self.rw_uow() as uow:
            community = self._require_community(uow, dto.community_id)
            requester = uow.members.get_membership(community.id, dto.requester_id)
            target = uow.members.get_membership(community.id, dto.target_user_id)

            check_role_change(
                RoleChange(
                    requester_role=requester.role if requester is not None else None,
                    target_user_id=dto.target_user_id,
                    target_role=target.role if target is not None else None,
                    new_role=dto.new_role,
                )
            )
            target = cast(CommunityMember, target)
            uow.members.update(target, role=dto.new_role)
            out = to_member_out(target)

        logger.info(
            "community.role_changed",
            extra={
                "community_id": dto.community_id,
                "user_id": dto.requester_id,
                "target_user_id": dto.target_user_id,
                "role": dto.new_role.value,
            },
        )
        return out

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def get_community(self, community_id: str, viewer_id: str | None = None) -> CommunityOut:
        """
        Return a community with the viewer's role.

        Private communities are reported as missing to non-members.
        """
        with self.ro_uow() as uow:
            community = self._require_community(uow, community_id)
            membership = (
                uow.members.get_membership(community.id, viewer_id) if viewer_id else None
            )
            if community.privacy is CommunityPrivacy.PRIVATE and membership is None:
                raise CommunityNotFoundError(community_id)
            return to_community_out(community, membership.role if membership else None)

    def list_public(self, dto: CommunityListIn) -> CommunityPageOut:
        pagination = self.ensure_pagination(page=dto.page, limit=dto.limit)
        with self.ro_uow() as uow:
            page = uow.communities.list_public(pagination)
            items = [to_community_out(c, None) for c in page.items]
        return CommunityPageOut(
            items=items,
            meta=PageMeta.build(page=pagination.page, limit=pagination.limit, total=page.total),
        )

    def list_for_user(self, user_id: str, dto: CommunityListIn) -> CommunityPageOut:
        """Communities ``user_id`` actively belongs to, with their role in each."""
        pagination = self.ensure_pagination(page=dto.page, limit=dto.limit)
        with self.ro_uow() as uow:
            page = uow.communities.list_for_user(user_id, pagination)
            items = [to_community_out(c, role) for c, role in page.items]
        return CommunityPageOut(
            items=items,
            meta=PageMeta.build(page=pagination.page, limit=pagination.limit, total=page.total),
        )

    def list_members(self, community_id: str, viewer_id: str) -> list[MemberOut]:
        """
        :raises NotAMemberError: Private community and the viewer is not a member.
        """
        with self.ro_uow() as uow:
            community = self._require_community(uow, community_id)
            if community.privacy is CommunityPrivacy.PRIVATE and not uow.members.is_member(
                community.id, viewer_id
            ):
                raise NotAMemberError()
            return [to_member_out(m) for m in uow.members.list_for_community(community.id)]

    def list_invites(self, community_id: str, requester_id: str) -> list[InviteOut]:
        with self.ro_uow() as uow:
            community = self._require_community(uow, community_id)
            membership = uow.members.get_membership(community.id, requester_id)
            ensure_manager(membership.role if membership is not None else None)
            return [to_invite_out(i) for i in uow.invites.list_for_community(community.id)]

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    @staticmethod
    def _require_community(uow: SQLAlchemyRepositoryContainer, community_id: str) -> Community:
        community = uow.communities.get(community_id)
        if community is None:
            raise CommunityNotFoundError(community_id)
        return community

    def _unique_code(self, uow: SQLAlchemyRepositoryContainer) -> str:
        for _ in range(self.MAX_CODE_ATTEMPTS):
            code = self.code_factory()
            if not uow.invites.code_exists(code):
                return code
        raise RuntimeError("Could not generate a unique invite code")

    @staticmethod
    def _invite_rejection(
        invite: CommunityInvite | None, community_id: str, now: datetime
    ) -> ServiceError | None:
        """Return the error that keeps ``invite`` from being redeemed, if any."""
        if invite is None or not invite.is_active or invite.community_id != community_id:
            return InvalidInviteError()
        if invite.expires_at <= now:
            return InviteExpiredError()
        if invite.max_uses is not None and invite.uses_count >= invite.max_uses:
            return InviteExhaustedError()
        return None

    def _redeem_invite(
        self,
        uow: SQLAlchemyRepositoryContainer,
        community: Community,
        code: str | None,
        now: datetime,
    ) -> None:
        if not code or not code.strip():
            raise InviteRequiredError()

        invite = uow.invites.get_by_code(normalize_invite_code(code))
        rejection = self._invite_rejection(invite, community.id, now)
        if rejection is not None:
            raise rejection
        invite = cast(CommunityInvite, invite)

        if not uow.invites.redeem(invite.id, now=now):
            # Another join consumed the last use (or the invite changed) after
            # our read; report the state the store now holds.
            uow.invites.refresh(invite)
            raise self._invite_rejection(invite, community.id, now) or InviteExhaustedError()
