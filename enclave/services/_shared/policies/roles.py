"""
Community role policy.

Role changes are decided by an ordered list of deny rules. The first rule
whose predicate matches produces the error; when none match the change is
allowed. Keeping the order in data makes the precedence between failures
(e.g. "not a member" before "insufficient role") explicit and testable.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from enclave.models.community import CommunityRole
from enclave.services._shared.errors import (
    InsufficientRoleError,
    NotAMemberError,
    OwnershipTransferUnsupportedError,
    ServiceError,
    TargetNotAMemberError,
)

MANAGER_ROLES: frozenset[CommunityRole] = frozenset({CommunityRole.OWNER, CommunityRole.MODERATOR})


@dataclass(frozen=True, slots=True)
class RoleChange:
    """
    Facts a role change is judged on.

    ``None`` roles mean the user has no active membership.
    """

    requester_role: CommunityRole | None
    target_user_id: str
    target_role: CommunityRole | None
    new_role: CommunityRole


@dataclass(frozen=True, slots=True)
class RoleRule:
    name: str
    denies: Callable[[RoleChange], bool]
    error: Callable[[RoleChange], ServiceError]


ROLE_CHANGE_RULES: tuple[RoleRule, ...] = (
    RoleRule(
        "requester_is_member",
        lambda c: c.requester_role is None,
        lambda c: NotAMemberError(),
    ),
    RoleRule(
        "requester_manages",
        lambda c: c.requester_role not in MANAGER_ROLES,
        lambda c: InsufficientRoleError("Only owners and moderators can change roles"),
    ),
    RoleRule(
        "owner_not_grantable",
        lambda c: c.new_role is CommunityRole.OWNER,
        lambda c: OwnershipTransferUnsupportedError(),
    ),
    RoleRule(
        "target_is_member",
        lambda c: c.target_role is None,
        lambda c: TargetNotAMemberError(c.target_user_id),
    ),
    RoleRule(
        "moderator_manages_members_only",
        lambda c: c.requester_role is CommunityRole.MODERATOR
        and c.target_role is not CommunityRole.MEMBER,
        lambda c: InsufficientRoleError("Moderators can only change the role of members"),
    ),
    RoleRule(
        "owner_keeps_owner_role",
        lambda c: c.target_role is CommunityRole.OWNER,
        lambda c: InsufficientRoleError("The owner's role cannot be changed"),
    ),
)


def first_denying_rule(change: RoleChange) -> RoleRule | None:
    """Return the first rule that rejects ``change``, or ``None``."""
    for rule in ROLE_CHANGE_RULES:
        if rule.denies(change):
            return rule
    return None


def check_role_change(change: RoleChange) -> None:
    """
    Raise the error of the first rule rejecting ``change``.

    :raises NotAMemberError: Requester has no active membership.
    :raises InsufficientRoleError: Requester may not manage the target.
    :raises OwnershipTransferUnsupportedError: ``new_role`` is Owner.
    :raises TargetNotAMemberError: Target has no active membership.
    """
    rule = first_denying_rule(change)
    if rule is not None:
        raise rule.error(change)


def ensure_manager(role: CommunityRole | None) -> CommunityRole:
    """
    Require an Owner or Moderator membership.

    :raises NotAMemberError: ``role`` is ``None``.
    :raises InsufficientRoleError: ``role`` is Member.
    """
    if role is None:
        raise NotAMemberError()
    if role not in MANAGER_ROLES:
        raise InsufficientRoleError("Only owners and moderators can manage invites")
    return role
