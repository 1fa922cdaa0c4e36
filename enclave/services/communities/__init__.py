from __future__ import annotations

from .dto import (
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
from .service import CommunityService

__all__ = [
    "CommunityService",
    "CommunityCreateIn",
    "CommunityListIn",
    "CommunityOut",
    "CommunityPageOut",
    "InviteCreateIn",
    "InviteOut",
    "JoinIn",
    "LeaveIn",
    "MemberOut",
    "RoleUpdateIn",
]
