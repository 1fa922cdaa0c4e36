"""Service layer public API.

Callers import from :mod:`enclave.services` without knowing the internal
structure.

Re-exports
----------
- Base primitives: :class:`BaseService`, :class:`ServiceContext`
- Shared DTOs: :class:`PaginationIn`, :class:`PageMeta`
- Identity: :class:`IdentityService` and its DTOs
- Authentication: :class:`AuthService` and its DTOs
- Communities: :class:`CommunityService` and its DTOs
"""

from __future__ import annotations

# Base primitives (service base + request-scoped context)
from ._shared.base import BaseService, ServiceContext

# Shared DTOs
from ._shared.dto import PageMeta, PaginationIn

# Authentication service + DTOs
from .auth import AuthService, LoginIn, LogoutIn, RefreshIn, SessionOut

# Community service + DTOs
from .communities import (
    CommunityCreateIn,
    CommunityListIn,
    CommunityOut,
    CommunityPageOut,
    CommunityService,
    InviteCreateIn,
    InviteOut,
    JoinIn,
    LeaveIn,
    MemberOut,
    RoleUpdateIn,
)

# Identity service + DTOs
from .identity import IdentityService, UserProfileUpdateIn, UserPublicOut, UserRegisterIn

__all__ = [
    # Base
    "BaseService",
    "ServiceContext",
    # Shared DTOs
    "PaginationIn",
    "PageMeta",
    # Identity
    "IdentityService",
    "UserRegisterIn",
    "UserProfileUpdateIn",
    "UserPublicOut",
    # Auth
    "AuthService",
    "LoginIn",
    "RefreshIn",
    "LogoutIn",
    "SessionOut",
    # Communities
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
