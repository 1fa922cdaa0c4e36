"""Convenience exports for API schemas."""

from __future__ import annotations

from .auth import LoginSchema, LogoutSchema, RefreshSchema, SessionSchema
from .common import MetaSchema, PaginationQuerySchema, TrimmedString
from .community import (
    CommunityCreateSchema,
    CommunityPageSchema,
    CommunitySchema,
    InviteCreateSchema,
    InviteSchema,
    JoinSchema,
    MemberSchema,
    RoleUpdateSchema,
)
from .user import ProfileUpdateSchema, RegisterSchema, UserSchema

__all__ = [
    "LoginSchema",
    "LogoutSchema",
    "RefreshSchema",
    "SessionSchema",
    "MetaSchema",
    "TrimmedString",
    "PaginationQuerySchema",
    "CommunityCreateSchema",
    "CommunityPageSchema",
    "CommunitySchema",
    "InviteCreateSchema",
    "InviteSchema",
    "JoinSchema",
    "MemberSchema",
    "RoleUpdateSchema",
    "ProfileUpdateSchema",
    "RegisterSchema",
    "UserSchema",
]
