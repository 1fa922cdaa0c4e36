"""Persistence-layer repositories for every model."""

from __future__ import annotations

from enclave.repositories.base import BaseRepository, Page, Pagination, paginate_select
from enclave.repositories.community import CommunityRepository
from enclave.repositories.invite import CommunityInviteRepository
from enclave.repositories.membership import CommunityMemberRepository
from enclave.repositories.refresh_token import RefreshTokenRepository
from enclave.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "Page",
    "Pagination",
    "paginate_select",
    "CommunityRepository",
    "CommunityInviteRepository",
    "CommunityMemberRepository",
    "RefreshTokenRepository",
    "UserRepository",
]
