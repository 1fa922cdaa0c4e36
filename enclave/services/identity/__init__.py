from __future__ import annotations

from .dto import UserProfileUpdateIn, UserPublicOut, UserRegisterIn
from .service import IdentityService

__all__ = ["IdentityService", "UserRegisterIn", "UserProfileUpdateIn", "UserPublicOut"]
