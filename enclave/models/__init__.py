from enclave.models.community import (
    Community,
    CommunityInvite,
    CommunityMember,
    CommunityPrivacy,
    CommunityRole,
)
from enclave.models.refresh_token import RefreshToken
from enclave.models.user import User

__all__ = [
    "Community",
    "CommunityInvite",
    "CommunityMember",
    "CommunityPrivacy",
    "CommunityRole",
    "RefreshToken",
    "User",
]
