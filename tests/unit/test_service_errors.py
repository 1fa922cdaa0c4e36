"""Unit tests for service error codes and their HTTP translation."""

from __future__ import annotations

import pytest

from enclave.core.errors import APIError
from enclave.services._shared.base import BaseService
from enclave.services._shared.errors import (
    AlreadyMemberError,
    CommunityNotFoundError,
    EmailTakenError,
    InsufficientRoleError,
    InvalidCredentialsError,
    InvalidInviteError,
    InvalidInviteParametersError,
    InvalidRefreshTokenError,
    InviteExhaustedError,
    InviteExpiredError,
    InviteRequiredError,
    NotAMemberError,
    OwnerCannotLeaveError,
    OwnershipTransferUnsupportedError,
    RefreshTokenExpiredError,
    TargetNotAMemberError,
    UsernameTakenError,
    UserNotFoundError,
)


@pytest.mark.parametrize(
    ("exc", "status", "code"),
    [
        (CommunityNotFoundError("c1"), 404, "community_not_found"),
        (UserNotFoundError("u1"), 404, "user_not_found"),
        (TargetNotAMemberError("u2"), 404, "target_not_member"),
        (AlreadyMemberError(), 409, "already_member"),
        (EmailTakenError(), 409, "email_taken"),
        (UsernameTakenError(), 409, "username_taken"),
        (OwnerCannotLeaveError(), 409, "owner_cannot_leave"),
        (OwnershipTransferUnsupportedError(), 409, "ownership_transfer_unsupported"),
        (InvalidCredentialsError(), 401, "invalid_credentials"),
        (InvalidRefreshTokenError(), 401, "invalid_refresh_token"),
        (NotAMemberError(), 403, "not_member"),
        (InsufficientRoleError(), 403, "insufficient_role"),
        (InviteRequiredError(), 400, "invite_required"),
        (InvalidInviteError(), 400, "invalid_invite"),
        (InviteExpiredError(), 400, "invite_expired"),
        (InviteExhaustedError(), 400, "invite_exhausted"),
        (InvalidInviteParametersError(), 400, "invalid_invite_parameters"),
        (RefreshTokenExpiredError(), 400, "refresh_token_expired"),
    ],
)
def test_translate_exceptions(exc, status, code) -> None:
    translated = BaseService.translate_exceptions(exc)

    assert isinstance(translated, APIError)
    assert translated.status_code == status
    assert translated.code == code
    assert translated.message == exc.message


def test_non_service_errors_pass_through() -> None:
    err = ValueError("boom")
    assert BaseService.translate_exceptions(err) is err


def test_invalid_credentials_message_is_fixed() -> None:
    assert InvalidCredentialsError().message == "Invalid email or password"


def test_not_found_message_names_entity_and_key() -> None:
    err = CommunityNotFoundError("abc")
    assert err.entity == "Community"
    assert err.key == "abc"
    assert "abc" in err.message
