"""
Domain-level exceptions raised by the service layer.

They carry no HTTP knowledge. Each family maps to one HTTP status in
:meth:`enclave.services._shared.base.BaseService.translate_exceptions`, and
every concrete error exposes a stable ``code`` that clients can match on.
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, *markers: str) -> bool:
    """
    Check whether an IntegrityError comes from a given constraint.

    PostgreSQL reports the constraint name; SQLite reports the offending
    ``table.column`` pairs, so callers pass both spellings.

    :param exc: Error raised by SQLAlchemy during flush or commit.
    :param markers: Constraint names or ``table.column`` fragments.
    :returns: ``True`` if any marker occurs in the driver message.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return any(marker.lower() in message for marker in markers)


# --------------------------------------------------------------------------- #
# Families
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    :param message: Human-readable summary; defaults to ``default_message``.
    """

    code = "service_error"
    default_message = "Service error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(ServiceError):
    """
    An entity the operation depends on does not exist.

    :param entity: Entity name, e.g. ``"Community"``.
    :param key: Identifier that was looked up.
    :param message: Optional override of the generated message.
    """

    code = "not_found"

    def __init__(self, entity: str, key: str | int, message: str | None = None) -> None:
        self.entity = entity
        self.key = key
        super().__init__(message or f"{entity} not found: {key}")


class ConflictError(ServiceError):
    """
    The request clashes with current state (uniqueness, lifecycle rules).

    :param entity: Entity name, e.g. ``"User"``.
    :param detail: Short explanation.
    """

    code = "conflict"

    def __init__(self, entity: str, detail: str) -> None:
        self.entity = entity
        self.detail = detail
        super().__init__(f"Conflict on {entity}: {detail}")


class AuthenticationError(ServiceError):
    """Credentials or refresh tokens were rejected."""

    code = "unauthorized"
    default_message = "Authentication failed"


class AuthorizationError(ServiceError):
    """The caller is known but not allowed to perform the operation."""

    code = "forbidden"
    default_message = "Forbidden"


class DomainValidationError(ServiceError):
    """Input is well-formed but violates a domain rule."""

    code = "validation_error"
    default_message = "Invalid request"


# --------------------------------------------------------------------------- #
# Not found
# --------------------------------------------------------------------------- #


class CommunityNotFoundError(NotFoundError):
    code = "community_not_found"

    def __init__(self, community_id: str) -> None:
        super().__init__("Community", community_id)


class UserNotFoundError(NotFoundError):
    code = "user_not_found"

    def __init__(self, user_id: str) -> None:
        super().__init__("User", user_id)


class TargetNotAMemberError(NotFoundError):
    code = "target_not_member"

    def __init__(self, user_id: str) -> None:
        super().__init__(
            "CommunityMember", user_id, "Target user is not a member of this community"
        )


# --------------------------------------------------------------------------- #
# Conflicts
# --------------------------------------------------------------------------- #


class AlreadyMemberError(ConflictError):
    code = "already_member"

    def __init__(self) -> None:
        super().__init__("CommunityMember", "already a member of this community")


class EmailTakenError(ConflictError):
    code = "email_taken"

    def __init__(self) -> None:
        super().__init__("User", "email already registered")


class UsernameTakenError(ConflictError):
    code = "username_taken"

    def __init__(self) -> None:
        super().__init__("User", "username already taken")


class OwnerCannotLeaveError(ConflictError):
    code = "owner_cannot_leave"

    def __init__(self) -> None:
        super().__init__("CommunityMember", "the owner cannot leave their own community")


class OwnershipTransferUnsupportedError(ConflictError):
    code = "ownership_transfer_unsupported"

    def __init__(self) -> None:
        super().__init__("CommunityMember", "the owner role cannot be granted or changed")


# --------------------------------------------------------------------------- #
# Authentication
# --------------------------------------------------------------------------- #


class InvalidCredentialsError(AuthenticationError):
    code = "invalid_credentials"
    default_message = "Invalid email or password"


class InvalidRefreshTokenError(AuthenticationError):
    code = "invalid_refresh_token"
    default_message = "Invalid refresh token"


# --------------------------------------------------------------------------- #
# Authorization
# --------------------------------------------------------------------------- #


class NotAMemberError(AuthorizationError):
    code = "not_member"
    default_message = "You are not a member of this community"


class InsufficientRoleError(AuthorizationError):
    code = "insufficient_role"
    default_message = "Your role does not allow this action"


# --------------------------------------------------------------------------- #
# Domain validation
# --------------------------------------------------------------------------- #


class InviteRequiredError(DomainValidationError):
    code = "invite_required"
    default_message = "An invite code is required to join a private community"


class InvalidInviteError(DomainValidationError):
    code = "invalid_invite"
    default_message = "Invalid invite code"


class InviteExpiredError(DomainValidationError):
    code = "invite_expired"
    default_message = "Invite code has expired"


class InviteExhaustedError(DomainValidationError):
    code = "invite_exhausted"
    default_message = "Invite code has reached its maximum uses"


class InvalidInviteParametersError(DomainValidationError):
    code = "invalid_invite_parameters"
    default_message = "Invite limits must be positive"


class RefreshTokenExpiredError(DomainValidationError):
    code = "refresh_token_expired"
    default_message = "Refresh token has expired"
