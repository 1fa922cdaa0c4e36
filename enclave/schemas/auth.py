"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from .user import UserSchema


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class RefreshSchema(Schema):
    refresh_token = fields.String(
        data_key="refreshToken", required=True, validate=validate.Length(min=1, max=255)
    )


class LogoutSchema(Schema):
    """Input payload for ending a session (or all of them)."""

    refresh_token = fields.String(
        data_key="refreshToken", required=True, validate=validate.Length(min=1, max=255)
    )
    all_sessions = fields.Boolean(data_key="allSessions", load_default=False)


class SessionSchema(Schema):
    """Response payload for login and refresh."""

    access_token = fields.String(data_key="accessToken", required=True)
    refresh_token = fields.String(data_key="refreshToken", required=True)
    token_type = fields.Constant("Bearer", data_key="tokenType", dump_only=True)
    access_token_expires_at = fields.DateTime(data_key="accessTokenExpiresAt", required=True)
    refresh_token_expires_at = fields.DateTime(data_key="refreshTokenExpiresAt", required=True)
    user = fields.Nested(UserSchema, required=True)
