"""User resource schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from .common import TrimmedString


class RegisterSchema(Schema):
    """Input payload for account registration."""

    username = TrimmedString(required=True, validate=validate.Length(min=3, max=50))
    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=8, max=128))
    display_name = fields.String(
        data_key="displayName", load_default=None, allow_none=True, validate=validate.Length(max=100)
    )


class ProfileUpdateSchema(Schema):
    """Partial profile update; omitted or ``null`` fields are left untouched."""

    display_name = fields.String(
        data_key="displayName", allow_none=True, validate=validate.Length(max=100)
    )
    bio = fields.String(allow_none=True, validate=validate.Length(max=500))
    profile_picture_url = fields.String(
        data_key="profilePictureUrl", allow_none=True, validate=validate.Length(max=500)
    )


class UserSchema(Schema):
    """Public representation of a user."""

    id = fields.String(required=True)
    username = fields.String(required=True)
    email = fields.Email(required=True)
    display_name = fields.String(data_key="displayName", allow_none=True)
    bio = fields.String(allow_none=True)
    profile_picture_url = fields.String(data_key="profilePictureUrl", allow_none=True)
    created_at = fields.DateTime(data_key="createdAt", allow_none=True)
