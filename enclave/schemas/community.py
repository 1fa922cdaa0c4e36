"""Community resource schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from enclave.models.community import CommunityPrivacy, CommunityRole

from .common import MetaSchema, TrimmedString


class CommunityCreateSchema(Schema):
    """Payload for creating a community."""

    name = TrimmedString(required=True, validate=validate.Length(min=1, max=100))
    description = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=2000))
    cover_image_url = fields.String(
        data_key="coverImageUrl", load_default=None, allow_none=True, validate=validate.Length(max=500)
    )
    privacy = fields.Enum(CommunityPrivacy, by_value=True, load_default=CommunityPrivacy.PUBLIC)
    tags = fields.List(
        fields.String(validate=validate.Length(max=50)),
        load_default=list,
        validate=validate.Length(max=20),
    )


class InviteCreateSchema(Schema):
    """Payload for creating an invite; limits are checked by the service."""

    max_uses = fields.Integer(data_key="maxUses", load_default=None, allow_none=True)
    expires_in_days = fields.Integer(data_key="expiresInDays")


class JoinSchema(Schema):
    invite_code = fields.String(
        data_key="inviteCode", load_default=None, allow_none=True, validate=validate.Length(max=32)
    )


class RoleUpdateSchema(Schema):
    """Payload for changing a member's role."""

    user_id = fields.String(data_key="userId", required=True, validate=validate.Length(min=1, max=32))
    new_role = fields.Enum(CommunityRole, by_value=True, data_key="newRole", required=True)


class CommunitySchema(Schema):
    """A community as seen by the caller."""

    id = fields.String(required=True)
    name = fields.String(required=True)
    description = fields.String(allow_none=True)
    cover_image_url = fields.String(data_key="coverImageUrl", allow_none=True)
    privacy = fields.Enum(CommunityPrivacy, by_value=True)
    owner_id = fields.String(data_key="ownerId")
    member_count = fields.Integer(data_key="memberCount")
    tags = fields.List(fields.String())
    created_at = fields.DateTime(data_key="createdAt", allow_none=True)
    current_user_role = fields.Enum(
        CommunityRole, by_value=True, data_key="currentUserRole", allow_none=True
    )


class CommunityPageSchema(Schema):
    items = fields.List(fields.Nested(CommunitySchema))
    meta = fields.Nested(MetaSchema)


class MemberSchema(Schema):
    user_id = fields.String(data_key="userId")
    role = fields.Enum(CommunityRole, by_value=True)
    joined_at = fields.DateTime(data_key="joinedAt")


class InviteSchema(Schema):
    """An invite as shown to owners and moderators."""

    id = fields.String(required=True)
    community_id = fields.String(data_key="communityId")
    invite_code = fields.String(data_key="inviteCode")
    expires_at = fields.DateTime(data_key="expiresAt")
    max_uses = fields.Integer(data_key="maxUses", allow_none=True)
    uses_count = fields.Integer(data_key="usesCount")
    is_active = fields.Boolean(data_key="isActive")
    created_by_user_id = fields.String(data_key="createdByUserId")
