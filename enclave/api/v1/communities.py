"""Community endpoints: lifecycle, membership, roles and invites."""

from __future__ import annotations

from flask import Blueprint, current_app

from enclave.api.deps import (
    build_community_service,
    current_user_id,
    json_response,
    load_json,
    no_content,
    optional_user_id,
    parse_pagination,
    require_auth,
    timing,
)
from enclave.schemas import (
    CommunityCreateSchema,
    CommunityPageSchema,
    CommunitySchema,
    InviteCreateSchema,
    InviteSchema,
    JoinSchema,
    MemberSchema,
    RoleUpdateSchema,
)
from enclave.services.communities.dto import (
    CommunityCreateIn,
    CommunityListIn,
    InviteCreateIn,
    JoinIn,
    LeaveIn,
    RoleUpdateIn,
)

bp = Blueprint("communities", __name__, url_prefix="/communities")

create_schema = CommunityCreateSchema()
invite_create_schema = InviteCreateSchema()
join_schema = JoinSchema()
role_update_schema = RoleUpdateSchema()
community_schema = CommunitySchema()
page_schema = CommunityPageSchema()
member_schema = MemberSchema()
member_list_schema = MemberSchema(many=True)
invite_schema = InviteSchema()
invite_list_schema = InviteSchema(many=True)


@bp.post("")
@require_auth
@timing
def create_community():
    """Create a community owned by the caller."""

    data = load_json(create_schema)
    user_id = current_user_id()
    community = build_community_service(user_id).create_community(
        CommunityCreateIn(
            owner_id=user_id,
            name=data["name"],
            privacy=data["privacy"],
            description=data.get("description"),
            cover_image_url=data.get("cover_image_url"),
            tags=data.get("tags") or (),
        )
    )
    return json_response({"data": community_schema.dump(community)}, status=201)


@bp.get("")
@timing
def list_public():
    """Return public communities, newest first."""

    pagination = parse_pagination()
    page = build_community_service().list_public(
        CommunityListIn(page=pagination.page, limit=pagination.limit)
    )
    body = page_schema.dump(page)
    return json_response({"data": body["items"], "meta": body["meta"]})


@bp.get("/mine")
@require_auth
@timing
def list_mine():
    """Return the caller's communities with their role in each."""

    pagination = parse_pagination()
    user_id = current_user_id()
    page = build_community_service(user_id).list_for_user(
        user_id, CommunityListIn(page=pagination.page, limit=pagination.limit)
    )
    body = page_schema.dump(page)
    return json_response({"data": body["items"], "meta": body["meta"]})


@bp.get("/<community_id>")
@timing
def get_community(community_id: str):
    viewer_id = optional_user_id()
    community = build_community_service(viewer_id).get_community(community_id, viewer_id)
    return json_response({"data": community_schema.dump(community)})


@bp.post("/<community_id>/join")
@require_auth
@timing
def join(community_id: str):
    """Join a community; private ones need an ``inviteCode``."""

    data = load_json(join_schema)
    user_id = current_user_id()
    community = build_community_service(user_id).join_community(
        JoinIn(community_id=community_id, user_id=user_id, invite_code=data.get("invite_code"))
    )
    return json_response({"data": community_schema.dump(community)})


@bp.post("/<community_id>/leave")
@require_auth
@timing
def leave(community_id: str):
    user_id = current_user_id()
    build_community_service(user_id).leave_community(
        LeaveIn(community_id=community_id, user_id=user_id)
    )
    return no_content()


@bp.put("/<community_id>/members/role")
@require_auth
@timing
def update_member_role(community_id: str):
    """Change another member's role."""

    data = load_json(role_update_schema)
    user_id = current_user_id()
    member = build_community_service(user_id).update_member_role(
        RoleUpdateIn(
            community_id=community_id,
            requester_id=user_id,
            target_user_id=data["user_id"],
            new_role=data["new_role"],
        )
    )
    return json_response({"data": member_schema.dump(member)})


@bp.get("/<community_id>/members")
@require_auth
@timing
def list_members(community_id: str):
    user_id = current_user_id()
    members = build_community_service(user_id).list_members(community_id, user_id)
    return json_response({"data": member_list_schema.dump(members)})


@bp.post("/<community_id>/invites")
@require_auth
@timing
def create_invite(community_id: str):
    """Create an invite code; owners and moderators only."""

    data = load_json(invite_create_schema)
    user_id = current_user_id()
    invite = build_community_service(user_id).create_invite(
        InviteCreateIn(
            community_id=community_id,
            requester_id=user_id,
            max_uses=data.get("max_uses"),
            expires_in_days=data.get(
                "expires_in_days", int(current_app.config.get("INVITE_DEFAULT_EXPIRY_DAYS", 7))
            ),
        )
    )
    return json_response({"data": invite_schema.dump(invite)}, status=201)


@bp.get("/<community_id>/invites")
@require_auth
@timing
def list_invites(community_id: str):
    user_id = current_user_id()
    invites = build_community_service(user_id).list_invites(community_id, user_id)
    return json_response({"data": invite_list_schema.dump(invites)})
