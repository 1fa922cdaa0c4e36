"""User endpoints: registration and the caller's own profile."""

from __future__ import annotations

from flask import Blueprint

from enclave.api.deps import (
    build_identity_service,
    current_user_id,
    json_response,
    load_json,
    require_auth,
    timing,
)
from enclave.schemas import ProfileUpdateSchema, RegisterSchema, UserSchema
from enclave.services.identity.dto import UserProfileUpdateIn, UserRegisterIn

bp = Blueprint("users", __name__, url_prefix="/users")

register_schema = RegisterSchema()
profile_update_schema = ProfileUpdateSchema()
user_schema = UserSchema()


@bp.post("/register")
@timing
def register():
    """Register a new user and return the created representation."""

    data = load_json(register_schema)
    user = build_identity_service().register(
        UserRegisterIn(
            username=data["username"],
            email=data["email"],
            password=data["password"],
            display_name=data.get("display_name"),
        )
    )
    return json_response({"data": user_schema.dump(user)}, status=201)


@bp.get("/me")
@require_auth
@timing
def get_me():
    user_id = current_user_id()
    user = build_identity_service(user_id).get_profile(user_id)
    return json_response({"data": user_schema.dump(user)})


@bp.patch("/me")
@require_auth
@timing
def update_me():
    """Partially update the caller's profile."""

    data = load_json(profile_update_schema)
    user_id = current_user_id()
    user = build_identity_service(user_id).update_profile(
        UserProfileUpdateIn(
            user_id=user_id,
            display_name=data.get("display_name"),
            bio=data.get("bio"),
            profile_picture_url=data.get("profile_picture_url"),
        )
    )
    return json_response({"data": user_schema.dump(user)})
