"""Authentication endpoints: login, refresh rotation, logout."""

from __future__ import annotations

from flask import Blueprint

from enclave.api.deps import (
    build_auth_service,
    build_identity_service,
    current_user_id,
    json_response,
    load_json,
    no_content,
    require_auth,
    timing,
)
from enclave.schemas import LoginSchema, LogoutSchema, RefreshSchema, SessionSchema, UserSchema
from enclave.services.auth.dto import LoginIn, LogoutIn, RefreshIn

bp = Blueprint("auth", __name__, url_prefix="/auth")

login_schema = LoginSchema()
refresh_schema = RefreshSchema()
logout_schema = LogoutSchema()
session_schema = SessionSchema()
user_schema = UserSchema()


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and open a session."""

    data = load_json(login_schema)
    session = build_auth_service().login(LoginIn(email=data["email"], password=data["password"]))
    return json_response({"data": session_schema.dump(session)})


@bp.post("/refresh")
@timing
def refresh():
    """Rotate a refresh token into a new token pair."""

    data = load_json(refresh_schema)
    session = build_auth_service().refresh(RefreshIn(refresh_token=data["refresh_token"]))
    return json_response({"data": session_schema.dump(session)})


@bp.post("/logout")
@timing
def logout():
    data = load_json(logout_schema)
    build_auth_service().logout(
        LogoutIn(refresh_token=data["refresh_token"], all_sessions=data["all_sessions"])
    )
    return no_content()


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the authenticated user's public profile."""

    user_id = current_user_id()
    user = build_identity_service(user_id).get_profile(user_id)
    return json_response({"data": user_schema.dump(user)})
