"""Shared API helpers: request parsing, auth guards and service wiring."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, jsonify, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from marshmallow import Schema

from enclave.core.logger import ensure_request_id
from enclave.schemas.common import PaginationQuerySchema
from enclave.services._shared.base import ServiceContext
from enclave.services._shared.dto import PaginationIn
from enclave.services._shared.ports import PasswordHasher, SessionLedger, TokenIssuer
from enclave.services.auth.service import AuthService
from enclave.services.communities.service import CommunityService
from enclave.services.identity.service import IdentityService

F = TypeVar("F", bound=Callable[..., Any])


def load_json(schema: Schema) -> dict[str, Any]:
    """Validate the JSON body with ``schema``; a missing body counts as ``{}``."""

    return cast(dict[str, Any], schema.load(request.get_json(silent=True) or {}))


def parse_pagination(default_limit: int = 20, max_limit: int = 100) -> PaginationIn:
    """Parse ``page``/``limit`` from ``request.args``."""

    schema = PaginationQuerySchema(default_limit=default_limit, max_limit=max_limit)
    data = schema.load(request.args)
    return PaginationIn(page=data["page"], limit=data["limit"])


def require_auth(func: F) -> F:
    """Ensure the request carries a valid JWT access token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_user_id() -> str:
    """Subject of the verified access token."""

    return str(get_jwt_identity())


def optional_user_id() -> str | None:
    """Subject of the access token when one is presented, else ``None``."""

    verify_jwt_in_request(optional=True)
    identity = get_jwt_identity()
    return str(identity) if identity is not None else None


def service_context(actor_id: str | None = None) -> ServiceContext:
    return ServiceContext(actor_id=actor_id, request_id=ensure_request_id())


def _adapter(name: str) -> Any:
    try:
        return current_app.extensions[name]
    except KeyError as exc:
        raise RuntimeError(f"Adapter {name!r} is not configured; call infra.init_app().") from exc


def build_identity_service(actor_id: str | None = None) -> IdentityService:
    return IdentityService(
        password_hasher=cast(PasswordHasher, _adapter("password_hasher")),
        ctx=service_context(actor_id),
    )


def build_auth_service() -> AuthService:
    return AuthService(
        token_issuer=cast(TokenIssuer, _adapter("token_issuer")),
        session_ledger=cast(SessionLedger, _adapter("session_ledger")),
        password_hasher=cast(PasswordHasher, _adapter("password_hasher")),
        revoke_on_reuse=bool(current_app.config.get("AUTH_REVOKE_ON_REUSE", True)),
        ctx=service_context(),
    )


def build_community_service(actor_id: str | None = None) -> CommunityService:
    return CommunityService(ctx=service_context(actor_id))


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def no_content() -> Response:
    return Response(status=204)


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
