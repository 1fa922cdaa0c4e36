"""API blueprint package aggregating versioned endpoints."""

from __future__ import annotations

from collections.abc import Iterable
from typing import cast

from flask import Blueprint, Flask

from enclave.core.errors import APIError, render_api_error
from enclave.services._shared.base import BaseService
from enclave.services._shared.errors import ServiceError


def register_blueprint_group(
    app: Flask,
    *,
    base_prefix: str,
    entries: Iterable[tuple[Blueprint, str]],
) -> None:
    """Register related blueprints beneath a common prefix.

    :param app: Application instance receiving the blueprints.
    :param base_prefix: Prefix applied to all entries, e.g. ``"/api/v1"``.
    :param entries: ``(blueprint, relative_prefix)`` pairs; an empty relative
        prefix mounts the blueprint at the version root.
    """

    for bp, rel_prefix in entries:
        full_prefix = "/".join(
            segment for segment in [base_prefix.rstrip("/"), rel_prefix.strip("/")] if segment
        )
        full_prefix = "/" + full_prefix if not full_prefix.startswith("/") else full_prefix
        app.register_blueprint(bp, url_prefix=full_prefix)


def init_app(app: Flask) -> None:
    """Register the available API versions and the service error handler."""

    api_base = app.config.get("API_BASE_PREFIX", "/api")

    from enclave.api.v1 import API_VERSION as V1
    from enclave.api.v1 import REGISTRY as V1_REGISTRY

    register_blueprint_group(app, base_prefix=f"{api_base}/{V1}", entries=V1_REGISTRY)

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        return render_api_error(cast(APIError, BaseService.translate_exceptions(err)))


__all__ = ["init_app", "register_blueprint_group"]
