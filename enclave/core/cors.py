"""CORS policy for the ``/api`` surface."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS


def init_app(app: Flask) -> None:
    """Apply ``CORS_ORIGINS`` to every route under ``API_BASE_PREFIX``.

    :param app: Application to configure. A blank or ``"*"`` origin list
        allows any origin and then disables credentialed requests, since
        browsers refuse that combination anyway.
    """
    raw_origins = app.config.get("CORS_ORIGINS") or ""
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
    wildcard = not origins or origins == ["*"]
    api_prefix = app.config.get("API_BASE_PREFIX", "/api").rstrip("/")

    CORS(
        app,
        resources={rf"{api_prefix}/*": {"origins": "*" if wildcard else origins}},
        supports_credentials=not wildcard,
        expose_headers=["X-Request-ID"],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
