"""Concrete adapters for the service ports and their per-app wiring."""

from __future__ import annotations

from flask import Flask

from enclave.services._shared.ports import PasswordHasher, SessionLedger, TokenIssuer

SESSION_LEDGER_BACKENDS = ("sql", "redis")


def build_session_ledger(app: Flask) -> SessionLedger:
    """Return the ledger selected by ``SESSION_LEDGER_BACKEND``.

    :raises RuntimeError: On an unknown backend name.
    """
    backend = str(app.config.get("SESSION_LEDGER_BACKEND", "sql")).strip().lower()
    if backend == "sql":
        from enclave.infra.sql import SQLAlchemySessionLedger

        return SQLAlchemySessionLedger()
    if backend == "redis":
        from enclave.core.extensions import get_redis
        from enclave.infra.redis import RedisSessionLedger

        return RedisSessionLedger(get_redis())
    raise RuntimeError(
        f"Unknown SESSION_LEDGER_BACKEND {backend!r}; expected one of {SESSION_LEDGER_BACKENDS}"
    )


def init_app(app: Flask) -> None:
    """Build the process-wide adapters and park them in ``app.extensions``.

    The adapters are stateless (or hold only a connection pool), so one
    instance per app is shared by every request.
    """
    from enclave.infra.jwt import JWTTokenIssuer
    from enclave.infra.security import WerkzeugPasswordHasher

    password_hasher: PasswordHasher = WerkzeugPasswordHasher(
        method=app.config.get("PASSWORD_HASH_METHOD", "scrypt")
    )
    token_issuer: TokenIssuer = JWTTokenIssuer(
        access_ttl=app.config["JWT_ACCESS_TOKEN_EXPIRES"],
        refresh_ttl=app.config["REFRESH_TOKEN_EXPIRES"],
        refresh_token_bytes=int(app.config.get("REFRESH_TOKEN_BYTES", 64)),
    )
    app.extensions["password_hasher"] = password_hasher
    app.extensions["token_issuer"] = token_issuer
    app.extensions["session_ledger"] = build_session_ledger(app)


__all__ = ["init_app", "build_session_ledger"]
