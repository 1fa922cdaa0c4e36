"""Environment-driven settings for the enclave service."""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Final

from dotenv import load_dotenv

# Selects the configuration class ('development' | 'testing' | 'production')
ENV_VAR: Final[str] = "APP_ENV"

# Loads a local .env when present
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    :param name: Environment variable to inspect.
    :param default: Value returned when the variable is unset.
    :returns: ``True`` for ``{"1", "true", "yes", "y", "on"}`` (any case).
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from the environment, falling back to ``default``."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


class BaseConfig:
    """Settings shared by every environment.

    Attributes
    ----------
    JWT_ACCESS_TOKEN_EXPIRES: timedelta
        Lifetime of signed access tokens (15 minutes unless overridden).
    REFRESH_TOKEN_EXPIRES: timedelta
        Lifetime of opaque refresh tokens (7 days unless overridden).
    REFRESH_TOKEN_BYTES: int
        Entropy, in bytes, drawn for each refresh token.
    AUTH_REVOKE_ON_REUSE: bool
        When ``True`` presenting an already rotated refresh token revokes
        every live session of its owner.
    PASSWORD_HASH_METHOD: str
        Method string handed to :func:`werkzeug.security.generate_password_hash`.
    SESSION_LEDGER_BACKEND: str
        ``"sql"`` stores refresh sessions in the database, ``"redis"`` in Redis.
    INVITE_DEFAULT_EXPIRY_DAYS: int
        Expiry applied to invites created without an explicit lifetime.
    """

    API_BASE_PREFIX = os.getenv("API_BASE_PREFIX", "/api")

    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME_enclave_development_secret")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_enclave_development_jwt_key")

    # Tokens
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=env_int("JWT_ACCESS_TOKEN_EXPIRES_MINUTES", 15))
    REFRESH_TOKEN_EXPIRES = timedelta(days=env_int("REFRESH_TOKEN_EXPIRES_DAYS", 7))
    REFRESH_TOKEN_BYTES = env_int("REFRESH_TOKEN_BYTES", 64)
    AUTH_REVOKE_ON_REUSE = env_bool("AUTH_REVOKE_ON_REUSE", True)
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")

    # Session ledger
    SESSION_LEDGER_BACKEND = os.getenv("SESSION_LEDGER_BACKEND", "sql")
    REDIS_URL = os.getenv("REDIS_URL")

    # Communities
    INVITE_DEFAULT_EXPIRY_DAYS = env_int("INVITE_DEFAULT_EXPIRY_DAYS", 7)

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./enclave.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Local development: debug on, CORS preflight cached for ten minutes."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    CORS_MAX_AGE = 600


class TestingConfig(BaseConfig):
    """Configuration for the pytest suite.

    Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set and
    a cheap password hash so fixtures stay fast.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    PROPAGATE_EXCEPTIONS = True
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    SESSION_LEDGER_BACKEND = "sql"
    REDIS_URL = None
    JWT_SECRET_KEY = "enclave-testing-jwt-secret-key-with-enough-entropy"
    LOG_LEVEL = "WARNING"


class ProductionConfig(BaseConfig):
    """Production defaults; secrets must come from the environment."""

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class named by ``APP_ENV``.

    Unknown or missing names fall back to :class:`DevelopmentConfig`.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
