"""Unit tests for environment-driven configuration."""

from __future__ import annotations

from enclave.core.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    env_bool,
    env_int,
    get_config,
)


def test_get_config_follows_app_env(monkeypatch) -> None:
    monkeypatch.setenv("APP_ENV", "production")
    assert get_config() is ProductionConfig
    monkeypatch.setenv("APP_ENV", "Testing ")
    assert get_config() is TestingConfig
    monkeypatch.setenv("APP_ENV", "unknown")
    assert get_config() is DevelopmentConfig


def test_env_helpers(monkeypatch) -> None:
    monkeypatch.setenv("FLAG", "Yes")
    monkeypatch.setenv("NUMBER", "42")
    monkeypatch.setenv("BLANK", "  ")
    assert env_bool("FLAG") is True
    assert env_bool("MISSING_FLAG", default=True) is True
    assert env_int("NUMBER", 1) == 42
    assert env_int("BLANK", 7) == 7


def test_testing_defaults() -> None:
    assert TestingConfig.SQLALCHEMY_DATABASE_URI.startswith("sqlite")
    assert TestingConfig.SESSION_LEDGER_BACKEND == "sql"
    assert TestingConfig.REFRESH_TOKEN_EXPIRES.days == 7
    assert TestingConfig.JWT_ACCESS_TOKEN_EXPIRES.total_seconds() == 15 * 60
