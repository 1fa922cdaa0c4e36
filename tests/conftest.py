"""Global pytest fixtures for the enclave API and services."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

import pytest
from flask import Flask

from enclave import create_app
from enclave.core.config import TestingConfig
from enclave.core.extensions import db as _db
from enclave.infra.security import WerkzeugPasswordHasher
from enclave.models.user import User
from enclave.services._shared.ports import StubTokenIssuer

from tests.factories import TEST_PASSWORD_METHOD
from tests.factories.user import UserFactory
from tests.helpers.auth import expired_token, issue_token


@pytest.fixture(scope="session")
def app() -> Generator[Flask, None, None]:
    """Create the application once for the whole test session."""

    application = create_app(TestingConfig)
    yield application


@pytest.fixture()
def db(app: Flask) -> Generator[Any, None, None]:
    """Push an app context with a fresh in-memory schema for one test."""

    with app.app_context():
        _db.create_all()
        try:
            yield _db
        finally:
            _db.session.remove()
            _db.drop_all()


@pytest.fixture()
def session(db: Any) -> Any:
    """Scoped session shared by factories, services and the test client."""

    return db.session


@pytest.fixture()
def client(app: Flask, db: Any) -> Any:
    """Flask test client running inside the test's app context."""

    return app.test_client()


@pytest.fixture()
def hasher() -> WerkzeugPasswordHasher:
    return WerkzeugPasswordHasher(method=TEST_PASSWORD_METHOD)


@pytest.fixture()
def token_issuer() -> StubTokenIssuer:
    return StubTokenIssuer()


@pytest.fixture()
def user(db: Any) -> User:
    """Persist and return a user whose password is ``password123``."""

    return UserFactory()


@pytest.fixture()
def auth_header(user: User) -> dict[str, str]:
    """Authorization header for ``user``."""

    return {"Authorization": f"Bearer {issue_token(user.id)}"}


@pytest.fixture()
def expired_auth_header(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {expired_token(user.id)}"}
