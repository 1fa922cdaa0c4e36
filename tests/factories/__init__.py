"""Factory Boy setup for test data generation."""

from __future__ import annotations

import factory
from faker import Faker

from enclave.infra.security import WerkzeugPasswordHasher

faker = Faker()
Faker.seed(1234)

# Cheap hash so fixtures stay fast; matches TestingConfig.PASSWORD_HASH_METHOD
TEST_PASSWORD_METHOD = "pbkdf2:sha256:1000"
DEFAULT_PASSWORD = "password123"
TEST_HASHER = WerkzeugPasswordHasher(method=TEST_PASSWORD_METHOD)


class SQLAlchemyFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Base factory for SQLAlchemy models.

    Rows are committed so a service whose unit of work rolls back never
    takes the fixtures down with it.
    """

    class Meta:
        abstract = True
        sqlalchemy_session_persistence = "commit"
