"""
Shared fixtures for adversarial tests.

Provides a PostgreSQL pool and a fully wired AuthenticationService for
concurrency attack simulations.
"""

from collections.abc import Generator
from datetime import timedelta

import pytest
from psycopg_pool import ConnectionPool

from src.adapters.security.bcrypt_verifier import BcryptCredentialVerifier
from src.domain.authentication import AuthenticationService
from src.domain.tokens import SessionTokenCodec
from tests.conftest import ACTIVATION_URL, SIGNING_KEY
from tests.database import clean_tables, open_test_pool, unit_of_work_factory
from tests.fakes import RecordingNotificationGateway


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for adversarial tests (skips without a database)."""
    yield from open_test_pool(max_size=20)


@pytest.fixture(autouse=True)
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Clean principal and code tables before each test."""
    clean_tables(pool)
    yield


@pytest.fixture
def gateway() -> RecordingNotificationGateway:
    return RecordingNotificationGateway()


@pytest.fixture
def service(pool: ConnectionPool, gateway: RecordingNotificationGateway) -> AuthenticationService:
    """AuthenticationService backed by PostgreSQL with a recording gateway."""
    factory = unit_of_work_factory(pool)
    return AuthenticationService(
        unit_of_work=factory,
        credential_verifier=BcryptCredentialVerifier(factory),
        token_codec=SessionTokenCodec(SIGNING_KEY, timedelta(hours=24)),
        notification_gateway=gateway,
        activation_url=ACTIVATION_URL,
        bcrypt_cost=4,
    )
