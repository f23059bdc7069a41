"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- In-memory persistence and unit-of-work factories
- Recording notification gateways and a controllable clock
- A session token codec and a fully wired AuthenticationService
"""

from collections.abc import Callable
from datetime import timedelta

import pytest

from src.adapters.security.bcrypt_verifier import BcryptCredentialVerifier
from src.domain.authentication import AuthenticationService
from src.domain.tokens import SessionTokenCodec
from tests.fakes import (
    FakeClock,
    InMemoryDatabase,
    InMemoryUnitOfWork,
    RecordingNotificationGateway,
)

SIGNING_KEY = b"unit-test-signing-key-with-at-least-32-bytes!!"
ACTIVATION_URL = "http://localhost:4200/activate-account"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def codec(clock: FakeClock) -> SessionTokenCodec:
    return SessionTokenCodec(signing_key=SIGNING_KEY, ttl=timedelta(hours=24), clock=clock)


@pytest.fixture
def database() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def uow_factory(database: InMemoryDatabase) -> Callable[[], InMemoryUnitOfWork]:
    return lambda: InMemoryUnitOfWork(database)


@pytest.fixture
def gateway() -> RecordingNotificationGateway:
    return RecordingNotificationGateway()


@pytest.fixture
def service(
    uow_factory: Callable[[], InMemoryUnitOfWork],
    codec: SessionTokenCodec,
    gateway: RecordingNotificationGateway,
    clock: FakeClock,
) -> AuthenticationService:
    """AuthenticationService wired to in-memory fakes (bcrypt cost 4 for speed)."""
    return AuthenticationService(
        unit_of_work=uow_factory,
        credential_verifier=BcryptCredentialVerifier(uow_factory),
        token_codec=codec,
        notification_gateway=gateway,
        activation_url=ACTIVATION_URL,
        bcrypt_cost=4,
        clock=clock,
    )
