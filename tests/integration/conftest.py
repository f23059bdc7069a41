"""
Shared fixtures for integration tests against PostgreSQL.
"""

from collections.abc import Generator

import pytest
from psycopg_pool import ConnectionPool

from tests.database import clean_tables, open_test_pool


@pytest.fixture(scope="session")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for integration tests (skips without a database)."""
    yield from open_test_pool()


@pytest.fixture(autouse=True)
def clean_database(request: pytest.FixtureRequest) -> Generator[None, None, None]:
    """Clean principal and code tables before each database test."""
    if "pool" in request.fixturenames:
        clean_tables(request.getfixturevalue("pool"))
    yield
