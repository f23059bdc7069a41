"""Repository adapters - Database implementations."""

from .postgres import (
    PostgresActivationCodeStore,
    PostgresPrincipalDirectory,
    PostgresUnitOfWork,
    run_migrations,
)

__all__ = [
    "PostgresActivationCodeStore",
    "PostgresPrincipalDirectory",
    "PostgresUnitOfWork",
    "run_migrations",
]
