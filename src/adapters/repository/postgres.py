"""
PostgreSQL repository adapter - Implements the persistence ports.

This module provides the PostgreSQL implementations of the domain's
PrincipalDirectory, ActivationCodeStore and UnitOfWork ports using
psycopg3 with raw SQL.

Transaction Design:
------------------
Repositories are bound to one connection supplied by PostgresUnitOfWork and
never commit themselves. The unit of work commits explicitly; leaving it
without commit() rolls back.

Activation relies on row-level locking: find_by_code(..., for_update=True)
issues SELECT ... FOR UPDATE, so a concurrent activation of the same code
blocks until the first transaction ends and then sees validated_at set.

Duplicate registrations are rejected by the UNIQUE constraint on
principals.email, surfaced as PrincipalAlreadyExistsError.
"""

import logging
from datetime import date, datetime
from pathlib import Path
from types import TracebackType

import psycopg
from psycopg import errors
from psycopg_pool import ConnectionPool

from src.domain.exceptions import PrincipalAlreadyExistsError, RoleNotConfiguredError
from src.domain.models import ActivationCode, Principal

logger = logging.getLogger(__name__)

_PRINCIPAL_COLUMNS = """
    id, email, password_hash, firstname, lastname, date_of_birth,
    enabled, account_locked, created_at, updated_at
"""

_ACTIVATION_CODE_COLUMNS = "id, code, principal_id, created_at, expires_at, validated_at"


class PostgresPrincipalDirectory:
    """
    Implements PrincipalDirectory protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, conn: psycopg.Connection) -> None:
        self._conn = conn

    def create(
        self,
        email: str,
        password_hash: str,
        firstname: str,
        lastname: str,
        role_name: str,
        date_of_birth: date | None = None,
    ) -> Principal:
        role_sql = "SELECT id FROM roles WHERE name = %s"
        insert_sql = """
            INSERT INTO principals (
                email, password_hash, firstname, lastname, date_of_birth,
                enabled, account_locked, created_at
            )
            VALUES (%s, %s, %s, %s, %s, FALSE, FALSE, NOW())
            RETURNING id, created_at
        """
        link_sql = "INSERT INTO principal_roles (principal_id, role_id) VALUES (%s, %s)"

        with self._conn.cursor() as cursor:
            cursor.execute(role_sql, (role_name,))
            role_row = cursor.fetchone()
            if role_row is None:
                raise RoleNotConfiguredError(f"Role {role_name} was not initialized")

            try:
                cursor.execute(
                    insert_sql, (email, password_hash, firstname, lastname, date_of_birth)
                )
            except errors.UniqueViolation:
                raise PrincipalAlreadyExistsError(email) from None
            principal_id, created_at = cursor.fetchone()
            cursor.execute(link_sql, (principal_id, role_row[0]))

        return Principal(
            id=principal_id,
            email=email,
            password_hash=password_hash,
            firstname=firstname,
            lastname=lastname,
            date_of_birth=date_of_birth,
            enabled=False,
            account_locked=False,
            roles=frozenset({role_name}),
            created_at=created_at,
        )

    def find_by_login_id(self, email: str) -> Principal | None:
        sql = f"SELECT {_PRINCIPAL_COLUMNS} FROM principals WHERE email = %s"
        return self._fetch_one(sql, (email,))

    def find_by_id(self, principal_id: int, for_update: bool = False) -> Principal | None:
        sql = f"SELECT {_PRINCIPAL_COLUMNS} FROM principals WHERE id = %s"
        if for_update:
            sql += " FOR UPDATE"
        return self._fetch_one(sql, (principal_id,))

    def save(self, principal: Principal) -> None:
        sql = """
            UPDATE principals
            SET firstname = %s,
                lastname = %s,
                enabled = %s,
                account_locked = %s,
                updated_at = NOW()
            WHERE id = %s
            RETURNING updated_at
        """
        with self._conn.cursor() as cursor:
            cursor.execute(
                sql,
                (
                    principal.firstname,
                    principal.lastname,
                    principal.enabled,
                    principal.account_locked,
                    principal.id,
                ),
            )
            row = cursor.fetchone()
        if row is not None:
            principal.updated_at = row[0]

    def _fetch_one(self, sql: str, params: tuple) -> Principal | None:
        roles_sql = """
            SELECT r.name
            FROM roles r
            JOIN principal_roles pr ON pr.role_id = r.id
            WHERE pr.principal_id = %s
        """
        with self._conn.cursor() as cursor:
            cursor.execute(sql, params)
            row = cursor.fetchone()
            if row is None:
                return None
            cursor.execute(roles_sql, (row[0],))
            roles = frozenset(name for (name,) in cursor.fetchall())

        (
            principal_id,
            email,
            password_hash,
            firstname,
            lastname,
            date_of_birth,
            enabled,
            account_locked,
            created_at,
            updated_at,
        ) = row
        return Principal(
            id=principal_id,
            email=email,
            password_hash=password_hash,
            firstname=firstname,
            lastname=lastname,
            date_of_birth=date_of_birth,
            enabled=enabled,
            account_locked=account_locked,
            roles=roles,
            created_at=created_at,
            updated_at=updated_at,
        )


class PostgresActivationCodeStore:
    """Implements ActivationCodeStore protocol via psycopg3."""

    def __init__(self, conn: psycopg.Connection) -> None:
        self._conn = conn

    def add(self, activation_code: ActivationCode) -> ActivationCode:
        sql = """
            INSERT INTO activation_codes (code, principal_id, created_at, expires_at, validated_at)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING id
        """
        with self._conn.cursor() as cursor:
            cursor.execute(
                sql,
                (
                    activation_code.code,
                    activation_code.principal_id,
                    activation_code.created_at,
                    activation_code.expires_at,
                    activation_code.validated_at,
                ),
            )
            activation_code.id = cursor.fetchone()[0]
        return activation_code

    def find_by_code(self, code: str, for_update: bool = False) -> ActivationCode | None:
        sql = f"""
            SELECT {_ACTIVATION_CODE_COLUMNS}
            FROM activation_codes
            WHERE code = %s
            ORDER BY created_at DESC, id DESC
            LIMIT 1
        """
        if for_update:
            sql += " FOR UPDATE"
        with self._conn.cursor() as cursor:
            cursor.execute(sql, (code,))
            row = cursor.fetchone()
        return self._to_activation_code(row) if row is not None else None

    def consume(self, activation_code: ActivationCode, validated_at: datetime) -> None:
        sql = "UPDATE activation_codes SET validated_at = %s WHERE id = %s"
        with self._conn.cursor() as cursor:
            cursor.execute(sql, (validated_at, activation_code.id))
        activation_code.validated_at = validated_at

    def list_for_principal(self, principal_id: int) -> list[ActivationCode]:
        sql = f"""
            SELECT {_ACTIVATION_CODE_COLUMNS}
            FROM activation_codes
            WHERE principal_id = %s
            ORDER BY created_at DESC, id DESC
        """
        with self._conn.cursor() as cursor:
            cursor.execute(sql, (principal_id,))
            rows = cursor.fetchall()
        return [self._to_activation_code(row) for row in rows]

    @staticmethod
    def _to_activation_code(row: tuple) -> ActivationCode:
        id_, code, principal_id, created_at, expires_at, validated_at = row
        return ActivationCode(
            id=id_,
            code=code,
            principal_id=principal_id,
            created_at=created_at,
            expires_at=expires_at,
            validated_at=validated_at,
        )


class PostgresUnitOfWork:
    """
    Implements UnitOfWork protocol on one pooled connection.

    Both repositories share the connection, so their writes commit or roll
    back together.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool
        self._conn_cm = None
        self._conn: psycopg.Connection | None = None
        self._committed = False

    def __enter__(self) -> "PostgresUnitOfWork":
        self._conn_cm = self._pool.connection()
        self._conn = self._conn_cm.__enter__()
        self.principals = PostgresPrincipalDirectory(self._conn)
        self.activation_codes = PostgresActivationCodeStore(self._conn)
        self._committed = False
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        try:
            if self._conn is not None and not self._committed:
                self._conn.rollback()
        finally:
            if self._conn_cm is not None:
                self._conn_cm.__exit__(exc_type, exc_value, traceback)
            self._conn = None
            self._conn_cm = None
            self._committed = False

    def commit(self) -> None:
        if self._conn is None:
            raise RuntimeError("No connection available to commit")
        self._conn.commit()
        self._committed = True


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            with pool.connection() as conn:
                conn.execute(sql_file.read_text())
        except psycopg.Error as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e

        logger.info("Migration complete: %s", sql_file.name)
