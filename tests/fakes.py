"""
In-memory port implementations for unit tests.

InMemoryDatabase mimics the PostgreSQL adapter closely enough for the
domain service: a unique email index, a role catalog, accumulating
activation codes, and transactions that only become visible on commit.
A single lock held for the whole unit of work stands in for row locks.
"""

import threading
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone

from src.domain.exceptions import (
    NotificationDeliveryError,
    PrincipalAlreadyExistsError,
    RoleNotConfiguredError,
)
from src.domain.models import ActivationCode, Principal
from src.domain.ports import NotificationPurpose


class InMemoryDatabase:
    def __init__(self, roles: tuple[str, ...] = ("USER", "ADMIN")) -> None:
        self.roles: set[str] = set(roles)
        self.principals: dict[int, Principal] = {}
        self.activation_codes: dict[int, ActivationCode] = {}
        self.lock = threading.RLock()
        self.commits = 0
        self._next_id = 1

    def next_id(self) -> int:
        value = self._next_id
        self._next_id += 1
        return value

    def codes_for(self, principal_id: int) -> list[ActivationCode]:
        return [c for c in self.activation_codes.values() if c.principal_id == principal_id]

    def principal_by_email(self, email: str) -> Principal | None:
        return next((p for p in self.principals.values() if p.email == email), None)


class InMemoryPrincipalDirectory:
    def __init__(self, db: InMemoryDatabase, staged: dict[int, Principal]) -> None:
        self._db = db
        self._staged = staged

    def _all(self) -> dict[int, Principal]:
        return {**self._db.principals, **self._staged}

    def create(
        self,
        email: str,
        password_hash: str,
        firstname: str,
        lastname: str,
        role_name: str,
        date_of_birth: date | None = None,
    ) -> Principal:
        if role_name not in self._db.roles:
            raise RoleNotConfiguredError(f"Role {role_name} was not initialized")
        if any(p.email == email for p in self._all().values()):
            raise PrincipalAlreadyExistsError(email)
        principal = Principal(
            id=self._db.next_id(),
            email=email,
            password_hash=password_hash,
            firstname=firstname,
            lastname=lastname,
            date_of_birth=date_of_birth,
            roles=frozenset({role_name}),
            created_at=datetime.now(timezone.utc),
        )
        self._staged[principal.id] = principal
        return replace(principal)

    def find_by_login_id(self, email: str) -> Principal | None:
        found = next((p for p in self._all().values() if p.email == email), None)
        return replace(found) if found is not None else None

    def find_by_id(self, principal_id: int, for_update: bool = False) -> Principal | None:
        found = self._all().get(principal_id)
        return replace(found) if found is not None else None

    def save(self, principal: Principal) -> None:
        principal.updated_at = datetime.now(timezone.utc)
        self._staged[principal.id] = replace(principal)


class InMemoryActivationCodeStore:
    def __init__(self, db: InMemoryDatabase, staged: dict[int, ActivationCode]) -> None:
        self._db = db
        self._staged = staged

    def _all(self) -> dict[int, ActivationCode]:
        return {**self._db.activation_codes, **self._staged}

    def add(self, activation_code: ActivationCode) -> ActivationCode:
        activation_code.id = self._db.next_id()
        self._staged[activation_code.id] = replace(activation_code)
        return activation_code

    def find_by_code(self, code: str, for_update: bool = False) -> ActivationCode | None:
        matches = [c for c in self._all().values() if c.code == code]
        if not matches:
            return None
        newest = max(matches, key=lambda c: (c.created_at, c.id))
        return replace(newest)

    def consume(self, activation_code: ActivationCode, validated_at: datetime) -> None:
        activation_code.validated_at = validated_at
        self._staged[activation_code.id] = replace(activation_code)

    def list_for_principal(self, principal_id: int) -> list[ActivationCode]:
        codes = [replace(c) for c in self._all().values() if c.principal_id == principal_id]
        return sorted(codes, key=lambda c: (c.created_at, c.id), reverse=True)


class InMemoryUnitOfWork:
    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db
        self.committed = False

    def __enter__(self) -> "InMemoryUnitOfWork":
        self._db.lock.acquire()
        self._staged_principals: dict[int, Principal] = {}
        self._staged_codes: dict[int, ActivationCode] = {}
        self.principals = InMemoryPrincipalDirectory(self._db, self._staged_principals)
        self.activation_codes = InMemoryActivationCodeStore(self._db, self._staged_codes)
        self.committed = False
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self._db.lock.release()

    def commit(self) -> None:
        self._db.principals.update(self._staged_principals)
        self._db.activation_codes.update(self._staged_codes)
        self._staged_principals.clear()
        self._staged_codes.clear()
        self._db.commits += 1
        self.committed = True


class RecordingNotificationGateway:
    def __init__(self) -> None:
        self.sent: list[dict] = []

    def send(
        self,
        address: str,
        display_name: str,
        code: str,
        purpose: NotificationPurpose,
        subject_line: str,
        action_url: str | None = None,
    ) -> None:
        self.sent.append(
            {
                "address": address,
                "display_name": display_name,
                "code": code,
                "purpose": purpose,
                "subject_line": subject_line,
                "action_url": action_url,
            }
        )


class FailingNotificationGateway(RecordingNotificationGateway):
    def send(self, *args, **kwargs) -> None:
        super().send(*args, **kwargs)
        raise NotificationDeliveryError("SMTP relay unavailable")


class FakeClock:
    """Controllable clock returning timezone-aware UTC datetimes."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)
