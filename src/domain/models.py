"""
Domain models - Principals and activation codes.

Plain dataclasses shared by the domain service, the ports and the adapters.
"""

from dataclasses import dataclass, field
from datetime import date, datetime


@dataclass
class Principal:
    """
    A registered account capable of authenticating.

    Created disabled by registration; enabled only by a successful
    activation. Roles hold role names (e.g. "USER"), which become the
    authorities carried in session tokens.
    """

    email: str
    password_hash: str = field(repr=False)
    firstname: str
    lastname: str
    id: int | None = None
    date_of_birth: date | None = None
    enabled: bool = False
    account_locked: bool = False
    roles: frozenset[str] = field(default_factory=frozenset)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.firstname} {self.lastname}".strip()

    @property
    def authorities(self) -> list[str]:
        return sorted(self.roles)


@dataclass
class ActivationCode:
    """
    One issuance of a single-use activation code.

    Lifecycle is derived from timestamps only:
    - live: validated_at is None
    - expired: live and now is after expires_at
    - consumed: validated_at is set
    """

    code: str
    principal_id: int
    created_at: datetime
    expires_at: datetime
    id: int | None = None
    validated_at: datetime | None = None

    @property
    def is_live(self) -> bool:
        return self.validated_at is None

    @property
    def is_consumed(self) -> bool:
        return self.validated_at is not None

    def is_expired(self, now: datetime) -> bool:
        return self.is_live and now > self.expires_at


@dataclass(frozen=True)
class NewRegistration:
    """Fields submitted at registration (already format-validated by the API)."""

    firstname: str
    lastname: str
    email: str
    password: str = field(repr=False)
    date_of_birth: date | None = None


@dataclass(frozen=True)
class AuthenticationResult:
    """Outcome of a successful login."""

    token: str
    principal: Principal
