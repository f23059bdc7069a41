"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from datetime import date, datetime
from enum import Enum
from types import TracebackType
from typing import Protocol

from .models import ActivationCode, Principal


class NotificationPurpose(str, Enum):
    """Template selector for outbound notifications."""

    ACTIVATE_ACCOUNT = "activate_account"


class PrincipalDirectory(Protocol):
    """Port interface for principal persistence."""

    def create(
        self,
        email: str,
        password_hash: str,
        firstname: str,
        lastname: str,
        role_name: str,
        date_of_birth: date | None = None,
    ) -> Principal:
        """
        Persist a new disabled, unlocked principal holding one role.

        Args:
            email: Normalized email address (unique)
            password_hash: bcrypt hash of the password
            firstname: Given name
            lastname: Family name
            role_name: Role to assign, must exist in the role catalog
            date_of_birth: Optional birth date

        Returns:
            The stored Principal with its generated id

        Raises:
            RoleNotConfiguredError: If role_name is not in the role catalog
            PrincipalAlreadyExistsError: If the email is already registered
        """
        ...

    def find_by_login_id(self, email: str) -> Principal | None:
        """Return the principal registered under email, or None."""
        ...

    def find_by_id(self, principal_id: int, for_update: bool = False) -> Principal | None:
        """Return the principal with this id, or None. Optionally row-locked."""
        ...

    def save(self, principal: Principal) -> None:
        """Persist mutable fields (enabled, account_locked, names)."""
        ...


class ActivationCodeStore(Protocol):
    """Port interface for activation code persistence."""

    def add(self, activation_code: ActivationCode) -> ActivationCode:
        """Persist a new activation code row and return it with its id."""
        ...

    def find_by_code(self, code: str, for_update: bool = False) -> ActivationCode | None:
        """
        Exact-match lookup by code value.

        Codes are not unique across principals or time; the most recently
        issued match wins. With for_update=True the row is locked until the
        surrounding transaction ends.
        """
        ...

    def consume(self, activation_code: ActivationCode, validated_at: datetime) -> None:
        """Set the validation timestamp on the code."""
        ...

    def list_for_principal(self, principal_id: int) -> list[ActivationCode]:
        """Issuance history for a principal, newest first."""
        ...


class UnitOfWork(Protocol):
    """
    Transaction boundary shared by the directory and the code store.

    Usage:
        with uow_factory() as uow:
            principal = uow.principals.create(...)
            uow.activation_codes.add(...)
            uow.commit()

    Leaving the block without commit() rolls back.
    """

    principals: PrincipalDirectory
    activation_codes: ActivationCodeStore

    def __enter__(self) -> "UnitOfWork": ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None: ...

    def commit(self) -> None: ...


class CredentialVerifier(Protocol):
    """Port interface for the login credential check."""

    def verify(self, email: str, password: str) -> Principal | None:
        """
        Return the principal if the password matches and the account is
        enabled and unlocked, otherwise None.

        Implementations must not reveal which of those checks failed.
        """
        ...


class NotificationGateway(Protocol):
    """Port interface for activation message delivery."""

    def send(
        self,
        address: str,
        display_name: str,
        code: str,
        purpose: NotificationPurpose,
        subject_line: str,
        action_url: str | None = None,
    ) -> None:
        """
        Deliver a code to an address.

        Args:
            address: Recipient email address
            display_name: Recipient display name
            code: Activation code
            purpose: Template selector
            subject_line: Message subject
            action_url: Landing page the recipient should open (passed through)

        Raises:
            NotificationDeliveryError: If the message could not be delivered
        """
        ...
