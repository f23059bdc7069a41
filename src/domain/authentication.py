"""
Authentication domain service - Registration, login and account activation.

This module contains the core business logic of the account lifecycle.

Activation State Machine
========================

Principal:
    disabled --(successful activation)--> enabled   (never reversed here)

ActivationCode (derived from timestamps, never stored as a status):
    live     validated_at is NULL and now <= expires_at
    expired  validated_at is NULL and now >  expires_at
    consumed validated_at is set

activate(code) outcomes:
    CODE_NOT_FOUND          -> TokenNotFoundError
    CODE_CONSUMED           -> ActivationCodeConsumedError
    CODE_EXPIRED            -> new code issued and sent, then TokenExpiredError
    CODE_LIVE_AND_CURRENT   -> principal enabled + code consumed (one commit)

The code row is locked (SELECT FOR UPDATE) for the whole activation
transaction, so of two concurrent activations of the same code exactly one
enables the principal and the other observes the code as consumed.

Notification delivery happens after the commit. A failed send surfaces as
NotificationDeliveryError but does not roll back the account or the code.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

import bcrypt

from .activation import DEFAULT_ACTIVATION_WINDOW, issue_activation_code
from .exceptions import (
    ActivationCodeConsumedError,
    AuthenticationError,
    ExpiredError,
    IntegrityError,
    MalformedError,
    NotificationDeliveryError,
    PrincipalNotFoundError,
    TokenExpiredError,
    TokenNotFoundError,
)
from .models import ActivationCode, AuthenticationResult, NewRegistration, Principal
from .ports import CredentialVerifier, NotificationGateway, NotificationPurpose, UnitOfWork
from .tokens import FULL_NAME_CLAIM, SessionTokenCodec, utc_now

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "USER"
ACTIVATION_SUBJECT = "Account activation"
EXPIRED_CODE_MESSAGE = (
    "Activation code has expired. A new code has been sent to the same email address"
)


@dataclass
class AuthenticationService:
    """
    Domain service for the account lifecycle.

    Orchestrates the principal directory, the activation code store, the
    session token codec and the notification gateway.
    """

    unit_of_work: Callable[[], UnitOfWork]
    credential_verifier: CredentialVerifier
    token_codec: SessionTokenCodec
    notification_gateway: NotificationGateway
    activation_url: str
    activation_window: timedelta = DEFAULT_ACTIVATION_WINDOW
    default_role: str = DEFAULT_ROLE
    bcrypt_cost: int = 10
    clock: Callable[[], datetime] = utc_now

    def register(self, registration: NewRegistration) -> Principal:
        """
        Register a disabled principal and send its first activation code.

        Args:
            registration: Submitted registration fields

        Returns:
            The created (disabled) principal

        Raises:
            PrincipalAlreadyExistsError: If the email is already registered
            RoleNotConfiguredError: If the default role is missing
            NotificationDeliveryError: If the code could not be sent
                (the principal and code stay persisted)
        """
        email = self._normalize_email(registration.email)
        password_hash = self._hash_password(registration.password)
        now = self.clock()

        with self.unit_of_work() as uow:
            principal = uow.principals.create(
                email=email,
                password_hash=password_hash,
                firstname=registration.firstname,
                lastname=registration.lastname,
                role_name=self.default_role,
                date_of_birth=registration.date_of_birth,
            )
            activation_code = issue_activation_code(
                uow.activation_codes, principal, now, self.activation_window
            )
            uow.commit()

        logger.info("Registered principal id=%s", principal.id)
        self._send_activation_code(principal, activation_code)
        return principal

    def authenticate(self, email: str, password: str) -> AuthenticationResult:
        """
        Verify credentials and issue a session token.

        Raises:
            AuthenticationError: Wrong password, unknown email, disabled or
                locked account (deliberately not distinguished)
        """
        principal = self.credential_verifier.verify(self._normalize_email(email), password)
        if principal is None:
            logger.warning("Authentication rejected")
            raise AuthenticationError("Bad credentials")

        token = self.token_codec.generate_token(
            principal, {FULL_NAME_CLAIM: principal.full_name}
        )
        logger.info("Issued session token for principal id=%s", principal.id)
        return AuthenticationResult(token=token, principal=principal)

    def activate(self, code: str) -> Principal:
        """
        Consume an activation code and enable its principal.

        Raises:
            TokenNotFoundError: Unknown code
            ActivationCodeConsumedError: Code already used
            TokenExpiredError: Code expired; a new one was sent
            PrincipalNotFoundError: Owner vanished
        """
        now = self.clock()

        with self.unit_of_work() as uow:
            activation_code = uow.activation_codes.find_by_code(code, for_update=True)
            if activation_code is None:
                logger.warning("Activation rejected: unknown code")
                raise TokenNotFoundError("Invalid activation code")
            if activation_code.is_consumed:
                logger.warning("Activation rejected: code id=%s already used", activation_code.id)
                raise ActivationCodeConsumedError("Activation code has already been used")

            if not activation_code.is_expired(now):
                principal = uow.principals.find_by_id(activation_code.principal_id, for_update=True)
                if principal is None:
                    raise PrincipalNotFoundError("Principal not found")
                principal.enabled = True
                uow.principals.save(principal)
                uow.activation_codes.consume(activation_code, now)
                uow.commit()
                logger.info("Activated principal id=%s", principal.id)
                return principal

        # Expired codes are left as they are; expiry is always recomputed.
        logger.warning("Activation rejected: code id=%s expired", activation_code.id)
        self._reissue_for_id(activation_code.principal_id)
        raise TokenExpiredError(EXPIRED_CODE_MESSAGE)

    def resend_activation_code(self, email: str) -> Principal:
        """
        Issue and send a fresh code to a registered, not yet enabled principal.

        Raises:
            PrincipalNotFoundError: Unknown email or account already enabled
        """
        now = self.clock()
        with self.unit_of_work() as uow:
            principal = uow.principals.find_by_login_id(self._normalize_email(email))
            if principal is None or principal.enabled:
                raise PrincipalNotFoundError("No pending account for this email")
            activation_code = issue_activation_code(
                uow.activation_codes, principal, now, self.activation_window
            )
            uow.commit()

        self._send_activation_code(principal, activation_code)
        return principal

    def current_principal(self, token: str) -> Principal:
        """
        Resolve the caller behind a bearer token.

        Every failure is reported as AuthenticationError.
        """
        try:
            email = self.token_codec.extract_subject(token)
        except (IntegrityError, MalformedError, ExpiredError):
            raise AuthenticationError("Invalid session token") from None

        with self.unit_of_work() as uow:
            principal = uow.principals.find_by_login_id(email)

        if (
            principal is None
            or not principal.enabled
            or principal.account_locked
            or not self.token_codec.is_valid(token, principal.email)
        ):
            raise AuthenticationError("Invalid session token")
        return principal

    def _reissue_for_id(self, principal_id: int) -> None:
        now = self.clock()
        with self.unit_of_work() as uow:
            principal = uow.principals.find_by_id(principal_id)
            if principal is None:
                raise PrincipalNotFoundError("Principal not found")
            activation_code = issue_activation_code(
                uow.activation_codes, principal, now, self.activation_window
            )
            uow.commit()

        self._send_activation_code(principal, activation_code)

    def _send_activation_code(self, principal: Principal, activation_code: ActivationCode) -> None:
        try:
            self.notification_gateway.send(
                address=principal.email,
                display_name=principal.full_name,
                code=activation_code.code,
                purpose=NotificationPurpose.ACTIVATE_ACCOUNT,
                subject_line=ACTIVATION_SUBJECT,
                action_url=self.activation_url,
            )
        except NotificationDeliveryError:
            logger.error("Activation code delivery failed for principal id=%s", principal.id)
            raise

    def _normalize_email(self, email: str) -> str:
        """
        Normalize email address for consistent storage and lookup.

        Applies: strip whitespace + lowercase
        """
        return email.strip().lower()

    def _hash_password(self, password: str) -> str:
        """Hash password using bcrypt with the configured cost factor."""
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.bcrypt_cost)).decode()
