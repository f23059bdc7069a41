"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core business logic for account registration,
session tokens and activation codes. It defines its own port interfaces
for infrastructure abstraction, keeping web and database frameworks out.
"""

from .authentication import AuthenticationService
from .exceptions import (
    ActivationCodeConsumedError,
    AuthenticationError,
    AuthError,
    ErrorKind,
    ExpiredError,
    IntegrityError,
    MalformedError,
    NotificationDeliveryError,
    PrincipalAlreadyExistsError,
    PrincipalNotFoundError,
    RoleNotConfiguredError,
    TokenExpiredError,
    TokenNotFoundError,
)
from .models import ActivationCode, AuthenticationResult, NewRegistration, Principal
from .ports import (
    ActivationCodeStore,
    CredentialVerifier,
    NotificationGateway,
    NotificationPurpose,
    PrincipalDirectory,
    UnitOfWork,
)
from .tokens import SessionTokenCodec

__all__ = [
    "ActivationCode",
    "ActivationCodeConsumedError",
    "ActivationCodeStore",
    "AuthError",
    "AuthenticationError",
    "AuthenticationResult",
    "AuthenticationService",
    "CredentialVerifier",
    "ErrorKind",
    "ExpiredError",
    "IntegrityError",
    "MalformedError",
    "NewRegistration",
    "NotificationDeliveryError",
    "NotificationGateway",
    "NotificationPurpose",
    "Principal",
    "PrincipalAlreadyExistsError",
    "PrincipalDirectory",
    "PrincipalNotFoundError",
    "RoleNotConfiguredError",
    "SessionTokenCodec",
    "TokenExpiredError",
    "TokenNotFoundError",
    "UnitOfWork",
]
