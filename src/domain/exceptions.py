"""
Domain exceptions - Semantic error types for authentication and activation.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.

Every exception carries an ErrorKind tag: a coarse category callers can
test without importing every class. A subclass keeps its parent's kind, so
a consumed activation code is still NOT_FOUND. The HTTP routes map failures
to status codes by concrete class.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Category of a domain failure."""

    INTEGRITY = "integrity"
    MALFORMED = "malformed"
    EXPIRED = "expired"
    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    CONFIGURATION = "configuration"
    DELIVERY = "delivery"


class AuthError(Exception):
    """Base class for authentication domain errors."""

    kind: ErrorKind


class IntegrityError(AuthError):
    """Session token signature does not match (tampered or foreign key)."""

    kind = ErrorKind.INTEGRITY


class MalformedError(AuthError):
    """Session token cannot be parsed."""

    kind = ErrorKind.MALFORMED


class ExpiredError(AuthError):
    """Session token or activation code is past its expiry instant."""

    kind = ErrorKind.EXPIRED


class TokenExpiredError(ExpiredError):
    """Activation code expired; a replacement code has already been sent."""

    pass


class AuthenticationError(AuthError):
    """Bad credentials, disabled account, or locked account (undifferentiated)."""

    kind = ErrorKind.AUTHENTICATION


class TokenNotFoundError(AuthError):
    """No activation code matches the submitted value."""

    kind = ErrorKind.NOT_FOUND


class ActivationCodeConsumedError(TokenNotFoundError):
    """Activation code was already used."""

    pass


class PrincipalNotFoundError(AuthError):
    """No principal matches the lookup criteria."""

    kind = ErrorKind.NOT_FOUND


class PrincipalAlreadyExistsError(AuthError):
    """Email is already registered."""

    kind = ErrorKind.CONFLICT


class RoleNotConfiguredError(AuthError):
    """Role is missing from the role catalog (deployment misconfiguration)."""

    kind = ErrorKind.CONFIGURATION


class NotificationDeliveryError(AuthError):
    """Outbound notification could not be delivered."""

    kind = ErrorKind.DELIVERY
