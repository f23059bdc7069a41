"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes,
plus the builders used once at startup.
"""

from collections.abc import Callable
from datetime import timedelta
from functools import partial

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import PostgresUnitOfWork
from src.adapters.security.bcrypt_verifier import BcryptCredentialVerifier
from src.adapters.smtp.console import ConsoleNotificationGateway
from src.adapters.smtp.mailer import SmtpNotificationGateway
from src.config.settings import Settings, get_settings
from src.domain.authentication import AuthenticationService
from src.domain.exceptions import AuthenticationError
from src.domain.models import Principal
from src.domain.ports import NotificationGateway, UnitOfWork
from src.domain.tokens import SessionTokenCodec


def build_token_codec(settings: Settings) -> SessionTokenCodec:
    """Create the token codec from configuration (called once at startup)."""
    return SessionTokenCodec(
        signing_key=settings.jwt_signing_key,
        ttl=timedelta(seconds=settings.jwt_expiration_seconds),
    )


def build_notification_gateway(settings: Settings) -> NotificationGateway:
    """Select the notification transport configured by MAIL_BACKEND."""
    if settings.mail_backend == "smtp":
        return SmtpNotificationGateway(
            host=settings.smtp_host,
            port=settings.smtp_port,
            sender=settings.mail_from,
            username=settings.smtp_username,
            password=settings.smtp_password,
            code_ttl_minutes=settings.activation_code_ttl_minutes,
        )
    return ConsoleNotificationGateway()


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_unit_of_work_factory(request: Request) -> Callable[[], UnitOfWork]:
    """Return a factory producing one unit of work per call."""
    return partial(PostgresUnitOfWork, get_pool(request))


def get_token_codec(request: Request) -> SessionTokenCodec:
    """Get the startup-built token codec from app state."""
    return request.app.state.token_codec


def get_notification_gateway(request: Request) -> NotificationGateway:
    """Get the startup-built notification gateway from app state."""
    return request.app.state.notification_gateway


def get_authentication_service(request: Request) -> AuthenticationService:
    """
    Create authentication service with injected dependencies.

    Wires together the unit of work, credential verifier, token codec
    and notification gateway for the domain service.
    """
    settings = get_settings()
    unit_of_work = get_unit_of_work_factory(request)
    return AuthenticationService(
        unit_of_work=unit_of_work,
        credential_verifier=BcryptCredentialVerifier(unit_of_work),
        token_codec=get_token_codec(request),
        notification_gateway=get_notification_gateway(request),
        activation_url=settings.activation_url,
        activation_window=timedelta(minutes=settings.activation_code_ttl_minutes),
        default_role=settings.default_role,
        bcrypt_cost=settings.bcrypt_cost,
    )


# Bearer security scheme for OpenAPI documentation
http_bearer = HTTPBearer(auto_error=False)


def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    service: AuthenticationService = Depends(get_authentication_service),
) -> Principal:
    """
    Resolve the caller from the Authorization: Bearer header.

    Missing, malformed, tampered, expired and foreign tokens all produce
    the same 401 response.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return service.current_principal(credentials.credentials)
    except AuthenticationError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
