"""
API v1 routes.

Defines REST endpoints for registration, login and account activation.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.api.dependencies import get_authentication_service, get_current_principal
from src.api.models import (
    ActivationResponse,
    AuthenticationRequest,
    AuthenticationResponse,
    ErrorResponse,
    PrincipalResponse,
    RegistrationRequest,
    RegistrationResponse,
    ResendActivationRequest,
)
from src.domain.authentication import AuthenticationService
from src.domain.exceptions import (
    AuthenticationError,
    NotificationDeliveryError,
    PrincipalAlreadyExistsError,
    PrincipalNotFoundError,
    RoleNotConfiguredError,
    TokenExpiredError,
    TokenNotFoundError,
)
from src.domain.models import NewRegistration, Principal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["v1"])


@router.post(
    "/register",
    response_model=RegistrationResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses={
        409: {"model": ErrorResponse, "description": "Email already registered"},
        502: {"model": ErrorResponse, "description": "Activation email not delivered"},
        422: {"description": "Validation error"},
    },
    summary="Register a new user",
    description="Create a disabled account. "
    "A 6-digit activation code is sent to the provided email.",
)
def register(
    request_data: RegistrationRequest,
    service: AuthenticationService = Depends(get_authentication_service),
) -> RegistrationResponse:
    """
    Register a new user and send an activation code.

    - **firstname** / **lastname**: Display name parts
    - **email**: Valid email address to register
    - **password**: Password (8 to 72 characters)
    """
    registration = NewRegistration(
        firstname=request_data.firstname,
        lastname=request_data.lastname,
        email=request_data.email,
        password=request_data.password,
        date_of_birth=request_data.date_of_birth,
    )
    try:
        principal = service.register(registration)
    except PrincipalAlreadyExistsError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Registration failed",
        ) from None
    except NotificationDeliveryError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Account created but the activation email could not be sent",
        ) from None
    except RoleNotConfiguredError:
        logger.error("Default role is missing from the role catalog")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Registration is unavailable",
        ) from None
    return RegistrationResponse(message="Activation code sent", email=principal.email)


@router.post(
    "/authenticate",
    response_model=AuthenticationResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        422: {"description": "Validation error"},
    },
    summary="Log in",
    description="Exchange email and password for a signed session token.",
)
def authenticate(
    request_data: AuthenticationRequest,
    service: AuthenticationService = Depends(get_authentication_service),
) -> AuthenticationResponse:
    """Authenticate and return a bearer token."""
    try:
        result = service.authenticate(request_data.email, request_data.password)
    except AuthenticationError:
        # Same response for unknown email, wrong password, disabled or locked
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        ) from None
    return AuthenticationResponse(token=result.token)


@router.get(
    "/activate-account",
    response_model=ActivationResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Unknown or already used code"},
        410: {"model": ErrorResponse, "description": "Expired code, a new one was sent"},
        502: {"model": ErrorResponse, "description": "New code not delivered"},
        422: {"description": "Validation error"},
    },
    summary="Activate account with activation code",
    description="Submit the 6-digit activation code received via email.",
)
def activate_account(
    token: str = Query(..., pattern=r"^\d{6}$", description="6-digit activation code"),
    service: AuthenticationService = Depends(get_authentication_service),
) -> ActivationResponse:
    """Enable the account that owns the activation code."""
    try:
        principal = service.activate(token)
    except TokenExpiredError as e:
        raise HTTPException(status_code=status.HTTP_410_GONE, detail=str(e)) from None
    except (TokenNotFoundError, PrincipalNotFoundError):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invalid activation code",
        ) from None
    except NotificationDeliveryError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Activation code has expired and a new one could not be sent",
        ) from None
    return ActivationResponse(message="Account activated", email=principal.email)


@router.post(
    "/resend-activation",
    response_model=RegistrationResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses={
        404: {"model": ErrorResponse, "description": "No pending account"},
        502: {"model": ErrorResponse, "description": "Activation email not delivered"},
        422: {"description": "Validation error"},
    },
    summary="Send a new activation code",
)
def resend_activation(
    request_data: ResendActivationRequest,
    service: AuthenticationService = Depends(get_authentication_service),
) -> RegistrationResponse:
    """Issue a fresh activation code for a registered, not yet enabled account."""
    try:
        principal = service.resend_activation_code(request_data.email)
    except PrincipalNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No pending account",
        ) from None
    except NotificationDeliveryError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Activation email could not be sent",
        ) from None
    return RegistrationResponse(message="Activation code sent", email=principal.email)


@router.get(
    "/me",
    response_model=PrincipalResponse,
    responses={401: {"model": ErrorResponse, "description": "Unauthorized"}},
    summary="Describe the authenticated caller",
)
def me(principal: Principal = Depends(get_current_principal)) -> PrincipalResponse:
    """Return the principal behind the bearer token."""
    return PrincipalResponse(
        id=principal.id,
        email=principal.email,
        full_name=principal.full_name,
        roles=principal.authorities,
    )
