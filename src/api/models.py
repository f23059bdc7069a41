"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from datetime import date

from pydantic import BaseModel, EmailStr, Field, field_validator

# bcrypt only reads the first 72 bytes of a secret.
BCRYPT_MAX_PASSWORD_BYTES = 72


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
        raise ValueError(
            f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes when UTF-8 encoded"
        )
    return value


class RegistrationRequest(BaseModel):
    """Request model for user registration."""

    firstname: str = Field(..., min_length=1, max_length=255, description="First name")
    lastname: str = Field(..., min_length=1, max_length=255, description="Last name")
    email: EmailStr
    password: str = Field(
        ..., min_length=8, max_length=72, description="User password (8 characters, at most 72 UTF-8 bytes)"
    )
    date_of_birth: date | None = None

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class RegistrationResponse(BaseModel):
    """Response model for accepted registration."""

    message: str
    email: str


class AuthenticationRequest(BaseModel):
    """Request model for login."""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class AuthenticationResponse(BaseModel):
    """Response model carrying the session token."""

    token: str


class ActivationResponse(BaseModel):
    """Response model for successful activation."""

    message: str
    email: str


class ResendActivationRequest(BaseModel):
    """Request model for requesting a new activation code."""

    email: EmailStr


class PrincipalResponse(BaseModel):
    """Response model describing the authenticated caller."""

    id: int
    email: str
    full_name: str
    roles: list[str]


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
