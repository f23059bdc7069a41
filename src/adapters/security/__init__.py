"""Security adapters - Credential verification."""

from .bcrypt_verifier import BcryptCredentialVerifier

__all__ = ["BcryptCredentialVerifier"]
