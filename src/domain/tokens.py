"""
Session tokens - Signed, self-describing bearer credentials.

Tokens use the JWS compact serialization (header.payload.signature, each
segment base64url-encoded) signed with HMAC-SHA256 via python-jose.

Verification order matters:
1. The three segments and the header are parsed (MalformedError).
2. The signature is recomputed over "header.payload" and compared in
   constant time against the signature segment text (IntegrityError).
3. Only then is the payload decoded and any claim read.

Comparing the encoded signature text rather than decoded bytes means any
change to the signature segment, including the unused trailing bits of its
last base64 character, fails verification.

Timestamps (iat, exp) are integer seconds since the epoch. A token is
expired when now >= exp.

Verification is stateless: no database, no revocation list. Any instance
holding the signing key can verify a token; tokens cannot be revoked before
they expire.
"""

import hmac
import json
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import jwk, jwt
from jose.utils import base64url_decode, base64url_encode

from .exceptions import ExpiredError, IntegrityError, MalformedError
from .models import Principal

ALGORITHM = "HS256"
AUTHORITIES_CLAIM = "authorities"
FULL_NAME_CLAIM = "fullName"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionTokenCodec:
    """
    Encodes and verifies session tokens with an injected symmetric key.

    The key is supplied once at startup and never mutated; instances are
    safe to share across request handlers.
    """

    def __init__(
        self,
        signing_key: bytes,
        ttl: timedelta,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Args:
            signing_key: Raw HMAC key bytes (decoded from base64 configuration)
            ttl: Default session lifetime used by generate_token()
            clock: Returns the current time (timezone-aware UTC)
        """
        if not signing_key:
            raise ValueError("signing_key must not be empty")
        self._signing_key = signing_key
        self._hmac_key = jwk.construct(signing_key, ALGORITHM)
        self.ttl = ttl
        self._clock = clock

    def encode(
        self,
        subject: str,
        extra_claims: Mapping[str, Any],
        authorities: Iterable[str],
        issued_at: datetime,
        ttl: timedelta,
    ) -> str:
        """
        Build and sign a token.

        Reserved claims (sub, iat, exp, authorities) override any extra
        claim with the same name.
        """
        iat = int(issued_at.timestamp())
        claims = dict(extra_claims)
        claims["sub"] = subject
        claims["iat"] = iat
        claims["exp"] = iat + int(ttl.total_seconds())
        claims[AUTHORITIES_CLAIM] = list(authorities)
        return jwt.encode(claims, self._signing_key, algorithm=ALGORITHM)

    def decode(self, token: str) -> dict[str, Any]:
        """
        Verify the signature and return the claim set. Expiry is not checked.

        Raises:
            MalformedError: Token structure or payload cannot be parsed
            IntegrityError: Signature mismatch or unexpected algorithm
        """
        if not isinstance(token, str):
            raise MalformedError("Token must be a string")
        segments = token.split(".", 2)
        if len(segments) != 3:
            raise MalformedError("Token must have three segments")
        header_segment, payload_segment, signature_segment = segments

        try:
            header = json.loads(base64url_decode(header_segment.encode("ascii")))
            signing_input = f"{header_segment}.{payload_segment}".encode("ascii")
        except (ValueError, RecursionError):
            raise MalformedError("Token header cannot be decoded") from None
        if not isinstance(header, dict):
            raise MalformedError("Token header must be a JSON object")

        if header.get("alg") != ALGORITHM:
            raise IntegrityError("Unexpected signing algorithm")
        expected = base64url_encode(self._hmac_key.sign(signing_input))
        if not hmac.compare_digest(expected, signature_segment.encode("utf-8", "replace")):
            raise IntegrityError("Signature verification failed")

        try:
            claims = json.loads(base64url_decode(payload_segment.encode("ascii")))
        except (ValueError, RecursionError):
            raise MalformedError("Token payload cannot be decoded") from None
        if not isinstance(claims, dict):
            raise MalformedError("Token payload must be a JSON object")
        return claims

    def extract_claims(self, token: str) -> dict[str, Any]:
        """Decode and reject expired tokens."""
        claims = self.decode(token)
        if self._is_expired(claims):
            raise ExpiredError("Token has expired")
        return claims

    def extract_subject(self, token: str) -> str:
        """Return the subject of a verified, unexpired token."""
        subject = self.extract_claims(token).get("sub")
        if not isinstance(subject, str):
            raise MalformedError("Token has no subject")
        return subject

    def is_valid(self, token: str, expected_subject: str) -> bool:
        """
        True iff the token verifies, belongs to expected_subject and has
        not expired. Verification failures are reported as False.
        """
        try:
            claims = self.decode(token)
            expired = self._is_expired(claims)
        except (IntegrityError, MalformedError):
            return False
        return claims.get("sub") == expected_subject and not expired

    def generate_token(
        self, principal: Principal, extra_claims: Mapping[str, Any] | None = None
    ) -> str:
        """Issue a token for principal with the default lifetime."""
        return self.encode(
            subject=principal.email,
            extra_claims=extra_claims or {},
            authorities=principal.authorities,
            issued_at=self._clock(),
            ttl=self.ttl,
        )

    def _is_expired(self, claims: Mapping[str, Any]) -> bool:
        exp = claims.get("exp")
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            raise MalformedError("Token has no expiry")
        return self._clock().timestamp() >= exp
