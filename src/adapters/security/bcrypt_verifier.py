"""
bcrypt credential verifier - Implements CredentialVerifier protocol.

Security Design - Timing Oracle Prevention:
------------------------------------------
1. **bcrypt.checkpw()**: Always runs, even for unknown emails. Unknown
   accounts are checked against _DUMMY_BCRYPT_HASH so response time does not
   reveal whether an email is registered.

2. **Uniform failure**: Unknown email, wrong password, disabled account and
   locked account all return None. The caller cannot tell them apart.

3. **Gating after comparison**: enabled/locked checks happen only after the
   password comparison has run.
"""

import logging
from collections.abc import Callable

import bcrypt

from src.domain.models import Principal
from src.domain.ports import UnitOfWork

logger = logging.getLogger(__name__)

# Pre-computed bcrypt hash for timing oracle prevention.
_DUMMY_BCRYPT_HASH = bcrypt.hashpw(b"dummy_password_for_timing_safety", bcrypt.gensalt(10)).decode()


class BcryptCredentialVerifier:
    """
    Implements CredentialVerifier protocol against the principal directory.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, unit_of_work: Callable[[], UnitOfWork]) -> None:
        self._unit_of_work = unit_of_work

    def verify(self, email: str, password: str) -> Principal | None:
        with self._unit_of_work() as uow:
            principal = uow.principals.find_by_login_id(email)

        stored_hash = principal.password_hash if principal is not None else _DUMMY_BCRYPT_HASH
        password_valid = _check_password(password, stored_hash)

        if principal is None or not password_valid:
            return None
        if not principal.enabled or principal.account_locked:
            logger.debug("Login refused for inactive principal id=%s", principal.id)
            return None
        return principal


def _check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        # Stored value is not a bcrypt hash
        return False
