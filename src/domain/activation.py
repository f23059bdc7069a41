"""
Activation codes - Generation and issuance policy.

Codes are 6 ASCII digits drawn from a CSPRNG, valid for a fixed window.
Uniqueness is not enforced at issuance: two principals, or one principal
over time, may receive the same code value.
"""

import secrets
from datetime import datetime, timedelta

from .models import ActivationCode, Principal
from .ports import ActivationCodeStore

ACTIVATION_CODE_LENGTH = 6
ACTIVATION_CODE_ALPHABET = "0123456789"
DEFAULT_ACTIVATION_WINDOW = timedelta(minutes=15)


def generate_activation_code(length: int = ACTIVATION_CODE_LENGTH) -> str:
    """
    Generate a numeric activation code.

    Each position is drawn independently and uniformly from 0-9.
    Returns a string to preserve leading zeros.
    """
    return "".join(secrets.choice(ACTIVATION_CODE_ALPHABET) for _ in range(length))


def issue_activation_code(
    store: ActivationCodeStore,
    principal: Principal,
    now: datetime,
    window: timedelta = DEFAULT_ACTIVATION_WINDOW,
) -> ActivationCode:
    """
    Generate and persist a new live code for principal.

    The caller owns the transaction; nothing is committed here.
    """
    if principal.id is None:
        raise ValueError("principal must be persisted before issuing a code")
    activation_code = ActivationCode(
        code=generate_activation_code(),
        principal_id=principal.id,
        created_at=now,
        expires_at=now + window,
    )
    return store.add(activation_code)
