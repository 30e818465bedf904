"""
Location: python/cause_sdk/lifecycle.py

Summary:
    Payment state machine and payment codes.

Usage:
    Used by service.py. Payment codes are short Crockford base32 strings
    that customers type in by hand, so lookups normalise the letters people
    commonly confuse with digits.
"""

import secrets

from .types import PaymentStatus

CROCKFORD_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
PAYMENT_CODE_LENGTH = 5

_NEXT_STATUS = {
    PaymentStatus.CREATED: PaymentStatus.CUSTOMER_ASSIGNED,
    PaymentStatus.CUSTOMER_ASSIGNED: PaymentStatus.CALCULATED,
    PaymentStatus.CALCULATED: PaymentStatus.COMPLETED,
}

_AMBIGUOUS = str.maketrans({"O": "0", "I": "1", "L": "1"})


def advance_status(current: PaymentStatus, target: PaymentStatus) -> PaymentStatus:
    """
    Validate a status transition.

    Args:
        current: Status the payment is in
        target: Requested status

    Returns:
        target, if the transition is allowed

    Raises:
        InvalidTransitionError: On regressions, skipped steps, or any move
                                out of Completed or Failed
    """
    if current in (PaymentStatus.COMPLETED, PaymentStatus.FAILED):
        raise InvalidTransitionError(current, target)
    if target == PaymentStatus.FAILED or _NEXT_STATUS.get(current) == target:
        return target
    raise InvalidTransitionError(current, target)


def can_cancel(status: PaymentStatus) -> bool:
    """A payment may be cancelled until it completes."""
    return status != PaymentStatus.COMPLETED


def generate_payment_code() -> str:
    """Random 5-character Crockford base32 code (24 bits of entropy)."""
    value = secrets.randbits(24)
    chars = []
    for _ in range(PAYMENT_CODE_LENGTH):
        chars.append(CROCKFORD_ALPHABET[value & 0x1F])
        value >>= 5
    return "".join(reversed(chars))


def normalize_payment_code(code: str) -> str:
    """Upper-case a code and map O -> 0 and I, L -> 1."""
    return code.strip().upper().translate(_AMBIGUOUS)


class InvalidTransitionError(Exception):
    """
    Exception raised for a disallowed payment status change.

    Attributes:
        current: Status the payment was in
        target: Status that was requested
    """

    def __init__(self, current: PaymentStatus, target: PaymentStatus):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move payment from {current.value} to {target.value}")
