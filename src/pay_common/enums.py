"""Global enums — must match DB CHECK constraints exactly.

Ref: alembic/versions/004_create_payment_methods.py
"""

from enum import Enum


class PaymentMethodType(str, Enum):
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    BANK_ACCOUNT = "BANK_ACCOUNT"
    DIGITAL_WALLET = "DIGITAL_WALLET"
    OTHER = "OTHER"


class CacheStatus(str, Enum):
    """Outcome of a cache call. DEGRADED means the backend was unreachable."""

    HIT = "HIT"
    MISS = "MISS"
    OK = "OK"
    DEGRADED = "DEGRADED"
