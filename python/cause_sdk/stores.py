"""
Location: python/cause_sdk/stores.py

Summary:
    Persistence protocols used by PaymentService, with in-memory
    implementations for development and testing.

Usage:
    Production deployments implement these protocols over their database
    (documents keyed by payment code, wallet address, token key and cause
    symbol). Tests and single-process demos use the Memory* classes.

Example:
    from cause_sdk.stores import MemoryPaymentStore, MemoryPreferenceStore

    payments = MemoryPaymentStore()
    await payments.save(payment)
    payment = await payments.get("7KQ2M")
"""

from typing import Iterable, Optional, Protocol

from .market import select_recent
from .preferences import VendorPreferences
from .types import Cause, DepositRecord, Payment, TransactionRecord


class PaymentStore(Protocol):
    """Protocol for payment persistence, keyed by payment code."""

    async def get(self, payment_id: str) -> Optional[Payment]:
        """Return the payment, or None if unknown."""
        ...

    async def save(self, payment: Payment) -> None:
        """Insert or replace a payment."""
        ...

    async def delete(self, payment_id: str) -> bool:
        """Delete a payment. Returns False if it did not exist."""
        ...


class PreferenceStore(Protocol):
    """Protocol for vendor preference budgets, keyed by wallet address."""

    async def get_preferences(self, wallet_address: str) -> VendorPreferences:
        """
        Get a vendor's budgets.

        Args:
            wallet_address: Vendor wallet

        Returns:
            The vendor's budgets (empty if none were set)
        """
        ...

    async def set_preferences(self, wallet_address: str, prefs: VendorPreferences) -> None:
        """Replace a vendor's budgets."""
        ...


class TransactionStore(Protocol):
    """Protocol for write-once transaction records."""

    async def add_records(self, records: Iterable[TransactionRecord]) -> None:
        """Append transaction records."""
        ...

    async def recent_for_token(self, token_key: str, limit: int) -> list[TransactionRecord]:
        """
        Get a token's most recent records.

        Args:
            token_key: Token identifier
            limit: Maximum number of records

        Returns:
            Records, newest first
        """
        ...


class TokenPriceStore(Protocol):
    """Protocol for persisted token market prices."""

    async def get_market_price(self, token_key: str) -> Optional[float]:
        """Return the stored market price, or None."""
        ...

    async def set_market_price(self, token_key: str, price: float) -> None:
        """Store a token's market price."""
        ...


class CauseStore(Protocol):
    """Protocol for cause bonding curve state and deposit history."""

    async def get_cause(self, token_symbol: str) -> Optional[Cause]:
        """Return the cause issuing this token, or None."""
        ...

    async def save_cause(self, cause: Cause) -> None:
        """Insert or replace a cause."""
        ...

    async def add_deposit(self, record: DepositRecord) -> None:
        """Append a deposit record."""
        ...


class MemoryPaymentStore:
    """
    In-memory payment store.

    WARNING: Data is lost when the process restarts.
    """

    def __init__(self):
        self._payments: dict[str, Payment] = {}

    async def get(self, payment_id: str) -> Optional[Payment]:
        payment = self._payments.get(payment_id)
        return payment.model_copy(deep=True) if payment else None

    async def save(self, payment: Payment) -> None:
        self._payments[payment.payment_id] = payment.model_copy(deep=True)

    async def delete(self, payment_id: str) -> bool:
        return self._payments.pop(payment_id, None) is not None

    def __len__(self) -> int:
        return len(self._payments)


class MemoryPreferenceStore:
    """In-memory vendor preference store."""

    def __init__(self):
        self._prefs: dict[str, VendorPreferences] = {}

    async def get_preferences(self, wallet_address: str) -> VendorPreferences:
        return self._prefs.get(wallet_address, VendorPreferences())

    async def set_preferences(self, wallet_address: str, prefs: VendorPreferences) -> None:
        self._prefs[wallet_address] = prefs


class MemoryTransactionStore:
    """In-memory transaction record store."""

    def __init__(self):
        self._records: list[TransactionRecord] = []

    async def add_records(self, records: Iterable[TransactionRecord]) -> None:
        self._records.extend(records)

    async def recent_for_token(self, token_key: str, limit: int) -> list[TransactionRecord]:
        return select_recent(self._records, token_key, limit)

    def __len__(self) -> int:
        return len(self._records)


class MemoryTokenPriceStore:
    """In-memory market price store."""

    def __init__(self, prices: Optional[dict[str, float]] = None):
        self._prices: dict[str, float] = dict(prices or {})

    async def get_market_price(self, token_key: str) -> Optional[float]:
        return self._prices.get(token_key)

    async def set_market_price(self, token_key: str, price: float) -> None:
        self._prices[token_key] = price


class MemoryCauseStore:
    """In-memory cause store."""

    def __init__(self):
        self._causes: dict[str, Cause] = {}
        self.deposits: list[DepositRecord] = []

    async def get_cause(self, token_symbol: str) -> Optional[Cause]:
        cause = self._causes.get(token_symbol)
        return cause.model_copy() if cause else None

    async def save_cause(self, cause: Cause) -> None:
        self._causes[cause.token_symbol] = cause.model_copy()

    async def add_deposit(self, record: DepositRecord) -> None:
        self.deposits.append(record)
