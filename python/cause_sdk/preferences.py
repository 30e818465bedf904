"""
Location: python/cause_sdk/preferences.py

Summary:
    Typed vendor preference budgets. A vendor assigns each token a signed
    fiat budget: positive budgets fund discounts for customers paying with
    that token, negative budgets charge a premium. Budgets are consumed
    toward zero as payments complete and are never replenished.

Usage:
    Stored documents are validated once with VendorPreferences.from_document()
    and then looked up with resolve_preference(). Keys are canonicalised to
    upper case, so a token is found by symbol or name regardless of case.

Example:
    from cause_sdk.preferences import VendorPreferences, resolve_preference

    prefs = VendorPreferences.from_document({"btc": 100.0, "Ethereum": -25})
    resolve_preference(prefs, "BTC", "Bitcoin")    # 100.0
    resolve_preference(prefs, "ETH", "ethereum")   # -25.0
"""

import math
from typing import Any, Iterable, Iterator, Mapping, Optional

from .types import DiscountConsumption


def canonical_key(key: str) -> str:
    """Canonical form of a preference key: stripped and upper-cased."""
    return key.strip().upper()


class VendorPreferences(Mapping[str, float]):
    """
    Immutable mapping from canonical token key to signed fiat budget.

    Behaves like a read-only dict. Use consume() to get an updated
    snapshot after a payment.
    """

    def __init__(self, budgets: Optional[Mapping[str, float]] = None):
        self._budgets: dict[str, float] = {}
        for key, value in (budgets or {}).items():
            self._budgets[canonical_key(key)] = float(value)

    @classmethod
    def from_document(cls, document: Optional[Mapping[str, Any]]) -> "VendorPreferences":
        """
        Validate a raw preference document from the store.

        When two raw keys collide after canonicalisation ("BTC" and "btc"),
        a key already in canonical form wins, otherwise the first one seen.

        Args:
            document: Raw mapping of token symbol or name to budget

        Returns:
            A VendorPreferences snapshot

        Raises:
            PreferenceError: If a key is empty or a value is not a finite number
        """
        budgets: dict[str, float] = {}
        exact: set[str] = set()

        for raw_key, raw_value in (document or {}).items():
            if not isinstance(raw_key, str) or not raw_key.strip():
                raise PreferenceError(f"Invalid preference key: {raw_key!r}")
            if isinstance(raw_value, bool) or not isinstance(raw_value, (int, float)):
                raise PreferenceError(
                    f"Preference for {raw_key!r} must be a number, got {type(raw_value).__name__}"
                )
            value = float(raw_value)
            if not math.isfinite(value):
                raise PreferenceError(f"Preference for {raw_key!r} must be finite")

            key = canonical_key(raw_key)
            is_exact = raw_key == key
            if key in budgets and (key in exact or not is_exact):
                continue
            budgets[key] = value
            if is_exact:
                exact.add(key)

        return cls(budgets)

    def __getitem__(self, key: str) -> float:
        return self._budgets[canonical_key(key)]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and canonical_key(key) in self._budgets

    def __iter__(self) -> Iterator[str]:
        return iter(self._budgets)

    def __len__(self) -> int:
        return len(self._budgets)

    def __repr__(self) -> str:
        return f"VendorPreferences({self._budgets!r})"

    def to_document(self) -> dict[str, float]:
        """Plain dict for persistence."""
        return dict(self._budgets)

    def consume(self, consumptions: Iterable[DiscountConsumption]) -> "VendorPreferences":
        """
        Apply a completed payment's discount consumption.

        Each budget moves toward zero by the amount used and never crosses
        it: a discount budget of 100 that granted 30 becomes 70, a premium
        budget of -50 that charged 20 (amount_used -20) becomes -30.
        Tokens without a stored budget are left alone.

        Args:
            consumptions: Discount consumption of the completed payment

        Returns:
            A new VendorPreferences snapshot
        """
        budgets = dict(self._budgets)
        for consumption in consumptions:
            key = canonical_key(consumption.preference_key or consumption.symbol)
            if key not in budgets or consumption.amount_used == 0:
                continue
            current = budgets[key]
            remaining = current - consumption.amount_used
            if current > 0:
                budgets[key] = max(remaining, 0.0)
            elif current < 0:
                budgets[key] = min(remaining, 0.0)
        return VendorPreferences(budgets)


def preference_key(
    prefs: Mapping[str, float],
    symbol: str,
    name: Optional[str] = None,
) -> Optional[str]:
    """Canonical key of the budget a token draws from: its symbol, else its name."""
    for key in (symbol, name):
        if key and canonical_key(key) in prefs:
            return canonical_key(key)
    return None


def resolve_preference(
    prefs: Mapping[str, float],
    symbol: str,
    name: Optional[str] = None,
) -> Optional[float]:
    """
    Look up a token's budget by symbol, then by name.

    Args:
        prefs: A VendorPreferences snapshot
        symbol: Token symbol
        name: Optional token name

    Returns:
        The signed budget, or None if the vendor has none for this token
    """
    key = preference_key(prefs, symbol, name)
    return None if key is None else prefs[key]


class PreferenceError(ValueError):
    """Exception raised when a preference document fails validation."""
    pass
