"""
Location: python/cause_sdk/market.py

Summary:
    Market price estimation from completed payments. Every completed
    payment leaves one TransactionRecord per token paid; a token's market
    price is the time-decayed, volume-weighted average of the effective
    valuations in its most recent records.

Usage:
    Used by service.py once a payment completes:

        records = build_transaction_records(code, final, initial)
        ...persist records...
        price = estimate_market_price(select_recent(all_records, token_key))
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from .config import DEFAULT_MARKET_WINDOW
from .types import TokenPayment, TokenValuation, TransactionRecord

logger = logging.getLogger("cause_sdk.market")

# Effective valuation when nothing better is known
NEUTRAL_VALUATION = 1.0


def build_transaction_records(
    payment_id: str,
    final_bundle: Sequence[TokenPayment],
    initial_bundle: Optional[Sequence[TokenPayment]] = None,
    vendor_valuations: Optional[Sequence[TokenValuation]] = None,
    now: Optional[datetime] = None,
) -> list[TransactionRecord]:
    """
    Build one transaction record per token of a completed payment.

    The effective valuation is final / initial token amount when the
    pre-discount bundle is known. Without it the vendor valuation for the
    symbol is used, and failing that a neutral 1.0.

    Args:
        payment_id: Payment code
        final_bundle: Bundle actually transferred
        initial_bundle: Bundle before discounts, if recorded
        vendor_valuations: Vendor valuations, if recorded
        now: Timestamp for the records (defaults to current UTC time)

    Returns:
        Records in bundle order
    """
    timestamp = now or datetime.now(timezone.utc)
    initial_by_key = {p.token_key: p for p in initial_bundle or ()}
    vendor_by_symbol = {v.symbol: v.valuation for v in vendor_valuations or ()}

    records = []
    for payment in final_bundle:
        effective = None
        if initial_bundle is not None:
            initial = initial_by_key.get(payment.token_key)
            if initial is not None and initial.amount_to_pay > 0:
                effective = payment.amount_to_pay / initial.amount_to_pay
        elif payment.symbol in vendor_by_symbol:
            effective = vendor_by_symbol[payment.symbol]

        records.append(TransactionRecord(
            token_key=payment.token_key,
            symbol=payment.symbol,
            amount_paid=payment.amount_to_pay,
            effective_valuation=NEUTRAL_VALUATION if effective is None else effective,
            timestamp=timestamp,
            payment_id=payment_id,
        ))
    return records


def select_recent(
    records: Iterable[TransactionRecord],
    token_key: str,
    limit: int = DEFAULT_MARKET_WINDOW,
) -> list[TransactionRecord]:
    """Records for one token, newest first, at most `limit` of them."""
    matching = [r for r in records if r.token_key == token_key]
    matching.sort(key=lambda r: r.timestamp, reverse=True)
    return matching[:limit]


def estimate_market_price(
    records: Sequence[TransactionRecord],
    window: int = DEFAULT_MARKET_WINDOW,
) -> float:
    """
    Linearly time-decayed, volume-weighted average effective valuation.

    Record i (newest = 0) is weighted by (window - i) / window times its
    amount paid. Records past the window are ignored.

    Args:
        records: Recent records for one token, newest first
        window: Window size N

    Returns:
        The new market price

    Raises:
        NoMarketDataError: If there are no records
        DegenerateWeightingError: If the weighted volume is zero
    """
    if not records:
        raise NoMarketDataError("No transaction records found for token")

    weighted_sum = 0.0
    weight_sum = 0.0
    for i, record in enumerate(records[:window]):
        weight = (window - i) / window
        weighted_sum += record.effective_valuation * record.amount_paid * weight
        weight_sum += record.amount_paid * weight

    if weight_sum == 0:
        raise DegenerateWeightingError("Zero weight sum in market price calculation")

    price = weighted_sum / weight_sum
    logger.info("Calculated weighted market price %s from %d records", price, len(records))
    return price


class MarketPriceError(Exception):
    """Base exception for market price estimation failures."""
    pass


class NoMarketDataError(MarketPriceError):
    """Exception raised when a token has no transaction history."""
    pass


class DegenerateWeightingError(MarketPriceError):
    """Exception raised when every record in the window has zero volume."""
    pass
