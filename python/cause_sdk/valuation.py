"""
Location: python/cause_sdk/valuation.py

Summary:
    Vendor valuation engine. Turns a vendor's preference budgets and a
    customer's wallet into per-token valuations and per-token discount
    (or premium) consumption for one payment.

Usage:
    First step of a quote, see service.py. The consumption it returns is
    applied to the bundle by bundle.apply_discounts().
"""

import logging
from typing import Mapping, Sequence

from .config import DEFAULT_LAMBDA_CAP
from .preferences import preference_key
from .types import DiscountConsumption, TokenBalance, TokenValuation

logger = logging.getLogger("cause_sdk.valuation")


def portfolio_value(balances: Sequence[TokenBalance]) -> float:
    """Total market value of a wallet."""
    return sum(b.value for b in balances)


def calculate_vendor_valuations(
    preferences: Mapping[str, float],
    balances: Sequence[TokenBalance],
    payment_amount: float,
    lambda_cap: float = DEFAULT_LAMBDA_CAP,
) -> tuple[list[TokenValuation], list[DiscountConsumption]]:
    """
    Compute vendor valuations and discount consumption for a payment.

    Each token's share of the payment is proportional to its share of the
    wallet's market value. A vendor preference may alter at most
    lambda_cap of that share, and never more than the remaining budget.
    Valuations are the market valuations; the vendor's preference acts
    only through the consumption figures.

    Args:
        preferences: Vendor budgets (VendorPreferences or any mapping of
                     canonical key to budget)
        balances: Customer wallet snapshot
        payment_amount: Price of the payment in dollars
        lambda_cap: Maximum alterable fraction of a token's payment share

    Returns:
        (valuations, consumptions), one entry per balance in input order.
        Both lists are empty if the wallet holds no value.
    """
    total_value = portfolio_value(balances)
    if total_value <= 0:
        logger.info("Wallet has no market value, skipping vendor valuations")
        return [], []

    valuations: list[TokenValuation] = []
    consumptions: list[DiscountConsumption] = []

    for token in balances:
        share = token.value / total_value
        token_payment_value = payment_amount * share
        max_consumable = lambda_cap * token_payment_value

        key = preference_key(preferences, token.symbol, token.name)
        preference = preferences[key] if key is not None else 0.0
        if preference > 0:
            amount_used = min(max_consumable, preference)
        elif preference < 0:
            amount_used = -min(max_consumable, abs(preference))
        else:
            amount_used = 0.0

        logger.debug(
            "Token %s: share=%.6f preference=%s amount_used=%s",
            token.symbol, share, preference, amount_used,
        )

        valuations.append(TokenValuation(
            token_key=token.token_key,
            symbol=token.symbol,
            valuation=token.average_valuation,
        ))
        consumptions.append(DiscountConsumption(
            token_key=token.token_key,
            symbol=token.symbol,
            amount_used=amount_used,
            preference_key=key,
        ))

    return valuations, consumptions
