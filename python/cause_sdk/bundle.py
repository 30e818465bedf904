"""
Location: python/cause_sdk/bundle.py

Summary:
    Payment bundle computation. Splits a fiat price across the tokens of a
    customer's wallet in proportion to their value, applies the vendor's
    discounts and premiums to that split, and verifies that the adjusted
    bundle is still affordable.

Usage:
    Used by service.py after valuation.calculate_vendor_valuations():

        bundle = calculate_payment_bundle(balances, valuations, price)
        final = [p.model_copy() for p in bundle]
        apply_discounts(final, consumptions, balances)
        actual_cost = verify_affordability(final, balances, price)

    All failures are InsufficientFundsError subclasses. Each one carries
    the figures behind it; end users should only ever see public_message.
"""

import logging
import math
from typing import Sequence

from .types import DiscountConsumption, TokenBalance, TokenPayment, TokenValuation

logger = logging.getLogger("cause_sdk.bundle")

# Relative tolerance when comparing computed amounts against balances
REL_TOLERANCE = 1e-9


def _exceeds(amount: float, limit: float) -> bool:
    return amount > limit and not math.isclose(amount, limit, rel_tol=REL_TOLERANCE)


def _valuation_for(balance: TokenBalance, valuations: Sequence[TokenValuation]) -> float:
    for valuation in valuations:
        if valuation.symbol == balance.symbol:
            return valuation.valuation
    return balance.average_valuation


def wallet_value(
    balances: Sequence[TokenBalance],
    valuations: Sequence[TokenValuation] = (),
) -> float:
    """
    Value of a wallet, using vendor valuations where given.

    Args:
        balances: Customer wallet snapshot
        valuations: Vendor valuations, matched by symbol; tokens without
                    one are valued at their market valuation

    Returns:
        Total fiat value
    """
    return sum(b.balance * _valuation_for(b, valuations) for b in balances)


def check_portfolio_value(
    balances: Sequence[TokenBalance],
    valuations: Sequence[TokenValuation],
    price: float,
) -> float:
    """
    Check that a wallet can cover a price at all.

    Args:
        balances: Customer wallet snapshot
        valuations: Vendor valuations (may be empty)
        price: Price in dollars

    Returns:
        The wallet value

    Raises:
        ZeroPortfolioValueError: If the wallet holds nothing of value
        InsufficientPortfolioValueError: If the wallet is worth less than price
    """
    total = wallet_value(balances, valuations)
    if total <= 0:
        raise ZeroPortfolioValueError()
    if _exceeds(price, total):
        raise InsufficientPortfolioValueError(total, price)
    return total


def calculate_payment_bundle(
    balances: Sequence[TokenBalance],
    valuations: Sequence[TokenValuation],
    price: float,
) -> list[TokenPayment]:
    """
    Split a price across a wallet in proportion to value.

    Each token pays price * (its value / wallet value), converted back to
    token units at the same valuation. Tokens with zero balance are left
    out; tokens with zero valuation appear with amount 0.

    Args:
        balances: Customer wallet snapshot, in the order to check
        valuations: Vendor valuations matched by symbol; empty means
                    market valuations throughout
        price: Price in dollars

    Returns:
        The pre-discount bundle

    Raises:
        ZeroPortfolioValueError: If the wallet holds nothing of value
        InsufficientTokenBalanceError: For the first token whose share
                                       exceeds its balance
    """
    priced = [(b, _valuation_for(b, valuations)) for b in balances]
    total_value = sum(b.balance * v for b, v in priced)
    if total_value <= 0:
        raise ZeroPortfolioValueError()

    payments: list[TokenPayment] = []
    for balance, valuation in priced:
        if balance.balance == 0:
            continue

        weight = balance.balance * valuation / total_value
        payment_value = price * weight
        tokens_to_pay = payment_value / valuation if valuation > 0 else 0.0

        if _exceeds(tokens_to_pay, balance.balance):
            raise InsufficientTokenBalanceError(balance.symbol, tokens_to_pay, balance.balance)

        payments.append(TokenPayment(
            token_key=balance.token_key,
            symbol=balance.symbol,
            amount_to_pay=min(tokens_to_pay, balance.balance),
            token_image_url=balance.token_image_url,
        ))

    return payments


def apply_discounts(
    bundle: list[TokenPayment],
    consumptions: Sequence[DiscountConsumption],
    balances: Sequence[TokenBalance],
) -> None:
    """
    Apply discount/premium consumption to a bundle in place.

    The fiat amount used is converted to token units at the token's market
    valuation and subtracted, so discounts lower the tokens owed and
    premiums (negative amounts) raise them. Results are clamped at zero.

    Args:
        bundle: Bundle to adjust
        consumptions: Consumption from calculate_vendor_valuations()
        balances: Wallet snapshot, for market valuations
    """
    by_key = {c.token_key: c for c in consumptions}
    market = {b.token_key: b.average_valuation for b in balances}

    for payment in bundle:
        consumption = by_key.get(payment.token_key)
        if consumption is None or consumption.amount_used == 0:
            continue
        valuation = market.get(payment.token_key, 0.0)
        if valuation <= 0:
            continue

        token_discount = consumption.amount_used / valuation
        adjusted = max(payment.amount_to_pay - token_discount, 0.0)
        logger.debug(
            "Adjusted %s from %s to %s (%+.6f fiat)",
            payment.symbol, payment.amount_to_pay, adjusted, -consumption.amount_used,
        )
        payment.amount_to_pay = adjusted


def verify_affordability(
    bundle: Sequence[TokenPayment],
    balances: Sequence[TokenBalance],
    price: float,
) -> float:
    """
    Verify that an adjusted bundle can be paid and return its real cost.

    Premiums applied after the quote can push the bundle above what the
    wallet holds; this is the last check before a bundle is signed.

    Args:
        bundle: Final, post-discount bundle
        balances: Wallet snapshot
        price: Originally requested price (for messages only)

    Returns:
        Market value of the bundle, the authoritative charge

    Raises:
        InsufficientFundsAfterAdjustmentError: If the bundle costs more
                                               than the wallet is worth
        InsufficientTokenBalanceError: If a token's amount exceeds its balance
    """
    by_key = {b.token_key: b for b in balances}

    actual_cost = 0.0
    for payment in bundle:
        balance = by_key.get(payment.token_key)
        valuation = balance.average_valuation if balance else 0.0
        actual_cost += payment.amount_to_pay * valuation

    total_value = sum(b.value for b in balances)
    if _exceeds(actual_cost, total_value):
        raise InsufficientFundsAfterAdjustmentError(actual_cost, total_value, price)

    for payment in bundle:
        balance = by_key.get(payment.token_key)
        held = balance.balance if balance else 0.0
        if _exceeds(payment.amount_to_pay, held):
            raise InsufficientTokenBalanceError(payment.symbol, payment.amount_to_pay, held)

    logger.info("Bundle verified: price $%.2f, actual cost $%.2f", price, actual_cost)
    return actual_cost


class BundleError(Exception):
    """Base exception for bundle computation failures."""
    pass


class InsufficientFundsError(BundleError):
    """
    Exception raised when a wallet cannot pay for a bundle.

    All subclasses collapse to the same message for end users.
    """
    public_message = "Insufficient funds"


class ZeroPortfolioValueError(InsufficientFundsError):
    """Exception raised when a wallet holds nothing of value."""

    def __init__(self):
        super().__init__("Portfolio has no value from vendor's perspective")


class InsufficientPortfolioValueError(InsufficientFundsError):
    """
    Exception raised when a wallet is worth less than the price.

    Attributes:
        portfolio_value: Wallet value
        price: Requested price
    """

    def __init__(self, portfolio_value: float, price: float):
        self.portfolio_value = portfolio_value
        self.price = price
        super().__init__(
            f"Insufficient funds: Portfolio value ${portfolio_value:.2f} < Payment ${price:.2f}"
        )


class InsufficientTokenBalanceError(InsufficientFundsError):
    """
    Exception raised when one token's share exceeds its balance.

    Attributes:
        symbol: Token that falls short
        needed: Token units required
        have: Token units held
    """

    def __init__(self, symbol: str, needed: float, have: float):
        self.symbol = symbol
        self.needed = needed
        self.have = have
        super().__init__(f"Insufficient {symbol}: need {needed:.6f} but have {have:.6f}")

    @property
    def shortfall(self) -> float:
        """Token units missing."""
        return self.needed - self.have


class InsufficientFundsAfterAdjustmentError(InsufficientFundsError):
    """
    Exception raised when premiums push a bundle above the wallet's value.

    Attributes:
        actual_cost: Market value of the adjusted bundle
        portfolio_value: Wallet value
        price: Originally requested price
    """

    def __init__(self, actual_cost: float, portfolio_value: float, price: float):
        self.actual_cost = actual_cost
        self.portfolio_value = portfolio_value
        self.price = price
        super().__init__(
            f"Insufficient funds after vendor adjustments: cost ${actual_cost:.2f} "
            f"exceeds portfolio value ${portfolio_value:.2f} (price ${price:.2f})"
        )
