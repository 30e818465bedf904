"""
Location: python/cause_sdk/deposit.py

Summary:
    Converts a fiat deposit, as reported by the payment processor in
    cents, into newly minted cause tokens on the bonding curve, split
    between the depositor and the platform.

Usage:
    Used by PaymentService.credit_deposit(). Pure computation: the caller
    persists the new supply and performs the transfers.

Example:
    from cause_sdk.bonding_curve import BondingCurve
    from cause_sdk.deposit import quote_deposit

    quote = quote_deposit(10000, tokens_purchased=0.0, curve=BondingCurve())
    quote.user_tokens, quote.platform_tokens
"""

import logging
import math

from .bonding_curve import BondingCurve
from .config import DEFAULT_PLATFORM_FEE_RATE
from .types import MintQuote

logger = logging.getLogger("cause_sdk.deposit")

# Symbol of the stable-value token minted one-per-cent, bypassing the curve
STABLE_SYMBOL = "USD"


def _round_half_up(value: float) -> int:
    """Round a non-negative amount to the nearest integer, halves up."""
    return math.floor(value + 0.5)


def quote_deposit(
    amount_cents: int,
    tokens_purchased: float,
    curve: BondingCurve,
    fee_rate: float = DEFAULT_PLATFORM_FEE_RATE,
    token_symbol: str = "",
    is_topup: bool = False,
) -> MintQuote:
    """
    Quote the tokens minted for a deposit.

    The platform keeps fee_rate of the cash. The rest buys tokens on the
    curve from the cause's current supply; of the tokens minted the
    platform receives fee_rate / (1 - fee_rate), which is worth the same
    as the cash fee at the average price. Fractional amounts round half
    up.

    A top-up is a stable token deposit that is not a donation: every cent
    is credited to the depositor as one token, with no fee and no split.

    Args:
        amount_cents: Deposit in cents, as delivered by the processor
        tokens_purchased: Cause's cumulative supply before this deposit
        curve: The cause's bonding curve
        fee_rate: Platform fee rate
        token_symbol: Token symbol; the stable token bypasses the curve
        is_topup: Credit a stable token top-up at par without fees

    Returns:
        A MintQuote

    Raises:
        ValueError: If amount_cents is negative, or a top-up is requested
                    for a token other than the stable token
    """
    if amount_cents < 0:
        raise ValueError("Amount must be positive")

    if is_topup:
        if token_symbol.upper() != STABLE_SYMBOL:
            raise ValueError(f"Only {STABLE_SYMBOL} deposits can be top-ups, got {token_symbol!r}")
        logger.info("Top-up of %d cents credited at par", amount_cents)
        return MintQuote(
            amount_cents=amount_cents,
            platform_fee_cents=0,
            cause_amount_usd=0.0,
            tokens_minted=amount_cents,
            user_tokens=amount_cents,
            platform_tokens=0,
            new_tokens_purchased=tokens_purchased + amount_cents,
            new_price=1.0,
        )

    platform_fee_cents = _round_half_up(amount_cents * fee_rate)
    cause_cents = amount_cents - platform_fee_cents
    cause_amount_usd = cause_cents / 100.0

    if token_symbol.upper() == STABLE_SYMBOL:
        minted = float(cause_cents)
        new_supply = tokens_purchased + minted
        new_price = 1.0
    else:
        minted = curve.tokens_for_amount(cause_amount_usd, tokens_purchased)
        new_supply = tokens_purchased + minted
        new_price = curve.price(new_supply)

    tokens_minted = _round_half_up(minted)
    platform_tokens = _round_half_up(tokens_minted * fee_rate / (1 - fee_rate))
    user_tokens = tokens_minted - platform_tokens

    logger.info(
        "Deposit of %d cents: %d tokens minted (%d user, %d platform), new price %s",
        amount_cents, tokens_minted, user_tokens, platform_tokens, new_price,
    )

    return MintQuote(
        amount_cents=amount_cents,
        platform_fee_cents=platform_fee_cents,
        cause_amount_usd=cause_amount_usd,
        tokens_minted=tokens_minted,
        user_tokens=user_tokens,
        platform_tokens=platform_tokens,
        new_tokens_purchased=new_supply,
        new_price=new_price,
    )
