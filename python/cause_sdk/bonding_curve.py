"""
Location: python/cause_sdk/bonding_curve.py

Summary:
    Linear bonding curve used to mint cause tokens from fiat deposits.
    The marginal price grows linearly with cumulative supply, so the cost
    of a purchase is quadratic in the number of tokens bought.

Usage:
    Used by deposit.py to convert a deposit into newly minted tokens.
    All amounts are in major currency units (dollars); callers holding
    cents must divide by 100 first.

Example:
    from cause_sdk.bonding_curve import BondingCurve

    curve = BondingCurve()
    tokens = curve.tokens_for_amount(95.0, current_tokens_purchased=0.0)
    price_after = curve.price(tokens)
"""

import logging
import math

from pydantic import BaseModel, Field

logger = logging.getLogger("cause_sdk.bonding_curve")


class BondingCurve(BaseModel):
    """
    Linear price curve: price(t) = base_price + slope * t.

    With the defaults a token starts at one cent and the price doubles
    after 100,000 tokens have been minted.

    Attributes:
        base_price: Price per token at zero cumulative supply
        slope: Price increase per token minted
    """
    base_price: float = Field(0.01, gt=0, alias="basePrice")
    slope: float = Field(0.0000001, gt=0)

    model_config = {"populate_by_name": True, "frozen": True}

    def price(self, tokens_purchased: float) -> float:
        """
        Marginal price at a given cumulative supply.

        Args:
            tokens_purchased: Tokens minted so far (>= 0)

        Returns:
            Fiat price of the next token
        """
        return self.base_price + self.slope * tokens_purchased

    def cost_for_tokens(self, tokens: float, current_tokens_purchased: float) -> float:
        """
        Fiat cost of buying `tokens` starting at `current_tokens_purchased`.

        The curve is linear, so the integral is exactly the trapezoid
        between the start and end prices.

        Args:
            tokens: Number of tokens to buy
            current_tokens_purchased: Supply before the purchase

        Returns:
            Total fiat cost
        """
        start = self.price(current_tokens_purchased)
        end = self.price(current_tokens_purchased + tokens)
        return (start + end) / 2.0 * tokens

    def tokens_for_amount(self, amount: float, current_tokens_purchased: float) -> float:
        """
        Tokens that `amount` of fiat buys at the current curve position.

        Solves (slope / 2) * t^2 + price(current) * t - amount = 0 for the
        positive root.

        Args:
            amount: Fiat spend in dollars
            current_tokens_purchased: Supply before the purchase

        Returns:
            Tokens bought, or 0.0 when the discriminant is negative
        """
        a = self.slope / 2.0
        b = self.price(current_tokens_purchased)
        c = -amount

        discriminant = b * b - 4.0 * a * c
        if discriminant < 0:
            logger.warning(
                "Negative discriminant for amount=%s at supply=%s",
                amount, current_tokens_purchased,
            )
            return 0.0

        # (-b + sqrt(d)) / 2a, rearranged as -2c / (b + sqrt(d)) so a tiny
        # slope does not cancel against b.
        tokens = -2.0 * c / (b + math.sqrt(discriminant))

        logger.debug(
            "Bonding curve: amount=%s supply=%s start_price=%s tokens=%s",
            amount, current_tokens_purchased, b, tokens,
        )
        return tokens

    def tokens_for_amount_approx(self, amount: float, current_tokens_purchased: float) -> float:
        """
        Average-price approximation of tokens_for_amount.

        Estimates the purchase at the current price, then prices it once
        more at the mean of the start and estimated end prices. Close to
        the exact root for small purchases, falls well short for large ones.

        Args:
            amount: Fiat spend in dollars
            current_tokens_purchased: Supply before the purchase

        Returns:
            Approximate tokens bought
        """
        current_price = self.price(current_tokens_purchased)
        estimate = amount / current_price
        end_price = current_price + self.slope * estimate
        avg_price = (current_price + end_price) / 2.0
        return amount / avg_price
