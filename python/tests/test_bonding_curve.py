"""
Tests for cause_sdk.bonding_curve module.

Tests the linear price function, the exact quadratic inverse, and how far
the average-price approximation drifts from it.
"""

import pytest
from pydantic import ValidationError

from cause_sdk.bonding_curve import BondingCurve


@pytest.fixture
def curve():
    """Default curve: one cent base price, 1e-7 slope."""
    return BondingCurve()


class TestPrice:
    """Tests for BondingCurve.price."""

    def test_defaults(self, curve):
        """Test default curve parameters."""
        assert curve.base_price == 0.01
        assert curve.slope == 0.0000001

    def test_price_points(self, curve):
        """Test price at several supply levels."""
        assert curve.price(0.0) == 0.01
        assert curve.price(1000.0) == pytest.approx(0.0101)
        assert curve.price(10000.0) == pytest.approx(0.011)

    def test_price_doubles_after_100k_tokens(self, curve):
        """Test that the default price doubles at 100,000 tokens."""
        assert curve.price(100_000.0) == pytest.approx(0.02)

    def test_monotonic(self, curve):
        """Test that price strictly increases with supply."""
        supplies = [0.0, 1.0, 10.0, 1e3, 1e5, 1e7]
        prices = [curve.price(s) for s in supplies]
        assert all(later > earlier for earlier, later in zip(prices, prices[1:]))

    def test_rejects_non_positive_parameters(self):
        """Test that a zero slope or base price is rejected."""
        with pytest.raises(ValidationError):
            BondingCurve(base_price=0.01, slope=0)
        with pytest.raises(ValidationError):
            BondingCurve(base_price=0, slope=1e-7)

    def test_is_frozen(self, curve):
        """Test that curves are immutable values."""
        with pytest.raises(ValidationError):
            curve.slope = 1.0


class TestTokensForAmount:
    """Tests for the exact quadratic inverse."""

    def test_95_dollars_at_start(self, curve):
        """Test $95 at zero supply solves 0.01t + 0.00000005t^2 = 95."""
        tokens = curve.tokens_for_amount(95.0, 0.0)
        assert 0.01 * tokens + 0.00000005 * tokens ** 2 == pytest.approx(95.0)
        assert tokens == pytest.approx(9087.2, abs=0.5)

    def test_zero_amount(self, curve):
        """Test that spending nothing buys nothing."""
        assert curve.tokens_for_amount(0.0, 5000.0) == 0.0

    def test_fewer_tokens_later_on_curve(self, curve):
        """Test that the same spend buys fewer tokens at higher supply."""
        early = curve.tokens_for_amount(95.0, 0.0)
        late = curve.tokens_for_amount(95.0, 100_000.0)
        assert late < early

    @pytest.mark.parametrize("amount", [0.5, 95.0, 1000.0, 25000.0])
    @pytest.mark.parametrize("current", [0.0, 100_000.0, 5_000_000.0])
    def test_integral_matches_amount(self, curve, amount, current):
        """Test that the cost of the tokens bought equals the spend."""
        tokens = curve.tokens_for_amount(amount, current)
        assert curve.cost_for_tokens(tokens, current) == pytest.approx(amount, rel=1e-3)

    def test_negative_discriminant_returns_zero(self, curve):
        """Test that an impossible (negative) spend returns 0 instead of failing."""
        assert curve.tokens_for_amount(-1000.0, 0.0) == 0.0


class TestApproximation:
    """Tests for the average-price approximation."""

    def test_small_purchases(self, curve):
        """Test approximation values for small spends at zero supply."""
        assert curve.tokens_for_amount_approx(1.0, 0.0) == pytest.approx(99.950, abs=0.01)
        assert curve.tokens_for_amount_approx(10.0, 0.0) == pytest.approx(995.02, abs=0.1)

    def test_close_to_exact_for_small_purchases(self, curve):
        """Test that the approximation stays within 1% at $95."""
        exact = curve.tokens_for_amount(95.0, 0.0)
        approx = curve.tokens_for_amount_approx(95.0, 0.0)
        assert approx == pytest.approx(exact, rel=0.01)
        assert approx != exact

    def test_diverges_for_large_purchases(self, curve):
        """Test that the approximation undershoots badly at $10,000."""
        exact = curve.tokens_for_amount(10000.0, 0.0)
        approx = curve.tokens_for_amount_approx(10000.0, 0.0)
        assert approx < exact * 0.9


class TestCostForTokens:
    """Tests for BondingCurve.cost_for_tokens."""

    def test_trapezoid(self, curve):
        """Test the cost of 1000 tokens from zero supply."""
        assert curve.cost_for_tokens(1000.0, 0.0) == pytest.approx((0.01 + 0.0101) / 2 * 1000)

    def test_zero_tokens_cost_nothing(self, curve):
        """Test that buying no tokens is free."""
        assert curve.cost_for_tokens(0.0, 1e6) == 0.0
