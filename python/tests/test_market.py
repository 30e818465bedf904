"""
Tests for cause_sdk.market module.

Tests transaction record construction, window selection and the
time-decayed market price estimate.
"""

from datetime import datetime, timedelta, timezone

import pytest

from cause_sdk.market import (
    DegenerateWeightingError,
    MarketPriceError,
    NoMarketDataError,
    build_transaction_records,
    estimate_market_price,
    select_recent,
)
from cause_sdk.types import TokenPayment, TokenValuation, TransactionRecord

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _record(valuation: float, amount: float = 10.0, minutes: int = 0, token_key: str = "btc,1"):
    return TransactionRecord(
        token_key=token_key,
        symbol="BTC",
        amount_paid=amount,
        effective_valuation=valuation,
        timestamp=T0 + timedelta(minutes=minutes),
        payment_id="ABC12",
    )


def _payment(token_key: str, symbol: str, amount: float) -> TokenPayment:
    return TokenPayment(token_key=token_key, symbol=symbol, amount_to_pay=amount)


class TestBuildTransactionRecords:
    """Tests for build_transaction_records."""

    def test_ratio_of_final_to_initial(self):
        """Test effective valuations from the pre-discount bundle."""
        initial = [_payment("btc,1", "BTC", 0.01), _payment("usd,1", "USD", 200.0)]
        final = [_payment("btc,1", "BTC", 0.008), _payment("usd,1", "USD", 200.0)]

        records = build_transaction_records("ABC12", final, initial_bundle=initial, now=T0)

        assert [r.effective_valuation for r in records] == pytest.approx([0.8, 1.0])
        assert [r.amount_paid for r in records] == [0.008, 200.0]
        assert all(r.payment_id == "ABC12" and r.timestamp == T0 for r in records)

    def test_premium_above_one(self):
        """Test that a premium yields an effective valuation above 1."""
        records = build_transaction_records(
            "ABC12",
            [_payment("usd,1", "USD", 240.0)],
            initial_bundle=[_payment("usd,1", "USD", 200.0)],
        )
        assert records[0].effective_valuation == pytest.approx(1.2)

    def test_zero_initial_amount_is_neutral(self):
        """Test that a zero initial amount falls back to 1.0."""
        records = build_transaction_records(
            "ABC12",
            [_payment("junk,1", "JUNK", 0.0)],
            initial_bundle=[_payment("junk,1", "JUNK", 0.0)],
        )
        assert records[0].effective_valuation == 1.0

    def test_vendor_valuation_fallback(self):
        """Test that vendor valuations are used without an initial bundle."""
        valuations = [TokenValuation(token_key="usd,1", symbol="USD", valuation=0.9)]
        records = build_transaction_records(
            "ABC12", [_payment("usd,1", "USD", 5.0)], vendor_valuations=valuations
        )
        assert records[0].effective_valuation == 0.9

    def test_neutral_without_data(self):
        """Test the neutral fallback when nothing was recorded."""
        records = build_transaction_records("ABC12", [_payment("usd,1", "USD", 5.0)])
        assert records[0].effective_valuation == 1.0
        assert records[0].timestamp.tzinfo is not None


class TestSelectRecent:
    """Tests for select_recent."""

    def test_filters_sorts_and_truncates(self):
        """Test that only the newest records of one token are kept."""
        records = [_record(1.0, minutes=m) for m in (3, 1, 4, 2)]
        records.append(_record(9.0, minutes=10, token_key="eth,1"))

        recent = select_recent(records, "btc,1", limit=3)
        assert [r.timestamp.minute for r in recent] == [4, 3, 2]

    def test_no_matches(self):
        """Test that unknown tokens give an empty window."""
        assert select_recent([_record(1.0)], "eth,1") == []


class TestEstimateMarketPrice:
    """Tests for estimate_market_price."""

    def test_single_record(self):
        """Test that one record sets the price to its valuation."""
        assert estimate_market_price([_record(0.8)]) == pytest.approx(0.8)

    def test_linear_decay(self):
        """Test weights of 1.0 and 0.95 for the two newest records."""
        records = [_record(1.0), _record(0.5)]
        expected = (1.0 * 10 * 1.0 + 0.5 * 10 * 0.95) / (10 * 1.0 + 10 * 0.95)
        assert estimate_market_price(records) == pytest.approx(expected)

    def test_volume_weighted(self):
        """Test that larger payments dominate."""
        records = [_record(1.0, amount=1.0), _record(0.5, amount=1000.0)]
        assert estimate_market_price(records) < 0.51

    def test_ignores_records_past_window(self):
        """Test that only the first N records count."""
        records = [_record(1.0) for _ in range(20)] + [_record(100.0) for _ in range(5)]
        assert estimate_market_price(records) == pytest.approx(1.0)

    def test_custom_window(self):
        """Test a window of two."""
        records = [_record(1.0), _record(0.0), _record(50.0)]
        # Weights 1.0 and 0.5
        assert estimate_market_price(records, window=2) == pytest.approx(10.0 / 15.0)

    def test_no_records(self):
        """Test that an empty history fails."""
        with pytest.raises(NoMarketDataError):
            estimate_market_price([])

    def test_zero_volume(self):
        """Test that zero-amount records cannot set a price."""
        with pytest.raises(DegenerateWeightingError):
            estimate_market_price([_record(1.0, amount=0.0), _record(2.0, amount=0.0)])

    def test_errors_share_base(self):
        """Test that both failures are MarketPriceErrors."""
        assert issubclass(NoMarketDataError, MarketPriceError)
        assert issubclass(DegenerateWeightingError, MarketPriceError)
