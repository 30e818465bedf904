"""
Tests for cause_sdk.lifecycle module.

Tests the payment status machine and payment code generation and
normalisation.
"""

import pytest

from cause_sdk.lifecycle import (
    CROCKFORD_ALPHABET,
    InvalidTransitionError,
    advance_status,
    can_cancel,
    generate_payment_code,
    normalize_payment_code,
)
from cause_sdk.types import PaymentStatus as S


class TestAdvanceStatus:
    """Tests for advance_status."""

    @pytest.mark.parametrize("current,target", [
        (S.CREATED, S.CUSTOMER_ASSIGNED),
        (S.CUSTOMER_ASSIGNED, S.CALCULATED),
        (S.CALCULATED, S.COMPLETED),
    ])
    def test_forward_steps(self, current, target):
        """Test each allowed forward step."""
        assert advance_status(current, target) == target

    @pytest.mark.parametrize("current", [S.CREATED, S.CUSTOMER_ASSIGNED, S.CALCULATED])
    def test_fail_from_open_states(self, current):
        """Test that any open payment can fail."""
        assert advance_status(current, S.FAILED) == S.FAILED

    @pytest.mark.parametrize("current,target", [
        (S.CREATED, S.CALCULATED),
        (S.CREATED, S.COMPLETED),
        (S.CALCULATED, S.CUSTOMER_ASSIGNED),
        (S.CUSTOMER_ASSIGNED, S.CREATED),
        (S.CREATED, S.CREATED),
        (S.COMPLETED, S.FAILED),
        (S.FAILED, S.CREATED),
        (S.FAILED, S.FAILED),
    ])
    def test_rejected(self, current, target):
        """Test skips, regressions and moves out of terminal states."""
        with pytest.raises(InvalidTransitionError) as exc_info:
            advance_status(current, target)
        assert exc_info.value.current == current
        assert exc_info.value.target == target


class TestCanCancel:
    """Tests for can_cancel."""

    def test_open_and_failed_payments(self):
        """Test that everything but Completed can be cancelled."""
        for status in (S.CREATED, S.CUSTOMER_ASSIGNED, S.CALCULATED, S.FAILED):
            assert can_cancel(status)
        assert not can_cancel(S.COMPLETED)


class TestPaymentCodes:
    """Tests for payment code helpers."""

    def test_generated_shape(self):
        """Test length and alphabet of generated codes."""
        for _ in range(200):
            code = generate_payment_code()
            assert len(code) == 5
            assert set(code) <= set(CROCKFORD_ALPHABET)

    def test_generated_codes_survive_normalisation(self):
        """Test that generated codes are already normalised."""
        for _ in range(50):
            code = generate_payment_code()
            assert normalize_payment_code(code.lower()) == code

    @pytest.mark.parametrize("raw,expected", [
        ("ABC0O", "ABC00"),
        ("abcde", "ABCDE"),
        ("O0I1L", "00111"),
        ("valid", "VA11D"),
        (" 7kq2m ", "7KQ2M"),
    ])
    def test_normalize(self, raw, expected):
        """Test normalisation of common typing mistakes."""
        assert normalize_payment_code(raw) == expected
