"""
Location: python/cause_sdk/__init__.py

Summary:
    Main package initialization for cause-sdk. Exports the payment bundle
    engine, the bonding curve, market price estimation and the payment
    service.

Usage:
    from cause_sdk import PaymentService, TokenBalance, EconomyConfig

    # Or use the pure computations directly
    from cause_sdk.bundle import calculate_payment_bundle
    from cause_sdk.valuation import calculate_vendor_valuations

Version: 0.1.0
"""

from .types import (
    Cause,
    DepositRecord,
    DiscountConsumption,
    MintQuote,
    Payment,
    PaymentStatus,
    SupplementResult,
    TokenBalance,
    TokenPayment,
    TokenValuation,
    TransactionRecord,
)
from .config import EconomyConfig
from .bonding_curve import BondingCurve
from .preferences import VendorPreferences, PreferenceError, preference_key, resolve_preference
from .valuation import calculate_vendor_valuations
from .bundle import (
    apply_discounts,
    calculate_payment_bundle,
    check_portfolio_value,
    verify_affordability,
    BundleError,
    InsufficientFundsError,
    InsufficientPortfolioValueError,
    InsufficientTokenBalanceError,
    ZeroPortfolioValueError,
    InsufficientFundsAfterAdjustmentError,
)
from .market import (
    build_transaction_records,
    estimate_market_price,
    select_recent,
    MarketPriceError,
    NoMarketDataError,
    DegenerateWeightingError,
)
from .deposit import quote_deposit
from .lifecycle import (
    advance_status,
    can_cancel,
    generate_payment_code,
    normalize_payment_code,
    InvalidTransitionError,
)
from .executor import ExecutorClient, ExecutorError, Ledger
from .service import PaymentService, PaymentNotFoundError, PaymentCancellationError

__version__ = "0.1.0"

__all__ = [
    # Main service
    "PaymentService",
    "EconomyConfig",
    # Types
    "Cause",
    "DepositRecord",
    "DiscountConsumption",
    "MintQuote",
    "Payment",
    "PaymentStatus",
    "SupplementResult",
    "TokenBalance",
    "TokenPayment",
    "TokenValuation",
    "TransactionRecord",
    # Bonding curve and deposits
    "BondingCurve",
    "quote_deposit",
    # Preferences
    "VendorPreferences",
    "preference_key",
    "resolve_preference",
    # Bundle engine
    "calculate_vendor_valuations",
    "calculate_payment_bundle",
    "check_portfolio_value",
    "apply_discounts",
    "verify_affordability",
    # Market prices
    "build_transaction_records",
    "estimate_market_price",
    "select_recent",
    # Lifecycle
    "advance_status",
    "can_cancel",
    "generate_payment_code",
    "normalize_payment_code",
    # Ledger
    "ExecutorClient",
    "Ledger",
    # Exceptions
    "BundleError",
    "InsufficientFundsError",
    "InsufficientPortfolioValueError",
    "InsufficientTokenBalanceError",
    "ZeroPortfolioValueError",
    "InsufficientFundsAfterAdjustmentError",
    "MarketPriceError",
    "NoMarketDataError",
    "DegenerateWeightingError",
    "PreferenceError",
    "InvalidTransitionError",
    "ExecutorError",
    "PaymentNotFoundError",
    "PaymentCancellationError",
]
