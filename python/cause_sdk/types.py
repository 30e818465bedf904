"""
Location: python/cause_sdk/types.py

Summary:
    Pydantic models for cause-sdk. Defines the wallet snapshots, vendor
    valuations, payment bundles, payment records and ledger records that
    flow through the bundle engine, the market price estimator and the
    payment service.

Usage:
    These models are imported by valuation.py, bundle.py, market.py,
    deposit.py and service.py. Fiat amounts are plain floats in major
    currency units (dollars) unless a field name says otherwise
    (e.g. amount_cents).

Example:
    from cause_sdk.types import TokenBalance

    balance = TokenBalance(
        token_key="9xQe...,1",
        symbol="BTC",
        name="Bitcoin",
        balance=1.0,
        average_valuation=50000.0,
    )
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PaymentStatus(str, Enum):
    """
    Lifecycle states of a payment.

    Payments only move forward through Created -> CustomerAssigned ->
    Calculated -> Completed, or drop to Failed. See lifecycle.py.
    """
    CREATED = "Created"
    CUSTOMER_ASSIGNED = "CustomerAssigned"
    CALCULATED = "Calculated"
    COMPLETED = "Completed"
    FAILED = "Failed"


class TokenBalance(BaseModel):
    """
    A customer's holding of one token at the time of payment.

    Attributes:
        token_key: Opaque token identifier ("address,chainId")
        symbol: Token symbol (e.g., "BTC")
        name: Human readable token name
        balance: Quantity held, in token units
        average_valuation: Market value of one unit in fiat
        token_image_url: Optional image for display
    """
    token_key: str = Field(alias="tokenKey")
    symbol: str
    name: str = ""
    balance: float = Field(ge=0)
    average_valuation: float = Field(ge=0, alias="averageValuation")
    token_image_url: Optional[str] = Field(None, alias="tokenImageUrl")

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def value(self) -> float:
        """Market value of the whole holding."""
        return self.balance * self.average_valuation


class TokenValuation(BaseModel):
    """
    Price per unit a vendor accepts a token at.

    Attributes:
        token_key: Opaque token identifier
        symbol: Token symbol
        valuation: Fiat value per unit from the vendor's perspective
    """
    token_key: str = Field(alias="tokenKey")
    symbol: str
    valuation: float = Field(ge=0)

    model_config = {"populate_by_name": True}


class DiscountConsumption(BaseModel):
    """
    How much of a vendor's preference budget one payment uses for a token.

    Attributes:
        token_key: Opaque token identifier
        symbol: Token symbol
        amount_used: Signed fiat amount. Positive is a discount granted,
                     negative is a premium charged, zero is neutral.
        preference_key: Budget key the amount is drawn from, if the vendor
                        has a budget for this token
    """
    token_key: str = Field(alias="tokenKey")
    symbol: str
    amount_used: float = Field(alias="amountUsed")
    preference_key: Optional[str] = Field(None, alias="preferenceKey")

    model_config = {"populate_by_name": True}


class TokenPayment(BaseModel):
    """
    One line of a payment bundle.

    Attributes:
        token_key: Opaque token identifier
        symbol: Token symbol
        amount_to_pay: Token units the customer transfers (never negative)
        token_image_url: Optional image for display
    """
    token_key: str = Field(alias="tokenKey")
    symbol: str
    amount_to_pay: float = Field(ge=0, alias="amountToPay")
    token_image_url: Optional[str] = Field(None, alias="tokenImageUrl")

    model_config = {"populate_by_name": True, "validate_assignment": True}


class TransactionRecord(BaseModel):
    """
    Write-once record of one token paid in a completed payment.

    Attributes:
        token_key: Opaque token identifier
        symbol: Token symbol
        amount_paid: Token units transferred
        effective_valuation: Final over initial token amount for this payment
        timestamp: When the payment completed (UTC)
        payment_id: Code of the payment this record belongs to
    """
    token_key: str = Field(alias="tokenKey")
    symbol: str
    amount_paid: float = Field(ge=0, alias="amountPaid")
    effective_valuation: float = Field(alias="effectiveValuation")
    timestamp: datetime = Field(default_factory=_utcnow)
    payment_id: str = Field(alias="paymentId")

    model_config = {"populate_by_name": True, "frozen": True}


class DepositRecord(BaseModel):
    """
    A fiat deposit converted into cause tokens.

    Attributes:
        wallet_address: Depositor wallet
        token_symbol: Symbol of the token credited
        token_image_url: Optional image for display
        amount_deposited_usd: Fiat deposited, in dollars
        amount_tokens_received: Tokens credited to the depositor
        created_at: When the deposit was credited (UTC)
    """
    wallet_address: str = Field(alias="walletAddress")
    token_symbol: str = Field(alias="tokenSymbol")
    token_image_url: Optional[str] = Field(None, alias="tokenImageUrl")
    amount_deposited_usd: float = Field(ge=0, alias="amountDepositedUsd")
    amount_tokens_received: float = Field(ge=0, alias="amountTokensReceived")
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")

    model_config = {"populate_by_name": True}


class Payment(BaseModel):
    """
    A vendor's payment request and everything computed for it.

    Attributes:
        payment_id: Short human-typable payment code
        vendor_address: Vendor wallet address
        vendor_name: Vendor display name
        price_usd: Requested price in dollars
        customer_address: Payer wallet, once assigned
        customer_username: Payer display name, once assigned
        status: Lifecycle status
        created_at: Creation time (UTC)
        vendor_valuations: Valuations used for the quote
        discount_consumption: Preference budget used by the quote
        computed_payment: Final bundle, after discounts and premiums
        initial_payment_bundle: Bundle before discounts and premiums
    """
    payment_id: str = Field(alias="paymentId")
    vendor_address: str = Field(alias="vendorAddress")
    vendor_name: str = Field(alias="vendorName")
    price_usd: float = Field(gt=0, alias="priceUsd")
    customer_address: Optional[str] = Field(None, alias="customerAddress")
    customer_username: Optional[str] = Field(None, alias="customerUsername")
    status: PaymentStatus = PaymentStatus.CREATED
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")
    vendor_valuations: Optional[list[TokenValuation]] = Field(None, alias="vendorValuations")
    discount_consumption: Optional[list[DiscountConsumption]] = Field(
        None, alias="discountConsumption"
    )
    computed_payment: Optional[list[TokenPayment]] = Field(None, alias="computedPayment")
    initial_payment_bundle: Optional[list[TokenPayment]] = Field(
        None, alias="initialPaymentBundle"
    )

    model_config = {"populate_by_name": True}


class SupplementResult(BaseModel):
    """
    Outcome of quoting a payment against a customer's wallet.

    Attributes:
        payment_id: The payment code
        status: Status after the quote (Calculated)
        price_usd: Requested price in dollars
        vendor_valuations: Per-token vendor valuations
        discount_consumption: Per-token discount/premium in fiat
        initial_payment_bundle: Bundle before adjustments
        payment_bundle: Final bundle to be signed
        actual_cost: Market value of the final bundle, the authoritative charge
    """
    payment_id: str = Field(alias="paymentId")
    status: PaymentStatus
    price_usd: float = Field(alias="priceUsd")
    vendor_valuations: list[TokenValuation] = Field(alias="vendorValuations")
    discount_consumption: list[DiscountConsumption] = Field(alias="discountConsumption")
    initial_payment_bundle: list[TokenPayment] = Field(alias="initialPaymentBundle")
    payment_bundle: list[TokenPayment] = Field(alias="paymentBundle")
    actual_cost: float = Field(alias="actualCost")

    model_config = {"populate_by_name": True}


class MintQuote(BaseModel):
    """
    How a fiat deposit is turned into cause tokens.

    Attributes:
        amount_cents: Total deposit in cents
        platform_fee_cents: Cash kept by the platform
        cause_amount_usd: Dollars converted on the bonding curve
        tokens_minted: Whole tokens minted for this deposit
        user_tokens: Tokens credited to the depositor
        platform_tokens: Tokens credited to the platform vault
        new_tokens_purchased: Cumulative supply after the mint
        new_price: Marginal price at the new supply
    """
    amount_cents: int = Field(ge=0, alias="amountCents")
    platform_fee_cents: int = Field(ge=0, alias="platformFeeCents")
    cause_amount_usd: float = Field(ge=0, alias="causeAmountUsd")
    tokens_minted: int = Field(ge=0, alias="tokensMinted")
    user_tokens: int = Field(ge=0, alias="userTokens")
    platform_tokens: int = Field(ge=0, alias="platformTokens")
    new_tokens_purchased: float = Field(ge=0, alias="newTokensPurchased")
    new_price: float = Field(ge=0, alias="newPrice")

    model_config = {"populate_by_name": True}


class Cause(BaseModel):
    """
    Bonding curve state of a cause token.

    Attributes:
        token_symbol: Symbol of the cause token
        amount_donated: Total dollars converted so far
        tokens_purchased: Cumulative tokens minted
        current_price: Marginal price at the current supply
        token_image_url: Optional image for display
    """
    token_symbol: str = Field(alias="tokenSymbol")
    amount_donated: float = Field(0.0, ge=0, alias="amountDonated")
    tokens_purchased: float = Field(0.0, ge=0, alias="tokensPurchased")
    current_price: float = Field(0.0, ge=0, alias="currentPrice")
    token_image_url: Optional[str] = Field(None, alias="tokenImageUrl")

    model_config = {"populate_by_name": True}
