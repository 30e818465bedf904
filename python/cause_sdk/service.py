"""
Location: python/cause_sdk/service.py

Summary:
    PaymentService ties the bundle engine, the market price estimator and
    the bonding curve to persistence and the ledger executor. It owns the
    payment lifecycle: create, quote ("supplement"), complete, cancel, and
    crediting fiat deposits as cause tokens.

Usage:
    The HTTP layer calls one method per request and maps
    InsufficientFundsError to a plain "Insufficient funds" message.

Example:
    from cause_sdk import PaymentService, EconomyConfig

    async with PaymentService(EconomyConfig.from_env()) as service:
        payment = await service.create_payment("vendor_addr", "Cafe", 12.5)
        quote = await service.supplement_payment(
            payment.payment_id, "payer_addr", balances
        )
        await service.complete_payment(payment.payment_id, signed_instructions)
"""

import json
import logging
from typing import Any, Optional, Sequence, Union

from .bundle import (
    InsufficientFundsError,
    apply_discounts,
    calculate_payment_bundle,
    check_portfolio_value,
    verify_affordability,
)
from .config import EconomyConfig
from .deposit import STABLE_SYMBOL, quote_deposit
from .executor import ExecutorClient, ExecutorError, Ledger
from .lifecycle import advance_status, can_cancel, generate_payment_code, normalize_payment_code
from .market import MarketPriceError, build_transaction_records, estimate_market_price
from .stores import (
    CauseStore,
    MemoryCauseStore,
    MemoryPaymentStore,
    MemoryPreferenceStore,
    MemoryTokenPriceStore,
    MemoryTransactionStore,
    PaymentStore,
    PreferenceStore,
    TokenPriceStore,
    TransactionStore,
)
from .types import (
    DepositRecord,
    MintQuote,
    Payment,
    PaymentStatus,
    SupplementResult,
    TokenBalance,
)
from .valuation import calculate_vendor_valuations

logger = logging.getLogger("cause_sdk.service")


class PaymentService:
    """
    Payment lifecycle orchestration.

    Every store defaults to its in-memory implementation, and the ledger
    to an ExecutorClient built from the config.

    Attributes:
        config: Economy configuration
        payments: Payment persistence
        preferences: Vendor preference budgets
        transactions: Transaction record history
        prices: Token market prices
        causes: Cause bonding curve state
        ledger: Ledger executor
    """

    def __init__(
        self,
        config: Optional[EconomyConfig] = None,
        payments: Optional[PaymentStore] = None,
        preferences: Optional[PreferenceStore] = None,
        transactions: Optional[TransactionStore] = None,
        prices: Optional[TokenPriceStore] = None,
        causes: Optional[CauseStore] = None,
        ledger: Optional[Ledger] = None,
    ):
        self.config = config or EconomyConfig()
        self.payments = payments or MemoryPaymentStore()
        self.preferences = preferences or MemoryPreferenceStore()
        self.transactions = transactions or MemoryTransactionStore()
        self.prices = prices or MemoryTokenPriceStore()
        self.causes = causes or MemoryCauseStore()

        self._owns_ledger = ledger is None
        self.ledger = ledger or ExecutorClient(
            self.config.executor_url, timeout=self.config.executor_timeout
        )

    async def close(self) -> None:
        """Close the ledger client if this service created it."""
        if self._owns_ledger and isinstance(self.ledger, ExecutorClient):
            await self.ledger.close()

    async def __aenter__(self) -> "PaymentService":
        """Enter async context manager."""
        return self

    async def __aexit__(self, *args) -> None:
        """Exit async context manager and close resources."""
        await self.close()

    async def create_payment(self, vendor_address: str, vendor_name: str, price_usd: float) -> Payment:
        """
        Create a payment request for a vendor.

        Args:
            vendor_address: Vendor wallet address
            vendor_name: Vendor display name
            price_usd: Price in dollars (> 0)

        Returns:
            The new payment, in status Created
        """
        payment_id = generate_payment_code()
        while await self.payments.get(payment_id) is not None:
            payment_id = generate_payment_code()

        payment = Payment(
            payment_id=payment_id,
            vendor_address=vendor_address,
            vendor_name=vendor_name,
            price_usd=price_usd,
        )
        await self.payments.save(payment)
        logger.info("Payment created with ID %s for %s ($%.2f)", payment_id, vendor_name, price_usd)
        return payment

    async def get_payment(self, payment_id: str) -> Payment:
        """
        Look up a payment by (possibly mistyped) code.

        Raises:
            PaymentNotFoundError: If no payment has this code
        """
        code = normalize_payment_code(payment_id)
        payment = await self.payments.get(code)
        if payment is None:
            raise PaymentNotFoundError(f"Payment {code} not found")
        return payment

    async def supplement_payment(
        self,
        payment_id: str,
        payer_address: str,
        balances: Sequence[TokenBalance],
        payer_username: Optional[str] = None,
    ) -> SupplementResult:
        """
        Assign a customer to a payment and compute the bundle they pay.

        Runs vendor valuation, proportional bundling, discount application
        and the affordability check, then stores everything on the payment.
        The payment is saved once, as Calculated or as Failed.

        Args:
            payment_id: Payment code as typed by the customer
            payer_address: Customer wallet address
            balances: Customer wallet snapshot
            payer_username: Optional customer display name

        Returns:
            The quote, with the payment now Calculated

        Raises:
            PaymentNotFoundError: If the code is unknown
            InvalidTransitionError: If the payment was already quoted or closed
            InsufficientFundsError: If the wallet cannot pay; the payment is
                                    marked Failed
        """
        payment = await self.get_payment(payment_id)
        assigned = advance_status(payment.status, PaymentStatus.CUSTOMER_ASSIGNED)

        # Saved only once the quote is Calculated or rejected
        prefs = await self.preferences.get_preferences(payment.vendor_address)
        price = payment.price_usd
        payment.status = assigned
        payment.customer_address = payer_address
        payment.customer_username = payer_username

        try:
            valuations, consumptions = calculate_vendor_valuations(
                prefs, balances, price, lambda_cap=self.config.lambda_cap
            )
            check_portfolio_value(balances, valuations, price)
            initial_bundle = calculate_payment_bundle(balances, valuations, price)

            final_bundle = [p.model_copy() for p in initial_bundle]
            apply_discounts(final_bundle, consumptions, balances)
            actual_cost = verify_affordability(final_bundle, balances, price)
        except InsufficientFundsError as e:
            logger.warning("Payment %s rejected: %s", payment.payment_id, e)
            payment.status = advance_status(payment.status, PaymentStatus.FAILED)
            await self.payments.save(payment)
            raise

        payment.vendor_valuations = valuations
        payment.discount_consumption = consumptions
        payment.initial_payment_bundle = initial_bundle
        payment.computed_payment = final_bundle
        payment.status = advance_status(payment.status, PaymentStatus.CALCULATED)
        await self.payments.save(payment)

        logger.info(
            "Payment %s calculated. Original price: $%.2f, actual cost after adjustments: $%.2f",
            payment.payment_id, price, actual_cost,
        )
        return SupplementResult(
            payment_id=payment.payment_id,
            status=payment.status,
            price_usd=price,
            vendor_valuations=valuations,
            discount_consumption=consumptions,
            initial_payment_bundle=initial_bundle,
            payment_bundle=final_bundle,
            actual_cost=actual_cost,
        )

    async def complete_payment(
        self,
        payment_id: str,
        signed_transaction: Union[str, list[Any]],
    ) -> Payment:
        """
        Submit the customer's signed instructions and settle the payment.

        After the ledger accepts the instructions, transaction records are
        written and the vendor's preference budgets are consumed. Only then
        is the payment saved as Completed. If one of those store writes
        fails, the error propagates and the payment stays Calculated.
        Finally the market price of each token paid is refreshed.

        Args:
            payment_id: Payment code
            signed_transaction: Signed instructions, as a JSON array string
                                or an already-parsed list

        Returns:
            The completed payment

        Raises:
            PaymentNotFoundError: If the code is unknown
            InvalidTransitionError: If the payment is not Calculated
            ValueError: If signed_transaction is not a JSON array
            ExecutorError: If the ledger rejects the instructions; the
                           payment is marked Failed
        """
        payment = await self.get_payment(payment_id)
        advance_status(payment.status, PaymentStatus.COMPLETED)

        verifiables = _parse_signed_transaction(signed_transaction)
        logger.info("Submitting %d signed instructions for payment %s", len(verifiables), payment.payment_id)

        try:
            await self.ledger.submit_verifiables(verifiables)
        except ExecutorError:
            payment.status = advance_status(payment.status, PaymentStatus.FAILED)
            await self.payments.save(payment)
            raise

        final_bundle = payment.computed_payment or []
        records = build_transaction_records(
            payment.payment_id,
            final_bundle,
            initial_bundle=payment.initial_payment_bundle,
            vendor_valuations=payment.vendor_valuations,
        )
        await self.transactions.add_records(records)

        if payment.discount_consumption:
            prefs = await self.preferences.get_preferences(payment.vendor_address)
            await self.preferences.set_preferences(
                payment.vendor_address, prefs.consume(payment.discount_consumption)
            )

        # Completed is saved after records and budgets
        payment.status = advance_status(payment.status, PaymentStatus.COMPLETED)
        await self.payments.save(payment)
        logger.info("Payment %s completed", payment.payment_id)

        for token_key in dict.fromkeys(p.token_key for p in final_bundle):
            try:
                await self.refresh_market_price(token_key)
            except MarketPriceError as e:
                logger.error("Failed to calculate market price for %s: %s", token_key, e)

        return payment

    async def fail_payment(self, payment_id: str) -> Payment:
        """
        Mark an open payment as Failed.

        Raises:
            PaymentNotFoundError: If the code is unknown
            InvalidTransitionError: If the payment is already Completed or Failed
        """
        payment = await self.get_payment(payment_id)
        payment.status = advance_status(payment.status, PaymentStatus.FAILED)
        await self.payments.save(payment)
        return payment

    async def cancel_payment(self, payment_id: str) -> None:
        """
        Delete a payment that has not completed.

        Raises:
            PaymentNotFoundError: If the code is unknown
            PaymentCancellationError: If the payment is Completed
        """
        payment = await self.get_payment(payment_id)
        if not can_cancel(payment.status):
            raise PaymentCancellationError(f"Payment {payment.payment_id} is already completed")
        await self.payments.delete(payment.payment_id)
        logger.info("Payment %s cancelled", payment.payment_id)

    async def refresh_market_price(self, token_key: str) -> float:
        """
        Recompute and store a token's market price from recent payments.

        Returns:
            The new market price

        Raises:
            NoMarketDataError: If the token has no transaction records
            DegenerateWeightingError: If all recent records have zero volume
        """
        window = self.config.market_window
        records = await self.transactions.recent_for_token(token_key, window)
        price = estimate_market_price(records, window=window)
        await self.prices.set_market_price(token_key, price)
        logger.info("Updated market price for token %s: %s", token_key, price)
        return price

    async def credit_deposit(
        self,
        token_symbol: str,
        amount_cents: int,
        wallet_address: str,
        connected_account_id: Optional[str] = None,
    ) -> MintQuote:
        """
        Convert a processed fiat deposit into tokens.

        A USD deposit without a connected account is a top-up and is
        credited one token per cent with no fee. Anything else is a
        donation: the cause's bonding curve supply and price are advanced
        and the platform fee split applies. Tokens without a cause (and USD
        donations) are minted one per cent. A deposit record is stored
        either way.

        Args:
            token_symbol: Symbol of the token being bought
            amount_cents: Deposit in cents, as delivered by the processor
            wallet_address: Depositor wallet
            connected_account_id: Payout account of the receiving cause, if
                                  the deposit is a donation

        Returns:
            The mint quote; the caller performs the vault transfers
        """
        is_stable = token_symbol.upper() == STABLE_SYMBOL
        is_topup = is_stable and not connected_account_id

        cause = None
        if not is_stable:
            cause = await self.causes.get_cause(token_symbol)
            if cause is None:
                logger.warning("No cause issues token %s, minting at par", token_symbol)

        quote = quote_deposit(
            amount_cents,
            tokens_purchased=cause.tokens_purchased if cause else 0.0,
            curve=self.config.bonding_curve(),
            fee_rate=self.config.platform_fee_rate,
            token_symbol=token_symbol if cause else STABLE_SYMBOL,
            is_topup=is_topup,
        )

        if cause is not None:
            cause.amount_donated += quote.cause_amount_usd
            cause.tokens_purchased = quote.new_tokens_purchased
            cause.current_price = quote.new_price
            await self.causes.save_cause(cause)

        await self.causes.add_deposit(DepositRecord(
            wallet_address=wallet_address,
            token_symbol=token_symbol,
            token_image_url=cause.token_image_url if cause else None,
            amount_deposited_usd=amount_cents / 100.0,
            amount_tokens_received=quote.user_tokens,
        ))
        return quote


def _parse_signed_transaction(signed_transaction: Union[str, list[Any]]) -> list[Any]:
    if isinstance(signed_transaction, str):
        try:
            signed_transaction = json.loads(signed_transaction)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid signed transaction format: {e}") from e
    if not isinstance(signed_transaction, list):
        raise ValueError("Invalid signed transaction format: expected a JSON array")
    return signed_transaction


class PaymentNotFoundError(LookupError):
    """Exception raised when a payment code matches no payment."""
    pass


class PaymentCancellationError(Exception):
    """Exception raised when cancelling a completed payment."""
    pass
