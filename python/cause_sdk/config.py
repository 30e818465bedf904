"""
Location: python/cause_sdk/config.py

Summary:
    Tunables for the token economy: the vendor preference cap, the market
    price window, bonding curve parameters, the deposit fee and the ledger
    executor endpoint.

Usage:
    Passed to PaymentService. Build one explicitly or read it from the
    environment with EconomyConfig.from_env().

Example:
    from cause_sdk.config import EconomyConfig

    config = EconomyConfig.from_env()
    curve = config.bonding_curve()
"""

import os
from typing import Optional

from pydantic import BaseModel, Field

from .bonding_curve import BondingCurve

DEFAULT_LAMBDA_CAP = 0.2
DEFAULT_MARKET_WINDOW = 20
DEFAULT_PLATFORM_FEE_RATE = 0.05


class EconomyConfig(BaseModel):
    """
    Configuration for the token economy.

    Attributes:
        lambda_cap: Maximum fraction of a token's payment share that a
                    vendor preference may alter in one payment
        market_window: Number of recent transactions feeding a market price
        base_price: Bonding curve price at zero supply, in dollars
        slope: Bonding curve price increase per token minted
        platform_fee_rate: Fraction of each deposit kept by the platform
        executor_url: Base URL of the ledger executor service
        executor_timeout: Executor request timeout in seconds
    """
    lambda_cap: float = Field(DEFAULT_LAMBDA_CAP, ge=0, le=1, alias="lambdaCap")
    market_window: int = Field(DEFAULT_MARKET_WINDOW, gt=0, alias="marketWindow")
    base_price: float = Field(0.01, gt=0, alias="basePrice")
    slope: float = Field(0.0000001, gt=0)
    platform_fee_rate: float = Field(
        DEFAULT_PLATFORM_FEE_RATE, ge=0, lt=1, alias="platformFeeRate"
    )
    executor_url: str = Field("http://localhost:8081", alias="executorUrl")
    executor_timeout: float = Field(30.0, gt=0, alias="executorTimeout")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None) -> "EconomyConfig":
        """
        Build a config from environment variables.

        Unset variables keep their defaults. SERVER_HOST and EXECUTOR_PORT
        together form the executor URL.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            A validated EconomyConfig
        """
        env = os.environ if environ is None else environ
        values: dict = {}

        mapping = {
            "CAUSE_LAMBDA_CAP": "lambda_cap",
            "CAUSE_MARKET_WINDOW": "market_window",
            "CAUSE_BASE_PRICE": "base_price",
            "CAUSE_SLOPE": "slope",
            "CAUSE_PLATFORM_FEE_RATE": "platform_fee_rate",
            "CAUSE_EXECUTOR_TIMEOUT": "executor_timeout",
        }
        for var, field in mapping.items():
            if env.get(var):
                values[field] = env[var]

        host = env.get("SERVER_HOST")
        port = env.get("EXECUTOR_PORT")
        if host or port:
            values["executor_url"] = f"http://{host or 'localhost'}:{port or 8081}"

        return cls.model_validate(values)

    def bonding_curve(self) -> BondingCurve:
        """Return the bonding curve described by this config."""
        return BondingCurve(base_price=self.base_price, slope=self.slope)
