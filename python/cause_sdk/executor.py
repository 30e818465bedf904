"""
Location: python/cause_sdk/executor.py

Summary:
    HTTP client for the ledger executor, the service that holds token
    vault balances and executes signed transfer instructions.

Usage:
    Used by PaymentService as its Ledger to submit a customer's signed
    debit instructions once a quote is accepted. Signing happens on the
    customer's device; instructions are passed through as opaque JSON.

Example:
    from cause_sdk.executor import ExecutorClient

    async with ExecutorClient("http://localhost:8081") as executor:
        vault = await executor.get_vault("9xQe...")
        await executor.submit_verifiables(signed_instructions)
"""

import logging
from typing import Any, Optional, Protocol

import httpx

logger = logging.getLogger("cause_sdk.executor")


class Ledger(Protocol):
    """
    Protocol for the ledger execution backend.

    ExecutorClient is the HTTP implementation; tests use a mock.
    """

    async def submit_verifiables(self, verifiables: list[Any]) -> None:
        """
        Submit signed instructions for execution.

        Args:
            verifiables: Signed instructions as JSON-compatible objects

        Raises:
            ExecutorError: If the executor rejects the submission
        """
        ...


class ExecutorClient:
    """
    Async HTTP client for the ledger executor.

    Attributes:
        base_url: Executor base URL
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        headers: Optional[dict[str, str]] = None,
    ):
        """
        Initialize the executor client.

        Args:
            base_url: Executor base URL (trailing slash removed)
            timeout: Request timeout in seconds (default 30)
            headers: Optional default headers for all requests
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http = httpx.AsyncClient(timeout=timeout, headers=headers or {})
        logger.info("Executor client connecting to %s", self.base_url)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._http.aclose()

    async def __aenter__(self) -> "ExecutorClient":
        """Enter async context manager."""
        return self

    async def __aexit__(self, *args) -> None:
        """Exit async context manager and close resources."""
        await self.close()

    async def get_vault(self, pubkey: str) -> Optional[dict]:
        """
        Fetch a vault by owner public key.

        Args:
            pubkey: Vault owner's public key

        Returns:
            The vault JSON, or None if the executor has no such vault

        Raises:
            ExecutorError: On any other non-success response or transport failure
        """
        url = f"{self.base_url}/vaults/{pubkey}"
        try:
            response = await self._http.get(url)
        except httpx.HTTPError as e:
            logger.error("Request to executor service failed: %s", e)
            raise ExecutorError(f"Request to executor service failed: {e}") from e

        if response.status_code == 404:
            logger.info("Vault not found for public key %s", pubkey)
            return None
        if response.is_error:
            raise ExecutorError(
                f"Failed to get vault: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response.json()

    async def submit_verifiables(self, verifiables: list[Any]) -> None:
        """
        Submit signed instructions for execution.

        Args:
            verifiables: Signed instructions as JSON-compatible objects

        Raises:
            ExecutorError: If the executor rejects the submission or is unreachable
        """
        url = f"{self.base_url}/execute"
        logger.info("Submitting %d verifiables to %s", len(verifiables), url)
        try:
            response = await self._http.post(url, json=verifiables)
        except httpx.HTTPError as e:
            logger.error("Request to executor service failed: %s", e)
            raise ExecutorError(f"Request to executor service failed: {e}") from e

        if response.is_error:
            raise ExecutorError(
                f"Failed to submit verifiables: HTTP {response.status_code} - {response.text}",
                status_code=response.status_code,
            )


class ExecutorError(Exception):
    """
    Exception raised when the ledger executor fails a request.

    Attributes:
        status_code: HTTP status, if a response was received
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
