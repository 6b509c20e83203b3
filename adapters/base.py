#!/usr/bin/env python3
"""
Base Adapter for Data Source Integrations
A foundational HTTP client class plus the balance provider capability
interface that the portfolio services depend on.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional

import requests

from exceptions import ProviderError
from models.portfolio_models import RawBalance

logger = logging.getLogger(__name__)


class ProviderStatus(str, Enum):
    """Connectivity lifecycle of a provider client."""

    CONSTRUCTED = "constructed"
    READY = "ready"
    DEGRADED = "degraded"


class BaseAdapter(ABC):
    """Base adapter class for API integrations with common functionality."""

    def __init__(
        self, base_url: str = None, headers: Dict[str, str] = None, timeout: float = 30
    ):
        """
        Initialize the base adapter.

        Args:
            base_url: Base URL for API endpoints
            headers: Default headers for requests
            timeout: Request timeout in seconds
        """
        self.base_url = base_url or ""
        self.headers = headers or {}
        self.timeout = timeout
        self.session = requests.Session()

        # Set default headers
        if self.headers:
            self.session.headers.update(self.headers)

    def get(
        self,
        endpoint: str,
        params: Dict[str, Any] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Perform a GET request to the specified endpoint.

        Args:
            endpoint: API endpoint (will be appended to base_url)
            params: Query parameters
            timeout: Per-call timeout overriding the adapter default

        Returns:
            Decoded JSON response

        Raises:
            ProviderError: on network failure, non-2xx status or invalid JSON
        """
        url = self._build_url(endpoint)
        try:
            response = self.session.get(
                url, params=params, timeout=timeout or self.timeout
            )
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            self._handle_error(f"Error fetching data from {url}: {e}")
            raise ProviderError(f"Request to {endpoint} failed: {e}") from e
        except ValueError as e:
            self._handle_error(f"Error parsing JSON response from {url}: {e}")
            raise ProviderError(f"Invalid JSON from {endpoint}") from e

    def close(self) -> None:
        """Release the underlying HTTP session."""
        self.session.close()

    def _build_url(self, endpoint: str) -> str:
        """Build full URL from base URL and endpoint."""
        return f"{self.base_url.rstrip('/')}/{endpoint.lstrip('/')}"

    def _handle_error(self, message: str) -> None:
        """Handle error messages. Can be overridden by subclasses."""
        logger.warning(message)

    @abstractmethod
    def authenticate(self) -> bool:
        """
        Authenticate with the API service.
        Must be implemented by subclasses.

        Returns:
            True if authentication successful, False otherwise
        """

    @abstractmethod
    def validate_response(self, response: Any) -> bool:
        """
        Validate API response format.
        Must be implemented by subclasses.

        Args:
            response: Decoded API response

        Returns:
            True if response is valid, False otherwise
        """


class BalanceProvider(ABC):
    """
    Capability interface for reaching a blockchain data provider.

    Implementations are synchronous and raise ProviderError on any upstream
    failure. The connectivity status moves from CONSTRUCTED to READY or
    DEGRADED when probe() is called.
    """

    status: ProviderStatus = ProviderStatus.CONSTRUCTED

    @abstractmethod
    def probe(self) -> ProviderStatus:
        """Check connectivity once and record the resulting status."""

    @abstractmethod
    def fetch_balance(self, chain: str, address: str) -> RawBalance:
        """Fetch the raw native balance payload for an address on a chain."""

    @abstractmethod
    def fetch_token_balances(self, chain: str, address: str) -> List[Dict[str, str]]:
        """
        Fetch fungible token balances.

        Returns:
            List of {"symbol", "contractAddress", "balance"} dictionaries
        """

    @abstractmethod
    def fetch_nfts(self, chain: str, address: str) -> List[Dict[str, Any]]:
        """
        Fetch NFTs held by an address.

        Returns:
            List of {"contractAddress", "tokenId", "name", "balance"} dictionaries
        """

    @abstractmethod
    def check_malicious_address(self, address: str) -> bool:
        """Return True if the address is reported as malicious."""

    @abstractmethod
    def get_transaction_history(
        self, address: str, chain: str = "ethereum", limit: int = 10
    ) -> List[Dict[str, Any]]:
        """Return the most recent transactions for an address."""

    @property
    def is_degraded(self) -> bool:
        return self.status == ProviderStatus.DEGRADED
