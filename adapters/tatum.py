#!/usr/bin/env python3
"""
Tatum API Adapter
Specific adapter for fetching balances, token and NFT holdings, transaction
history and address security data from the Tatum REST API.
Documentation: https://docs.tatum.io/reference
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from config import CHAIN_CONFIG, Config, mask_secret
from exceptions import ProviderError, UnsupportedChainError
from models.portfolio_models import RawBalance
from .base import BaseAdapter, BalanceProvider, ProviderStatus

logger = logging.getLogger(__name__)


class TatumAdapter(BaseAdapter, BalanceProvider):
    """Adapter for the Tatum API acting as the portfolio balance provider."""

    def __init__(
        self,
        api_key: str = None,
        base_url: str = None,
        timeout: float = None,
        aux_timeout: float = None,
    ):
        """
        Initialize Tatum adapter.

        Args:
            api_key: Tatum API key (can also be set via TATUM_API_KEY env var)
            base_url: API root, defaults to TATUM_BASE_URL
            timeout: Timeout for balance calls in seconds
            aux_timeout: Timeout for auxiliary (security/activity) calls
        """
        self.api_key = api_key or Config.TATUM_API_KEY
        self.aux_timeout = aux_timeout or Config.ENHANCEMENT_TIMEOUT
        self.status = ProviderStatus.CONSTRUCTED

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["x-api-key"] = self.api_key
        else:
            logger.warning("⚠️  TATUM_API_KEY not set, balance calls will likely fail")

        super().__init__(
            base_url=base_url or Config.TATUM_BASE_URL,
            headers=headers,
            timeout=timeout or Config.PROVIDER_TIMEOUT,
        )

    def authenticate(self) -> bool:
        """
        Authenticate with Tatum by calling the version endpoint.

        Returns:
            True if authentication successful, False otherwise
        """
        if not self.api_key:
            self._handle_error("No API key provided for Tatum authentication")
            return False

        try:
            response = self.get("v3/tatum/version", timeout=self.aux_timeout)
        except ProviderError as e:
            self._handle_error(f"Authentication failed: {e}")
            return False
        return self.validate_response(response)

    def validate_response(self, response: Any) -> bool:
        """Tatum JSON responses used here are always objects."""
        return isinstance(response, dict)

    def probe(self) -> ProviderStatus:
        """Probe connectivity and move to READY or DEGRADED."""
        logger.info(f"🔗 Probing Tatum API (key: {mask_secret(self.api_key)})")
        self.status = (
            ProviderStatus.READY if self.authenticate() else ProviderStatus.DEGRADED
        )
        logger.info(f"Tatum provider status: {self.status.value}")
        return self.status

    # === Balance Endpoints ===

    def fetch_balance(self, chain: str, address: str) -> RawBalance:
        """
        Get the native balance payload for an address.

        Args:
            chain: Chain id from CHAIN_CONFIG
            address: Wallet address

        Returns:
            RawBalance wrapping the decoded JSON object
        """
        config = CHAIN_CONFIG.get(chain)
        if config is None:
            raise UnsupportedChainError(chain)

        response = self.get(config.balance_endpoint.format(address=address))
        if not self.validate_response(response):
            raise ProviderError(f"Unexpected {chain} balance response: {response!r}")

        if "incoming" in response and "balance" not in response:
            response = {**response, "balance": _utxo_balance(response)}

        logger.debug(f"{chain} balance data: {response}")
        return RawBalance(chain=chain, address=address, payload=response)

    def fetch_token_balances(self, chain: str, address: str) -> List[Dict[str, str]]:
        """
        Get fungible token balances from the Tatum data API.

        Args:
            chain: Chain id from CHAIN_CONFIG
            address: Wallet address

        Returns:
            List of token dictionaries, empty when the chain has no data API id
        """
        tokens = []
        for item in self._wallet_portfolio(chain, address, "fungible"):
            contract_address = item.get("tokenAddress") or ""
            balance = item.get("balance")
            if balance is None:
                continue
            tokens.append(
                {
                    "symbol": item.get("symbol") or _short_address(contract_address),
                    "contractAddress": contract_address,
                    "balance": str(balance),
                }
            )
        return tokens

    def fetch_nfts(self, chain: str, address: str) -> List[Dict[str, Any]]:
        """
        Get NFTs held by an address from the Tatum data API.

        Args:
            chain: Chain id from CHAIN_CONFIG
            address: Wallet address

        Returns:
            List of NFT dictionaries, empty when the chain has no data API id
        """
        return [
            {
                "contractAddress": item.get("tokenAddress") or "",
                "tokenId": item.get("tokenId"),
                "name": _nft_name(item),
                "balance": str(item.get("balance", "1")),
            }
            for item in self._wallet_portfolio(chain, address, "nft")
        ]

    def _wallet_portfolio(
        self, chain: str, address: str, token_types: str
    ) -> List[Dict[str, Any]]:
        """Raw items from the wallet portfolio endpoint for one token type."""
        config = CHAIN_CONFIG.get(chain)
        if config is None:
            raise UnsupportedChainError(chain)
        if not config.data_chain:
            return []

        response = self.get(
            "v4/data/wallet/portfolio",
            params={
                "chain": config.data_chain,
                "addresses": address,
                "tokenTypes": token_types,
            },
        )
        if not self.validate_response(response):
            raise ProviderError(f"Unexpected {chain} portfolio response: {response!r}")

        items = response.get("result") or []
        if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
            raise ProviderError(f"Malformed {chain} portfolio items: {items!r}")
        return items

    # === Security & Activity Endpoints ===

    def check_malicious_address(self, address: str) -> bool:
        """
        Check whether an address is reported as malicious.

        Returns:
            True if flagged, False if the address is clean
        """
        response = self.get(f"v3/security/address/{address}", timeout=self.aux_timeout)
        if not self.validate_response(response):
            raise ProviderError(f"Unexpected security response: {response!r}")

        if "isKnownMalicious" in response:
            return bool(response["isKnownMalicious"])
        return response.get("status", "valid") != "valid"

    def get_transaction_history(
        self, address: str, chain: str = "ethereum", limit: int = 10
    ) -> List[Dict[str, Any]]:
        """
        Get the most recent transactions for an address.

        Args:
            address: Wallet address
            chain: Chain id from CHAIN_CONFIG
            limit: Maximum number of transactions to return

        Returns:
            Transaction list (newest first)
        """
        config = CHAIN_CONFIG.get(chain)
        if config is None:
            raise UnsupportedChainError(chain)
        if not config.data_chain:
            return []

        response = self.get(
            "v4/data/transaction/history",
            params={
                "chain": config.data_chain,
                "addresses": address,
                "pageSize": limit,
            },
            timeout=self.aux_timeout,
        )
        if not self.validate_response(response):
            raise ProviderError(f"Unexpected transaction response: {response!r}")
        transactions = response.get("result") or []
        if not isinstance(transactions, list):
            raise ProviderError(f"Malformed transaction list: {transactions!r}")
        return transactions[:limit]


def _short_address(contract_address: Optional[str]) -> str:
    """Fallback label for tokens the provider returns without a symbol."""
    if not contract_address:
        return "UNKNOWN"
    return f"{contract_address[:6]}…{contract_address[-4:]}"


def _nft_name(item: Dict[str, Any]) -> Optional[str]:
    metadata = item.get("metadata")
    if isinstance(metadata, dict) and metadata.get("name"):
        return metadata["name"]
    return item.get("symbol")


def _utxo_balance(payload: Dict[str, Any]) -> str:
    """Spendable balance of a UTXO address: confirmed incoming minus outgoing."""
    try:
        incoming = Decimal(str(payload.get("incoming") or "0"))
        outgoing = Decimal(str(payload.get("outgoing") or "0"))
    except InvalidOperation as e:
        raise ProviderError(f"Unparseable UTXO balance: {payload!r}") from e
    return str(incoming - outgoing)
