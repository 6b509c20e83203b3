"""
Balance service for fetching one chain's holdings for an address.

The provider client is synchronous, so each call runs in a worker thread and
several chains can be fetched concurrently from the event loop.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

from adapters.base import BalanceProvider
from config import CHAIN_CONFIG
from exceptions import ProviderError, UnsupportedChainError
from models.portfolio_models import ChainHolding, TokenHolding, parse_amount
from services.pricing_service import PriceOracle

logger = logging.getLogger(__name__)

# Legacy response shapes, tried in this order
BALANCE_FIELDS: Tuple[str, ...] = ("balance", "value", "result")


def extract_native_balance(payload: Optional[Dict[str, Any]]) -> str:
    """
    Pull the native balance out of a provider payload.

    The first of BALANCE_FIELDS that is present and not null wins. Numeric
    values are rendered as strings. Returns "0" when no field is present.
    """
    if not isinstance(payload, dict):
        return "0"
    for field in BALANCE_FIELDS:
        value = payload.get(field)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            continue
        return str(value)
    return "0"


class ChainBalanceFetcher:
    """Service for fetching and pricing one chain's native and token balances."""

    def __init__(self, provider: BalanceProvider, price_oracle: PriceOracle):
        """Initialize with a balance provider and a price oracle."""
        self.provider = provider
        self.price_oracle = price_oracle

    async def fetch(self, address: str, chain: str) -> ChainHolding:
        """
        Fetch a chain holding for an address.

        Raises:
            UnsupportedChainError: chain is not in CHAIN_CONFIG
            ProviderError: the balance call failed
        """
        config = CHAIN_CONFIG.get(chain)
        if config is None:
            raise UnsupportedChainError(chain)

        raw = await asyncio.to_thread(self.provider.fetch_balance, chain, address)
        balance = extract_native_balance(raw.payload)

        native_usd_value, tokens = await asyncio.gather(
            self.price_oracle.value_of(config.symbol, parse_amount(balance)),
            self._fetch_tokens(address, chain),
        )

        holding = ChainHolding(
            name=chain,
            symbol=config.symbol,
            balance=balance,
            native_usd_value=native_usd_value,
            tokens=tuple(tokens),
        )
        logger.info(
            f"✅ {chain}: {balance} {config.symbol} + {len(tokens)} tokens "
            f"= ${holding.usd_value:,.2f}"
        )
        return holding

    async def _fetch_tokens(self, address: str, chain: str) -> List[TokenHolding]:
        """Fetch and price token balances. Failures yield an empty list."""
        try:
            raw_tokens = await asyncio.to_thread(
                self.provider.fetch_token_balances, chain, address
            )
            return await self._price_tokens(raw_tokens)
        except (ProviderError, UnsupportedChainError) as e:
            logger.warning(f"Could not fetch tokens for {chain}: {e}")
        except Exception:
            logger.exception(f"Unexpected error fetching tokens for {chain}")
        return []

    async def _price_tokens(self, raw_tokens: List[Dict[str, Any]]) -> List[TokenHolding]:
        values = await asyncio.gather(
            *(
                self.price_oracle.value_of(
                    token.get("symbol", ""), parse_amount(token.get("balance"))
                )
                for token in raw_tokens
            )
        )
        return [
            TokenHolding(
                symbol=token.get("symbol", ""),
                contract_address=token.get("contractAddress", ""),
                balance=str(token.get("balance", "0")),
                usd_value=usd_value,
            )
            for token, usd_value in zip(raw_tokens, values)
        ]
