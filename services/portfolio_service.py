"""
Portfolio service for aggregating a wallet across every compatible chain.

Classification picks the candidate chains, each chain is fetched concurrently,
and failed chains are replaced by zero-value placeholders so the caller always
gets one entry per candidate chain.
"""

import asyncio
import dataclasses
import logging
from typing import Optional

from adapters.base import BalanceProvider
from config import CHAIN_CONFIG
from exceptions import ChainFetchError, InvalidAddressError
from models.portfolio_models import ChainHolding, Portfolio
from services.activity_service import ActivityService
from services.address_classifier import is_valid_address, ordered_chains
from services.balance_service import ChainBalanceFetcher
from services.pricing_service import PriceOracle

logger = logging.getLogger(__name__)


class PortfolioAggregator:
    """Service for building a normalized multi-chain portfolio."""

    def __init__(
        self,
        provider: BalanceProvider,
        price_oracle: PriceOracle,
        activity_service: Optional[ActivityService] = None,
    ):
        """Initialize with an injected provider client and price oracle."""
        self.provider = provider
        self.balance_fetcher = ChainBalanceFetcher(provider, price_oracle)
        self.activity_service = activity_service or ActivityService(provider)

    async def aggregate(self, address: str, comprehensive: bool = False) -> Portfolio:
        """
        Aggregate a wallet's holdings across all compatible chains.

        Args:
            address: Wallet address
            comprehensive: Also attach security and recent-activity data

        Raises:
            InvalidAddressError: the address fails format validation
        """
        if not is_valid_address(address):
            raise InvalidAddressError(address)

        chains = ordered_chains(address)
        logger.info(
            f"📋 Compatible chains for address {address[:10]}...: {', '.join(chains)}"
        )

        holdings = await asyncio.gather(
            *(self._fetch_or_placeholder(address, chain) for chain in chains)
        )
        portfolio = Portfolio(address=address, chains=tuple(holdings))

        if comprehensive:
            portfolio = await self._enhance(portfolio)

        logger.info(
            f"💰 Portfolio for {address[:10]}...: ${portfolio.total_usd_value:,.2f} "
            f"across {len(portfolio.chains)} chains"
        )
        return portfolio

    async def _fetch_or_placeholder(self, address: str, chain: str) -> ChainHolding:
        """Fetch one chain, substituting a zero-value holding on failure."""
        try:
            return await self.balance_fetcher.fetch(address, chain)
        except ChainFetchError as e:
            logger.warning(f"Error fetching {chain} data: {e}")
        except Exception:
            logger.exception(f"Unexpected error fetching {chain} data")
        return ChainHolding.placeholder(chain, placeholder_symbol(chain))

    async def _enhance(self, portfolio: Portfolio) -> Portfolio:
        """Attach best-effort security and activity data."""
        if self.provider.is_degraded:
            logger.info("Provider degraded, skipping portfolio enhancement")
            return portfolio

        enhancements = await self.activity_service.enhance(portfolio.address)
        return dataclasses.replace(portfolio, **enhancements)


def placeholder_symbol(chain: str) -> str:
    """Configured native symbol for a chain, or the upper-cased chain id."""
    config = CHAIN_CONFIG.get(chain)
    return config.symbol if config else chain.upper()
