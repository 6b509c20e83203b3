"""
Portfolio Analyzer for Multi-Chain Wallets

This is the main entry point for portfolio analysis. The analyzer wires the
balance provider, price oracle and services together and exposes the
operations used by the HTTP server and the command line.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from adapters.base import BalanceProvider, ProviderStatus
from adapters.tatum import TatumAdapter
from config import CHAIN_CONFIG, Config
from exceptions import PortfolioError, UnexpectedError
from insights.query_analyzer import QueryAnalyzer
from models.portfolio_models import Portfolio
from services.activity_service import ActivityService
from services.portfolio_service import PortfolioAggregator
from services.pricing_service import PriceOracle

logger = logging.getLogger(__name__)


class PortfolioAnalyzer:
    """Main portfolio analyzer coordinating all services."""

    def __init__(
        self,
        provider: BalanceProvider,
        price_oracle: Optional[PriceOracle] = None,
        query_analyzer: Optional[QueryAnalyzer] = None,
    ):
        """Initialize with an explicitly constructed provider client."""
        self.provider = provider
        self.price_oracle = price_oracle or PriceOracle()
        self.query_analyzer = query_analyzer or QueryAnalyzer()

        # Initialize services
        self.activity_service = ActivityService(provider)
        self.aggregator = PortfolioAggregator(
            provider, self.price_oracle, self.activity_service
        )

    @classmethod
    def from_config(cls) -> "PortfolioAnalyzer":
        """Build an analyzer backed by the Tatum API and CoinGecko."""
        return cls(TatumAdapter(api_key=Config.TATUM_API_KEY), PriceOracle())

    async def __aenter__(self):
        """Async context manager entry."""
        await self.price_oracle.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.price_oracle.__aexit__(exc_type, exc_val, exc_tb)

    def probe(self) -> ProviderStatus:
        """Probe the provider once; the result gates portfolio enhancement."""
        return self.provider.probe()

    async def get_portfolio(
        self, address: str, comprehensive: bool = False
    ) -> Portfolio:
        """Aggregate a wallet's multi-chain portfolio."""
        return await self.aggregator.aggregate(address, comprehensive=comprehensive)

    async def analyze_query(self, address: str, query: str) -> Dict[str, Any]:
        """
        Rebuild the portfolio and answer a question about it.

        Args:
            address: Wallet address
            query: Free-text question

        Returns:
            Dictionary with the analysis text, portfolio data, timestamp and query

        Raises:
            InvalidAddressError: the address fails format validation
            UnexpectedError: anything else went wrong
        """
        logger.info(f"🤖 Analysis request: {query!r} for wallet {address}")
        try:
            portfolio = await self.aggregator.aggregate(address, comprehensive=True)
            analysis = self.query_analyzer.analyze(portfolio, query)
        except PortfolioError:
            raise
        except Exception as e:
            raise UnexpectedError(f"Failed to analyze portfolio: {e}") from e

        return {
            "analysis": analysis,
            "portfolioData": portfolio.to_dict(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "query": query,
        }

    def get_supported_chains(self) -> List[str]:
        """Chains the aggregator knows how to fetch."""
        return list(CHAIN_CONFIG)

    async def get_exchange_rates(self, currencies: List[str]) -> Dict[str, float]:
        """USD prices for up to MAX_RATE_CURRENCIES symbols."""
        symbols = [c.strip().upper() for c in currencies if c and c.strip()]
        return await self.price_oracle.rates(symbols[: Config.MAX_RATE_CURRENCIES])

    async def get_transactions(
        self, address: str, chain: str = "ethereum", limit: int = 10
    ) -> List[Dict[str, Any]]:
        """Recent transactions for an address, empty if the lookup failed."""
        transactions = await self.activity_service.get_transactions(
            address, chain=chain, limit=limit
        )
        return transactions or []

    async def get_nfts(
        self, address: str, chain: str = "ethereum"
    ) -> List[Dict[str, Any]]:
        """NFTs held by an address, empty if the lookup failed."""
        return await self.activity_service.get_nfts(address, chain=chain)
