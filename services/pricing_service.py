"""
Pricing service for converting asset balances to USD.

Prices come live from the CoinGecko simple price endpoint. Every lookup is a
single best-effort attempt with a hard timeout; any failure prices the asset
at zero instead of raising.
"""

import asyncio
import logging
from typing import Dict, Iterable, Optional

import aiohttp

from config import COIN_IDS, Config

logger = logging.getLogger(__name__)


class PriceOracle:
    """Service for fetching current USD prices by token symbol."""

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        base_url: str = None,
        timeout: float = None,
    ):
        """Initialize with optional aiohttp session."""
        self.session = session
        self._own_session = session is None
        self.base_url = (base_url or Config.COINGECKO_BASE_URL).rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout or Config.PRICE_TIMEOUT)

    async def __aenter__(self):
        """Async context manager entry."""
        if self._own_session and self.session is None:
            self.session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def close(self):
        """Close the session if this oracle created it."""
        if self._own_session and self.session:
            await self.session.close()
            self.session = None

    @staticmethod
    def coin_id_for(symbol: str) -> str:
        """Map a token symbol to the price service's coin id."""
        return COIN_IDS.get(symbol.upper(), symbol.lower())

    async def price_of(self, symbol: str) -> float:
        """Get the current USD unit price for a symbol, 0.0 on any failure."""
        if not symbol:
            return 0.0

        coin_id = self.coin_id_for(symbol)
        if self.session is None:
            self.session = aiohttp.ClientSession()

        try:
            async with self.session.get(
                f"{self.base_url}/simple/price",
                params={"ids": coin_id, "vs_currencies": "usd"},
                timeout=self.timeout,
            ) as response:
                if response.status != 200:
                    logger.warning(
                        f"Price lookup for {symbol} returned HTTP {response.status}"
                    )
                    return 0.0
                data = await response.json()
        except asyncio.TimeoutError:
            logger.warning(f"Price lookup for {symbol} timed out")
            return 0.0
        except (aiohttp.ClientError, ValueError) as e:
            logger.warning(f"Error fetching USD price for {symbol}: {e}")
            return 0.0

        entry = data.get(coin_id) if isinstance(data, dict) else None
        price = entry.get("usd") if isinstance(entry, dict) else None
        try:
            price = float(price)
        except (TypeError, ValueError):
            return 0.0
        return price if price > 0 else 0.0

    async def value_of(self, symbol: str, amount: float) -> float:
        """Get the USD value of an amount of a symbol."""
        if amount is None or amount <= 0:
            return 0.0
        return amount * await self.price_of(symbol)

    async def rates(self, symbols: Iterable[str]) -> Dict[str, float]:
        """Get USD prices for several symbols concurrently."""
        symbols = list(symbols)
        prices = await asyncio.gather(*(self.price_of(symbol) for symbol in symbols))
        return dict(zip(symbols, prices))
