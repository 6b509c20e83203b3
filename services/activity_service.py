"""
Activity service for best-effort wallet enrichment.

Handles the auxiliary provider lookups (malicious-address check, recent
transaction history) that decorate a comprehensive portfolio. Each lookup has
its own timeout and its failure only drops that one piece of data.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from adapters.base import BalanceProvider
from config import Config
from exceptions import ChainFetchError
from models.portfolio_models import RecentActivity, SecurityCheck

logger = logging.getLogger(__name__)


class ActivityService:
    """Service for security and activity lookups on a wallet."""

    def __init__(self, provider: BalanceProvider, timeout: float = None):
        """Initialize with a balance provider."""
        self.provider = provider
        self.timeout = timeout or Config.ENHANCEMENT_TIMEOUT

    async def _call(self, func, *args):
        """Run a blocking provider call in a thread, abandoning it after the timeout."""
        return await asyncio.wait_for(asyncio.to_thread(func, *args), self.timeout)

    async def get_security_check(self, address: str) -> Optional[SecurityCheck]:
        """Check whether the address is flagged as malicious."""
        try:
            is_malicious = await self._call(
                self.provider.check_malicious_address, address
            )
        except asyncio.TimeoutError:
            logger.warning(f"Security check for {address} timed out")
            return None
        except ChainFetchError as e:
            logger.warning(f"Security check failed for {address}: {e}")
            return None
        except Exception:
            logger.exception(f"Unexpected error in security check for {address}")
            return None
        return SecurityCheck(is_malicious=bool(is_malicious), checked=True)

    async def get_recent_activity(
        self, address: str, limit: int = 5
    ) -> Optional[RecentActivity]:
        """Count the address's most recent transactions."""
        transactions = await self.get_transactions(address, limit=limit)
        if transactions is None:
            return None
        return RecentActivity(transaction_count=len(transactions))

    async def get_transactions(
        self, address: str, chain: str = "ethereum", limit: int = 10
    ) -> Optional[List[Dict[str, Any]]]:
        """Get recent transactions, or None if the lookup failed."""
        try:
            return await self._call(
                self.provider.get_transaction_history, address, chain, limit
            )
        except asyncio.TimeoutError:
            logger.warning(f"Transaction history for {address} timed out")
        except ChainFetchError as e:
            logger.warning(f"Transaction history failed for {address}: {e}")
        except Exception:
            logger.exception(f"Unexpected error in transaction history for {address}")
        return None

    async def get_nfts(
        self, address: str, chain: str = "ethereum"
    ) -> List[Dict[str, Any]]:
        """Get NFTs held by an address, empty if the lookup failed."""
        try:
            return await self._call(self.provider.fetch_nfts, chain, address)
        except asyncio.TimeoutError:
            logger.warning(f"NFT lookup for {address} timed out")
        except ChainFetchError as e:
            logger.warning(f"NFT lookup failed for {address}: {e}")
        except Exception:
            logger.exception(f"Unexpected error in NFT lookup for {address}")
        return []

    async def enhance(self, address: str) -> Dict[str, Any]:
        """
        Run all enrichment lookups concurrently.

        Returns:
            Dictionary with "security" and/or "recent_activity" keys for the
            lookups that succeeded
        """
        security, recent_activity = await asyncio.gather(
            self.get_security_check(address), self.get_recent_activity(address)
        )
        enhancements = {}
        if security is not None:
            enhancements["security"] = security
        if recent_activity is not None:
            enhancements["recent_activity"] = recent_activity
        return enhancements
