"""
Services for portfolio aggregation.
"""

from .address_classifier import classify, is_valid_address, ordered_chains
from .pricing_service import PriceOracle
from .balance_service import ChainBalanceFetcher, extract_native_balance
from .activity_service import ActivityService
from .portfolio_service import PortfolioAggregator

__all__ = [
    "classify",
    "is_valid_address",
    "ordered_chains",
    "PriceOracle",
    "ChainBalanceFetcher",
    "extract_native_balance",
    "ActivityService",
    "PortfolioAggregator",
]
