"""
Data models for portfolio aggregation and analysis.
"""

from .portfolio_models import (
    RawBalance,
    TokenHolding,
    ChainHolding,
    SecurityCheck,
    RecentActivity,
    Portfolio,
    Holding,
    parse_amount,
)

__all__ = [
    "RawBalance",
    "TokenHolding",
    "ChainHolding",
    "SecurityCheck",
    "RecentActivity",
    "Portfolio",
    "Holding",
    "parse_amount",
]
