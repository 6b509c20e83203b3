"""
Data models for multi-chain portfolio aggregation.

Holdings and portfolios are immutable once built. USD totals are always derived
by summation so a portfolio's total can never drift from its chains.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


def parse_amount(value: Any) -> float:
    """Convert a textual balance to a float, treating garbage as zero."""
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    # NaN and infinities are not balances
    if amount != amount or amount in (float("inf"), float("-inf")):
        return 0.0
    return amount


@dataclass(frozen=True)
class RawBalance:
    """Undecoded balance payload returned by a provider for one chain."""

    chain: str
    address: str
    payload: Dict[str, Any]


@dataclass(frozen=True)
class TokenHolding:
    """A fungible token position on a single chain."""

    symbol: str
    contract_address: str
    balance: str
    usd_value: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "contractAddress": self.contract_address,
            "balance": self.balance,
            "usdValue": self.usd_value,
        }


@dataclass(frozen=True)
class ChainHolding:
    """One chain's native position plus its tokens."""

    name: str
    symbol: str
    balance: str
    native_usd_value: float = 0.0
    tokens: Tuple[TokenHolding, ...] = ()

    @property
    def token_usd_value(self) -> float:
        """Total USD value of the tokens held on this chain."""
        return sum(token.usd_value for token in self.tokens)

    @property
    def usd_value(self) -> float:
        """Native USD value plus all token USD values."""
        return self.native_usd_value + self.token_usd_value

    @classmethod
    def placeholder(cls, chain: str, symbol: str) -> "ChainHolding":
        """Zero-value stand-in for a chain whose fetch failed."""
        return cls(name=chain, symbol=symbol, balance="0")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "balance": self.balance,
            "usdValue": self.usd_value,
            "nativeUsdValue": self.native_usd_value,
            "tokens": [token.to_dict() for token in self.tokens],
        }


@dataclass(frozen=True)
class SecurityCheck:
    """Result of a malicious-address lookup."""

    is_malicious: bool
    checked: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {"isMalicious": self.is_malicious, "checked": self.checked}


@dataclass(frozen=True)
class RecentActivity:
    """Summary of an address's most recent transactions."""

    transaction_count: int

    @property
    def has_recent_activity(self) -> bool:
        return self.transaction_count > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transactionCount": self.transaction_count,
            "hasRecentActivity": self.has_recent_activity,
        }


@dataclass(frozen=True)
class Portfolio:
    """Aggregated multi-chain portfolio for a single address."""

    address: str
    chains: Tuple[ChainHolding, ...] = ()

    # Only set by the comprehensive variant, and only when the lookup succeeded
    security: Optional[SecurityCheck] = None
    recent_activity: Optional[RecentActivity] = None

    @property
    def total_usd_value(self) -> float:
        """Sum of every chain's USD value, recomputed on each access."""
        return sum(chain.usd_value for chain in self.chains)

    @property
    def chain_names(self) -> Tuple[str, ...]:
        return tuple(chain.name for chain in self.chains)

    def get_chain(self, name: str) -> Optional[ChainHolding]:
        """Get the holding for a chain by id, if present."""
        for chain in self.chains:
            if chain.name == name:
                return chain
        return None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "address": self.address,
            "chains": [chain.to_dict() for chain in self.chains],
            "totalUsdValue": self.total_usd_value,
        }
        if self.security is not None:
            data["security"] = self.security.to_dict()
        if self.recent_activity is not None:
            data["recentActivity"] = self.recent_activity.to_dict()
        return data


@dataclass(frozen=True)
class Holding:
    """Flattened view of one position, native or token, used for analytics."""

    symbol: str
    balance: float
    usd_value: float
    chain: str
    type: str  # "native" or "token"
    contract_address: Optional[str] = None

    @property
    def price_usd(self) -> float:
        """Unit price derived from value and balance."""
        if self.balance > 0:
            return self.usd_value / self.balance
        return 0.0

    @property
    def is_native(self) -> bool:
        return self.type == "native"
