"""
Configuration for the portfolio analyzer.

Values are read from the environment (a local .env file is loaded first) and
exposed as class attributes on Config. The static per-chain table and the
analysis tuning constants live here as well.
"""

import os
from dataclasses import dataclass
from typing import Dict, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


@dataclass(frozen=True)
class ChainConfig:
    """Static description of a supported chain."""

    symbol: str
    display_name: str
    balance_endpoint: str
    data_chain: Optional[str] = None  # Tatum data API chain id, None if unsupported


# Iteration order here is the order chains appear in a portfolio.
CHAIN_CONFIG: Dict[str, ChainConfig] = {
    "ethereum": ChainConfig(
        "ETH", "Ethereum", "v3/ethereum/account/balance/{address}", "ethereum-mainnet"
    ),
    "polygon": ChainConfig(
        "MATIC", "Polygon", "v3/polygon/account/balance/{address}", "polygon-mainnet"
    ),
    "bsc": ChainConfig(
        "BNB", "BNB Smart Chain", "v3/bsc/account/balance/{address}", "bsc-mainnet"
    ),
    "arbitrum": ChainConfig(
        "ETH", "Arbitrum", "v3/arbitrum/account/balance/{address}", "arb-one-mainnet"
    ),
    "optimism": ChainConfig(
        "ETH", "Optimism", "v3/optimism/account/balance/{address}", "optimism-mainnet"
    ),
    "avalanche": ChainConfig(
        "AVAX", "Avalanche", "v3/avalanche/account/balance/{address}"
    ),
    "solana": ChainConfig(
        "SOL", "Solana", "v3/solana/account/balance/{address}", "solana-mainnet"
    ),
    "bitcoin": ChainConfig("BTC", "Bitcoin", "v3/bitcoin/address/balance/{address}"),
}

# Symbol -> CoinGecko coin id. Unknown symbols fall back to the lower-cased symbol.
COIN_IDS: Dict[str, str] = {
    "ETH": "ethereum",
    "WETH": "weth",
    "MATIC": "polygon",
    "SOL": "solana",
    "BNB": "binancecoin",
    "AVAX": "avalanche-2",
    "BTC": "bitcoin",
    "USDC": "usd-coin",
    "USDT": "tether",
    "DAI": "dai",
}


@dataclass(frozen=True)
class AnalysisThresholds:
    """Product-tuning constants used by the query analyzer."""

    # Risk buckets (USD, upper bounds inclusive)
    whale_usd: float = 10000.0
    high_usd: float = 1000.0
    medium_usd: float = 100.0
    low_usd: float = 1.0

    # Smart contract risk by number of token holdings
    contract_risk_high: int = 20
    contract_risk_medium: int = 10

    # Chain concentration (percent of total value)
    chain_high_pct: float = 70.0
    chain_well_diversified_pct: float = 40.0

    # Top-3 holdings concentration (percent of total value)
    top3_high_pct: float = 80.0
    top3_moderate_pct: float = 60.0

    # Recommendations
    dust_usd: float = 5.0
    dust_cleanup_count: int = 15
    rebalance_share: float = 0.6
    accumulate_below_usd: float = 1000.0
    secure_above_usd: float = 50000.0


class Config:
    """Environment-backed settings."""

    TATUM_API_KEY = os.getenv("TATUM_API_KEY")
    TATUM_BASE_URL = os.getenv("TATUM_BASE_URL", "https://api.tatum.io")
    COINGECKO_BASE_URL = os.getenv(
        "COINGECKO_BASE_URL", "https://api.coingecko.com/api/v3"
    )

    # Timeouts in seconds
    PROVIDER_TIMEOUT = float(os.getenv("PROVIDER_TIMEOUT", "10"))
    PRICE_TIMEOUT = float(os.getenv("PRICE_TIMEOUT", "5"))
    ENHANCEMENT_TIMEOUT = float(os.getenv("ENHANCEMENT_TIMEOUT", "5"))

    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", "5002"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    MAX_RATE_CURRENCIES = 5
    DEFAULT_RATE_CURRENCIES = ("ETH", "BTC", "MATIC")


def mask_secret(secret: Optional[str], visible: int = 4) -> str:
    """Mask a credential for log output, keeping only a short prefix."""
    if not secret:
        return "Missing"
    if len(secret) <= visible:
        return "*" * len(secret)
    return f"{secret[:visible]}{'*' * 8}"
