#!/usr/bin/env python3
"""
Command line portfolio analysis.

Usage:
    python main.py <wallet address> [question ...]

Prints the aggregated multi-chain portfolio for the address and, when a
question is given, the analyzer's answer to it.
"""

import asyncio
import sys

from config import Config, mask_secret
from exceptions import InvalidAddressError
from logging_config import setup_logging
from portfolio_analyzer import PortfolioAnalyzer


def print_portfolio(portfolio) -> None:
    """Print a portfolio breakdown ordered by chain."""
    print(f"\n💰 PORTFOLIO BREAKDOWN FOR {portfolio.address}")
    print("=" * 80)
    print(f"📊 Total Portfolio Value: ${portfolio.total_usd_value:,.2f}")
    print()
    print(f"{'Chain':<12} {'Symbol':<8} {'Balance':<20} {'Value (USD)':<15} {'Tokens':<6}")
    print("-" * 80)

    for chain in portfolio.chains:
        print(
            f"{chain.name:<12} {chain.symbol:<8} {chain.balance:<20} "
            f"${chain.usd_value:<14,.2f} {len(chain.tokens):<6}"
        )
        for token in sorted(chain.tokens, key=lambda t: t.usd_value, reverse=True):
            print(f"   • {token.symbol}: {token.balance} (${token.usd_value:,.2f})")

    if portfolio.security is not None:
        status = "⚠️  flagged" if portfolio.security.is_malicious else "✅ clean"
        print(f"\n🛡️  Security: {status}")
    if portfolio.recent_activity is not None:
        print(f"⚡ Recent transactions: {portfolio.recent_activity.transaction_count}")


async def run(address: str, query: str = None) -> int:
    """Analyze one wallet and optionally answer a question about it."""
    print("🚀 Multi-Chain Portfolio Analyzer")
    print(f"🔑 Tatum API key: {mask_secret(Config.TATUM_API_KEY)}")

    analyzer = PortfolioAnalyzer.from_config()
    status = await asyncio.to_thread(analyzer.probe)
    print(f"🔗 Provider status: {status.value}")

    async with analyzer:
        try:
            portfolio = await analyzer.get_portfolio(address, comprehensive=True)
        except InvalidAddressError as e:
            print(f"❌ {e}")
            return 1

        print_portfolio(portfolio)

        if query:
            print(f"\n🤖 {query}")
            print("-" * 80)
            print(analyzer.query_analyzer.analyze(portfolio, query))

    return 0


def main() -> int:
    if len(sys.argv) < 2:
        print(__doc__)
        return 2

    setup_logging(Config.LOG_LEVEL)
    address = sys.argv[1]
    query = " ".join(sys.argv[2:]) or None
    return asyncio.run(run(address, query))


if __name__ == "__main__":
    sys.exit(main())
