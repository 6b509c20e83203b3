"""
Rule-based portfolio question answering.

This module answers free-text questions about an aggregated portfolio by
matching keywords to an intent and recomputing simple aggregates (chain
distribution, value buckets, concentration) over the portfolio's holdings.
Nothing here performs I/O, and every code path returns text.
"""

from collections import namedtuple
from typing import Callable, Dict, List, Optional

from config import AnalysisThresholds
from models.portfolio_models import Holding, Portfolio, parse_amount

Intent = namedtuple("Intent", ["name", "predicate", "handler"])

NO_PORTFOLIO_MESSAGE = (
    "🤖 I don't have any portfolio data yet. "
    "Load a wallet address first, then ask me about it!"
)


def keyword_predicate(*keywords: str) -> Callable[[str], bool]:
    """Build a predicate matching a lower-cased query containing any keyword."""
    return lambda query: any(keyword in query for keyword in keywords)


def flatten_holdings(portfolio: Portfolio) -> List[Holding]:
    """Flatten chains and their tokens into one list of holdings."""
    holdings = []
    for chain in portfolio.chains:
        holdings.append(
            Holding(
                symbol=chain.symbol,
                balance=parse_amount(chain.balance),
                usd_value=chain.native_usd_value,
                chain=chain.name,
                type="native",
            )
        )
        for token in chain.tokens:
            holdings.append(
                Holding(
                    symbol=token.symbol,
                    balance=parse_amount(token.balance),
                    usd_value=token.usd_value or 0.0,
                    chain=chain.name,
                    type="token",
                    contract_address=token.contract_address,
                )
            )
    return holdings


def _pct(value: float, total: float) -> float:
    return (value / total) * 100 if total > 0 else 0.0


def _by_value(holdings: List[Holding]) -> List[Holding]:
    return sorted(holdings, key=lambda h: h.usd_value, reverse=True)


class QueryAnalyzer:
    """Answers portfolio questions with deterministic rule evaluation."""

    def __init__(self, thresholds: Optional[AnalysisThresholds] = None):
        self.thresholds = thresholds or AnalysisThresholds()

        # First match wins, so reordering changes which report a query gets.
        self.intents = (
            Intent(
                "diversification",
                keyword_predicate("diversification", "diversity", "spread"),
                self._diversification,
            ),
            Intent(
                "risk",
                keyword_predicate("risk", "exposure", "danger"),
                self._risk,
            ),
            Intent(
                "performance",
                keyword_predicate("performance", "gains", "profit", "top", "best"),
                self._performance,
            ),
            Intent(
                "recommendations",
                keyword_predicate("recommendations", "advice", "suggest", "should"),
                self._recommendations,
            ),
            Intent(
                "summary",
                keyword_predicate("summary", "overview", "status"),
                self._summary,
            ),
            Intent(
                "largest_holding",
                keyword_predicate("biggest", "largest", "most valuable"),
                self._largest_holding,
            ),
        )

    def classify_intent(self, query: str) -> str:
        """Name of the intent a query maps to, or "help"."""
        lower_query = (query or "").lower()
        for intent in self.intents:
            if intent.predicate(lower_query):
                return intent.name
        return "help"

    def analyze(self, portfolio: Optional[Portfolio], query: str) -> str:
        """
        Produce a text report answering a query about a portfolio.

        Args:
            portfolio: Aggregated portfolio, or None if no wallet is loaded
            query: Free-text question

        Returns:
            Formatted multi-line report
        """
        if portfolio is None:
            return NO_PORTFOLIO_MESSAGE

        holdings = flatten_holdings(portfolio)
        total = portfolio.total_usd_value
        lower_query = (query or "").lower()

        for intent in self.intents:
            if intent.predicate(lower_query):
                return intent.handler(portfolio, holdings, total)
        return self._help(total)

    def _diversification(
        self, portfolio: Portfolio, holdings: List[Holding], total: float
    ) -> str:
        t = self.thresholds
        chain_values: Dict[str, float] = {}
        type_values = {"native": 0.0, "token": 0.0}
        for holding in holdings:
            chain_values[holding.chain] = (
                chain_values.get(holding.chain, 0.0) + holding.usd_value
            )
            type_values[holding.type] += holding.usd_value

        output = ["🔍 Portfolio Diversification Analysis:", ""]
        output.append(f"💰 Total Portfolio Value: ${total:.2f}")

        if not chain_values:
            output.append("\nNo holdings found for this wallet.")
            return "\n".join(output)

        distribution = sorted(chain_values.items(), key=lambda x: x[1], reverse=True)
        output.append("\n📊 Chain Distribution:")
        for chain, value in distribution:
            output.append(f"{chain.upper()}: ${value:.2f} ({_pct(value, total):.1f}%)")

        output.append("\n💎 Asset Types:")
        output.append(
            f"• Native tokens: ${type_values['native']:.2f} "
            f"({_pct(type_values['native'], total):.1f}%)"
        )
        output.append(
            f"• ERC-20/SPL tokens: ${type_values['token']:.2f} "
            f"({_pct(type_values['token'], total):.1f}%)"
        )

        dominant_chain, dominant_value = distribution[0]
        share = round(_pct(dominant_value, total), 1)
        if total <= 0:
            output.append(
                "\nℹ️ No priced holdings yet, concentration cannot be assessed."
            )
        elif share > t.chain_high_pct:
            output.append(
                f"\n⚠️ HIGH CONCENTRATION RISK: {dominant_chain.upper()} represents "
                f"{share:.1f}% of your portfolio. Consider diversifying!"
            )
        elif share < t.chain_well_diversified_pct:
            output.append(
                "\n✅ WELL DIVERSIFIED: Good distribution across multiple chains!"
            )
        else:
            output.append(
                f"\n⚖️ MODERATE CONCENTRATION: {dominant_chain.upper()} dominance "
                f"is reasonable at {share:.1f}%"
            )
        return "\n".join(output)

    def _risk_bucket(self, usd_value: float) -> Optional[str]:
        t = self.thresholds
        if usd_value > t.whale_usd:
            return "whale"
        if usd_value > t.high_usd:
            return "high"
        if usd_value > t.medium_usd:
            return "medium"
        if usd_value > t.low_usd:
            return "low"
        if usd_value > 0:
            return "dust"
        return None

    def _risk(self, portfolio: Portfolio, holdings: List[Holding], total: float) -> str:
        t = self.thresholds
        buckets: Dict[str, List[Holding]] = {
            "whale": [],
            "high": [],
            "medium": [],
            "low": [],
            "dust": [],
        }
        for holding in holdings:
            bucket = self._risk_bucket(holding.usd_value)
            if bucket:
                buckets[bucket].append(holding)

        output = ["⚠️ Risk & Exposure Analysis:", ""]
        output.append(f"💰 Total at Risk: ${total:.2f}")
        output.append("")
        output.append(
            f"🐋 Whale positions (>${t.whale_usd:,.0f}): {len(buckets['whale'])}"
        )
        output.append(
            f"💎 High-value positions (${t.high_usd:,.0f}-${t.whale_usd:,.0f}): "
            f"{len(buckets['high'])}"
        )
        output.append(
            f"💰 Medium positions (${t.medium_usd:,.0f}-${t.high_usd:,.0f}): "
            f"{len(buckets['medium'])}"
        )
        output.append(
            f"💵 Small positions (${t.low_usd:,.0f}-${t.medium_usd:,.0f}): "
            f"{len(buckets['low'])}"
        )
        output.append(f"🗑️ Dust tokens (<${t.low_usd:,.0f}): {len(buckets['dust'])}")

        major = _by_value(buckets["whale"] + buckets["high"])[:5]
        if major:
            output.append("\n⚡ MAJOR RISK EXPOSURES:")
            for i, holding in enumerate(major, 1):
                level = "🔴" if holding.usd_value > t.whale_usd else "🟡"
                output.append(
                    f"{level} {i}. {holding.balance:.4f} {holding.symbol} = "
                    f"${holding.usd_value:.2f} ({holding.chain})"
                )

        contracts = {
            (h.chain, h.contract_address or h.symbol)
            for h in holdings
            if not h.is_native
        }
        output.append(f"\n🔒 Smart Contract Risk: {len(contracts)} token contracts")
        if len(contracts) > t.contract_risk_high:
            output.append("⚠️ HIGH: Many token contracts increase smart contract risk")
        elif len(contracts) > t.contract_risk_medium:
            output.append("⚖️ MEDIUM: Moderate token diversification")
        else:
            output.append("✅ LOW: Conservative token exposure")
        return "\n".join(output)

    def _performance(
        self, portfolio: Portfolio, holdings: List[Holding], total: float
    ) -> str:
        t = self.thresholds
        active = [h for h in holdings if h.usd_value > 0]
        top_holdings = _by_value(active)[:10]

        output = ["📈 Performance Insights:", ""]
        output.append(f"💰 Current Portfolio Value: ${total:.2f}")
        output.append(f"📊 Active Positions: {len(active)}")

        output.append("\n🏆 TOP HOLDINGS BY VALUE:")
        if not top_holdings:
            output.append("No priced holdings found.")
        for i, holding in enumerate(top_holdings, 1):
            price = holding.price_usd
            price_info = ""
            if price > 0:
                price_info = f" @ ${price:.6f}" if price < 1 else f" @ ${price:.2f}"
            output.append(
                f"{i}. {holding.balance:.4f} {holding.symbol}{price_info} = "
                f"${holding.usd_value:.2f} ({_pct(holding.usd_value, total):.1f}%)"
            )

        concentration = _pct(sum(h.usd_value for h in top_holdings[:3]), total)
        output.append("\n📊 Portfolio Concentration:")
        output.append(f"Top 3 holdings: {concentration:.1f}% of total value")
        if concentration > t.top3_high_pct:
            output.append(
                "⚠️ HIGH CONCENTRATION: Consider diversifying your top holdings"
            )
        elif concentration > t.top3_moderate_pct:
            output.append(
                "⚖️ MODERATE CONCENTRATION: Reasonable but watch for over-exposure"
            )
        else:
            output.append("✅ WELL DISTRIBUTED: Good balance across holdings")
        return "\n".join(output)

    def _recommendations(
        self, portfolio: Portfolio, holdings: List[Holding], total: float
    ) -> str:
        t = self.thresholds
        dust = [h for h in holdings if 0 < h.usd_value <= t.dust_usd]
        chains = sorted({h.chain for h in holdings})
        active = [h for h in holdings if h.usd_value > 0]
        dominant = _by_value(holdings)[0] if holdings else None

        output = ["💡 Investment Recommendations:", ""]
        output.append("📊 Portfolio Health Check:")
        output.append(f"• Total Value: ${total:.2f}")
        output.append(f"• Active Positions: {len(active)}")
        output.append(f"• Chains: {len(chains)}")
        output.append(f"• Dust Tokens: {len(dust)}")

        advice = []
        if len(dust) > t.dust_cleanup_count:
            advice.append(
                f"🧹 CLEANUP: You have {len(dust)} dust tokens (<${t.dust_usd:.0f}). "
                "Consider consolidating to reduce gas fees."
            )
        if len(chains) == 1:
            advice.append(
                f"🌐 DIVERSIFY: All funds on {chains[0].upper()}. "
                "Consider multi-chain exposure."
            )
        if dominant and total > 0 and dominant.usd_value / total > t.rebalance_share:
            advice.append(
                f"⚖️ REBALANCE: {dominant.symbol} is "
                f"{_pct(dominant.usd_value, total):.1f}% of portfolio. "
                "Consider taking profits."
            )
        if total < t.accumulate_below_usd:
            advice.append(
                f"📈 ACCUMULATE: Portfolio under ${t.accumulate_below_usd:,.0f}. "
                "Focus on DCA into blue-chip assets (ETH, BTC, SOL)."
            )
        elif total > t.secure_above_usd:
            advice.append(
                "🔐 SECURE: High-value portfolio. "
                "Consider hardware wallet and insurance."
            )

        chain_value = self._chain_value
        if chain_value(holdings, "ethereum") > chain_value(
            holdings, "polygon"
        ) + chain_value(holdings, "solana"):
            advice.append(
                "💸 GAS OPTIMIZATION: Heavy Ethereum exposure. Consider moving "
                "some assets to Polygon/Solana for lower fees."
            )

        output.append("\n🎯 ACTIONABLE RECOMMENDATIONS:")
        if not advice:
            output.append("✅ Nothing to act on right now. Your portfolio looks balanced.")
        for i, line in enumerate(advice, 1):
            output.append(f"{i}. {line}")

        output.append(
            "\n💎 Remember: This analysis is based on current market data. "
            "Always DYOR (Do Your Own Research)!"
        )
        return "\n".join(output)

    @staticmethod
    def _chain_value(holdings: List[Holding], chain: str) -> float:
        return sum(h.usd_value for h in holdings if h.chain == chain)

    def _summary(
        self, portfolio: Portfolio, holdings: List[Holding], total: float
    ) -> str:
        output = ["📊 Portfolio Overview:", ""]
        output.append(f"💰 Total Value: ${total:.2f}")
        output.append(f"🔗 Chains: {len({h.chain for h in holdings})}")
        output.append(
            f"💎 Active Positions: {len([h for h in holdings if h.usd_value > 0])}"
        )
        output.append("")

        for chain in portfolio.chains:
            line = (
                f"{chain.name.upper()}: {parse_amount(chain.balance):.4f} "
                f"{chain.symbol} (${chain.usd_value:.2f})"
            )
            if chain.tokens:
                count = len(chain.tokens)
                line += f" + {count} token{'s' if count != 1 else ''}"
            output.append(line)

        if portfolio.security is not None:
            flag = (
                "⚠️ reported as malicious"
                if portfolio.security.is_malicious
                else "✅ no reports"
            )
            output.append(f"\n🛡️ Security: {flag}")
        if portfolio.recent_activity is not None:
            output.append(
                f"⚡ Recent transactions: {portfolio.recent_activity.transaction_count}"
            )
        return "\n".join(output)

    def _largest_holding(
        self, portfolio: Portfolio, holdings: List[Holding], total: float
    ) -> str:
        active = [h for h in holdings if h.usd_value > 0]
        if not active:
            return "🔍 No priced holdings found yet, so there is no biggest holding."

        top = _by_value(active)[0]
        return (
            f"🏆 Your biggest holding is {top.symbol}: {top.balance:.4f} "
            f"{top.symbol} worth ${top.usd_value:.2f} on {top.chain} "
            f"({_pct(top.usd_value, total):.1f}% of your ${total:.2f} portfolio)."
        )

    def _help(self, total: float) -> str:
        return (
            f"🤖 I can analyze your ${total:.2f} portfolio!\n\n"
            "Try asking:\n"
            '🔍 "Analyze my portfolio diversification"\n'
            '⚠️ "What\'s my risk exposure?"\n'
            '📈 "Show me performance insights"\n'
            '💡 "Give me investment recommendations"\n'
            '📊 "Portfolio summary"\n'
            '🏆 "What\'s my biggest holding?"'
        )
