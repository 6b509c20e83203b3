"""Tests for rule-based portfolio question answering."""

import pytest

from config import AnalysisThresholds
from conftest import make_chain, make_portfolio, make_token
from insights import QueryAnalyzer, flatten_holdings
from insights.query_analyzer import NO_PORTFOLIO_MESSAGE
from models.portfolio_models import RecentActivity, SecurityCheck


@pytest.fixture
def analyzer():
    return QueryAnalyzer()


def test_biggest_holding_names_the_token(analyzer):
    portfolio = make_portfolio(
        make_chain("ethereum", "ETH", "0.05", 100.0, [make_token("UNI", "50", 500.0)])
    )

    answer = analyzer.analyze(portfolio, "What's my biggest holding?")

    assert "UNI" in answer
    assert "$500.00 on ethereum" in answer


def test_flatten_keeps_native_and_token_values_separate():
    portfolio = make_portfolio(
        make_chain("ethereum", "ETH", "0.05", 100.0, [make_token("UNI", "50", 500.0)])
    )

    holdings = flatten_holdings(portfolio)

    assert [(h.symbol, h.usd_value, h.type) for h in holdings] == [
        ("ETH", 100.0, "native"),
        ("UNI", 500.0, "token"),
    ]
    assert sum(h.usd_value for h in holdings) == portfolio.total_usd_value


def test_diversification_flags_dominant_chain(analyzer):
    portfolio = make_portfolio(
        make_chain("ethereum", "ETH", "4.5", 9000.0),
        make_chain("polygon", "MATIC", "2000", 1000.0),
    )

    answer = analyzer.analyze(portfolio, "analyze my diversification")

    assert "HIGH CONCENTRATION RISK" in answer
    assert "ETHEREUM" in answer
    assert "90.0%" in answer


def test_diversification_well_diversified(analyzer):
    portfolio = make_portfolio(
        make_chain("ethereum", "ETH", "1", 350.0),
        make_chain("polygon", "MATIC", "1", 350.0),
        make_chain("bsc", "BNB", "1", 300.0),
    )

    assert "WELL DIVERSIFIED" in analyzer.analyze(portfolio, "how is my spread?")


def test_diversification_moderate(analyzer):
    portfolio = make_portfolio(
        make_chain("ethereum", "ETH", "1", 600.0),
        make_chain("polygon", "MATIC", "1", 400.0),
    )

    answer = analyzer.analyze(portfolio, "diversity check")
    assert "MODERATE CONCENTRATION" in answer
    assert "60.0%" in answer


def test_diversification_with_zero_total_does_not_divide_by_zero(analyzer):
    portfolio = make_portfolio(make_chain("ethereum", "ETH", "0", 0.0))

    answer = analyzer.analyze(portfolio, "diversification")
    assert "$0.00" in answer
    assert "HIGH CONCENTRATION" not in answer


@pytest.mark.parametrize(
    "query,intent",
    [
        ("diversification risk", "diversification"),
        ("what is my risk exposure", "risk"),
        ("top risk factors", "risk"),
        ("show my best performers", "performance"),
        ("what should I do", "recommendations"),
        ("give me an overview", "summary"),
        ("PORTFOLIO SUMMARY", "summary"),
        ("which is my largest position", "largest_holding"),
        ("what is my most valuable asset", "largest_holding"),
        ("hello there", "help"),
        ("", "help"),
    ],
)
def test_intent_priority(analyzer, query, intent):
    assert analyzer.classify_intent(query) == intent


def test_no_portfolio(analyzer):
    assert analyzer.analyze(None, "summary") == NO_PORTFOLIO_MESSAGE


def test_unmatched_query_gets_help_with_total(analyzer):
    portfolio = make_portfolio(make_chain("ethereum", "ETH", "1", 2000.0))

    answer = analyzer.analyze(portfolio, "what's the weather")

    assert "$2000.00" in answer
    assert "Try asking" in answer


def test_risk_buckets_and_major_exposures(analyzer):
    portfolio = make_portfolio(
        make_chain(
            "ethereum",
            "ETH",
            "10",
            20000.0,
            [
                make_token("USDC", "5000", 5000.0),
                make_token("UNI", "20", 200.0),
                make_token("SHIB", "1000", 0.5),
            ],
        ),
    )

    answer = analyzer.analyze(portfolio, "risk")

    assert "Whale positions (>$10,000): 1" in answer
    assert "High-value positions ($1,000-$10,000): 1" in answer
    assert "Medium positions ($100-$1,000): 1" in answer
    assert "Dust tokens (<$1): 1" in answer
    assert "🔴 1. 10.0000 ETH = $20000.00 (ethereum)" in answer
    assert "🟡 2. 5000.0000 USDC = $5000.00 (ethereum)" in answer
    assert "3 token contracts" in answer
    assert "LOW: Conservative token exposure" in answer


def test_contract_risk_counts_distinct_contracts(analyzer):
    tokens = [make_token(f"T{i}", "1", 1.0, contract=f"0x{i:040x}") for i in range(21)]
    portfolio = make_portfolio(make_chain("ethereum", "ETH", "1", 10.0, tokens))

    answer = analyzer.analyze(portfolio, "what's my exposure")

    assert "21 token contracts" in answer
    assert "HIGH: Many token contracts" in answer


def test_custom_thresholds():
    analyzer = QueryAnalyzer(AnalysisThresholds(contract_risk_high=2))
    tokens = [make_token(f"T{i}", "1", 1.0) for i in range(3)]
    portfolio = make_portfolio(make_chain("ethereum", "ETH", "1", 10.0, tokens))

    assert "HIGH: Many token contracts" in analyzer.analyze(portfolio, "risk")


def test_performance_lists_sub_dollar_prices_with_six_decimals(analyzer):
    portfolio = make_portfolio(
        make_chain(
            "ethereum", "ETH", "1", 2000.0, [make_token("PEPE", "1000000", 12.0)]
        )
    )

    answer = analyzer.analyze(portfolio, "show performance")

    assert "1. 1.0000 ETH @ $2000.00 = $2000.00" in answer
    assert "PEPE @ $0.000012 = $12.00" in answer
    assert "Active Positions: 2" in answer
    assert "HIGH CONCENTRATION" in answer


def test_recommendations(analyzer):
    dust = [make_token(f"D{i}", "1", 1.0) for i in range(16)]
    portfolio = make_portfolio(make_chain("ethereum", "ETH", "0.1", 200.0, dust))

    answer = analyzer.analyze(portfolio, "any advice?")

    assert "CLEANUP: You have 16 dust tokens" in answer
    assert "DIVERSIFY: All funds on ETHEREUM" in answer
    assert "ACCUMULATE" in answer
    assert "GAS OPTIMIZATION" in answer
    assert "DYOR" in answer


def test_recommendations_for_large_balanced_portfolio(analyzer):
    portfolio = make_portfolio(
        make_chain("ethereum", "ETH", "10", 30000.0),
        make_chain("polygon", "MATIC", "10", 30000.0),
    )

    answer = analyzer.analyze(portfolio, "suggest something")

    assert "SECURE" in answer
    assert "CLEANUP" not in answer
    assert "DIVERSIFY" not in answer
    assert "GAS OPTIMIZATION" not in answer


def test_summary_lists_chains_and_enhancements(analyzer):
    portfolio = make_portfolio(
        make_chain("ethereum", "ETH", "2.5", 5000.0, [make_token("USDC", "10", 10.0)]),
        make_chain("polygon", "MATIC", "0", 0.0),
    )
    portfolio = type(portfolio)(
        address=portfolio.address,
        chains=portfolio.chains,
        security=SecurityCheck(is_malicious=False),
        recent_activity=RecentActivity(transaction_count=3),
    )

    answer = analyzer.analyze(portfolio, "status")

    assert "Total Value: $5010.00" in answer
    assert "ETHEREUM: 2.5000 ETH ($5010.00) + 1 token" in answer
    assert "POLYGON: 0.0000 MATIC ($0.00)" in answer
    assert "no reports" in answer
    assert "Recent transactions: 3" in answer


@pytest.mark.parametrize(
    "values,label",
    [
        ((71.0, 29.0), "HIGH CONCENTRATION RISK"),
        ((70.0, 30.0), "MODERATE CONCENTRATION"),
        ((40.0, 30.0, 30.0), "MODERATE CONCENTRATION"),
        ((39.0, 31.0, 30.0), "WELL DIVERSIFIED"),
    ],
)
def test_diversification_thresholds(analyzer, values, label):
    names = [("ethereum", "ETH"), ("polygon", "MATIC"), ("bsc", "BNB")]
    portfolio = make_portfolio(
        *(make_chain(name, symbol, "1", value) for (name, symbol), value in zip(names, values))
    )

    answer = analyzer.analyze(portfolio, "diversification")

    assert label in answer
    for other in {"HIGH CONCENTRATION RISK", "MODERATE CONCENTRATION", "WELL DIVERSIFIED"} - {label}:
        assert other not in answer


@pytest.mark.parametrize(
    "values,label",
    [
        ((30.0, 30.0, 21.0, 19.0), "HIGH CONCENTRATION:"),
        ((30.0, 30.0, 20.0, 20.0), "MODERATE CONCENTRATION:"),
        ((25.0, 25.0, 20.0, 10.0, 10.0, 10.0), "MODERATE CONCENTRATION:"),
        ((20.0, 20.0, 20.0, 20.0, 20.0), "WELL DISTRIBUTED"),
    ],
)
def test_performance_concentration_thresholds(analyzer, values, label):
    native, *token_values = values
    tokens = [make_token(f"T{i}", "1", value) for i, value in enumerate(token_values)]
    portfolio = make_portfolio(make_chain("ethereum", "ETH", "1", native, tokens))

    answer = analyzer.analyze(portfolio, "performance")

    assert label in answer
    for other in {"HIGH CONCENTRATION:", "MODERATE CONCENTRATION:", "WELL DISTRIBUTED"} - {label}:
        assert other not in answer


@pytest.mark.parametrize(
    "count,label",
    [
        (10, "LOW: Conservative"),
        (11, "MEDIUM: Moderate"),
        (20, "MEDIUM: Moderate"),
        (21, "HIGH: Many token contracts"),
    ],
)
def test_contract_risk_levels(analyzer, count, label):
    tokens = [make_token(f"T{i}", "1", 1.0) for i in range(count)]
    portfolio = make_portfolio(make_chain("ethereum", "ETH", "1", 10.0, tokens))

    answer = analyzer.analyze(portfolio, "risk")

    assert f"{count} token contracts" in answer
    assert label in answer


@pytest.mark.parametrize(
    "values,rebalance",
    [
        ((61.0, 39.0), True),
        ((60.0, 40.0), False),
    ],
)
def test_rebalance_advice_above_dominant_share(analyzer, values, rebalance):
    portfolio = make_portfolio(
        make_chain("ethereum", "ETH", "1", values[0]),
        make_chain("polygon", "MATIC", "1", values[1]),
    )

    answer = analyzer.analyze(portfolio, "recommendations")

    assert ("REBALANCE: ETH is" in answer) is rebalance


def test_most_valuable_names_native_holding_and_chain(analyzer):
    portfolio = make_portfolio(
        make_chain("polygon", "MATIC", "100", 50.0),
        make_chain("solana", "SOL", "2", 200.0),
    )

    answer = analyzer.analyze(portfolio, "what's my most valuable asset?")

    assert "biggest holding is SOL" in answer
    assert "$200.00 on solana" in answer
