"""Shared fakes and fixtures for the test suite."""

from typing import Dict, List

import pytest

from adapters.base import BalanceProvider, ProviderStatus
from config import CHAIN_CONFIG
from exceptions import ProviderError, UnsupportedChainError
from models.portfolio_models import ChainHolding, Portfolio, RawBalance, TokenHolding
from services.pricing_service import PriceOracle

EVM_ADDRESS = "0x1111111111111111111111111111111111111111"
SOLANA_ADDRESS = "7EcDhSYGxXyscszYEp35KHN8vvw3svAuLKTzXwCFLtV"
BITCOIN_LEGACY_ADDRESS = "1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa"


class FakeProvider(BalanceProvider):
    """In-memory balance provider recording every call."""

    def __init__(
        self,
        balances: Dict[str, dict] = None,
        tokens: Dict[str, List[dict]] = None,
        failing=(),
        token_failing=(),
        malicious: bool = False,
        transactions: List[dict] = None,
        nfts: Dict[str, List[dict]] = None,
        aux_failing: bool = False,
        status: ProviderStatus = ProviderStatus.READY,
    ):
        self.balances = balances or {}
        self.tokens = tokens or {}
        self.failing = set(failing)
        self.token_failing = set(token_failing)
        self.malicious = malicious
        self.transactions = transactions if transactions is not None else []
        self.nfts = nfts or {}
        self.aux_failing = aux_failing
        self.status = status
        self.api_key = "test-key"
        self.calls = []

    def probe(self):
        self.calls.append(("probe",))
        return self.status

    def fetch_balance(self, chain, address):
        self.calls.append(("balance", chain, address))
        if chain not in CHAIN_CONFIG:
            raise UnsupportedChainError(chain)
        if chain in self.failing:
            raise ProviderError(f"{chain} is down")
        return RawBalance(chain, address, self.balances.get(chain, {"balance": "0"}))

    def fetch_token_balances(self, chain, address):
        self.calls.append(("tokens", chain, address))
        if chain in self.token_failing:
            raise ProviderError(f"{chain} tokens unavailable")
        return list(self.tokens.get(chain, []))

    def fetch_nfts(self, chain, address):
        self.calls.append(("nfts", chain, address))
        if self.aux_failing:
            raise ProviderError("nft lookup failed")
        return list(self.nfts.get(chain, []))

    def check_malicious_address(self, address):
        self.calls.append(("security", address))
        if self.aux_failing:
            raise ProviderError("security lookup failed")
        return self.malicious

    def get_transaction_history(self, address, chain="ethereum", limit=10):
        self.calls.append(("transactions", address, chain, limit))
        if self.aux_failing:
            raise ProviderError("history lookup failed")
        return self.transactions[:limit]


class FakePriceOracle(PriceOracle):
    """Price oracle answering from a fixed symbol -> price table."""

    def __init__(self, prices: Dict[str, float] = None):
        super().__init__()
        self.prices = prices or {}
        self.requested = []

    async def price_of(self, symbol):
        self.requested.append(symbol)
        return self.prices.get(symbol.upper(), 0.0)


def make_portfolio(*chains: ChainHolding, address: str = EVM_ADDRESS) -> Portfolio:
    return Portfolio(address=address, chains=tuple(chains))


def make_chain(name, symbol, balance, native_usd, tokens=()) -> ChainHolding:
    return ChainHolding(
        name=name,
        symbol=symbol,
        balance=balance,
        native_usd_value=native_usd,
        tokens=tuple(tokens),
    )


def make_token(symbol, balance, usd_value, contract=None) -> TokenHolding:
    return TokenHolding(
        symbol=symbol,
        contract_address=contract or f"0x{symbol.lower():0>40}",
        balance=balance,
        usd_value=usd_value,
    )


@pytest.fixture
def provider():
    return FakeProvider(
        balances={chain: {"balance": "2.5"} for chain in CHAIN_CONFIG},
    )


@pytest.fixture
def price_oracle():
    return FakePriceOracle(
        {"ETH": 2000.0, "MATIC": 0.5, "BNB": 300.0, "AVAX": 20.0, "SOL": 100.0}
    )
