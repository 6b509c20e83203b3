"""
Error types raised by the portfolio pipeline.
"""


class PortfolioError(Exception):
    """Base class for portfolio analyzer errors."""


class InvalidAddressError(PortfolioError):
    """The wallet address failed format validation."""

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Invalid wallet address format: {address!r}")


class ChainFetchError(PortfolioError):
    """A single chain could not be fetched. Absorbed by the aggregator."""


class ProviderError(ChainFetchError):
    """An upstream provider call failed (network, HTTP status or bad payload)."""


class UnsupportedChainError(ChainFetchError):
    """The requested chain is not in the static chain table."""

    def __init__(self, chain: str):
        self.chain = chain
        super().__init__(f"Unsupported chain: {chain}")


class UnexpectedError(PortfolioError):
    """Anything else that went wrong while serving a request."""
