"""
Address classification.

Decides which chain families a raw address string could belong to, based on
its syntax alone. No network access.
"""

import re
from typing import List, Set

from config import CHAIN_CONFIG

BASE58 = "1-9A-HJ-NP-Za-km-z"

EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
SOLANA_ADDRESS_RE = re.compile(rf"^[{BASE58}]{{32,44}}$")
BITCOIN_LEGACY_RE = re.compile(rf"^[13][{BASE58}]{{25,34}}$")
BITCOIN_BECH32_RE = re.compile(r"^bc1[a-z0-9]{39,59}$")

EVM_CHAINS = ("ethereum", "polygon", "bsc", "arbitrum", "optimism", "avalanche")
FALLBACK_EVM_CHAINS = ("ethereum", "polygon")


def classify(address: str) -> Set[str]:
    """Return every chain id the address is syntactically compatible with."""
    if not isinstance(address, str) or not address:
        return set()

    chains: Set[str] = set()

    if EVM_ADDRESS_RE.fullmatch(address):
        chains.update(EVM_CHAINS)

    if not address.startswith("0x") and SOLANA_ADDRESS_RE.fullmatch(address):
        chains.add("solana")

    # Legacy Bitcoin addresses are also valid base58 Solana strings, so they
    # are tried on both chains.
    if BITCOIN_LEGACY_RE.fullmatch(address) or BITCOIN_BECH32_RE.fullmatch(address):
        chains.add("bitcoin")

    if not chains and address.startswith("0x"):
        chains.update(FALLBACK_EVM_CHAINS)

    return chains


def ordered_chains(address: str) -> List[str]:
    """Candidate chains in the fixed order used for portfolio output."""
    candidates = classify(address)
    ordered = [chain for chain in CHAIN_CONFIG if chain in candidates]
    # Chains missing from the table still get fetched (and fail as unsupported)
    ordered.extend(sorted(candidates.difference(CHAIN_CONFIG)))
    return ordered


def is_valid_address(address: str) -> bool:
    """Strict format check applied before any fetch is attempted."""
    if not isinstance(address, str):
        return False
    return bool(
        EVM_ADDRESS_RE.fullmatch(address) or SOLANA_ADDRESS_RE.fullmatch(address)
    )
