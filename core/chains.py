# =============================================================================
# core/chains.py  —  Chain name → Alchemy network id
# =============================================================================
#
# Alchemy serves each chain from its own subdomain
# (https://<network>.g.alchemy.com).  Callers pass a logical chain name;
# anything we don't recognise falls back to Ethereum mainnet.
# =============================================================================

from types import MappingProxyType
from typing import Mapping, Optional

DEFAULT_CHAIN = "ethereum"

CHAIN_NETWORKS: Mapping[str, str] = MappingProxyType({
    "ethereum": "eth-mainnet",
    "polygon": "polygon-mainnet",
    "arbitrum": "arb-mainnet",
    "optimism": "opt-mainnet",
})

SUPPORTED_CHAINS = tuple(CHAIN_NETWORKS)


def network_for(chain: Optional[str]) -> str:
    """Resolve a chain name to its Alchemy network id.

    >>> network_for("polygon")
    'polygon-mainnet'
    >>> network_for("base")
    'eth-mainnet'
    """
    return CHAIN_NETWORKS.get((chain or "").strip().lower(), CHAIN_NETWORKS[DEFAULT_CHAIN])
