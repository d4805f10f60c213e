"""
Web3 connection helper for the configured EVM chain.
"""

import logging
from typing import Optional

from web3 import Web3

from settings import CHAIN_CONFIG

logger = logging.getLogger(__name__)

# Predefined chains with public RPC endpoints
KNOWN_CHAINS = {
    "avalanche_fuji": {
        "name": "Avalanche Fuji",
        "rpc": "https://api.avax-test.network/ext/bc/C/rpc",
        "chain_id": 43113,
    },
    "avalanche": {
        "name": "Avalanche",
        "rpc": "https://api.avax.network/ext/bc/C/rpc",
        "chain_id": 43114,
    },
    "ethereum": {
        "name": "Ethereum",
        "rpc": "https://eth.llamarpc.com",
        "chain_id": 1,
    },
}


def get_chain_config(chain_name: Optional[str] = None, custom_rpc: Optional[str] = None) -> dict:
    """
    Resolve chain name + RPC.

    An explicit custom_rpc (or RPC_URL) always wins over the known RPC.
    Unknown chains without an RPC raise ValueError.
    """
    chain_name = (chain_name or CHAIN_CONFIG["chain_name"]).lower()
    custom_rpc = custom_rpc or CHAIN_CONFIG["rpc_url"]

    if chain_name in KNOWN_CHAINS:
        config = KNOWN_CHAINS[chain_name].copy()
        if custom_rpc:
            config["rpc"] = custom_rpc
        return config

    if not custom_rpc:
        raise ValueError(
            f"Unknown chain '{chain_name}' and no RPC_URL set. "
            f"Known chains: {', '.join(KNOWN_CHAINS)}"
        )
    return {"name": chain_name, "rpc": custom_rpc, "chain_id": None}


def get_web3(chain_name: Optional[str] = None, custom_rpc: Optional[str] = None) -> Web3:
    config = get_chain_config(chain_name, custom_rpc)
    logger.debug("Connecting to %s via %s", config["name"], config["rpc"])
    return Web3(Web3.HTTPProvider(config["rpc"]))


def to_checksum(address: str) -> str:
    return Web3.to_checksum_address(address.strip())
