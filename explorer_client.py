"""
Snowtrace (Etherscan-compatible) block explorer client.

Contract creation lookup and token holder list for the chain-state analyzer.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from settings import EXPLORER_CONFIG

logger = logging.getLogger(__name__)


class ExplorerError(RuntimeError):
    """Explorer request failed or returned an unusable payload."""


def explorer_get(params: Dict[str, Any], base_url: str = None, api_key: str = None,
                 timeout: float = None) -> Dict[str, Any]:
    base_url = (base_url or EXPLORER_CONFIG["base_url"]).rstrip("/")
    api_key = api_key if api_key is not None else EXPLORER_CONFIG["api_key"]
    query = dict(params)
    if api_key:
        query["apikey"] = api_key

    response = requests.get(
        f"{base_url}/api",
        params=query,
        timeout=timeout or EXPLORER_CONFIG["timeout"],
    )
    if not response.ok:
        raise ExplorerError(f"Snowtrace HTTP {response.status_code}")
    try:
        return response.json()
    except ValueError as e:
        raise ExplorerError(f"Snowtrace returned non-JSON body: {e}") from e


def get_contract_creation_tx(address: str) -> Optional[str]:
    """Hash of the transaction that deployed the contract, if known."""
    data = explorer_get({
        "module": "contract",
        "action": "getcontractcreation",
        "contractaddresses": address,
    })
    result = data.get("result")
    if isinstance(result, list) and result and isinstance(result[0], dict):
        return result[0].get("txHash")
    return None


def get_transaction_block_number(tx_hash: str) -> Optional[int]:
    data = explorer_get({
        "module": "proxy",
        "action": "eth_getTransactionByHash",
        "txhash": tx_hash,
    })
    result = data.get("result")
    if isinstance(result, dict) and result.get("blockNumber"):
        return int(result["blockNumber"], 16)
    return None


def get_token_holders(address: str, page_size: int = 100) -> List[Dict[str, Any]]:
    """First page of holders as returned by the explorer (may be empty)."""
    data = explorer_get({
        "module": "token",
        "action": "tokenholderlist",
        "contractaddress": address,
        "page": 1,
        "offset": page_size,
    })
    result = data.get("result")
    if not isinstance(result, list):
        logger.debug("No holder list for %s: %s", address, data.get("message"))
        return []
    return result
