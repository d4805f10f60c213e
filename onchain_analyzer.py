"""
On-Chain Token Analyzer.

ERC-20 metadata and risk flags read over RPC, plus contract age and holder
distribution from the block explorer. Every read is best-effort: a failed
read falls back to its default and the rest of the analysis continues.

Flags:
- has_mint_function: bytecode contains the mint(address,uint256) selector
- is_proxy: bytecode contains the implementation() selector
- owner_renounced: owner() is the zero address
- is_paused: paused() returned true
"""

import json
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from web3 import Web3

from chain_client import get_web3, to_checksum
from explorer_client import (
    get_contract_creation_tx,
    get_token_holders,
    get_transaction_block_number,
)
from risk_models import ChainStateResult, TokenFlags, error_tag, round_half_up

logger = logging.getLogger(__name__)

ERC20_ABI = json.loads('''[
    {"inputs": [], "name": "name", "outputs": [{"name": "", "type": "string"}], "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "symbol", "outputs": [{"name": "", "type": "string"}], "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "decimals", "outputs": [{"name": "", "type": "uint8"}], "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "totalSupply", "outputs": [{"name": "", "type": "uint256"}], "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "owner", "outputs": [{"name": "", "type": "address"}], "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "paused", "outputs": [{"name": "", "type": "bool"}], "stateMutability": "view", "type": "function"}
]''')

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# 4-byte selectors searched for in the runtime bytecode
MINT_SELECTOR = "40c10f19"            # mint(address,uint256)
PROXY_SELECTOR = "5c60da1b"           # implementation()

SECONDS_PER_DAY = 86400
TOP_HOLDERS = 10


def _best_effort(label: str, fn: Callable[[], Any], default: Any) -> Any:
    try:
        return fn()
    except Exception as e:
        logger.debug("%s read failed: %s", label, e)
        return default


def detect_bytecode_flags(bytecode_hex: str) -> Tuple[bool, bool]:
    """(has_mint_function, is_proxy) by fixed selector match."""
    code = bytecode_hex.lower()
    return MINT_SELECTOR in code, PROXY_SELECTOR in code


def calculate_top10_concentration(holders: List[Dict[str, Any]]) -> Tuple[Optional[int], Optional[int]]:
    """
    Holder count and top-10 share of the listed holders' balance.

    Returns (holder_count, top10_pct); top10_pct is an integer percent,
    None when there are no holders or the listed balance is zero.
    """
    if not holders:
        return None, None

    quantities = []
    for h in holders:
        try:
            quantities.append(int(h.get("TokenHolderQuantity", 0)))
        except (TypeError, ValueError):
            quantities.append(0)

    total = sum(quantities)
    if total <= 0:
        return len(holders), None

    top10 = sum(sorted(quantities, reverse=True)[:TOP_HOLDERS])
    # Integer basis points first, same precision as the explorer's raw units
    return len(holders), round_half_up((top10 * 10000 // total) / 100)


def lookup_contract_age_days(w3: Web3, address: str, now: Optional[float] = None) -> int:
    """
    Days since the contract's creation block. -1 when any step of the
    lookup fails or returns nothing.
    """
    now = now if now is not None else time.time()
    try:
        tx_hash = get_contract_creation_tx(address)
        if not tx_hash:
            return -1
        block_number = get_transaction_block_number(tx_hash)
        if block_number is None:
            return -1
        block = w3.eth.get_block(block_number)
        age_seconds = now - int(block["timestamp"])
        return max(0, int(age_seconds // SECONDS_PER_DAY))
    except Exception as e:
        logger.warning("Contract age lookup failed for %s: %s", address, e)
        return -1


def lookup_holder_distribution(address: str) -> Tuple[Optional[int], Optional[int]]:
    try:
        holders = get_token_holders(address)
    except Exception as e:
        logger.warning("Holder lookup failed for %s: %s", address, e)
        return None, None
    return calculate_top10_concentration(holders)


def analyze_chain_state(
    token_address: str,
    w3: Optional[Web3] = None,
    now: Optional[float] = None,
) -> ChainStateResult:
    """
    Analyze a token contract. Never raises.

    Args:
        token_address: ERC-20 contract address
        w3: Optional Web3 instance (defaults to the configured chain)
        now: Unix time used for the age calculation (defaults to time.time())
    """
    token_address = (token_address or "").strip()

    try:
        w3 = w3 or get_web3()
        address = to_checksum(token_address)
        contract = w3.eth.contract(address=address, abi=ERC20_ABI)
    except Exception as e:
        logger.warning("On-chain analysis could not start for %s: %s", token_address, e)
        return ChainStateResult(token_address=token_address, error=error_tag(f"On-chain analysis failed: {e}"))

    fns = contract.functions
    name = _best_effort("name", lambda: str(fns.name().call()), "Unknown")
    symbol = _best_effort("symbol", lambda: str(fns.symbol().call()), "???")
    decimals = _best_effort("decimals", lambda: int(fns.decimals().call()), 18)
    total_supply = _best_effort("totalSupply", lambda: str(fns.totalSupply().call()), "0")
    bytecode = _best_effort("bytecode", lambda: bytes(w3.eth.get_code(address)), b"")

    owner = _best_effort("owner", lambda: str(fns.owner().call()), None)
    is_paused = _best_effort("paused", lambda: bool(fns.paused().call()), False)

    has_mint, is_proxy = detect_bytecode_flags(bytecode.hex())

    contract_age_days = lookup_contract_age_days(w3, address, now=now)
    holder_count, top10_pct = lookup_holder_distribution(address)

    logger.info(
        "%s (%s): age=%sd holders=%s top10=%s%% mint=%s proxy=%s",
        name, symbol, contract_age_days, holder_count, top10_pct, has_mint, is_proxy,
    )

    return ChainStateResult(
        token_address=address,
        name=name,
        symbol=symbol,
        total_supply=total_supply,
        decimals=decimals,
        contract_age_days=contract_age_days,
        holder_count=holder_count,
        top10_concentration_pct=top10_pct,
        flags=TokenFlags(
            has_mint_function=has_mint,
            owner_renounced=owner is not None and owner.lower() == ZERO_ADDRESS,
            is_paused=is_paused,
            is_proxy=is_proxy,
        ),
        bytecode_size_bytes=len(bytecode),
    )
