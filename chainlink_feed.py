"""
Chainlink Price Feed Reader.

Reads an AggregatorV3Interface feed: latest price plus up to 7 prior rounds,
and the 7-round price range used as the volatility signal.
"""

import json
import logging
from typing import List, Optional

from web3 import Web3

from chain_client import get_web3, to_checksum
from risk_models import PriceFeedResult, PriceRound, compute_volatility_pct
from thresholds import PRICE_HISTORY_ROUNDS

logger = logging.getLogger(__name__)

# Chainlink AggregatorV3 ABI (minimal)
AGGREGATOR_ABI = json.loads('''[
    {
        "inputs": [],
        "name": "latestRoundData",
        "outputs": [
            {"name": "roundId", "type": "uint80"},
            {"name": "answer", "type": "int256"},
            {"name": "startedAt", "type": "uint256"},
            {"name": "updatedAt", "type": "uint256"},
            {"name": "answeredInRound", "type": "uint80"}
        ],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [{"name": "_roundId", "type": "uint80"}],
        "name": "getRoundData",
        "outputs": [
            {"name": "roundId", "type": "uint80"},
            {"name": "answer", "type": "int256"},
            {"name": "startedAt", "type": "uint256"},
            {"name": "updatedAt", "type": "uint256"},
            {"name": "answeredInRound", "type": "uint80"}
        ],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function"
    }
]''')


def raw_to_price(answer: int, decimals: int) -> float:
    return answer / 10 ** decimals


def fetch_round_history(contract, current_round_id: int, decimals: int,
                        count: int = PRICE_HISTORY_ROUNDS) -> List[PriceRound]:
    """
    Walk back from current_round_id, most recent first.

    Stops at the first round that cannot be read, so the history is always
    a contiguous run of rounds.
    """
    history = []
    for i in range(1, count + 1):
        target_round = current_round_id - i
        if target_round <= 0:
            break
        try:
            round_data = contract.functions.getRoundData(target_round).call()
        except Exception as e:
            logger.debug("Round %s not available: %s", target_round, e)
            break
        history.append(PriceRound(
            round_id=str(round_data[0]),
            price_usd=raw_to_price(round_data[1], decimals),
            timestamp=int(round_data[3]),
        ))
    return history


def read_price_feed(
    feed_address: str,
    token_symbol: str = "UNKNOWN",
    w3: Optional[Web3] = None,
) -> PriceFeedResult:
    """
    Read a Chainlink feed. Never raises: failures come back as an
    error-tagged result with zeroed fields.

    Args:
        feed_address: AggregatorV3 contract address
        token_symbol: Label carried into the result
        w3: Optional Web3 instance (defaults to the configured chain)
    """
    feed_address = (feed_address or "").strip()

    try:
        w3 = w3 or get_web3()
        contract = w3.eth.contract(address=to_checksum(feed_address), abi=AGGREGATOR_ABI)

        decimals = int(contract.functions.decimals().call())
        latest = contract.functions.latestRoundData().call()
    except Exception as e:
        logger.warning("Chainlink read failed for %s: %s", feed_address, e)
        return PriceFeedResult.failed(feed_address, token_symbol, f"Chainlink read failed: {str(e)[:200]}")

    current_round_id = int(latest[0])
    current_price = raw_to_price(latest[1], decimals)

    history = fetch_round_history(contract, current_round_id, decimals)
    prices = [current_price] + [r.price_usd for r in history]

    logger.info("Feed %s: price %.4f, %d history rounds", feed_address, current_price, len(history))

    return PriceFeedResult(
        feed_address=feed_address,
        token_symbol=token_symbol,
        price_usd=max(0.0, current_price),
        timestamp=int(latest[3]),
        round_id=str(current_round_id),
        history=tuple(history),
        volatility_7d_pct=compute_volatility_pct(prices),
    )
