#!/usr/bin/env python3
"""
Token Risk Pipeline - fan out to the four producers, score, report.

    price feed  ─┐
    chain state ─┼─> compute_risk_score -> generate_summary -> RiskReport
    audit       ─┤
    sentiment   ─┘

Producers run concurrently under a shared deadline. A producer that times
out, raises, or is skipped is passed to the scorer as None.
"""

import argparse
import logging
import re
import sys
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from datetime import datetime
from typing import Iterable, Optional

from chainlink_feed import read_price_feed
from contract_auditor import audit_contract
from onchain_analyzer import analyze_chain_state
from risk_report import RiskReport, build_risk_report
from sentiment_analyzer import analyze_sentiment
from settings import PIPELINE_CONFIG, configure_logging

logger = logging.getLogger(__name__)

PRODUCERS = ("chainlink", "onchain", "audit", "sentiment")
TOKEN_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def validate_token_address(token_address: Optional[str]) -> str:
    """Return the stripped address, or raise ValueError."""
    address = (token_address or "").strip()
    if not address:
        raise ValueError("Missing required field: token_address")
    if not TOKEN_ADDRESS_RE.match(address):
        raise ValueError("Invalid token_address - must be a 0x-prefixed 40-char hex address")
    return address


def _resolve(future, name: str, deadline: float):
    """Wait for a producer until the shared deadline; None on timeout or error."""
    if future is None:
        return None
    try:
        return future.result(timeout=max(0.0, deadline - time.monotonic()))
    except FuturesTimeoutError:
        logger.warning("Producer %s timed out", name)
    except Exception:
        logger.exception("Producer %s raised past its boundary", name)
    return None


def assess_token(
    token_address: str,
    feed_address: Optional[str] = None,
    token_name: Optional[str] = None,
    token_symbol: Optional[str] = None,
    description: Optional[str] = None,
    contract_source: Optional[str] = None,
    skip: Iterable[str] = (),
    timeout: Optional[float] = None,
    now: Optional[datetime] = None,
) -> RiskReport:
    """
    Run the full risk assessment for one token.

    Args:
        token_address: ERC-20 contract address (validated)
        feed_address: Chainlink feed; defaults to CHAINLINK_AVAX_USD_FEED,
            the price producer is skipped when neither is set
        token_name / token_symbol: Override the names given to the
            sentiment analyzer (default: read from chain state)
        description: Project description for the sentiment analyzer
        contract_source: Source or ABI passed to the auditor
        skip: Producer names to leave out (see PRODUCERS)
        timeout: Seconds all producers share (default PRODUCER_TIMEOUT_SECONDS)
        now: Report timestamp (defaults to current UTC time)

    Raises:
        ValueError: invalid token address or unknown producer name
    """
    token_address = validate_token_address(token_address)
    skip = set(skip)
    unknown = skip - set(PRODUCERS)
    if unknown:
        raise ValueError(f"Unknown producer(s): {', '.join(sorted(unknown))}")

    feed_address = (feed_address or PIPELINE_CONFIG["default_feed_address"] or "").strip()
    if not feed_address:
        skip.add("chainlink")

    timeout = timeout if timeout is not None else PIPELINE_CONFIG["producer_timeout"]
    deadline = time.monotonic() + timeout

    executor = ThreadPoolExecutor(max_workers=PIPELINE_CONFIG["max_workers"])
    futures = {}
    try:
        if "chainlink" not in skip:
            futures["chainlink"] = executor.submit(read_price_feed, feed_address, token_symbol or "UNKNOWN")
        if "onchain" not in skip:
            futures["onchain"] = executor.submit(analyze_chain_state, token_address)
        if "audit" not in skip:
            futures["audit"] = executor.submit(audit_contract, token_address, contract_source)

        if "sentiment" not in skip:
            chain_future = futures.get("onchain")

            def _sentiment():
                name, symbol = token_name, token_symbol
                if not (name and symbol):
                    chain_state = _resolve(chain_future, "onchain", deadline)
                    if chain_state is not None and not chain_state.error:
                        name = name or chain_state.name
                        symbol = symbol or chain_state.symbol
                symbol = symbol or name or "???"
                return analyze_sentiment(name or symbol, symbol, description)

            futures["sentiment"] = executor.submit(_sentiment)

        results = {name: _resolve(futures.get(name), name, deadline) for name in PRODUCERS}
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    missing = [name for name in PRODUCERS if results[name] is None]
    if missing:
        logger.info("Scoring %s without: %s", token_address, ", ".join(missing))

    return build_risk_report(
        token_address,
        price=results["chainlink"],
        chain_state=results["onchain"],
        audit=results["audit"],
        sentiment=results["sentiment"],
        generated_at=now,
    )


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(
        description="Assess the risk of a DeFi token (0-100 score + summary)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python risk_pipeline.py --token 0xB31f66AA3C1e785363F0875A1B74E27b85FD66c7

  python risk_pipeline.py \\
    --token 0xB31f66AA3C1e785363F0875A1B74E27b85FD66c7 \\
    --feed 0x5498BB86BC934c8D34FDA08E81D444153d0D06aD \\
    --description "Wrapped AVAX" --json
        """,
    )
    parser.add_argument("--token", required=True, help="Token contract address")
    parser.add_argument("--feed", help="Chainlink price feed address")
    parser.add_argument("--name", help="Token name for the sentiment analyzer")
    parser.add_argument("--symbol", help="Token symbol for the sentiment analyzer")
    parser.add_argument("--description", help="Project description for the sentiment analyzer")
    parser.add_argument("--source", help="File with contract source or ABI for the auditor")
    parser.add_argument("--skip", nargs="*", default=[], choices=PRODUCERS,
                        help="Producers to leave out")
    parser.add_argument("--timeout", type=float, help="Seconds to wait for producers")
    parser.add_argument("--json", action="store_true", help="Print the full report as JSON")
    parser.add_argument("--log-level", help="Logging level (default LOG_LEVEL or INFO)")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_arguments(argv)
    configure_logging(args.log_level)

    contract_source = None
    if args.source:
        with open(args.source, "r") as f:
            contract_source = f.read()

    try:
        report = assess_token(
            args.token,
            feed_address=args.feed,
            token_name=args.name,
            token_symbol=args.symbol,
            description=args.description,
            contract_source=contract_source,
            skip=args.skip,
            timeout=args.timeout,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if args.json:
        print(report.to_json())
    else:
        score = report.risk_score
        print(f"\n{'='*60}")
        print(report.summary)
        print(f"{'='*60}")
        for name, component in score.breakdown:
            print(f"  {name:15} score {component.score:>5}  x {component.weight:.2f}  = {component.contribution:6.2f}")
        for name, penalty in score.penalties:
            print(f"  {name:15} penalty +{penalty}")
        print(f"  {'TOTAL':15} {score.total}/100 [{score.rating.value}]")
        print(f"{'='*60}")
        print(report.disclaimer)

    return 0


if __name__ == "__main__":
    sys.exit(main())
