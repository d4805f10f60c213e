"""
Human-readable risk summary.

Renders one deterministic line of text from a RiskScore and the producer
results it was computed from. Free-text fields are used as-is: producers
have already capped their length.
"""

from typing import Optional

from risk_models import (
    AuditResult,
    ChainStateResult,
    PriceFeedResult,
    RiskScore,
    SentimentResult,
    Present,
    classify_result,
    round_half_up,
)
from thresholds import RATING_SCALE

ADDRESS_PREFIX_CHARS = 10


def format_price(price: Optional[PriceFeedResult]) -> str:
    outcome = classify_result(price)
    if not isinstance(outcome, Present):
        return "N/A"
    return f"${outcome.data.price_usd:.4f}"


def format_concentration(chain_state: Optional[ChainStateResult]) -> str:
    outcome = classify_result(chain_state)
    if not isinstance(outcome, Present) or outcome.data.top10_concentration_pct is None:
        return "unknown"
    return f"{round_half_up(outcome.data.top10_concentration_pct)}%"


def format_volatility(price: Optional[PriceFeedResult]) -> str:
    outcome = classify_result(price)
    if not isinstance(outcome, Present):
        return "unknown"
    return f"{outcome.data.volatility_7d_pct:.1f}%"


def display_name(token_address: str, chain_state: Optional[ChainStateResult]) -> tuple:
    """(name, symbol) from chain state, else truncated address and '???'."""
    outcome = classify_result(chain_state)
    if isinstance(outcome, Present):
        return outcome.data.name, outcome.data.symbol
    return token_address[:ADDRESS_PREFIX_CHARS] + "...", "???"


def critical_issues_clause(audit: Optional[AuditResult]) -> str:
    if audit is None:
        return ""
    titles = [f.title for f in audit.headline_findings()]
    if not titles:
        return ""
    return f" Critical issues: {', '.join(titles)}."


def generate_summary(
    token_address: str,
    score: RiskScore,
    price: Optional[PriceFeedResult],
    chain_state: Optional[ChainStateResult],
    audit: Optional[AuditResult],
    sentiment: Optional[SentimentResult],
) -> str:
    icon = RATING_SCALE[score.rating]["icon"]
    name, symbol = display_name(token_address, chain_state)
    sentiment_text = sentiment.analysis if sentiment is not None else "not analyzed"

    return (
        f"{icon} {name} ({symbol}) - Risk Score: {score.total}/100 [{score.rating.value}]. "
        f"Current price: {format_price(price)}. "
        f"Holder concentration (top-10): {format_concentration(chain_state)}. "
        f"7d volatility: {format_volatility(price)}."
        f"{critical_issues_clause(audit)}"
        f" Sentiment: {sentiment_text}"
    )
