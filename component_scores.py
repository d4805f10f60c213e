"""
Component scorers - one pure function per producer.

Each scorer takes the producer's result (or None) and returns an integer
risk score in [0, 100]. Missing or failed producers score NEUTRAL_SCORE,
except the audit, where "did not run" and "found nothing" both score 0.
"""

from typing import Optional

from risk_models import (
    AuditResult,
    ChainStateResult,
    PriceFeedResult,
    SentimentResult,
    Present,
    classify_result,
    clamp,
    round_half_up,
)
from thresholds import (
    Severity,
    SEVERITY_RANK,
    SEVERITY_SCORES,
    CONCENTRATION_BANDS,
    CONCENTRATION_FLOOR_SCORE,
    VOLATILITY_BANDS,
    VOLATILITY_FLOOR_SCORE,
    NEUTRAL_SCORE,
    NO_FINDINGS_SCORE,
)


def band_score(value: float, bands: list, floor_score: int) -> int:
    """Score of the first band (top-down) whose min_pct the value reaches."""
    for band in bands:
        if value >= band["min_pct"]:
            return band["score"]
    return floor_score


def audit_component_score(audit: Optional[AuditResult]) -> int:
    """Score of the single worst finding; first seen wins on equal severity."""
    outcome = classify_result(audit)
    if not isinstance(outcome, Present) or not outcome.data.findings:
        return NO_FINDINGS_SCORE

    worst = None
    for finding in outcome.data.findings:
        severity = Severity.parse(finding.severity)
        if worst is None or SEVERITY_RANK[severity] > SEVERITY_RANK[worst]:
            worst = severity

    return SEVERITY_SCORES[worst]


def concentration_component_score(chain_state: Optional[ChainStateResult]) -> int:
    outcome = classify_result(chain_state)
    if not isinstance(outcome, Present):
        return NEUTRAL_SCORE

    pct = outcome.data.top10_concentration_pct
    if pct is None:
        return NEUTRAL_SCORE

    return band_score(pct, CONCENTRATION_BANDS, CONCENTRATION_FLOOR_SCORE)


def volatility_component_score(price: Optional[PriceFeedResult]) -> int:
    outcome = classify_result(price)
    if not isinstance(outcome, Present):
        return NEUTRAL_SCORE

    return band_score(outcome.data.volatility_7d_pct, VOLATILITY_BANDS, VOLATILITY_FLOOR_SCORE)


def sentiment_component_score(sentiment: Optional[SentimentResult]) -> int:
    outcome = classify_result(sentiment)
    if not isinstance(outcome, Present):
        return NEUTRAL_SCORE

    # Already clamped by the analyzer; clamp again rather than trust it
    return round_half_up(clamp(outcome.data.sentiment_score))
