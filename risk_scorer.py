"""
Token Risk Scoring - aggregation engine.

Combines the four component scores into one 0-100 risk score:

    FINAL = sum(component_score * weight) + flag_penalties, clamped to [0, 100]

    Component       Weight   Source
    audit            35%     contract auditor findings
    concentration    25%     top-10 holder share (chain-state analyzer)
    volatility       25%     7d oracle price range (price feed reader)
    sentiment        15%     name/description red flags (sentiment analyzer)

    Penalties       age < 7d -> +10, mint function -> +5, proxy -> +5
    Ratings         0-30 SAFE, 31-65 CAUTION, 66-100 AVOID

Every function here is pure and total: None or error-tagged inputs are
scored as unknown, never raised.
"""

from typing import Callable, List, Optional, Tuple

from component_scores import (
    audit_component_score,
    concentration_component_score,
    volatility_component_score,
    sentiment_component_score,
)
from risk_models import (
    AuditResult,
    ChainStateResult,
    ComponentScore,
    PriceFeedResult,
    RiskScore,
    SentimentResult,
    Present,
    classify_result,
    clamp,
    round_half_up,
)
from thresholds import (
    Rating,
    COMPONENT_WEIGHTS,
    FLAG_PENALTIES,
    NEW_CONTRACT_MAX_AGE_DAYS,
    RATING_SCALE,
    MAX_SCORE,
    MIN_SCORE,
)


# =============================================================================
# FLAG PENALTY RULES
# =============================================================================

# (name, condition over a usable ChainStateResult), evaluated in order.
# An unknown contract age never counts as young.
PENALTY_RULES: List[Tuple[str, Callable[[ChainStateResult], bool]]] = [
    ("new_contract", lambda cs: cs.age_known and cs.contract_age_days < NEW_CONTRACT_MAX_AGE_DAYS),
    ("mint_function", lambda cs: cs.flags.has_mint_function),
    ("proxy", lambda cs: cs.flags.is_proxy),
]


def apply_flag_penalties(chain_state: Optional[ChainStateResult]) -> List[Tuple[str, int]]:
    """
    Return the (name, penalty) pairs triggered by the chain-state flags.

    Failed chain state carries placeholder values only, so it triggers
    nothing, same as a missing one.
    """
    outcome = classify_result(chain_state)
    if not isinstance(outcome, Present):
        return []

    triggered = []
    for name, condition in PENALTY_RULES:
        if condition(outcome.data):
            triggered.append((name, FLAG_PENALTIES[name]["penalty"]))
    return triggered


def classify_rating(total: int) -> Rating:
    """Map a final 0-100 score to its rating (bounds inclusive)."""
    for rating, band in RATING_SCALE.items():
        if band["min"] <= total <= band["max"]:
            return rating
    return Rating.AVOID if total > MAX_SCORE else Rating.SAFE


def compute_risk_score(
    price: Optional[PriceFeedResult],
    chain_state: Optional[ChainStateResult],
    audit: Optional[AuditResult],
    sentiment: Optional[SentimentResult],
) -> RiskScore:
    """
    Aggregate the four producer results into a RiskScore.

    Args:
        price: Price feed result, or None when the feed was not read
        chain_state: Chain-state analysis, or None
        audit: Contract audit, or None
        sentiment: Sentiment analysis, or None

    Returns:
        RiskScore with total, rating, breakdown (fixed component order)
        and the triggered flag penalties
    """
    scores = {
        "audit": audit_component_score(audit),
        "concentration": concentration_component_score(chain_state),
        "volatility": volatility_component_score(price),
        "sentiment": sentiment_component_score(sentiment),
    }

    breakdown = []
    for name, config in COMPONENT_WEIGHTS.items():
        score = scores[name]
        weight = config["weight"]
        breakdown.append((name, ComponentScore(score=score, weight=weight, contribution=score * weight)))

    total = sum(component.contribution for _, component in breakdown)

    penalties = apply_flag_penalties(chain_state)
    total += sum(p for _, p in penalties)

    final_score = round_half_up(clamp(total, MIN_SCORE, MAX_SCORE))

    return RiskScore(
        total=final_score,
        rating=classify_rating(final_score),
        breakdown=tuple(breakdown),
        penalties=tuple(penalties),
    )
