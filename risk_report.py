"""
Risk report envelope.

Bundles the risk score, rendered summary and the raw producer results into
the externally visible report.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from risk_models import (
    AuditResult,
    ChainStateResult,
    PriceFeedResult,
    RiskScore,
    SentimentResult,
)
from risk_scorer import compute_risk_score
from summary_generator import generate_summary

DISCLAIMER = (
    "This report is generated automatically from on-chain data and AI analysis. "
    "It is not financial advice. Scores can be wrong or incomplete when data "
    "sources are unavailable. Always do your own research before interacting "
    "with any token."
)


@dataclass(frozen=True)
class RiskReport:
    token_address: str
    generated_at: str
    risk_score: RiskScore
    price: Optional[PriceFeedResult]
    chain_state: Optional[ChainStateResult]
    audit: Optional[AuditResult]
    sentiment: Optional[SentimentResult]
    summary: str
    disclaimer: str = DISCLAIMER

    def to_dict(self) -> Dict[str, Any]:
        def _raw(result):
            return result.to_dict() if result is not None else None

        return {
            "token_address": self.token_address,
            "generated_at": self.generated_at,
            "risk_score": self.risk_score.to_dict(),
            "agents": {
                "chainlink": _raw(self.price),
                "onchain": _raw(self.chain_state),
                "audit": _raw(self.audit),
                "sentiment": _raw(self.sentiment),
            },
            "summary": self.summary,
            "disclaimer": self.disclaimer,
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


def build_risk_report(
    token_address: str,
    price: Optional[PriceFeedResult],
    chain_state: Optional[ChainStateResult],
    audit: Optional[AuditResult],
    sentiment: Optional[SentimentResult],
    generated_at: Optional[datetime] = None,
) -> RiskReport:
    """Score already-resolved producer results and wrap them in a report."""
    generated_at = generated_at or datetime.now(timezone.utc)
    score = compute_risk_score(price, chain_state, audit, sentiment)

    return RiskReport(
        token_address=token_address,
        generated_at=generated_at.isoformat(),
        risk_score=score,
        price=price,
        chain_state=chain_state,
        audit=audit,
        sentiment=sentiment,
        summary=generate_summary(token_address, score, price, chain_state, audit, sentiment),
    )
