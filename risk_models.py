"""
Producer result records and risk score records.

Every producer returns one of the frozen dataclasses below. Fields are
sanitized (capped, clamped, defaulted) before a record leaves its producer,
so the scoring engine only has to decide whether a result is usable at all:
see classify_result().
"""

import math
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np

from thresholds import (
    Rating,
    Severity,
    HEADLINE_SEVERITIES,
    MAX_ERROR_CHARS,
    MAX_TITLE_CHARS,
    MAX_DESCRIPTION_CHARS,
    MAX_SUMMARY_CHARS,
    MAX_FLAG_CHARS,
    MAX_ANALYSIS_CHARS,
)


# =============================================================================
# SANITIZERS
# =============================================================================

def truncate(value: Any, limit: int) -> str:
    """Coerce to str (None -> "") and cap the length."""
    if value is None:
        return ""
    return str(value)[:limit]


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def error_tag(err: Any) -> str:
    return truncate(err, MAX_ERROR_CHARS)


def compute_volatility_pct(prices: List[float]) -> float:
    """
    Price range over the observed rounds as a percentage of the minimum.

    Formula: (max - min) / min * 100, rounded half-up to 2 decimals.
    Returns 0 for an empty series or when the minimum price is 0.
    """
    if not prices:
        return 0.0
    arr = np.array(prices, dtype=float)
    min_p = float(np.min(arr))
    max_p = float(np.max(arr))
    if min_p <= 0:
        return 0.0
    pct = (max_p - min_p) / min_p * 100
    return round_half_up(pct * 100) / 100


# =============================================================================
# PRODUCER RESULTS
# =============================================================================

@dataclass(frozen=True)
class PriceRound:
    round_id: str
    price_usd: float
    timestamp: int


@dataclass(frozen=True)
class PriceFeedResult:
    """Chainlink AggregatorV3 reading plus up to 7 prior rounds."""
    feed_address: str
    token_symbol: str
    price_usd: float
    timestamp: int
    round_id: str
    history: Tuple[PriceRound, ...] = ()
    volatility_7d_pct: float = 0.0
    error: Optional[str] = None

    @classmethod
    def failed(cls, feed_address: str, token_symbol: str, err: Any) -> "PriceFeedResult":
        return cls(
            feed_address=feed_address,
            token_symbol=token_symbol,
            price_usd=0.0,
            timestamp=0,
            round_id="0",
            history=(),
            volatility_7d_pct=0.0,
            error=error_tag(err),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["history"] = [asdict(r) for r in self.history]
        if self.error is None:
            data.pop("error")
        return data


@dataclass(frozen=True)
class TokenFlags:
    has_mint_function: bool = False
    owner_renounced: bool = False
    is_paused: bool = False
    is_proxy: bool = False


@dataclass(frozen=True)
class ChainStateResult:
    """ERC-20 metadata, bytecode flags, age and holder distribution."""
    token_address: str
    name: str = "Unknown"
    symbol: str = "???"
    total_supply: str = "0"
    decimals: int = 18
    contract_age_days: int = -1
    holder_count: Optional[int] = None
    top10_concentration_pct: Optional[float] = None
    flags: TokenFlags = field(default_factory=TokenFlags)
    bytecode_size_bytes: int = 0
    error: Optional[str] = None

    @property
    def age_known(self) -> bool:
        return self.contract_age_days >= 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.error is None:
            data.pop("error")
        return data


@dataclass(frozen=True)
class AuditFinding:
    severity: Severity
    title: str
    description: str

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "AuditFinding":
        """Build a finding from untrusted LLM output."""
        if not isinstance(raw, dict):
            raw = {"description": raw}
        return cls(
            severity=Severity.parse(raw.get("severity")),
            title=truncate(raw.get("title"), MAX_TITLE_CHARS),
            description=truncate(raw.get("description"), MAX_DESCRIPTION_CHARS),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity.value,
            "title": self.title,
            "description": self.description,
        }


@dataclass(frozen=True)
class AuditResult:
    token_address: str
    findings: Tuple[AuditFinding, ...] = ()
    summary: str = ""
    powered_by: str = "groq-llama"
    error: Optional[str] = None

    def headline_findings(self) -> List[AuditFinding]:
        """CRITICAL and HIGH findings, in finding order."""
        return [f for f in self.findings if Severity.parse(f.severity) in HEADLINE_SEVERITIES]

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "token_address": self.token_address,
            "findings": [f.to_dict() for f in self.findings],
            "summary": self.summary,
            "powered_by": self.powered_by,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class SentimentResult:
    token_name: str
    token_symbol: str
    sentiment_score: int = 50
    flags: Tuple[str, ...] = ()
    analysis: str = ""
    error: Optional[str] = None

    @staticmethod
    def sanitize_score(raw: Any, default: int = 50) -> int:
        # JSON integers are unbounded; clamp them before any float conversion
        if isinstance(raw, int):
            return round_half_up(clamp(raw))
        try:
            value = float(raw)
        except (TypeError, ValueError, OverflowError):
            return default
        if math.isnan(value):
            return default
        return round_half_up(clamp(value))

    @staticmethod
    def sanitize_flags(raw: Any) -> Tuple[str, ...]:
        if not isinstance(raw, list):
            return ()
        return tuple(truncate(f, MAX_FLAG_CHARS) for f in raw)

    @staticmethod
    def sanitize_analysis(raw: Any) -> str:
        return truncate(raw, MAX_ANALYSIS_CHARS)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["flags"] = list(self.flags)
        if self.error is None:
            data.pop("error")
        return data


ProducerResult = Union[PriceFeedResult, ChainStateResult, AuditResult, SentimentResult]


# =============================================================================
# PRODUCER OUTCOME
# =============================================================================

@dataclass(frozen=True)
class Present:
    data: Any


@dataclass(frozen=True)
class Absent:
    pass


@dataclass(frozen=True)
class Failed:
    reason: str


ABSENT = Absent()


def classify_result(result: Optional[ProducerResult]) -> Union[Present, Absent, Failed]:
    """Classify a producer argument as usable data, missing, or failed."""
    if result is None:
        return ABSENT
    error = getattr(result, "error", None)
    if error:
        return Failed(reason=error)
    return Present(data=result)


# =============================================================================
# RISK SCORE
# =============================================================================

@dataclass(frozen=True)
class ComponentScore:
    score: float
    weight: float
    contribution: float


@dataclass(frozen=True)
class RiskScore:
    total: int
    rating: Rating
    # (component, ComponentScore) pairs in COMPONENT_WEIGHTS order
    breakdown: Tuple[Tuple[str, ComponentScore], ...]
    penalties: Tuple[Tuple[str, int], ...] = ()

    def component(self, name: str) -> ComponentScore:
        for key, value in self.breakdown:
            if key == name:
                return value
        raise KeyError(name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "rating": self.rating.value,
            "breakdown": {name: asdict(c) for name, c in self.breakdown},
            "penalties": {name: p for name, p in self.penalties},
        }
