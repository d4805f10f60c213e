"""
Risk Scoring Thresholds and Justifications.

Fixed tables behind the token risk score:
- Component weights (audit, concentration, volatility, sentiment)
- Audit severity ranking and severity -> score mapping
- Holder concentration and 7-day volatility bands
- Chain-state flag penalties
- Rating scale (SAFE / CAUTION / AVOID)

Scores run from 0 (no risk signal) to 100 (maximum risk signal).
"""

from enum import Enum


class Severity(Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    INFO = "INFO"

    @classmethod
    def parse(cls, value) -> "Severity":
        """Map a raw severity tag to a Severity, unknown tags become INFO."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return cls.INFO


class Rating(Enum):
    SAFE = "SAFE"
    CAUTION = "CAUTION"
    AVOID = "AVOID"


# =============================================================================
# COMPONENT WEIGHTS
# =============================================================================

# Insertion order is the breakdown order of every RiskScore.
COMPONENT_WEIGHTS = {
    "audit": {
        "weight": 0.35,
        "justification": "Contract security findings dominate: a single critical "
                        "finding (hidden mint, drainable liquidity, sell block) can "
                        "zero out holders regardless of market conditions.",
    },
    "concentration": {
        "weight": 0.25,
        "justification": "Top-10 holder share measures structural rug/dump exposure.",
    },
    "volatility": {
        "weight": 0.25,
        "justification": "7-day oracle price range measures market risk.",
    },
    "sentiment": {
        "weight": 0.15,
        "justification": "Name/description red flags are the noisiest signal and "
                        "contribute least.",
    },
}

# Score used when a producer is missing or failed. Absence of data is not
# evidence of safety, but it is not evidence of risk either.
NEUTRAL_SCORE = 50

# An audit that did not run or surfaced nothing contributes no risk.
NO_FINDINGS_SCORE = 0

# =============================================================================
# AUDIT SEVERITY
# =============================================================================

SEVERITY_RANK = {
    Severity.CRITICAL: 4,
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
    Severity.INFO: 0,
}

SEVERITY_SCORES = {
    Severity.CRITICAL: 100,
    Severity.HIGH: 75,
    Severity.MEDIUM: 45,
    Severity.LOW: 20,
    Severity.INFO: 5,
}

# Severities named in the summary's "Critical issues" clause
HEADLINE_SEVERITIES = (Severity.CRITICAL, Severity.HIGH)

# =============================================================================
# BANDED COMPONENTS
# =============================================================================

# Evaluated top-down, first band whose minimum is met (>=) wins.
CONCENTRATION_BANDS = [
    {"min_pct": 90, "score": 100, "justification": "Top 10 wallets hold nearly all supply"},
    {"min_pct": 75, "score": 80, "justification": "Top 10 wallets control the market"},
    {"min_pct": 60, "score": 60, "justification": "Heavily concentrated supply"},
    {"min_pct": 40, "score": 35, "justification": "Moderately concentrated supply"},
]
CONCENTRATION_FLOOR_SCORE = 10

VOLATILITY_BANDS = [
    {"min_pct": 80, "score": 100, "justification": "Extreme 7d price range"},
    {"min_pct": 50, "score": 75, "justification": "Very high 7d price range"},
    {"min_pct": 25, "score": 50, "justification": "High 7d price range"},
    {"min_pct": 10, "score": 25, "justification": "Moderate 7d price range"},
]
VOLATILITY_FLOOR_SCORE = 5

# =============================================================================
# FLAG PENALTIES
# =============================================================================

NEW_CONTRACT_MAX_AGE_DAYS = 7

FLAG_PENALTIES = {
    "new_contract": {
        "penalty": 10,
        "justification": f"Contract deployed less than {NEW_CONTRACT_MAX_AGE_DAYS} days ago",
    },
    "mint_function": {
        "penalty": 5,
        "justification": "Bytecode exposes mint(address,uint256)",
    },
    "proxy": {
        "penalty": 5,
        "justification": "Upgradeable proxy - logic can change under holders",
    },
}

MAX_SCORE = 100
MIN_SCORE = 0

# =============================================================================
# RATING SCALE
# =============================================================================

RATING_SCALE = {
    Rating.SAFE: {
        "min": 0,
        "max": 30,
        "icon": "✅",
        "description": "No material risk signals across the available producers.",
    },
    Rating.CAUTION: {
        "min": 31,
        "max": 65,
        "icon": "⚠️",
        "description": "Some risk signals or missing data. Review before interacting.",
    },
    Rating.AVOID: {
        "min": 66,
        "max": 100,
        "icon": "🚫",
        "description": "Strong risk signals. Interaction is not recommended.",
    },
}

# =============================================================================
# PRODUCER BOUNDARY LIMITS
# =============================================================================

MAX_ERROR_CHARS = 200
MAX_TITLE_CHARS = 100
MAX_DESCRIPTION_CHARS = 500
MAX_SUMMARY_CHARS = 500
MAX_FLAG_CHARS = 100
MAX_ANALYSIS_CHARS = 500
PRICE_HISTORY_ROUNDS = 7
