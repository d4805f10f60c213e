"""
Unit tests for component_scores module.

Each producer result maps to an integer 0-100 score; missing or failed
producers fall back to the neutral score (audit falls back to 0).
"""

import pytest
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from component_scores import (
    band_score,
    audit_component_score,
    concentration_component_score,
    volatility_component_score,
    sentiment_component_score,
)
from thresholds import CONCENTRATION_BANDS, CONCENTRATION_FLOOR_SCORE, NEUTRAL_SCORE


class TestBandScore:
    """Tests for the band_score helper."""

    @pytest.mark.unit
    @pytest.mark.scoring
    @pytest.mark.parametrize("value,expected", [
        (100, 100),
        (90, 100),
        (89.99, 80),
        (75, 80),
        (60, 60),
        (59, 35),
        (40, 35),
        (39.9, 10),
        (0, 10),
    ])
    def test_concentration_boundaries(self, value, expected):
        assert band_score(value, CONCENTRATION_BANDS, CONCENTRATION_FLOOR_SCORE) == expected


class TestAuditComponent:
    """Tests for audit_component_score."""

    @pytest.mark.unit
    @pytest.mark.scoring
    def test_not_run_scores_zero(self):
        assert audit_component_score(None) == 0

    @pytest.mark.unit
    @pytest.mark.scoring
    def test_no_findings_scores_zero(self, audit_factory):
        assert audit_component_score(audit_factory()) == 0

    @pytest.mark.unit
    @pytest.mark.scoring
    def test_failed_audit_scores_zero(self, audit_factory):
        audit = audit_factory(summary="Audit unavailable", error="GROQ_API_KEY env var not set")
        assert audit_component_score(audit) == 0

    @pytest.mark.unit
    @pytest.mark.scoring
    @pytest.mark.parametrize("severity,expected", [
        ("CRITICAL", 100),
        ("HIGH", 75),
        ("MEDIUM", 45),
        ("LOW", 20),
        ("INFO", 5),
    ])
    def test_single_finding(self, audit_factory, severity, expected):
        audit = audit_factory(findings=[(severity, "Finding")])
        assert audit_component_score(audit) == expected

    @pytest.mark.unit
    @pytest.mark.scoring
    def test_worst_finding_wins(self, audit_factory):
        audit = audit_factory(findings=[("LOW", "a"), ("CRITICAL", "b"), ("MEDIUM", "c")])
        assert audit_component_score(audit) == 100

    @pytest.mark.unit
    @pytest.mark.scoring
    def test_equal_severities(self, audit_factory):
        audit = audit_factory(findings=[("HIGH", "first"), ("HIGH", "second")])
        assert audit_component_score(audit) == 75


class TestConcentrationComponent:
    """Tests for concentration_component_score."""

    @pytest.mark.unit
    @pytest.mark.scoring
    def test_missing_is_neutral(self):
        assert concentration_component_score(None) == NEUTRAL_SCORE

    @pytest.mark.unit
    @pytest.mark.scoring
    def test_unknown_concentration_is_neutral(self, chain_state_factory):
        assert concentration_component_score(chain_state_factory(top10_concentration_pct=None)) == NEUTRAL_SCORE

    @pytest.mark.unit
    @pytest.mark.scoring
    def test_failed_chain_state_is_neutral(self, chain_state_factory):
        chain_state = chain_state_factory(top10_concentration_pct=95, error="On-chain analysis failed: rpc down")
        assert concentration_component_score(chain_state) == NEUTRAL_SCORE

    @pytest.mark.unit
    @pytest.mark.scoring
    def test_monotonic_in_concentration(self, chain_state_factory):
        scores = [
            concentration_component_score(chain_state_factory(top10_concentration_pct=pct))
            for pct in range(0, 101, 5)
        ]
        assert scores == sorted(scores)


class TestVolatilityComponent:
    """Tests for volatility_component_score."""

    @pytest.mark.unit
    @pytest.mark.scoring
    def test_missing_is_neutral(self):
        assert volatility_component_score(None) == NEUTRAL_SCORE

    @pytest.mark.unit
    @pytest.mark.scoring
    def test_failed_feed_is_neutral(self, price_factory):
        price = price_factory(volatility_7d_pct=0.0, error="Chainlink read failed: timeout")
        assert volatility_component_score(price) == NEUTRAL_SCORE

    @pytest.mark.unit
    @pytest.mark.scoring
    @pytest.mark.parametrize("volatility,expected", [
        (0.0, 5),
        (9.99, 5),
        (10, 25),
        (25, 50),
        (50, 75),
        (80, 100),
        (250, 100),
    ])
    def test_bands(self, price_factory, volatility, expected):
        assert volatility_component_score(price_factory(volatility_7d_pct=volatility)) == expected


class TestSentimentComponent:
    """Tests for sentiment_component_score."""

    @pytest.mark.unit
    @pytest.mark.scoring
    def test_missing_is_neutral(self):
        assert sentiment_component_score(None) == NEUTRAL_SCORE

    @pytest.mark.unit
    @pytest.mark.scoring
    def test_failed_is_neutral(self, sentiment_factory):
        sentiment = sentiment_factory(sentiment_score=90, error="Groq API error 500")
        assert sentiment_component_score(sentiment) == NEUTRAL_SCORE

    @pytest.mark.unit
    @pytest.mark.scoring
    @pytest.mark.parametrize("raw,expected", [
        (0, 0),
        (73, 73),
        (100, 100),
        (140, 100),
        (-5, 0),
    ])
    def test_passes_through_clamped(self, sentiment_factory, raw, expected):
        assert sentiment_component_score(sentiment_factory(sentiment_score=raw)) == expected
