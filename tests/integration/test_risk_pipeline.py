"""
Integration tests for risk_pipeline module.

Producers are patched at the pipeline boundary; these tests cover the
fan-out, skip handling, the shared deadline and the command line.
"""

import json
import threading
import pytest
import sys
from pathlib import Path
from unittest.mock import patch

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from risk_pipeline import PRODUCERS, assess_token, main, validate_token_address
from risk_scorer import compute_risk_score
from thresholds import Rating


@pytest.fixture
def producers(price_factory, chain_state_factory, audit_factory, sentiment_factory):
    """Patch all four producers with canned results."""
    results = {
        "chainlink": price_factory(),
        "onchain": chain_state_factory(),
        "audit": audit_factory(findings=[("HIGH", "Owner can pause")]),
        "sentiment": sentiment_factory(),
    }
    with patch("risk_pipeline.read_price_feed", return_value=results["chainlink"]) as price, \
         patch("risk_pipeline.analyze_chain_state", return_value=results["onchain"]) as onchain, \
         patch("risk_pipeline.audit_contract", return_value=results["audit"]) as audit, \
         patch("risk_pipeline.analyze_sentiment", return_value=results["sentiment"]) as sentiment:
        yield {
            "results": results,
            "chainlink": price,
            "onchain": onchain,
            "audit": audit,
            "sentiment": sentiment,
        }


class TestValidateTokenAddress:
    """Tests for validate_token_address."""

    @pytest.mark.integration
    def test_valid(self, token_address):
        assert validate_token_address(f"  {token_address} ") == token_address

    @pytest.mark.integration
    @pytest.mark.parametrize("bad", [
        None,
        "",
        "   ",
        "0x1234",
        "B31f66AA3C1e785363F0875A1B74E27b85FD66c7",
        "0xZZ1f66AA3C1e785363F0875A1B74E27b85FD66c7",
        "0xB31f66AA3C1e785363F0875A1B74E27b85FD66c7ff",
    ])
    def test_invalid(self, bad):
        with pytest.raises(ValueError):
            validate_token_address(bad)


class TestAssessToken:
    """Tests for assess_token."""

    @pytest.mark.integration
    def test_all_producers(self, producers, token_address, feed_address):
        report = assess_token(token_address, feed_address=feed_address, description="Wrapped AVAX")

        r = producers["results"]
        assert report.price == r["chainlink"]
        assert report.chain_state == r["onchain"]
        assert report.audit == r["audit"]
        assert report.sentiment == r["sentiment"]
        assert report.risk_score == compute_risk_score(r["chainlink"], r["onchain"], r["audit"], r["sentiment"])
        assert "Critical issues: Owner can pause." in report.summary

        producers["chainlink"].assert_called_once_with(feed_address, "UNKNOWN")
        producers["onchain"].assert_called_once_with(token_address)
        producers["audit"].assert_called_once_with(token_address, None)

    @pytest.mark.integration
    def test_sentiment_uses_chain_state_names(self, producers, token_address, feed_address):
        assess_token(token_address, feed_address=feed_address, description="desc")
        producers["sentiment"].assert_called_once_with("Wrapped AVAX", "WAVAX", "desc")

    @pytest.mark.integration
    def test_sentiment_prefers_given_names(self, producers, token_address, feed_address):
        assess_token(token_address, feed_address=feed_address, token_name="Given", token_symbol="GVN")
        producers["sentiment"].assert_called_once_with("Given", "GVN", None)
        producers["chainlink"].assert_called_once_with(feed_address, "GVN")

    @pytest.mark.integration
    def test_sentiment_without_chain_state(self, producers, token_address, feed_address):
        assess_token(token_address, feed_address=feed_address, skip=["onchain"])
        producers["sentiment"].assert_called_once_with("???", "???", None)

    @pytest.mark.integration
    def test_skip(self, producers, token_address, feed_address):
        report = assess_token(token_address, feed_address=feed_address, skip=["audit", "sentiment"])

        producers["audit"].assert_not_called()
        producers["sentiment"].assert_not_called()
        assert report.audit is None
        assert report.sentiment is None
        assert report.summary.endswith("Sentiment: not analyzed")

    @pytest.mark.integration
    def test_skip_all(self, producers, token_address):
        report = assess_token(token_address, skip=PRODUCERS)

        assert report.risk_score.total == 33
        assert report.risk_score.rating == Rating.CAUTION
        for name in PRODUCERS:
            producers[name].assert_not_called()

    @pytest.mark.integration
    def test_no_feed_skips_price(self, producers, token_address):
        with patch.dict("risk_pipeline.PIPELINE_CONFIG", {"default_feed_address": None}):
            report = assess_token(token_address)

        producers["chainlink"].assert_not_called()
        assert report.price is None
        assert "Current price: N/A." in report.summary

    @pytest.mark.integration
    def test_default_feed(self, producers, token_address, feed_address):
        with patch.dict("risk_pipeline.PIPELINE_CONFIG", {"default_feed_address": feed_address}):
            assess_token(token_address)
        producers["chainlink"].assert_called_once_with(feed_address, "UNKNOWN")

    @pytest.mark.integration
    def test_unknown_producer(self, token_address):
        with pytest.raises(ValueError, match="Unknown producer"):
            assess_token(token_address, skip=["twitter"])

    @pytest.mark.integration
    def test_invalid_address(self, producers):
        with pytest.raises(ValueError, match="token_address"):
            assess_token("0xnope")
        producers["onchain"].assert_not_called()

    @pytest.mark.integration
    def test_raising_producer_scored_as_missing(self, producers, token_address, feed_address):
        producers["audit"].side_effect = RuntimeError("boom")

        report = assess_token(token_address, feed_address=feed_address)

        assert report.audit is None
        assert report.risk_score.component("audit").score == 0

    @pytest.mark.integration
    def test_slow_producer_times_out(self, producers, token_address, feed_address):
        release = threading.Event()

        def _slow(*args, **kwargs):
            release.wait(5)
            return producers["results"]["audit"]

        producers["audit"].side_effect = _slow
        try:
            report = assess_token(token_address, feed_address=feed_address, timeout=0.2)
        finally:
            release.set()

        assert report.audit is None
        assert report.chain_state == producers["results"]["onchain"]
        assert report.sentiment == producers["results"]["sentiment"]

    @pytest.mark.integration
    def test_generated_at(self, producers, token_address):
        from datetime import datetime, timezone

        report = assess_token(token_address, skip=PRODUCERS, now=datetime(2024, 5, 1, tzinfo=timezone.utc))
        assert report.generated_at == "2024-05-01T00:00:00+00:00"


class TestCommandLine:
    """Tests for the token-risk command line."""

    @pytest.mark.integration
    @pytest.mark.smoke
    def test_json_output(self, producers, token_address, feed_address, capsys):
        exit_code = main(["--token", token_address, "--feed", feed_address, "--json"])

        assert exit_code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["token_address"] == token_address
        assert set(data["agents"]) == set(PRODUCERS)
        assert data["risk_score"]["total"] == compute_risk_score(*producers["results"].values()).total

    @pytest.mark.integration
    @pytest.mark.smoke
    def test_text_output(self, producers, token_address, capsys):
        exit_code = main(["--token", token_address, "--skip", "chainlink", "sentiment"])

        assert exit_code == 0
        out = capsys.readouterr().out
        assert "Risk Score:" in out
        assert "TOTAL" in out
        assert "not financial advice" in out

    @pytest.mark.integration
    @pytest.mark.smoke
    def test_source_file(self, producers, token_address, tmp_path):
        source = tmp_path / "Token.sol"
        source.write_text("contract Token {}")

        assert main(["--token", token_address, "--source", str(source), "--skip", "chainlink"]) == 0
        producers["audit"].assert_called_once_with(token_address, "contract Token {}")

    @pytest.mark.integration
    @pytest.mark.smoke
    def test_invalid_address_exit_code(self, capsys):
        assert main(["--token", "0x1234"]) == 2
        assert "Invalid token_address" in capsys.readouterr().err
