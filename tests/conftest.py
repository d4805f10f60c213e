"""
Pytest configuration and fixtures for the token risk pipeline.

This file contains shared fixtures used across all test modules.
Producer results are built through factory fixtures so each test only
states the fields it cares about.
"""

import pytest
import sys
from pathlib import Path
from typing import Dict, Any, List
from unittest.mock import MagicMock, patch

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from risk_models import (
    AuditFinding,
    AuditResult,
    ChainStateResult,
    PriceFeedResult,
    PriceRound,
    SentimentResult,
    TokenFlags,
)
from thresholds import Severity


TOKEN_ADDRESS = "0xB31f66AA3C1e785363F0875A1B74E27b85FD66c7"
FEED_ADDRESS = "0x5498BB86BC934c8D34FDA08E81D444153d0D06aD"


# =============================================================================
# PATH FIXTURES
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def token_address() -> str:
    return TOKEN_ADDRESS


@pytest.fixture
def feed_address() -> str:
    return FEED_ADDRESS


# =============================================================================
# PRODUCER RESULT FACTORIES
# =============================================================================

@pytest.fixture
def price_factory():
    """
    Factory fixture for PriceFeedResult.

    Usage:
        def test_something(price_factory):
            price = price_factory(volatility_7d_pct=42.0)
    """
    def _create(**overrides) -> PriceFeedResult:
        fields = {
            "feed_address": FEED_ADDRESS,
            "token_symbol": "AVAX",
            "price_usd": 25.1234,
            "timestamp": 1_700_000_000,
            "round_id": "100",
            "history": (PriceRound(round_id="99", price_usd=25.0, timestamp=1_699_990_000),),
            "volatility_7d_pct": 4.2,
        }
        fields.update(overrides)
        return PriceFeedResult(**fields)

    return _create


@pytest.fixture
def chain_state_factory():
    """Factory fixture for ChainStateResult (an established, clean token by default)."""
    def _create(flags: Dict[str, bool] = None, **overrides) -> ChainStateResult:
        fields = {
            "token_address": TOKEN_ADDRESS,
            "name": "Wrapped AVAX",
            "symbol": "WAVAX",
            "total_supply": str(10**24),
            "decimals": 18,
            "contract_age_days": 400,
            "holder_count": 100,
            "top10_concentration_pct": 30,
            "flags": TokenFlags(**(flags or {})),
            "bytecode_size_bytes": 2048,
        }
        fields.update(overrides)
        return ChainStateResult(**fields)

    return _create


@pytest.fixture
def audit_factory():
    """
    Factory fixture for AuditResult.

    Findings are given as (severity, title) pairs.
    """
    def _create(findings: List[tuple] = (), **overrides) -> AuditResult:
        fields = {
            "token_address": TOKEN_ADDRESS,
            "findings": tuple(
                AuditFinding(severity=Severity.parse(sev), title=title, description=f"{title} details")
                for sev, title in findings
            ),
            "summary": "Standard ERC-20 token.",
        }
        fields.update(overrides)
        return AuditResult(**fields)

    return _create


@pytest.fixture
def sentiment_factory():
    """Factory fixture for SentimentResult."""
    def _create(**overrides) -> SentimentResult:
        fields = {
            "token_name": "Wrapped AVAX",
            "token_symbol": "WAVAX",
            "sentiment_score": 10,
            "flags": (),
            "analysis": "Utility token with a clear use case.",
        }
        fields.update(overrides)
        return SentimentResult(**fields)

    return _create


# =============================================================================
# WEB3 MOCK FIXTURES
# =============================================================================

@pytest.fixture
def mock_web3():
    """Mock Web3 instance for testing without blockchain connection."""
    mock = MagicMock()
    mock.eth.contract.return_value = MagicMock()
    mock.is_connected.return_value = True
    return mock


@pytest.fixture
def mock_aggregator_contract():
    """
    Mock Chainlink AggregatorV3 contract.

    Latest round 10 at $100 (8 decimals); prior rounds 9 and 8 at $110 and
    $95, older rounds revert.
    """
    mock = MagicMock()

    mock.functions.decimals.return_value.call.return_value = 8
    mock.functions.latestRoundData.return_value.call.return_value = (
        10,                   # roundId
        100 * 10**8,          # answer ($100 * 10^8)
        1_700_000_000,        # startedAt
        1_700_000_100,        # updatedAt
        10,                   # answeredInRound
    )

    rounds = {
        9: (9, 110 * 10**8, 1_699_900_000, 1_699_900_100, 9),
        8: (8, 95 * 10**8, 1_699_800_000, 1_699_800_100, 8),
    }

    def _get_round_data(round_id):
        call = MagicMock()
        if round_id in rounds:
            call.call.return_value = rounds[round_id]
        else:
            call.call.side_effect = Exception("execution reverted")
        return call

    mock.functions.getRoundData.side_effect = _get_round_data
    return mock


@pytest.fixture
def mock_erc20_contract():
    """Mock ERC-20 contract with owner() renounced and paused() reverting."""
    mock = MagicMock()
    mock.functions.name.return_value.call.return_value = "Test Token"
    mock.functions.symbol.return_value.call.return_value = "TEST"
    mock.functions.decimals.return_value.call.return_value = 18
    mock.functions.totalSupply.return_value.call.return_value = 1_000_000 * 10**18
    mock.functions.owner.return_value.call.return_value = "0x0000000000000000000000000000000000000000"
    mock.functions.paused.return_value.call.side_effect = Exception("execution reverted")
    return mock


# =============================================================================
# HTTP MOCK FIXTURES
# =============================================================================

def make_response(json_body: Any = None, status_code: int = 200, text: str = "") -> MagicMock:
    """Build a requests.Response stand-in."""
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.text = text
    if isinstance(json_body, Exception):
        response.json.side_effect = json_body
    else:
        response.json.return_value = json_body
    return response


@pytest.fixture
def http_response():
    """Factory fixture wrapping make_response."""
    return make_response


@pytest.fixture
def groq_completion():
    """Factory for a Groq chat-completion body wrapping the given content."""
    def _create(content: str) -> Dict[str, Any]:
        return {
            "model": "llama-3.3-70b-versatile",
            "choices": [{"message": {"role": "assistant", "content": content}}],
            "usage": {"prompt_tokens": 120, "completion_tokens": 40, "total_tokens": 160},
        }

    return _create


@pytest.fixture
def mock_requests_post():
    """
    Mock requests.post for LLM client testing.

    Usage:
        def test_call(mock_requests_post):
            mock_requests_post.return_value = make_response({...})
    """
    with patch("requests.post") as mock_post:
        yield mock_post


@pytest.fixture
def mock_requests_get():
    """Mock requests.get for explorer client testing."""
    with patch("requests.get") as mock_get:
        yield mock_get


@pytest.fixture
def llm_api_key():
    """Provide a Groq API key for the duration of the test."""
    with patch.dict("llm_client.LLM_CONFIG", {"api_key": "test-key"}):
        yield "test-key"


# =============================================================================
# THRESHOLD FIXTURES
# =============================================================================

@pytest.fixture
def rating_boundaries() -> Dict[str, tuple]:
    """Expected rating boundaries for validation."""
    return {
        "SAFE": (0, 30),
        "CAUTION": (31, 65),
        "AVOID": (66, 100),
    }
