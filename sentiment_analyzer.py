"""
DeFi Sentiment Analyzer.

Scores a token's name, symbol and description for fraud/hype red flags
(0 = clean, 100 = very suspicious) with an LLM.
"""

import json
import logging
from typing import Optional

from llm_client import call_llm
from risk_models import SentimentResult, error_tag, truncate

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_INPUT_CHARS = 1000
FALLBACK_ANALYSIS_CHARS = 200

SENTIMENT_SYSTEM_PROMPT = """You are a DeFi fraud detection specialist. Analyze a token's name, symbol, and description for warning signs.

Look for:
- FOMO/hype naming ("Moon", "Safe", "Gem", "100x", "ElonBased", "Turbo")
- Impersonation of legitimate projects ("SafeMoon", "BabyETH", "MiniDOGE")
- Unrealistic promises in description ("guaranteed returns", "rugproof", "fully audited" without proof)
- Anonymous team + aggressive marketing language
- Legitimate indicators (real utility description, team transparency, verifiable use case)

RESPOND ONLY with valid JSON, no extra text:
{
  "sentiment_score": <integer 0-100, where 0=very clean, 100=very suspicious>,
  "flags": ["list", "of", "detected", "red", "flags"],
  "analysis": "2-3 sentence explanation"
}"""


def build_sentiment_prompt(token_name: str, token_symbol: str, description: Optional[str] = None) -> str:
    described = description[:MAX_DESCRIPTION_INPUT_CHARS] if description else "Not provided"
    return f"Token name: {token_name}\nSymbol: {token_symbol}\nDescription: {described}"


def parse_sentiment_response(token_name: str, token_symbol: str, text: str) -> SentimentResult:
    try:
        parsed = json.loads(text)
        if not isinstance(parsed, dict):
            raise ValueError("sentiment response is not a JSON object")
    except (TypeError, ValueError):
        return SentimentResult(
            token_name=token_name,
            token_symbol=token_symbol,
            sentiment_score=50,
            flags=("Parse error - manual review recommended",),
            analysis=truncate(text, FALLBACK_ANALYSIS_CHARS),
        )

    return SentimentResult(
        token_name=token_name,
        token_symbol=token_symbol,
        sentiment_score=SentimentResult.sanitize_score(parsed.get("sentiment_score", 50)),
        flags=SentimentResult.sanitize_flags(parsed.get("flags")),
        analysis=SentimentResult.sanitize_analysis(parsed.get("analysis")),
    )


def analyze_sentiment(token_name: str, token_symbol: str, description: Optional[str] = None) -> SentimentResult:
    """Never raises: LLM failures come back as a neutral, error-tagged result."""
    try:
        response = call_llm(
            messages=[
                {"role": "system", "content": SENTIMENT_SYSTEM_PROMPT},
                {"role": "user", "content": build_sentiment_prompt(token_name, token_symbol, description)},
            ],
            max_tokens=512,
            temperature=0,
        )
    except Exception as e:
        logger.warning("Sentiment analysis failed for %s: %s", token_symbol, e)
        return SentimentResult(
            token_name=token_name,
            token_symbol=token_symbol,
            sentiment_score=50,
            flags=(),
            analysis="Sentiment analysis unavailable",
            error=error_tag(e),
        )

    result = parse_sentiment_response(token_name, token_symbol, response.result)
    logger.info("Sentiment for %s: %d (%d flags)", token_symbol, result.sentiment_score, len(result.flags))
    return result
