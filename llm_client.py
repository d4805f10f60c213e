"""
Groq chat-completion client (OpenAI-compatible endpoint).
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import requests

from settings import LLM_CONFIG

logger = logging.getLogger(__name__)


class LLMClientError(RuntimeError):
    """LLM call failed: missing key, HTTP error, or malformed response."""


@dataclass(frozen=True)
class LLMResponse:
    result: str
    model: str
    usage: Dict[str, int] = field(default_factory=dict)


def call_llm(
    messages: List[Dict[str, str]],
    model: Optional[str] = None,
    max_tokens: int = 1024,
    temperature: float = 0,
    api_key: Optional[str] = None,
) -> LLMResponse:
    """
    Send one chat completion request and return the first choice's text.

    Raises:
        LLMClientError: on missing API key, non-2xx status, or bad payload
    """
    api_key = api_key or LLM_CONFIG["api_key"]
    if not api_key:
        raise LLMClientError("GROQ_API_KEY env var not set")

    payload = {
        "model": model or LLM_CONFIG["model"],
        "messages": messages,
        "max_tokens": max_tokens,
        "temperature": temperature,
    }

    try:
        response = requests.post(
            LLM_CONFIG["api_url"],
            json=payload,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=LLM_CONFIG["timeout"],
        )
    except requests.exceptions.RequestException as e:
        raise LLMClientError(f"Groq request failed: {e}") from e

    if not response.ok:
        raise LLMClientError(f"Groq API error {response.status_code}: {response.text[:200]}")

    try:
        data = response.json()
        choices = data.get("choices") or []
        content = (choices[0].get("message") or {}).get("content") if choices else ""
    except (ValueError, AttributeError) as e:
        raise LLMClientError(f"Malformed Groq response: {e}") from e

    if content is not None and not isinstance(content, str):
        raise LLMClientError("Malformed Groq response: content is not text")

    logger.debug("Groq usage: %s", data.get("usage"))

    return LLMResponse(
        result=content or "",
        model=data.get("model", payload["model"]),
        usage=data.get("usage") or {},
    )
