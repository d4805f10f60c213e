"""
Smart Contract Auditor.

LLM-driven security review of a token contract. The model is asked for a
fixed JSON shape; anything it returns is validated and capped before it
leaves this module.
"""

import json
import logging
from typing import Optional

from llm_client import call_llm
from risk_models import AuditFinding, AuditResult, error_tag, truncate
from thresholds import Severity, MAX_DESCRIPTION_CHARS, MAX_SUMMARY_CHARS

logger = logging.getLogger(__name__)

POWERED_BY = "groq-llama"
MAX_SOURCE_CHARS = 8000
FALLBACK_SUMMARY_CHARS = 200

AUDIT_SYSTEM_PROMPT = """You are a senior smart contract security auditor specializing in EVM/Avalanche DeFi contracts.

Given a token contract address and optionally its ABI or source, analyze for:
1. Rug pull mechanisms (hidden owner functions, drainable liquidity, emergency withdraw)
2. Honeypot patterns (sell restrictions, blacklist functions, transfer fees >10%)
3. Dangerous permissions (mint without cap, pause all transfers, setFee, blacklist/whitelist)
4. Centralization risks (single owner, upgradeable proxy without timelock)
5. Common vulnerabilities (reentrancy, integer overflow, unchecked returns)

RESPOND ONLY with valid JSON in this exact format, no extra text:
{
  "findings": [
    {
      "severity": "CRITICAL|HIGH|MEDIUM|LOW|INFO",
      "title": "Short title",
      "description": "What it means and why it matters"
    }
  ],
  "summary": "2-3 sentence overall assessment"
}"""


def build_audit_prompt(token_address: str, contract_source: Optional[str] = None) -> str:
    if contract_source:
        return (
            f"Token address: {token_address}\n\n"
            f"Contract source/ABI:\n{contract_source[:MAX_SOURCE_CHARS]}"
        )
    return (
        f"Token address: {token_address}\n\n"
        "No source code provided. Analyze based on the address and any known patterns "
        "for this type of contract on Avalanche. Focus on common DeFi risks."
    )


def parse_audit_response(token_address: str, text: str) -> AuditResult:
    """Turn raw model output into a sanitized AuditResult."""
    try:
        parsed = json.loads(text)
        if not isinstance(parsed, dict):
            raise ValueError("audit response is not a JSON object")
    except (TypeError, ValueError):
        # Non-JSON reply: keep the text as a single informational finding
        return AuditResult(
            token_address=token_address,
            findings=(AuditFinding(
                severity=Severity.INFO,
                title="Analysis completed",
                description=truncate(text, MAX_DESCRIPTION_CHARS),
            ),),
            summary=truncate(text, FALLBACK_SUMMARY_CHARS),
            powered_by=POWERED_BY,
        )

    raw_findings = parsed.get("findings") or []
    if not isinstance(raw_findings, list):
        raw_findings = []

    return AuditResult(
        token_address=token_address,
        findings=tuple(AuditFinding.from_raw(f) for f in raw_findings),
        summary=truncate(parsed.get("summary"), MAX_SUMMARY_CHARS),
        powered_by=POWERED_BY,
    )


def audit_contract(token_address: str, contract_source: Optional[str] = None) -> AuditResult:
    """
    Audit a token contract. Never raises: LLM failures come back as an
    error-tagged result with no findings.
    """
    try:
        response = call_llm(
            messages=[
                {"role": "system", "content": AUDIT_SYSTEM_PROMPT},
                {"role": "user", "content": build_audit_prompt(token_address, contract_source)},
            ],
            max_tokens=1024,
            temperature=0,
        )
    except Exception as e:
        logger.warning("Audit failed for %s: %s", token_address, e)
        return AuditResult(
            token_address=token_address,
            findings=(),
            summary="Audit unavailable",
            powered_by=POWERED_BY,
            error=error_tag(e),
        )

    result = parse_audit_response(token_address, response.result)
    logger.info("Audit for %s: %d findings", token_address, len(result.findings))
    return result
