"""
Risk pipeline configuration.

RPC, block explorer, LLM and pipeline settings read from the environment.
"""

import logging
import os

# Chain RPC - defaults to Avalanche Fuji testnet
CHAIN_CONFIG = {
    "chain_name": os.getenv("CHAIN_NAME", "avalanche_fuji"),
    "rpc_url": os.getenv("RPC_URL"),
}

# Snowtrace (Etherscan-compatible) block explorer
EXPLORER_CONFIG = {
    "base_url": os.getenv("SNOWTRACE_BASE_URL", "https://api-testnet.snowtrace.io").strip(),
    "api_key": os.getenv("SNOWTRACE_API_KEY", "").strip(),
    "timeout": float(os.getenv("EXPLORER_TIMEOUT_SECONDS", 8)),
}

# Groq chat-completion endpoint (OpenAI compatible)
LLM_CONFIG = {
    "api_key": os.getenv("GROQ_API_KEY"),
    "api_url": os.getenv("GROQ_API_URL", "https://api.groq.com/openai/v1/chat/completions"),
    "model": os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile"),
    "timeout": float(os.getenv("LLM_TIMEOUT_SECONDS", 30)),
}

PIPELINE_CONFIG = {
    "default_feed_address": os.getenv("CHAINLINK_AVAX_USD_FEED"),
    "producer_timeout": float(os.getenv("PRODUCER_TIMEOUT_SECONDS", 45)),
    "max_workers": 4,
}

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def configure_logging(level: str = None) -> None:
    """Configure root logging for command-line use."""
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
