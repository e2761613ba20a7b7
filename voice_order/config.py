"""
Configuration Module for Voice Order
====================================

This module centralizes all configuration settings, environment variables, and
constants used throughout the voice ordering service. Values are read from the
environment once at import time; `main.py` loads `.env` before anything else
is imported.

Configuration Categories:
-------------------------
- **Database**: SQLAlchemy connection URL.

- **NLU Back-ends**: Which extractor handles online utterances (remote HTTP
  NLU service, OpenAI, or the local rule engine) and how to reach it.

- **Ordering**: Confidence threshold for automatic order creation, supported
  languages/dialects and payment defaults.

- **Rate Limiting**: Throttling for the voice endpoints (slowapi).

- **Session Management**: TTL and cache size of the in-memory dialogue
  context store.

- **Input Validation**: Maximum utterance length.

- **CORS / Merchant Auth**: Frontend origins and the HTTP Basic credentials
  used by the merchant status endpoint.

Environment Variables:
----------------------
- DATABASE_URL: SQLAlchemy URL (default: "sqlite:///./voice_order.db")
- OFFLINE_MODE_ENABLED: Force the local rule engine (default: "false")
- NLU_BACKEND: "rules", "http" or "openai" (default: "rules")
- NLU_API_URL / NLU_API_KEY / NLU_REQUEST_TIMEOUT: Remote NLU service
- OPENAI_MODEL / OPENAI_MAX_TOKENS / OPENAI_TEMPERATURE: OpenAI back-end
- ORDER_CONFIDENCE_THRESHOLD: Minimum confidence to create an order (default: 0.7)
- DEFAULT_PAYMENT_METHOD: Payment method when none was spoken (default: "cash_on_delivery")
- RATE_LIMIT_VOICE: Voice endpoint rate limit (default: "30 per minute")
- RATE_LIMIT_ENABLED: Enable/disable rate limiting (default: "true")
- SESSION_TTL_SECONDS: Dialogue context TTL (default: 1800)
- SESSION_MAX_CACHE_SIZE: Max cached dialogue contexts (default: 1000)
- MAX_COMMAND_LENGTH: Max utterance length (default: 500)
- CORS_ORIGINS: Comma-separated allowed origins (default: "*")
- MERCHANT_USERNAME / MERCHANT_PASSWORD: Merchant credentials

Usage:
------
    from voice_order import config

    if command.confidence >= config.ORDER_CONFIDENCE_THRESHOLD:
        ...
"""

import os
from typing import List


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


# =============================================================================
# Database Configuration
# =============================================================================

DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./voice_order.db")


# =============================================================================
# NLU Back-end Configuration
# =============================================================================
# "rules" keeps everything local. "http" calls the remote NLU service and
# "openai" asks a chat model for the same ProcessedCommand JSON.

OFFLINE_MODE_ENABLED: bool = _env_bool("OFFLINE_MODE_ENABLED", "false")
NLU_BACKEND: str = os.getenv("NLU_BACKEND", "rules").lower()

NLU_API_URL: str = os.getenv("NLU_API_URL", "").rstrip("/")
NLU_API_KEY: str = os.getenv("NLU_API_KEY", "")
NLU_REQUEST_TIMEOUT: float = float(os.getenv("NLU_REQUEST_TIMEOUT", "10"))

OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
OPENAI_MAX_TOKENS: int = int(os.getenv("OPENAI_MAX_TOKENS", "300"))
OPENAI_TEMPERATURE: float = float(os.getenv("OPENAI_TEMPERATURE", "0.2"))


# =============================================================================
# Ordering Configuration
# =============================================================================

# Only an `order` command at or above this confidence may create an order
ORDER_CONFIDENCE_THRESHOLD: float = float(os.getenv("ORDER_CONFIDENCE_THRESHOLD", "0.7"))

SUPPORTED_LANGUAGES: List[str] = [
    "hindi",
    "tamil",
    "kannada",
    "bhojpuri",
    "bengali",
    "marathi",
    "gujarati",
    "english",
]
DIALECTS: List[str] = ["standard", "colloquial"]

DEFAULT_PAYMENT_METHOD: str = os.getenv("DEFAULT_PAYMENT_METHOD", "cash_on_delivery")


# =============================================================================
# Rate Limiting Configuration
# =============================================================================
# Rate limit format: "X per Y" where Y is second, minute, hour, or day

RATE_LIMIT_VOICE: str = os.getenv("RATE_LIMIT_VOICE", "30 per minute")
RATE_LIMIT_ENABLED: bool = _env_bool("RATE_LIMIT_ENABLED", "true")


def get_rate_limit_voice() -> str:
    """
    Return the current voice endpoint rate limit.

    Allows dynamic override in tests without touching the module constant.
    """
    return RATE_LIMIT_VOICE


# =============================================================================
# Session Management Configuration
# =============================================================================
# Dialogue contexts live only in memory; an evicted context simply starts a
# new conversation.

SESSION_TTL_SECONDS: int = int(os.getenv("SESSION_TTL_SECONDS", "1800"))
SESSION_MAX_CACHE_SIZE: int = int(os.getenv("SESSION_MAX_CACHE_SIZE", "1000"))


# =============================================================================
# Input Validation Configuration
# =============================================================================

MAX_COMMAND_LENGTH: int = int(os.getenv("MAX_COMMAND_LENGTH", "500"))


# =============================================================================
# CORS Configuration
# =============================================================================
# Format: comma-separated list of origins. Default "*" is for development only.

_cors_origins_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS: List[str] = [
    origin.strip()
    for origin in _cors_origins_env.split(",")
    if origin.strip()
] or ["*"]


# =============================================================================
# Merchant Authentication Configuration
# =============================================================================
# HTTP Basic credentials for merchant-driven status progression.
# MERCHANT_PASSWORD must be set for the endpoint to be usable.

MERCHANT_USERNAME: str = os.getenv("MERCHANT_USERNAME", "merchant")
MERCHANT_PASSWORD: str = os.getenv("MERCHANT_PASSWORD", "")
