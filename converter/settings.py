"""Converter runtime settings: tunable parameters for pipeline execution.

All values read from environment variables with defaults matching the
behavior of the hosted service. Import from here instead of hardcoding.

Infrastructure config (API host, credentials, storage backend) stays
in converter/config.py.
"""

from __future__ import annotations

import os


def _int(key: str, default: int) -> int:
    return int(os.getenv(key, str(default)))


def _float(key: str, default: float) -> float:
    return float(os.getenv(key, str(default)))


def _str(key: str, default: str) -> str:
    return os.getenv(key, default)


# =====================================================================
# Model calls (OpenAI chat completions)
# =====================================================================

# Text-only model used for Figma-based HTML, component and field generation
OPENAI_TEXT_MODEL = _str("OPENAI_TEXT_MODEL", "gpt-4")

# Vision-capable model used when an image is uploaded
OPENAI_VISION_MODEL = _str("OPENAI_VISION_MODEL", "gpt-4o")

# Token budgets per stage
HTML_MAX_TOKENS = _int("HTML_MAX_TOKENS", 3000)
COMPONENT_MAX_TOKENS = _int("COMPONENT_MAX_TOKENS", 2000)
FIELDS_MAX_TOKENS = _int("FIELDS_MAX_TOKENS", 2000)

# Request timeout for a single completion (seconds)
OPENAI_TIMEOUT = _float("OPENAI_TIMEOUT", 120.0)


# =====================================================================
# Result storage
# =====================================================================

# Records older than this are treated as deleted (lazy expiry on read)
RESULT_TTL_SECONDS = _int("RESULT_TTL_SECONDS", 3600)

# Background sweep period (seconds); first sweep runs at startup
RESULT_SWEEP_INTERVAL_SECONDS = _float("RESULT_SWEEP_INTERVAL_SECONDS", 3600.0)

# GET /api/all returns at most this many of the most recent results
RESULTS_LIST_LIMIT = _int("RESULTS_LIST_LIMIT", 10)


# =====================================================================
# Result polling (client side)
# =====================================================================

POLL_INTERVAL_SECONDS = _float("POLL_INTERVAL_SECONDS", 3.0)
POLL_MAX_ATTEMPTS = _int("POLL_MAX_ATTEMPTS", 20)


# =====================================================================
# HTTP Clients (Figma API)
# =====================================================================

FIGMA_HTTP_TIMEOUT = _float("FIGMA_HTTP_TIMEOUT", 60.0)
