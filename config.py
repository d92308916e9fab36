"""
CONFIGURATION MODULE
====================

PURPOSE:
  Central place for all Support Assistant settings: API keys, model name, the
  key-value store backend, retention limits and the support-agent system prompt.
  Each deployment runs its own copy of this service with its own .env file.

WHAT THIS FILE DOES:
  - Loads environment variables from .env (so API keys stay out of code).
  - Exposes GROQ_API_KEYS and GROQ_MODEL for the inference-backed responder.
    No key configured means the canned responder is used instead.
  - Selects the key-value store backend (none, memory or redis) and REDIS_URL.
  - Defines history retention, prompt history size and the response token cap.
  - Defines how persistence failures are reported to callers.
  - Holds the system prompt sent with every inference call.

USAGE:
  Import what you need: `from config import GROQ_API_KEYS, KV_BACKEND, SUPPORT_SYSTEM_PROMPT`
  All services import from here so behaviour is consistent.
"""

import os
from dotenv import load_dotenv


# -----------------------------------------------------------------------------
# ENVIRONMENT
# -----------------------------------------------------------------------------
# Load environment variables from .env file (if it exists).
load_dotenv()


# ============================================================================
# SERVER
# ============================================================================

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# ============================================================================
# GROQ API CONFIGURATION
# ============================================================================
# Groq is the inference endpoint used by the inference-backed responder.
# Set GROQ_API_KEY, and optionally GROQ_API_KEY_2 ... GROQ_API_KEY_<MAX_GROQ_API_KEYS>.
# Keys are used one per request in round-robin order. Blank slots are skipped,
# so removing GROQ_API_KEY_2 does not hide GROQ_API_KEY_3.

MAX_GROQ_API_KEYS = 10


def _env(name: str, default: str = "") -> str:
    """Environment value with surrounding whitespace removed; default when unset or blank."""
    return os.getenv(name, "").strip() or default


def _load_groq_api_keys(limit: int = MAX_GROQ_API_KEYS) -> list:
    """Non-blank keys from GROQ_API_KEY, GROQ_API_KEY_2 .. GROQ_API_KEY_<limit>, in order, without duplicates."""
    names = ["GROQ_API_KEY"] + [f"GROQ_API_KEY_{i}" for i in range(2, limit + 1)]
    keys = []
    for name in names:
        key = _env(name)
        if key and key not in keys:
            keys.append(key)
    return keys


GROQ_API_KEYS = _load_groq_api_keys()
GROQ_MODEL = _env("GROQ_MODEL", "llama-3.1-8b-instant")

# Token cap for every inference call.
MAX_RESPONSE_TOKENS = int(os.getenv("MAX_RESPONSE_TOKENS", "300"))

# Number of most recent history entries sent to the model with each request.
PROMPT_HISTORY_ENTRIES = 4

# ============================================================================
# KEY-VALUE STORE CONFIGURATION
# ============================================================================
# KV_BACKEND selects where history, conversation records, settings and tickets live:
#   none   - no store bound; nothing is persisted and reads return empty data
#   memory - process-local dict (development and tests only)
#   redis  - Redis at REDIS_URL

KV_BACKEND = os.getenv("KV_BACKEND", "none").strip().lower()
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

# Session history is truncated to this many entries on every write.
MAX_HISTORY_ENTRIES = 10

# Maximum length (characters) for a single user message.
MAX_MESSAGE_LENGTH = 32_000

# Identifiers used when the client does not supply one.
DEFAULT_SESSION_ID = "default"
DEFAULT_USER_ID = "default"

# How settings/ticket persistence failures reach the caller:
#   masked   - always report success (failures are only logged)
#   reported - report success=false when the write failed
FAILURE_VISIBILITY = os.getenv("FAILURE_VISIBILITY", "masked").strip().lower()

# ============================================================================
# ASSISTANT PERSONALITY
# ============================================================================

ASSISTANT_NAME = _env("ASSISTANT_NAME", "Support Assistant")

SUPPORT_SYSTEM_PROMPT = (
    f"You are {ASSISTANT_NAME}, a helpful support agent for a cloud hosting platform. "
    "Answer questions about SSL, DNS, performance, billing and deployments. "
    "Be concise: reply in no more than 3 sentences."
)
