"""
CONFIGURATION MODULE
====================

PURPOSE:
  Central place for all PromptDesk settings: where state is stored on disk,
  how long the simulated backend "thinks", the text-length approximations used
  for truncation and usage accounting, and the fixed greeting text. Designed
  for single-user use: each person runs their own copy of this backend with
  their own .env and database/ folder.

WHAT THIS FILE DOES:
  - Loads environment variables from .env (so local overrides stay out of code).
  - Defines the data directory that holds parameters.json, sessions.json and
    templates.json, and creates it if it doesn't exist.
  - Defines the latency range of the response synthesizer.
  - Holds the two characters-per-unit constants (3 for length, 4 for usage).

USAGE:
  Import what you need: `from config import DATA_DIR, USAGE_CHARS_PER_UNIT`
  All services import from here so behaviour is consistent.
"""

import os
import logging
from pathlib import Path
from dotenv import load_dotenv


# -----------------------------------------------------------------------------
# LOGGING
# -----------------------------------------------------------------------------
# Used when an environment override can't be parsed.
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# ENVIRONMENT
# -----------------------------------------------------------------------------
# Load environment variables from .env file (if it exists).
load_dotenv()


def _env_float(name: str, default: float) -> float:
    """Read a float from the environment; fall back to default if unset or malformed."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r, using %s", name, raw, default)
        return default


def _env_int(name: str, default: int) -> int:
    """Read an int from the environment; fall back to default if unset or malformed."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %s", name, raw, default)
        return default


# -----------------------------------------------------------------------------
# BASE PATH
# -----------------------------------------------------------------------------
# Points to the folder containing this file (the project root).
BASE_DIR = Path(__file__).parent

# ============================================================================
# DATABASE PATHS
# ============================================================================
# One JSON file per durable record lives here:
# - parameters.json: the current generation parameters
# - sessions.json:   every chat session with its messages
# - templates.json:  the saved prompt templates
# Override with PROMPTDESK_DATA_DIR (tests point it at a temporary folder).

DATA_DIR = Path(os.getenv("PROMPTDESK_DATA_DIR", "").strip() or BASE_DIR / "database" / "state")

# Create the directory if it doesn't exist so the app can run without manual setup.
DATA_DIR.mkdir(parents=True, exist_ok=True)

# ============================================================================
# SERVER
# ============================================================================
HOST = os.getenv("PROMPTDESK_HOST", "0.0.0.0")
PORT = _env_int("PROMPTDESK_PORT", 8000)

# ============================================================================
# RESPONSE SYNTHESIZER
# ============================================================================
# There is no real model behind this console. The synthesizer waits a random
# number of seconds in [LATENCY_MIN_SECONDS, LATENCY_MAX_SECONDS] before it
# answers so clients see a non-instant backend.

LATENCY_MIN_SECONDS = _env_float("PROMPTDESK_LATENCY_MIN", 1.0)
LATENCY_MAX_SECONDS = _env_float("PROMPTDESK_LATENCY_MAX", 3.0)

# Replies are cut at maxLength * LENGTH_CHARS_PER_UNIT characters.
# Usage units are ceil(chars / USAGE_CHARS_PER_UNIT).
# The two ratios differ on purpose; changing either changes observable output.
LENGTH_CHARS_PER_UNIT = 3
USAGE_CHARS_PER_UNIT = 4

# Appended to a reply when it is truncated, and to derived session titles.
ELLIPSIS = "..."

# ============================================================================
# SESSIONS
# ============================================================================
# A session title is derived from this many leading characters of the first
# user message.
TITLE_MAX_CHARS = 30
DEFAULT_SESSION_TITLE = "New Chat"

# Every new session opens with this assistant message.
DEFAULT_MODEL_ID = os.getenv("PROMPTDESK_DEFAULT_MODEL", "gpt-4")
GREETING_TEXT = "Hello! I'm your AI assistant. How can I help you today?"
# Placeholder usage shown on the greeting (prompt, completion, total).
GREETING_USAGE = (10, 15, 25)

# ============================================================================
# TEMPLATES
# ============================================================================
DEFAULT_TEMPLATE_CATEGORY = "Custom"
