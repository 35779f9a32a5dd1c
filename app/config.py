"""Centralize defaults and environment lookups for the assistant."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List

from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
_DEFAULT_LLM_MODEL: str = "gpt-4o-mini"
_DEFAULT_LLM_TIMEOUT_SECONDS: float = 20.0
_DEFAULT_LLM_HISTORY_WINDOW: int = 6
_DEFAULT_PROFILE_PATH = "owner-profile.json"
_DEFAULT_SESSION_MAX_TURNS: int = 20
_DEFAULT_USD_INR_RATE: float = 83.0
_DEFAULT_LOGGING_ENABLED: bool = True
_DEFAULT_LOG_REDACTION_ENABLED: bool = True
_DEFAULT_LOG_DIR = "logs"
_TURN_LOG_FILENAME = "turns.jsonl"
_DEFAULT_LOG_REDACTION_PATTERNS = "credit_card,gov_id,email,phone,url"
_DEFAULT_LOG_MAX_BYTES = 1_000_000
_DEFAULT_LOG_BACKUP_COUNT = 5
_DEFAULT_LOG_LEVEL = "INFO"
_DEFAULT_REQUIRE_TRIGGER: bool = False
_DEFAULT_WEB_HOST = "127.0.0.1"
_DEFAULT_WEB_PORT = 3000

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _source(env: Dict[str, str] | None) -> Dict[str, str] | os._Environ[str]:
    return env if env is not None else os.environ


def _flag(env: Dict[str, str] | None, key: str, default: bool) -> bool:
    raw = _source(env).get(key)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in _FALSE_VALUES:
        return False
    if normalized in _TRUE_VALUES:
        return True
    return default


def _int(env: Dict[str, str] | None, key: str, default: int, *, minimum: int = 0) -> int:
    raw = _source(env).get(key)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def _float(env: Dict[str, str] | None, key: str, default: float) -> float:
    raw = _source(env).get(key)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


# ---------------------------------------------------------------------------
# Model settings
# ---------------------------------------------------------------------------
def get_llm_api_key(env: Dict[str, str] | None = None) -> str | None:
    """API key for the generative model; ``None`` keeps the bot offline.

    Args:
        env: Mapping to read instead of ``os.environ`` (tests pass a dict).

    Returns:
        The stripped key, or ``None`` when unset or blank.
    """

    value = _source(env).get("OPENAI_API_KEY")
    return value.strip() if value and value.strip() else None


def get_llm_model(env: Dict[str, str] | None = None) -> str:
    """Return the model identifier used for generative fallbacks."""

    return _source(env).get("LLM_MODEL") or _DEFAULT_LLM_MODEL


def get_llm_timeout(env: Dict[str, str] | None = None) -> float:
    return _float(env, "LLM_TIMEOUT_SECONDS", _DEFAULT_LLM_TIMEOUT_SECONDS)


def get_llm_history_window(env: Dict[str, str] | None = None) -> int:
    """Return how many prior turns are sent along with each model prompt."""

    return _int(env, "LLM_HISTORY_WINDOW", _DEFAULT_LLM_HISTORY_WINDOW)


# ---------------------------------------------------------------------------
# Profile, sessions and conversions
# ---------------------------------------------------------------------------
def get_profile_path(env: Dict[str, str] | None = None) -> Path:
    override = _source(env).get("PROFILE_PATH")
    return Path(override) if override else Path(_DEFAULT_PROFILE_PATH)


def get_session_max_turns(env: Dict[str, str] | None = None) -> int:
    """Return the per-sender history cap."""

    return _int(env, "SESSION_MAX_TURNS", _DEFAULT_SESSION_MAX_TURNS, minimum=1)


def get_usd_inr_rate(env: Dict[str, str] | None = None) -> float:
    return _float(env, "USD_INR_RATE", _DEFAULT_USD_INR_RATE)


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
def is_logging_enabled(env: Dict[str, str] | None = None) -> bool:
    """Determine whether the JSONL turn log is written."""

    return _flag(env, "LOGGING_ENABLED", _DEFAULT_LOGGING_ENABLED)


def get_log_dir(env: Dict[str, str] | None = None) -> Path:
    """Directory holding ``turns.jsonl`` and its rotated backups."""

    override = _source(env).get("LOG_DIR")
    return Path(override) if override else Path(_DEFAULT_LOG_DIR)


def get_turn_log_path(env: Dict[str, str] | None = None) -> Path:
    return get_log_dir(env) / _TURN_LOG_FILENAME


def is_log_redaction_enabled(env: Dict[str, str] | None = None) -> bool:
    """Scrub contact details from logged message text unless switched off."""

    return _flag(env, "LOG_REDACTION_ENABLED", _DEFAULT_LOG_REDACTION_ENABLED)


def get_log_redaction_patterns(env: Dict[str, str] | None = None) -> List[str]:
    """Redaction rule names, e.g. ``email,url``; unknown names are ignored by the logger."""

    raw = _source(env).get("LOG_REDACTION_PATTERNS")
    values = raw if raw is not None else _DEFAULT_LOG_REDACTION_PATTERNS
    return [segment.strip().lower() for segment in values.split(",") if segment.strip()]


def get_log_max_bytes(env: Dict[str, str] | None = None) -> int:
    """Rotate the turn log once it would grow past this many bytes (0 disables)."""

    return _int(env, "LOG_MAX_BYTES", _DEFAULT_LOG_MAX_BYTES)


def get_log_backup_count(env: Dict[str, str] | None = None) -> int:
    return _int(env, "LOG_BACKUP_COUNT", _DEFAULT_LOG_BACKUP_COUNT)


def get_log_level(env: Dict[str, str] | None = None) -> str:
    value = (_source(env).get("LOG_LEVEL") or "").strip().upper()
    return value if value in _LOG_LEVELS else _DEFAULT_LOG_LEVEL


# ---------------------------------------------------------------------------
# Transport gate and web server
# ---------------------------------------------------------------------------
def get_allowed_senders(env: Dict[str, str] | None = None) -> List[str]:
    """Return the sender allowlist; empty means everyone is allowed."""

    raw = _source(env).get("BOT_ALLOWED_SENDERS") or ""
    return [segment.strip() for segment in raw.split(",") if segment.strip()]


def is_trigger_required(env: Dict[str, str] | None = None) -> bool:
    return _flag(env, "BOT_REQUIRE_TRIGGER", _DEFAULT_REQUIRE_TRIGGER)


def get_web_host(env: Dict[str, str] | None = None) -> str:
    return _source(env).get("WEB_HOST", _DEFAULT_WEB_HOST)


def get_web_port(env: Dict[str, str] | None = None) -> int:
    raw = _source(env).get("WEB_PORT")
    if raw is None:
        return _DEFAULT_WEB_PORT
    try:
        value = int(raw)
    except ValueError:
        return _DEFAULT_WEB_PORT
    return value if 0 < value <= 65535 else _DEFAULT_WEB_PORT
