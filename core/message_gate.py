"""Transport-side gates: trigger prefixes and the sender allowlist."""

from __future__ import annotations

import re
from typing import Iterable, Optional

_BOT_PREFIX = re.compile(r"^bot(?:\s*[:.\-]\s*|\s+)", re.IGNORECASE)


def strip_trigger(text: str) -> Optional[str]:
    """Return ``text`` without its trigger, or ``None`` when no trigger is present.

    Triggers are ``bot:``/``bot `` and ``!``. A leading ``/`` also counts but is
    kept so slash commands still parse downstream.
    """

    body = (text or "").strip()
    if body.startswith("/"):
        return body
    if body.startswith("!"):
        return body[1:].strip()
    match = _BOT_PREFIX.match(body)
    if match:
        return body[match.end() :].strip()
    return None


def _digits(value: str) -> str:
    return re.sub(r"\D", "", value or "")


def is_sender_allowed(sender_id: str, allowed: Iterable[str]) -> bool:
    """An empty allowlist admits everyone; otherwise digits must overlap either way."""

    entries = [entry for entry in (item.strip() for item in allowed) if entry]
    if not entries:
        return True
    sender_digits = _digits(sender_id)
    for entry in entries:
        entry_digits = _digits(entry)
        if entry_digits and sender_digits and (entry_digits in sender_digits or sender_digits in entry_digits):
            return True
        if entry == sender_id:
            return True
    return False


__all__ = ["is_sender_allowed", "strip_trigger"]
