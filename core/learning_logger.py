"""JSONL turn log for replaying how each message was handled.

One line per handled message: who sent it, which cascade stage or model path
produced the reply, which actions ran and whether they succeeded. Free-text
fields are scrubbed for contact details before they touch disk, and the file
is rotated once it grows past ``max_bytes``.
"""

from __future__ import annotations

import json
import logging
import re
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Pattern, Tuple

logger = logging.getLogger(__name__)

# Applied in this order: long digit runs must become card tokens before the
# phone rule can claim them.
_REDACTION_RULES: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("credit_card", re.compile(r"\b(?:\d[ -]*){13,19}\b")),
    ("gov_id", re.compile(r"\b\d{3}-\d{2}-\d{4}\b")),
    ("email", re.compile(r"\b[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}\b", re.IGNORECASE)),
    ("phone", re.compile(r"(?:\+?\d[\d\s\-().]{6,}\d)")),
    ("url", re.compile(r"https?://[^\s]+", re.IGNORECASE)),
)
REDACTION_KINDS = tuple(name for name, _ in _REDACTION_RULES)

_REDACT_FIELDS = frozenset({"sender_id", "user_text", "response_text"})


def _now_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


@dataclass
class TurnRecord:
    """One handled message, as written to ``turns.jsonl``."""

    sender_id: str
    channel: str
    user_text: str
    response_text: str = ""
    stage: str = ""
    response_source: str = "local"
    actions: List[Dict[str, Any]] = field(default_factory=list)
    latency_ms: int | None = None
    error: bool = False
    timestamp: str = field(default_factory=_now_iso)


class LearningLogger:
    """WHAT: append-only JSONL writer for ``TurnRecord`` rows.

    WHY: replies are assembled from several layers; the log is the only place
    that shows which one answered.
    HOW: redact configured fields, rotate by size, append under a lock.
    """

    def __init__(
        self,
        *,
        turn_log_path: Path,
        enabled: bool = True,
        redact: bool = True,
        patterns: Iterable[str] | None = None,
        max_bytes: int = 0,
        backup_count: int = 0,
    ) -> None:
        self.path = Path(turn_log_path)
        self.enabled = enabled
        self._max_bytes = max_bytes
        self._backups = backup_count
        self._lock = threading.Lock()
        wanted = set(patterns) if patterns else set(REDACTION_KINDS)
        self._rules = [rule for rule in _REDACTION_RULES if rule[0] in wanted] if redact else []

    def log_turn(self, record: TurnRecord) -> None:
        """Persist ``record``; disk errors are reported but never raised."""

        if not self.enabled:
            return
        row = {
            key: self.scrub(value) if key in _REDACT_FIELDS and isinstance(value, str) else value
            for key, value in asdict(record).items()
        }
        line = json.dumps(row, ensure_ascii=False) + "\n"
        try:
            with self._lock:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self._rotate(len(line.encode("utf-8")))
                with self.path.open("a", encoding="utf-8") as handle:
                    handle.write(line)
        except OSError as exc:
            logger.warning("Failed to write turn log %s: %s", self.path, exc)

    def scrub(self, value: str) -> str:
        """Replace emails, phone numbers, card numbers, ids and links with tokens."""

        for name, pattern in self._rules:
            value = pattern.sub(f"[REDACTED_{name.upper()}]", value)
        return value

    def _rotate(self, incoming: int) -> None:
        if self._max_bytes <= 0 or not self.path.exists():
            return
        if self.path.stat().st_size + incoming <= self._max_bytes:
            return
        if self._backups <= 0:
            self.path.unlink()
            return
        # .1 is the newest backup; the oldest falls off the end.
        for index in range(self._backups - 1, 0, -1):
            older = self.path.with_name(f"{self.path.name}.{index}")
            if older.exists():
                older.replace(self.path.with_name(f"{self.path.name}.{index + 1}"))
        self.path.replace(self.path.with_name(f"{self.path.name}.1"))


__all__ = ["LearningLogger", "REDACTION_KINDS", "TurnRecord"]
