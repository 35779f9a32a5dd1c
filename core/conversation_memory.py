"""Per-sender in-memory conversation history."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Tuple

USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"


@dataclass(frozen=True)
class ConversationTurn:
    role: str
    content: str


class SessionStore:
    """Ring buffers keyed by sender id; only the latest ``max_turns`` survive."""

    def __init__(self, max_turns: int = 20) -> None:
        self._max_turns = max(1, max_turns)
        self._sessions: Dict[str, Deque[ConversationTurn]] = {}
        self._lock = threading.Lock()

    @property
    def max_turns(self) -> int:
        return self._max_turns

    def _session(self, sender_id: str) -> Deque[ConversationTurn]:
        session = self._sessions.get(sender_id)
        if session is None:
            session = deque(maxlen=self._max_turns)
            self._sessions[sender_id] = session
        return session

    def history(self, sender_id: str) -> Tuple[ConversationTurn, ...]:
        with self._lock:
            session = self._sessions.get(sender_id)
            return tuple(session) if session else ()

    def append_exchange(self, sender_id: str, user_text: str, assistant_text: str) -> None:
        """Record a user turn followed by the assistant reply as one update."""

        with self._lock:
            session = self._session(sender_id)
            session.append(ConversationTurn(role=USER_ROLE, content=user_text))
            session.append(ConversationTurn(role=ASSISTANT_ROLE, content=assistant_text))

    def clear(self, sender_id: str) -> None:
        with self._lock:
            self._sessions.pop(sender_id, None)


__all__ = ["ASSISTANT_ROLE", "USER_ROLE", "ConversationTurn", "SessionStore"]
