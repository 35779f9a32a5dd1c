"""Facade that turns one inbound chat message into one outbound reply.

``BotFacade.handle`` is the only entry point transports call. It checks the
owner-takeover pause, asks the orchestrator for a classified response, runs
the returned actions one by one, records the exchange in the sender's session
and writes a turn log line. No exception escapes ``handle``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from time import perf_counter
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from core.command_parser import parse_manual_command, sanitize_actions
from core.conversation_memory import SessionStore
from core.learning_logger import LearningLogger, TurnRecord
from core.orchestrator import ResponseOrchestrator
from core.parsers.types import ClassifiedResponse
from core.profile import PauseRegistry
from core.task_executor import TaskExecutor

logger = logging.getLogger(__name__)

RESULTS_HEADER = "\n\n📋 **Results:**\n"
ERROR_TEXT = "❌ Sorry, I ran into a problem handling that. Please try again in a moment."
SOURCE_PAUSED = "paused"
SOURCE_OWNER_TAKEOVER = "owner_takeover"


@dataclass(frozen=True)
class MessageContext:
    source: str
    sender_id: str
    chat_id: Optional[str] = None
    sender_name: Optional[str] = None
    # False when the text carried no bot trigger, e.g. an owner chatting directly.
    addressed: bool = True
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def conversation_id(self) -> str:
        return self.chat_id or self.sender_id


@dataclass(frozen=True)
class BotResponse:
    text: str
    attachments: Tuple[str, ...] = ()
    image_url: Optional[str] = None
    error: bool = False
    paused: bool = False

    def to_dict(self) -> Dict[str, object]:
        return {
            "reply": self.text,
            "attachments": list(self.attachments),
            "image_url": self.image_url,
            "error": self.error,
        }


class BotFacade:
    """Coordinates the orchestrator, the executor and per-sender state."""

    def __init__(
        self,
        orchestrator: ResponseOrchestrator,
        executor: TaskExecutor,
        *,
        sessions: Optional[SessionStore] = None,
        pauses: Optional[PauseRegistry] = None,
        turn_logger: Optional[LearningLogger] = None,
        allowed_kinds: Optional[Iterable[str]] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._orchestrator = orchestrator
        self._executor = executor
        self._sessions = sessions or SessionStore()
        self._pauses = pauses
        self._turn_logger = turn_logger
        self._allowed_kinds = tuple(allowed_kinds) if allowed_kinds is not None else None
        self._today = today

    @property
    def sessions(self) -> SessionStore:
        return self._sessions

    def owner_takeover(self, chat_id: str) -> Optional[float]:
        """Pause automated replies in ``chat_id`` after the owner steps in."""
        if self._pauses is None:
            return None
        return self._pauses.pause(chat_id)

    def resume(self, chat_id: str) -> None:
        if self._pauses is not None:
            self._pauses.resume(chat_id)

    # WHAT: answer one message end to end.
    # WHY: transports need a single call that never raises.
    # HOW: owner takeover and pause checks, classify, run actions in order, update history, log the turn.
    async def handle(self, message: str, context: MessageContext) -> BotResponse:
        """Produce the reply for ``message``; failures become a generic apology."""
        started = perf_counter()
        logger.info("Processing message from %s: %s", context.source, (message or "")[:50])

        if not context.addressed and self._orchestrator.profile.is_owner(context.sender_id):
            self.owner_takeover(context.conversation_id)
            response = BotResponse(text="", paused=True)
            self._log_turn(context, message, response, None, [], started, source=SOURCE_OWNER_TAKEOVER)
            return response

        if self._pauses is not None and self._pauses.is_paused(context.conversation_id):
            logger.info("Chat %s is paused for owner takeover", context.conversation_id)
            response = BotResponse(text="", paused=True)
            self._log_turn(context, message, response, None, [], started, source=SOURCE_PAUSED)
            return response

        classified: Optional[ClassifiedResponse] = None
        action_log: List[Dict[str, object]] = []
        try:
            history = self._sessions.history(context.sender_id)
            classified = parse_manual_command(message)
            if classified is None:
                classified = await self._orchestrator.respond(message, history)

            results: List[str] = []
            attachments: List[str] = []
            image_url: Optional[str] = None
            for action in sanitize_actions(classified.actions, self._allowed_kinds):
                result = await self._executor.execute(action.kind, action.params)
                action_log.append({"type": action.kind, "success": result.success})
                if result.output:
                    results.append(result.output)
                elif not result.success and result.error:
                    results.append(f"❌ {result.error}")
                attachments.extend(result.attachments)
                if result.image_url:
                    image_url = result.image_url

            reply_text = classified.text
            if classified.stage == "greeting":
                festival = self._orchestrator.profile.festival_greeting(self._today())
                if festival:
                    reply_text = f"{reply_text}\n\n{festival}"

            self._sessions.append_exchange(context.sender_id, message, reply_text)

            if results:
                reply_text += RESULTS_HEADER + "\n".join(results)
            response = BotResponse(text=reply_text, attachments=tuple(attachments), image_url=image_url)
        except Exception:  # noqa: BLE001 - nothing may reach the transport
            logger.exception("Error processing message from %s", context.sender_id)
            response = BotResponse(text=ERROR_TEXT, error=True)

        self._log_turn(context, message, response, classified, action_log, started)
        return response

    def _log_turn(
        self,
        context: MessageContext,
        message: str,
        response: BotResponse,
        classified: Optional[ClassifiedResponse],
        actions: List[Dict[str, object]],
        started: float,
        *,
        source: Optional[str] = None,
    ) -> None:
        if self._turn_logger is None:
            return
        record = TurnRecord(
            sender_id=context.sender_id,
            channel=context.source,
            user_text=message,
            response_text=response.text,
            stage=classified.stage if classified else "",
            response_source=source or (classified.source if classified else "error"),
            actions=actions,
            latency_ms=int((perf_counter() - started) * 1000),
            error=response.error,
        )
        self._turn_logger.log_turn(record)


__all__ = ["BotFacade", "BotResponse", "MessageContext", "RESULTS_HEADER", "ERROR_TEXT"]
