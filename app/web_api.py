"""FastAPI application exposing the chat endpoint and keep-alive probes."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from app.config import get_allowed_senders, is_trigger_required
from app.main import build_bot
from core.bot import BotFacade, MessageContext
from core.message_gate import is_sender_allowed, strip_trigger

logger = logging.getLogger(__name__)


class ChatRequest(BaseModel):
    sender_id: str = Field(..., min_length=1)
    message: str
    chat_id: Optional[str] = None
    sender_name: Optional[str] = None


class TakeoverRequest(BaseModel):
    chat_id: str = Field(..., min_length=1)


def create_app(
    bot: Optional[BotFacade] = None,
    *,
    allowed_senders: Optional[List[str]] = None,
    require_trigger: Optional[bool] = None,
) -> FastAPI:
    """WHAT: instantiate FastAPI around one ``BotFacade``.

    WHY: the HTTP surface must reuse the CLI wiring so replies match.
    HOW: accept dependency overrides (tests), cache them on ``app.state`` and
    register the chat, takeover and probe routes.
    """
    app = FastAPI(title="Assistant Web API", version="1.0.0")
    app.state.bot = bot or build_bot()
    app.state.allowed_senders = allowed_senders if allowed_senders is not None else get_allowed_senders()
    app.state.require_trigger = require_trigger if require_trigger is not None else is_trigger_required()
    app.state.started_at = time.monotonic()
    app.state.ping_count = 0

    def _health_payload() -> Dict[str, Any]:
        return {
            "status": "ok",
            "uptime_seconds": int(time.monotonic() - app.state.started_at),
            "ping_count": app.state.ping_count,
            "timestamp": datetime.now(tz=timezone.utc).isoformat(),
        }

    @app.get("/health")
    def health_check() -> Dict[str, Any]:
        """Cheap liveness probe; never touches the classifier."""
        return _health_payload()

    @app.get("/api/health")
    def api_health_check() -> Dict[str, Any]:
        return _health_payload()

    @app.get("/ping")
    def ping() -> Dict[str, Any]:
        app.state.ping_count += 1
        return {"pong": True, "ping_count": app.state.ping_count}

    @app.post("/api/chat")
    async def chat(payload: ChatRequest) -> Dict[str, Any]:
        if not is_sender_allowed(payload.sender_id, app.state.allowed_senders):
            logger.warning("Blocked message from unauthorized sender")
            raise HTTPException(status_code=403, detail="Sender is not allowed to use this bot.")

        message = payload.message.strip()
        stripped = strip_trigger(message)
        if stripped is None and app.state.require_trigger:
            return {"reply": "", "attachments": [], "image_url": None, "error": False, "ignored": True}
        if stripped is not None:
            message = stripped
        if not message:
            raise HTTPException(status_code=400, detail="Message must not be empty.")

        context = MessageContext(
            source="web",
            sender_id=payload.sender_id,
            chat_id=payload.chat_id,
            sender_name=payload.sender_name,
            addressed=stripped is not None,
        )
        response = await app.state.bot.handle(message, context)
        body = response.to_dict()
        body["paused"] = response.paused
        return body

    @app.post("/api/takeover")
    def takeover(payload: TakeoverRequest) -> Dict[str, Any]:
        resume_at = app.state.bot.owner_takeover(payload.chat_id)
        return {"chat_id": payload.chat_id, "paused": resume_at is not None, "resume_at": resume_at}

    @app.delete("/api/takeover/{chat_id}")
    def resume(chat_id: str) -> Dict[str, Any]:
        app.state.bot.resume(chat_id)
        return {"chat_id": chat_id, "paused": False}

    return app


if __name__ == "__main__":
    import uvicorn

    from app.config import get_web_host, get_web_port
    from app.main import configure_logging

    configure_logging()
    uvicorn.run(create_app(), host=get_web_host(), port=get_web_port(), reload=False)
