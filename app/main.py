"""Assemble the bot facade and run the interactive CLI loop."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

from app.config import (
    get_llm_api_key,
    get_llm_history_window,
    get_llm_model,
    get_llm_timeout,
    get_log_backup_count,
    get_log_level,
    get_log_max_bytes,
    get_log_redaction_patterns,
    get_profile_path,
    get_session_max_turns,
    get_turn_log_path,
    get_usd_inr_rate,
    is_log_redaction_enabled,
    is_logging_enabled,
)
from core.bot import BotFacade, MessageContext
from core.conversation_memory import SessionStore
from core.learning_logger import LearningLogger
from core.llm_client import LLMClient
from core.local_nlp import LocalNLP
from core.orchestrator import ResponseOrchestrator
from core.parsers.conversions import FixedRateProvider
from core.profile import PauseRegistry, load_profile
from core.task_executor import ActionRegistry
from tools import load_search_tools

CLI_SENDER = "terminal-user"
_EXIT_COMMANDS = {"/exit", "/quit", "exit", "quit"}


def configure_logging(env: Dict[str, str] | None = None) -> None:
    logging.basicConfig(
        level=get_log_level(env),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


# -- Bot construction -----------------------------------------------------------
def build_bot(env: Dict[str, str] | None = None) -> BotFacade:
    """Wire the assistant for the CLI and the web API.

    WHAT: load the profile, build the local classifier, the optional model
    client, the action registry, sessions, pauses and the turn logger.
    WHY: every entry point must share identical wiring so replies do not
    depend on the surface they arrive through.
    HOW: read every setting through ``app.config`` accessors and pass the
    collaborators into ``BotFacade`` explicitly.
    """
    profile = load_profile(get_profile_path(env))
    nlp = LocalNLP(profile, rate_provider=FixedRateProvider(get_usd_inr_rate(env)))

    api_key = get_llm_api_key(env)
    model_client: Optional[LLMClient] = None
    if api_key:
        model_client = LLMClient(get_llm_model(env), api_key, timeout=get_llm_timeout(env))
    else:
        logging.getLogger(__name__).info("OPENAI_API_KEY not set; running with the local classifier only")

    orchestrator = ResponseOrchestrator(
        nlp,
        profile,
        model_client,
        history_window=get_llm_history_window(env),
    )

    registry = ActionRegistry()
    load_search_tools(registry)

    turn_logger = LearningLogger(
        turn_log_path=get_turn_log_path(env),
        enabled=is_logging_enabled(env),
        redact=is_log_redaction_enabled(env),
        patterns=get_log_redaction_patterns(env),
        max_bytes=get_log_max_bytes(env),
        backup_count=get_log_backup_count(env),
    )

    return BotFacade(
        orchestrator,
        registry,
        sessions=SessionStore(max_turns=get_session_max_turns(env)),
        pauses=PauseRegistry(profile),
        turn_logger=turn_logger,
        allowed_kinds=registry.known_kinds(),
    )


# -- Interactive CLI loop ------------------------------------------------------
async def run_cli(bot: BotFacade) -> None:
    """Proxy stdin lines to ``bot.handle`` until EOF or an exit command."""
    print("Assistant ready. Type /help for commands, /clear to reset, /exit to stop.")

    while True:
        try:
            message = await asyncio.to_thread(input, "You: ")
        except (EOFError, KeyboardInterrupt):
            print("\nExiting.")
            break

        stripped = message.strip()
        if not stripped:
            continue
        if stripped.lower() in _EXIT_COMMANDS:
            print("Goodbye!")
            break
        if stripped.lower() == "/clear":
            bot.sessions.clear(CLI_SENDER)
            print("History cleared.")
            continue

        response = await bot.handle(stripped, MessageContext(source="terminal", sender_id=CLI_SENDER))
        print()
        print(f"Assistant: {response.text}")
        if response.image_url:
            print(f"Image: {response.image_url}")
        print()


def main() -> None:
    configure_logging()
    asyncio.run(run_cli(build_bot()))


if __name__ == "__main__":
    main()
