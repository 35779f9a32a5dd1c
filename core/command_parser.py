"""Validate actions before they reach the executor and parse slash commands."""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional, Tuple

from core.parsers.types import Action, ActionKind, ClassifiedResponse

logger = logging.getLogger(__name__)

MANUAL_STAGE = "manual_command"
HELP_COMMAND = "help"

# Shell metacharacters stripped from every string parameter.
_UNSAFE_CHARS = re.compile(r"[;&|`$]")

_SLASH_COMMANDS = {
    "search": ActionKind.SMART_SEARCH,
    "web": ActionKind.WEB_SEARCH,
    "news": ActionKind.NEWS_SEARCH,
    "sports": ActionKind.SPORTS_SEARCH,
    "who": ActionKind.PERSON_SEARCH,
    "music": ActionKind.MUSIC_SEARCH,
    "song": ActionKind.MUSIC_SEARCH,
    "movie": ActionKind.MOVIE_SEARCH,
    "yt": ActionKind.YOUTUBE_SEARCH,
    "video": ActionKind.YOUTUBE_SEARCH,
    "shop": ActionKind.AMAZON_SEARCH,
    "buy": ActionKind.AMAZON_SEARCH,
    "map": ActionKind.LOCATION_SEARCH,
    "game": ActionKind.GAME_SEARCH,
    "image": ActionKind.IMAGE_SEARCH,
    "img": ActionKind.IMAGE_SEARCH,
}

COMMAND_HELP_TEXT = """📚 **Slash Commands**

*Chat naturally or use these shortcuts:*

• /search <query> - Search the web
• /news [topic] - Latest headlines
• /sports <query> - Scores and fixtures
• /who <name> - Look someone up
• /music <song> - Find a song
• /movie <title> - Movie info
• /yt <query> - YouTube videos
• /shop <item> - Amazon search
• /map <place> - Directions and places
• /game <title> - Game info
• /image <query> - Pictures
• /help - Show this help message"""


def sanitize_actions(
    actions: Iterable[Action],
    allowed_kinds: Optional[Iterable[str]] = None,
) -> Tuple[Action, ...]:
    """Drop unknown kinds and null params; strip shell metacharacters from strings."""

    allowed = set(allowed_kinds) if allowed_kinds is not None else set(ActionKind.SEARCH_KINDS)
    cleaned = []
    for action in actions:
        if action.kind not in allowed:
            logger.warning("Dropping unknown action type: %s", action.kind)
            continue
        params = {}
        for key, value in action.params.items():
            if value is None:
                continue
            params[key] = _UNSAFE_CHARS.sub("", value) if isinstance(value, str) else value
        cleaned.append(Action(kind=action.kind, params=params))
    return tuple(cleaned)


def parse_manual_command(message: str) -> Optional[ClassifiedResponse]:
    """Map ``/command args`` to a response; anything else returns ``None``."""

    trimmed = (message or "").strip()
    if not trimmed.startswith("/") or len(trimmed) < 2:
        return None
    parts = trimmed[1:].split(None, 1)
    command = parts[0].lower()
    args = parts[1].strip() if len(parts) > 1 else ""

    if command == HELP_COMMAND:
        return ClassifiedResponse(text=COMMAND_HELP_TEXT, stage=MANUAL_STAGE)

    kind = _SLASH_COMMANDS.get(command)
    if kind is None:
        logger.debug("Unknown manual command: %s", command)
        return None
    if not args:
        if kind != ActionKind.NEWS_SEARCH:
            return ClassifiedResponse(text=f"Usage: /{command} <query>", stage=MANUAL_STAGE)
        args = "trending"
    return ClassifiedResponse(
        text=f"🔍 Running /{command}...",
        actions=(Action(kind=kind, params={"query": args}),),
        stage=MANUAL_STAGE,
    )


__all__ = ["COMMAND_HELP_TEXT", "MANUAL_STAGE", "parse_manual_command", "sanitize_actions"]
