"""Small-talk replies: greetings, thanks, jokes, help and friends."""

from __future__ import annotations

from typing import Callable, Optional, Pattern, Tuple

from core.parsers.types import ClassifiedResponse, ParseContext, reply
from core.patterns import (
    COMPLIMENT_PATTERN,
    COMPLIMENT_REPLIES,
    GOODBYE_PATTERN,
    GREETING_PATTERN,
    HELP_PATTERN,
    HELP_TEXT,
    HOW_ARE_YOU_PATTERN,
    HOW_ARE_YOU_REPLIES,
    JOKE_PATTERN,
    JOKES,
    THANKS_PATTERN,
    WHO_ARE_YOU_PATTERN,
)

_TRAILING_PUNCTUATION = " !.?,~"

Responder = Callable[[ParseContext], str]


def _greeting(ctx: ParseContext) -> str:
    return ctx.profile.quick_response("greeting") or ctx.profile.bot_personality.greeting or "Hey! 👋"


def _thanks(ctx: ParseContext) -> str:
    return ctx.profile.quick_response("thanks") or "You're welcome! 😊"


def _goodbye(ctx: ParseContext) -> str:
    return ctx.profile.quick_response("goodbye") or "Take care! 👋"


def _who_are_you(ctx: ParseContext) -> str:
    return (
        f"I'm {ctx.profile.display_name}'s personal bot! 🤖 I help answer messages, "
        "search stuff, and keep things running. Ask me anything!"
    )


# (stage name, pattern, responder, match against the punctuation-stripped text)
CONVERSATIONS: Tuple[Tuple[str, Pattern[str], Responder, bool], ...] = (
    ("greeting", GREETING_PATTERN, _greeting, True),
    ("thanks", THANKS_PATTERN, _thanks, False),
    ("goodbye", GOODBYE_PATTERN, _goodbye, True),
    ("how_are_you", HOW_ARE_YOU_PATTERN, lambda ctx: ctx.rng.choice(HOW_ARE_YOU_REPLIES), False),
    ("who_are_you", WHO_ARE_YOU_PATTERN, _who_are_you, False),
    ("joke", JOKE_PATTERN, lambda ctx: ctx.rng.choice(JOKES), False),
    ("help", HELP_PATTERN, lambda ctx: HELP_TEXT, True),
    ("compliment", COMPLIMENT_PATTERN, lambda ctx: ctx.rng.choice(COMPLIMENT_REPLIES), False),
)


def parse(ctx: ParseContext) -> Optional[ClassifiedResponse]:
    bare = ctx.lowered.strip(_TRAILING_PUNCTUATION)
    for name, pattern, responder, anchored in CONVERSATIONS:
        target = bare if anchored else ctx.lowered
        if pattern.search(target):
            return reply(responder(ctx), name)
    return None


__all__ = ["CONVERSATIONS", "parse"]
