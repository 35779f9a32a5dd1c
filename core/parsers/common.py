"""Common questions: clock, calendar, weather redirect, conversions, chance."""

from __future__ import annotations

from typing import Callable, Optional, Tuple

from core.parsers import conversions
from core.parsers.types import ActionKind, ClassifiedResponse, ParseContext, reply, search
from core.patterns import DATE_PATTERN, DAY_OF_WEEK_PATTERN, RANDOM_PATTERN, TIME_PATTERN, WEATHER_PATTERN


def _time(ctx: ParseContext) -> Optional[ClassifiedResponse]:
    if not TIME_PATTERN.search(ctx.lowered):
        return None
    return reply(f"🕐 It's **{ctx.now:%I:%M %p}**", "time")


def _date(ctx: ParseContext) -> Optional[ClassifiedResponse]:
    if not DATE_PATTERN.search(ctx.lowered):
        return None
    now = ctx.now
    return reply(f"📅 Today is **{now:%A}, {now.day} {now:%B %Y}**", "date")


def _day_of_week(ctx: ParseContext) -> Optional[ClassifiedResponse]:
    if not DAY_OF_WEEK_PATTERN.search(ctx.lowered):
        return None
    return reply(f"📆 It's **{ctx.now:%A}**!", "day_of_week")


def _weather(ctx: ParseContext) -> Optional[ClassifiedResponse]:
    if not WEATHER_PATTERN.search(ctx.lowered):
        return None
    return search("🌤️ Let me check the weather for you!", "weather", ActionKind.SMART_SEARCH, ctx.message)


def _random(ctx: ParseContext) -> Optional[ClassifiedResponse]:
    if not RANDOM_PATTERN.search(ctx.lowered):
        return None
    if "dice" in ctx.lowered or " die" in ctx.lowered:
        return reply(f"🎲 You rolled a **{ctx.rng.randint(1, 6)}**!", "random")
    if "coin" in ctx.lowered:
        side = "Heads" if ctx.rng.random() < 0.5 else "Tails"
        return reply(f"🪙 **{side}**!", "random")
    return reply(f"🎯 Random number: **{ctx.rng.randint(1, 100)}**", "random")


COMMON_QUESTIONS: Tuple[Tuple[str, Callable[[ParseContext], Optional[ClassifiedResponse]]], ...] = (
    ("time", _time),
    ("date", _date),
    ("day_of_week", _day_of_week),
    ("weather", _weather),
    ("conversion", conversions.parse),
    ("random", _random),
)


def parse(ctx: ParseContext) -> Optional[ClassifiedResponse]:
    for _, handler in COMMON_QUESTIONS:
        result = handler(ctx)
        if result is not None:
            return result
    return None


__all__ = ["COMMON_QUESTIONS", "parse"]
