"""Search-intent routing: keyword families mapped to executor actions."""

from __future__ import annotations

from typing import Optional

from core.parsers.types import ClassifiedResponse, ParseContext, search
from core.patterns import SEARCH_INTENTS, SearchIntent


def match_intent(lowered: str) -> Optional[SearchIntent]:
    """Return the highest-priority search row whose pattern hits ``lowered``."""

    for intent in SEARCH_INTENTS:
        if intent.pattern.search(lowered):
            return intent
    return None


def build_query(intent: SearchIntent, message: str) -> str:
    """Derive the query for ``intent`` from the original-case message."""

    query = message
    if intent.strip is not None:
        query = " ".join(intent.strip.sub(" ", message).split())
    if not query and intent.empty_query:
        return intent.empty_query
    return query or message


def parse(ctx: ParseContext) -> Optional[ClassifiedResponse]:
    intent = match_intent(ctx.lowered)
    if intent is None:
        return None
    query = build_query(intent, ctx.message)
    return search(intent.reply.format(query=query), intent.kind, intent.kind, query)


__all__ = ["match_intent", "build_query", "parse"]
