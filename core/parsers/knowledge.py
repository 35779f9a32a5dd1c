"""Knowledge-base stage backed by the operator profile."""

from __future__ import annotations

from typing import Optional

from core.parsers.types import ClassifiedResponse, ParseContext, reply


def parse(ctx: ParseContext) -> Optional[ClassifiedResponse]:
    answer = ctx.profile.match_knowledge(ctx.lowered)
    if not answer:
        return None
    return reply(answer, "knowledge_base")


__all__ = ["parse"]
