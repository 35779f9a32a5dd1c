"""Arithmetic stage: digits, operators, percentages and word math."""

from __future__ import annotations

from typing import Optional

from core.expression_evaluator import evaluate, format_number
from core.parsers.types import ClassifiedResponse, ParseContext, reply


def parse(ctx: ParseContext) -> Optional[ClassifiedResponse]:
    value = evaluate(ctx.message)
    if value is None:
        return None
    return reply(f"🧮 = **{format_number(value)}**", "math")


__all__ = ["parse"]
