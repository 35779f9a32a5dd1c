"""Run the offline intent cascade before the generative model is considered.

Every inbound message passes through ``LocalNLP.classify`` first. The cascade
is an ordered table of stages; the first stage that claims the message wins
and later stages never see it. Classification never raises: unmatched input
ends in the generic search redirect or the profile fallback message.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import Callable, Optional, Tuple

from core.parsers import arithmetic, common, conversation, knowledge, search
from core.parsers.conversions import FixedRateProvider, RateProvider
from core.parsers.types import FALLBACK_STAGE, ActionKind, ClassifiedResponse, ParseContext
from core.parsers.types import search as search_response
from core.profile import Profile

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_STAGE = "default_search"
DEFAULT_SEARCH_TEXT = "🔍 Let me search that for you!"

Stage = Callable[[ParseContext], Optional[ClassifiedResponse]]

# Priority order: earlier rows win ties.
STAGES: Tuple[Tuple[str, Stage], ...] = (
    ("math", arithmetic.parse),
    ("knowledge_base", knowledge.parse),
    ("common", common.parse),
    ("search", search.parse),
    ("conversation", conversation.parse),
)


class LocalNLP:
    """Deterministic classifier over the ordered ``STAGES`` table."""

    def __init__(
        self,
        profile: Optional[Profile] = None,
        *,
        rate_provider: Optional[RateProvider] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
        stages: Tuple[Tuple[str, Stage], ...] = STAGES,
    ) -> None:
        self._profile = profile or Profile()
        self._rates = rate_provider or FixedRateProvider()
        self._rng = rng or random.Random()
        self._clock = clock or datetime.now
        self._stages = stages

    @property
    def profile(self) -> Profile:
        return self._profile

    # WHAT: map one message to exactly one ClassifiedResponse.
    # WHY: the orchestrator relies on a total, side-effect free first pass.
    # HOW: build a ParseContext, walk `_stages` in order, then apply the default fallback.
    def classify(self, message: str, profile: Optional[Profile] = None) -> ClassifiedResponse:
        """Return the first stage result, or the default fallback."""
        original = (message or "").strip()
        active_profile = profile or self._profile
        ctx = ParseContext(
            message=original,
            lowered=original.lower(),
            profile=active_profile,
            now=self._clock(),
            rng=self._rng,
            rates=self._rates,
        )

        if original:
            for name, stage in self._stages:
                result = stage(ctx)
                if result is not None:
                    logger.debug("Local NLP stage %s matched (%s)", name, result.stage)
                    return result

        return self._fallback(ctx)

    def _fallback(self, ctx: ParseContext) -> ClassifiedResponse:
        if len(ctx.message.split()) >= 2:
            return search_response(DEFAULT_SEARCH_TEXT, DEFAULT_SEARCH_STAGE, ActionKind.SMART_SEARCH, ctx.message)
        return ClassifiedResponse(text=ctx.profile.fallback_message(), stage=FALLBACK_STAGE)


__all__ = ["LocalNLP", "STAGES", "DEFAULT_SEARCH_STAGE", "DEFAULT_SEARCH_TEXT"]
