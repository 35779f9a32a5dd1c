"""Shared dataclasses for classifier outputs."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Mapping, Tuple, Union

if TYPE_CHECKING:  # pragma: no cover - typing only
    from core.parsers.conversions import RateProvider
    from core.profile import Profile

Scalar = Union[str, int, float, bool]

FALLBACK_STAGE = "fallback"


class ActionKind:
    """Tags understood by the task executor."""

    SPORTS_SEARCH = "sports_search"
    NEWS_SEARCH = "news_search"
    PERSON_SEARCH = "person_search"
    MUSIC_SEARCH = "music_search"
    MOVIE_SEARCH = "movie_search"
    YOUTUBE_SEARCH = "youtube_search"
    AMAZON_SEARCH = "amazon_search"
    LOCATION_SEARCH = "location_search"
    GAME_SEARCH = "game_search"
    IMAGE_SEARCH = "image_search"
    SMART_SEARCH = "smart_search"
    WEB_SEARCH = "web_search"

    SEARCH_KINDS: Tuple[str, ...] = (
        SPORTS_SEARCH,
        NEWS_SEARCH,
        PERSON_SEARCH,
        MUSIC_SEARCH,
        MOVIE_SEARCH,
        YOUTUBE_SEARCH,
        AMAZON_SEARCH,
        LOCATION_SEARCH,
        GAME_SEARCH,
        IMAGE_SEARCH,
        SMART_SEARCH,
        WEB_SEARCH,
    )


@dataclass(frozen=True)
class Action:
    """Deferred unit of work for the executor; parameters are plain scalars."""

    kind: str
    params: Mapping[str, Scalar] = field(default_factory=dict)


@dataclass(frozen=True)
class ClassifiedResponse:
    """Reply text plus the actions that still have to run.

    ``stage`` names the cascade row that produced the reply and ``source``
    records whether the text came from the local classifier or the model.
    """

    text: str
    actions: Tuple[Action, ...] = ()
    stage: str = FALLBACK_STAGE
    source: str = "local"

    @property
    def is_fallback(self) -> bool:
        return self.stage == FALLBACK_STAGE and not self.actions


@dataclass(frozen=True)
class ParseContext:
    """Inputs every cascade stage may read."""

    message: str
    lowered: str
    profile: "Profile"
    now: datetime
    rng: random.Random
    rates: "RateProvider"


def reply(text: str, stage: str) -> ClassifiedResponse:
    return ClassifiedResponse(text=text, actions=(), stage=stage)


def search(text: str, stage: str, kind: str, query: str) -> ClassifiedResponse:
    return ClassifiedResponse(text=text, actions=(Action(kind=kind, params={"query": query}),), stage=stage)


__all__ = [
    "Action",
    "ActionKind",
    "ClassifiedResponse",
    "ParseContext",
    "FALLBACK_STAGE",
    "Scalar",
    "reply",
    "search",
]
