"""Operator profile: persona, knowledge base, quick replies and takeover policy.

The profile is loaded once at startup from ``owner-profile.json`` and never
mutated afterwards. Every lookup degrades to a built-in default so a missing
file still yields a working assistant.
"""

from __future__ import annotations

import json
import logging
import re
import threading
import time
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from core.parsers.types import ActionKind

logger = logging.getLogger(__name__)

DEFAULT_OWNER_NAME = "Owner"
DEFAULT_FALLBACK_MESSAGE = "Hmm, not sure about that. Try asking differently? 🤔"
DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."
DEFAULT_PAUSE_SECONDS = 300

_PROMPT_COMMANDS = (
    (ActionKind.SMART_SEARCH, "General search"),
    (ActionKind.SPORTS_SEARCH, "Sports/scores"),
    (ActionKind.NEWS_SEARCH, "News"),
    (ActionKind.YOUTUBE_SEARCH, "Videos"),
    (ActionKind.MUSIC_SEARCH, "Songs"),
    (ActionKind.MOVIE_SEARCH, "Movies"),
)


@dataclass(frozen=True)
class KnowledgeEntry:
    patterns: Tuple[str, ...]
    answer: str

    def matches(self, lowered: str) -> bool:
        return any(pattern and pattern.lower() in lowered for pattern in self.patterns)


@dataclass(frozen=True)
class BotPersonality:
    name: str = ""
    tone: str = ""
    language: str = ""
    style: str = ""
    greeting: str = ""
    away_message: str = ""
    fallback_message: str = ""


@dataclass(frozen=True)
class Festival:
    name: str
    greeting: str
    date: str = ""


@dataclass(frozen=True)
class OwnerTakeover:
    enabled: bool = False
    pause_duration_seconds: int = DEFAULT_PAUSE_SECONDS


@dataclass(frozen=True)
class Profile:
    """Read-only owner persona consumed by the classifier and prompt builder."""

    owner_name: str = ""
    role: str = ""
    tagline: str = ""
    description: str = ""
    location: str = ""
    phone: str = ""
    education: str = ""
    work: str = ""
    technologies: Tuple[str, ...] = ()
    skills: Tuple[str, ...] = ()
    interests: Tuple[str, ...] = ()
    traits: Tuple[str, ...] = ()
    values: Tuple[str, ...] = ()
    work_style: str = ""
    bot_personality: BotPersonality = field(default_factory=BotPersonality)
    knowledge_base: Tuple[KnowledgeEntry, ...] = ()
    festivals: Tuple[Festival, ...] = ()
    quick_responses: Mapping[str, str] = field(default_factory=dict)
    owner_takeover: OwnerTakeover = field(default_factory=OwnerTakeover)
    loaded: bool = False

    # --- Construction ---------------------------------------------------------
    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Profile":
        """Build a profile from the ``owner-profile.json`` document shape."""

        person = _mapping(data.get("profile"))
        location = _mapping(person.get("location"))
        contact = _mapping(person.get("contact"))
        background = _mapping(data.get("background"))
        current_work = _mapping(background.get("currentWork"))
        skills = _mapping(background.get("skills"))
        interests = _mapping(data.get("interests"))
        personality = _mapping(data.get("personality"))
        bot = _mapping(data.get("botPersonality"))
        takeover = _mapping(data.get("ownerTakeover"))

        work = ""
        if current_work.get("role"):
            work = str(current_work["role"])
            if current_work.get("company"):
                work += f" at {current_work['company']}"

        knowledge = []
        for entry in data.get("knowledgeBase") or []:
            if not isinstance(entry, Mapping):
                continue
            patterns = tuple(str(p) for p in entry.get("patterns") or [] if str(p).strip())
            answer = str(entry.get("answer") or "")
            if patterns and answer:
                knowledge.append(KnowledgeEntry(patterns=patterns, answer=answer))

        festivals = []
        for entry in data.get("festivals") or []:
            if isinstance(entry, Mapping) and entry.get("greeting"):
                festivals.append(
                    Festival(
                        name=str(entry.get("name") or ""),
                        greeting=str(entry["greeting"]),
                        date=str(entry.get("date") or ""),
                    )
                )

        quick = {str(key): str(value) for key, value in _mapping(data.get("quickResponses")).items() if value}

        return cls(
            owner_name=str(person.get("name") or ""),
            role=str(person.get("role") or ""),
            tagline=str(person.get("tagline") or ""),
            description=str(person.get("description") or ""),
            location=", ".join(
                str(location[key]) for key in ("city", "state", "country") if location.get(key)
            ),
            phone=str(contact.get("phone") or ""),
            education=str(background.get("education") or ""),
            work=work,
            technologies=_strings(current_work.get("technologies")),
            skills=_strings(skills.get("technical")) + _strings(skills.get("research")),
            interests=_strings(interests.get("professional"))
            + _strings(interests.get("creative"))
            + _strings(interests.get("personal")),
            traits=_strings(personality.get("traits")),
            values=_strings(personality.get("values")),
            work_style=str(personality.get("workStyle") or ""),
            bot_personality=BotPersonality(
                name=str(bot.get("name") or ""),
                tone=str(bot.get("tone") or ""),
                language=str(bot.get("language") or ""),
                style=str(bot.get("style") or ""),
                greeting=str(bot.get("greeting") or ""),
                away_message=str(bot.get("awayMessage") or ""),
                fallback_message=str(bot.get("fallbackMessage") or ""),
            ),
            knowledge_base=tuple(knowledge),
            festivals=tuple(festivals),
            quick_responses=quick,
            owner_takeover=OwnerTakeover(
                enabled=bool(takeover.get("enabled", False)),
                pause_duration_seconds=_positive_int(takeover.get("pauseDurationSeconds"), DEFAULT_PAUSE_SECONDS),
            ),
            loaded=True,
        )

    # --- Lookups --------------------------------------------------------------
    @property
    def display_name(self) -> str:
        return self.owner_name or DEFAULT_OWNER_NAME

    def match_knowledge(self, query: str) -> Optional[str]:
        """First knowledge entry (declaration order) whose pattern is a substring wins."""

        lowered = (query or "").lower()
        for entry in self.knowledge_base:
            if entry.matches(lowered):
                return entry.answer
        return None

    def quick_response(self, kind: str) -> str:
        return self.quick_responses.get(kind, "")

    def fallback_message(self) -> str:
        return self.bot_personality.fallback_message or DEFAULT_FALLBACK_MESSAGE

    def festival_greeting(self, today: Optional[date] = None) -> Optional[str]:
        today = today or date.today()
        month_day = f"{today.day} {today:%B}".lower()
        for festival in self.festivals:
            if festival.date and month_day in festival.date.lower():
                return festival.greeting
        return None

    def is_owner(self, number: str) -> bool:
        owner = _digits(self.phone)
        candidate = _digits(number)
        if not owner or not candidate:
            return False
        return owner in candidate or candidate in owner

    # --- Prompt ---------------------------------------------------------------
    def system_prompt(self) -> str:
        """Render the persona prompt handed to the generative model."""

        if not self.loaded:
            return f"{DEFAULT_SYSTEM_PROMPT}\n\n{_reply_contract()}"

        bot = self.bot_personality
        name = self.display_name
        sections = [f"You are a chat bot that responds on behalf of {name}."]
        sections.append(
            _section(
                "OWNER PROFILE",
                [
                    ("Name", name),
                    ("Role", self.role),
                    ("Tagline", self.tagline),
                    ("Description", self.description),
                    ("Location", self.location),
                ],
            )
        )
        sections.append(
            _section(
                "BACKGROUND",
                [
                    ("Education", self.education),
                    ("Current Work", self.work),
                    ("Tech Stack", ", ".join(self.technologies)),
                    ("Skills", ", ".join(self.skills)),
                    ("Interests", ", ".join(self.interests)),
                ],
            )
        )
        sections.append(
            _section(
                "PERSONALITY",
                [
                    ("Traits", ", ".join(self.traits)),
                    ("Values", ", ".join(self.values)),
                    ("Work Style", self.work_style),
                ],
            )
        )
        sections.append(
            _section(
                "BOT PERSONALITY",
                [("Name", bot.name), ("Tone", bot.tone), ("Language", bot.language), ("Style", bot.style)],
            )
        )
        if self.knowledge_base:
            lines = "\n".join(f"Q: {'/'.join(entry.patterns)} -> {entry.answer}" for entry in self.knowledge_base)
            sections.append(f"## KNOWLEDGE BASE (use these for specific questions):\n{lines}")

        guidelines = [
            f"Be {name}: respond as if you ARE them",
            "Keep responses SHORT, like real texting",
            "Use emojis sparingly but naturally",
            f'For unknown topics: "{self.fallback_message()}"',
        ]
        if bot.tone:
            guidelines.append(f"Tone: {bot.tone}")
        if bot.away_message:
            guidelines.append(f'Away message: "{bot.away_message}"')
        numbered = "\n".join(f"{index}. {line}" for index, line in enumerate(guidelines, start=1))
        sections.append(f"## RESPONSE GUIDELINES:\n{numbered}")
        sections.append(_reply_contract())
        return "\n\n".join(section for section in sections if section)


class PauseRegistry:
    """Owner takeover: chat id -> resume timestamp, expiring lazily."""

    def __init__(self, profile: Profile, clock: Callable[[], float] = time.time) -> None:
        self._profile = profile
        self._clock = clock
        self._paused: Dict[str, float] = {}
        self._lock = threading.Lock()

    def pause(self, chat_id: str) -> Optional[float]:
        """Pause automated replies for ``chat_id``; returns the resume timestamp."""

        takeover = self._profile.owner_takeover
        if not takeover.enabled:
            return None
        resume_at = self._clock() + takeover.pause_duration_seconds
        with self._lock:
            self._paused[chat_id] = resume_at
        logger.info("Bot paused for chat %s for %ss", chat_id, takeover.pause_duration_seconds)
        return resume_at

    def is_paused(self, chat_id: str) -> bool:
        with self._lock:
            resume_at = self._paused.get(chat_id)
            if resume_at is None:
                return False
            if self._clock() > resume_at:
                del self._paused[chat_id]
                return False
            return True

    def resume(self, chat_id: str) -> None:
        with self._lock:
            self._paused.pop(chat_id, None)


def load_profile(path: Path | str) -> Profile:
    """Load ``path`` into a ``Profile``; missing or malformed files yield the default."""

    target = Path(path)
    if not target.exists():
        logger.warning("Owner profile not found at %s; using defaults", target)
        return Profile()
    try:
        data = json.loads(target.read_text(encoding="utf-8") or "{}")
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Failed to load owner profile %s: %s", target, exc)
        return Profile()
    if not isinstance(data, Mapping):
        logger.warning("Owner profile %s must be a JSON object", target)
        return Profile()
    profile = Profile.from_dict(data)
    logger.info("Loaded owner profile: %s", profile.display_name)
    return profile


def _reply_contract() -> str:
    commands = "\n".join(
        f'- {{"type": "{kind}", "params": {{"query": "..."}}}} - {label}' for kind, label in _PROMPT_COMMANDS
    )
    return (
        "## SEARCH COMMANDS (include in response when needed):\n"
        f"{commands}\n\n"
        "Format response as JSON:\n"
        '{"response": "your casual reply", "commands": []}'
    )


def _section(title: str, rows: list[tuple[str, str]]) -> str:
    lines = [f"- **{label}**: {value}" for label, value in rows if value]
    if not lines:
        return ""
    return f"## {title}:\n" + "\n".join(lines)


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _strings(value: Any) -> Tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(str(item) for item in value if str(item).strip())


def _positive_int(value: Any, default: int) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def _digits(value: str) -> str:
    return re.sub(r"\D", "", value or "")


__all__ = [
    "BotPersonality",
    "Festival",
    "KnowledgeEntry",
    "OwnerTakeover",
    "PauseRegistry",
    "Profile",
    "load_profile",
    "DEFAULT_FALLBACK_MESSAGE",
    "DEFAULT_OWNER_NAME",
]
