"""Ordered pattern tables shared by the classifier cascade.

Every table here is data: the cascade stages in ``core.parsers`` walk them in
declaration order and the first matching row wins. Keeping priorities in one
place makes the tie-break between overlapping keyword families auditable
(e.g. "cricket news" is sports because sports is listed before news).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple

from core.parsers.types import ActionKind

# ---------------------------------------------------------------------------
# Common questions
# ---------------------------------------------------------------------------
# Clock phrasing only; "time" inside "time complexity" or "buy an alarm clock" is not a clock query.
TIME_PATTERN = re.compile(
    r"\b(?:what time|time is it|current time|time now|tell me the time)\b"
    r"|\bwhat(?:'s| is) the time\s*(?:now|please)?\s*[?.!]*$"
    r"|^time\s*[?.!]*$"
)
DATE_PATTERN = re.compile(r"\b(?:date|what(?:'s| is) today)\b")
DAY_OF_WEEK_PATTERN = re.compile(r"\b(?:what day|which day|day of the week)\b")
WEATHER_PATTERN = re.compile(r"\b(?:weather|temperature|rain|sunny|forecast)\b")
RANDOM_PATTERN = re.compile(r"\b(?:random number|pick a number|roll (?:a )?dice|roll a die|flip (?:a )?coin|toss (?:a )?coin)\b")

# ---------------------------------------------------------------------------
# Unit conversions: (value, from-unit) <to|in> (to-unit)
# ---------------------------------------------------------------------------
_NUMBER = r"(\d+(?:\.\d+)?)"
_CONNECTOR = r"\s*(?:to|in)\s*"

CELSIUS_TO_FAHRENHEIT = re.compile(_NUMBER + r"\s*(?:°\s*c|celsius|c)\b" + _CONNECTOR + r"(?:°\s*f|fahrenheit|f)\b")
FAHRENHEIT_TO_CELSIUS = re.compile(_NUMBER + r"\s*(?:°\s*f|fahrenheit|f)\b" + _CONNECTOR + r"(?:°\s*c|celsius|c)\b")
KM_TO_MILES = re.compile(_NUMBER + r"\s*(?:km|kilometers?|kilometres?)\b" + _CONNECTOR + r"(?:miles?|mi)\b")
MILES_TO_KM = re.compile(_NUMBER + r"\s*(?:miles?|mi)\b" + _CONNECTOR + r"(?:km|kilometers?|kilometres?)\b")
KG_TO_LBS = re.compile(_NUMBER + r"\s*(?:kg|kilograms?|kilos?)\b" + _CONNECTOR + r"(?:lbs?|pounds?)\b")
USD_TO_INR = re.compile(_NUMBER + r"\s*(?:usd|dollars?|\$)" + _CONNECTOR + r"(?:inr|rupees?|₹)")


# ---------------------------------------------------------------------------
# Search intents, in priority order
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class SearchIntent:
    """One row of the search router: keyword pattern -> action kind."""

    name: str
    kind: str
    pattern: Pattern[str]
    reply: str
    strip: Optional[Pattern[str]] = None
    empty_query: Optional[str] = None


# Small talk that starts with an interrogative must not be claimed by the
# generic search row; the conversation stage answers it instead.
_SMALL_TALK_LOOKAHEAD = r"(?!how are you|how r u|how's it going|what's up|whats up|what are you|what can you do|what is your name|what's your name|tell me a joke)"

SEARCH_INTENTS: Tuple[SearchIntent, ...] = (
    SearchIntent(
        name="sports",
        kind=ActionKind.SPORTS_SEARCH,
        pattern=re.compile(r"\b(?:score|scores|match|vs|cricket|football|ipl|t20|live|world cup|playing)\b"),
        reply="🏏 Getting the latest scores!",
    ),
    SearchIntent(
        name="news",
        kind=ActionKind.NEWS_SEARCH,
        pattern=re.compile(r"\b(?:news|latest|breaking|headlines|update)\b"),
        reply="📰 Here's the latest!",
        strip=re.compile(r"\b(?:news|latest|breaking|headlines)\b", re.IGNORECASE),
        empty_query="trending",
    ),
    SearchIntent(
        name="person",
        kind=ActionKind.PERSON_SEARCH,
        pattern=re.compile(r"^(?:who is|about|biography|wiki)\b"),
        reply="👤 Let me tell you about {query}!",
        strip=re.compile(r"^\s*(?:who is|about|biography|wiki)\s*", re.IGNORECASE),
    ),
    SearchIntent(
        name="music",
        kind=ActionKind.MUSIC_SEARCH,
        pattern=re.compile(r"\b(?:song|songs|music|play|listen|album|singer|lyrics|spotify)\b"),
        reply="🎵 Finding music!",
    ),
    SearchIntent(
        name="movie",
        kind=ActionKind.MOVIE_SEARCH,
        pattern=re.compile(r"\b(?:movie|movies|film|watch|series|show|netflix|prime|imdb)\b"),
        reply="🎬 Let me find that!",
    ),
    SearchIntent(
        name="video",
        kind=ActionKind.YOUTUBE_SEARCH,
        pattern=re.compile(r"\b(?:video|videos|youtube|tutorial|how to|watch how)\b"),
        reply="▶️ Found videos!",
    ),
    SearchIntent(
        name="shopping",
        kind=ActionKind.AMAZON_SEARCH,
        pattern=re.compile(r"\b(?:buy|price|amazon|flipkart|shop|order|cost|cheap)\b"),
        reply="🛒 Checking prices!",
    ),
    SearchIntent(
        name="location",
        kind=ActionKind.LOCATION_SEARCH,
        pattern=re.compile(r"\b(?:location|map|direction|directions|where is|near me|restaurant|hotel|address)\b"),
        reply="📍 Finding location!",
    ),
    SearchIntent(
        name="gaming",
        kind=ActionKind.GAME_SEARCH,
        pattern=re.compile(r"\b(?:game|games|gameplay|steam|gaming|xbox|playstation|pc game)\b"),
        reply="🎮 Gaming info!",
    ),
    SearchIntent(
        name="images",
        kind=ActionKind.IMAGE_SEARCH,
        pattern=re.compile(r"\b(?:image|images|photo|photos|picture|pictures|wallpaper|pic of)\b"),
        reply="📸 Finding images!",
    ),
    SearchIntent(
        name="generic",
        kind=ActionKind.SMART_SEARCH,
        pattern=re.compile(r"^" + _SMALL_TALK_LOOKAHEAD + r"(?:what|when|where|why|how|search|find|google|tell me|explain)\b"),
        reply="🔍 Searching...",
    ),
)

# ---------------------------------------------------------------------------
# Conversational replies
# ---------------------------------------------------------------------------
GREETING_PATTERN = re.compile(
    r"^(?:hi|hello|hey|yo|sup|hii+|hola|wassup|namaste|kem cho|good morning|good evening|good afternoon)$"
)
THANKS_PATTERN = re.compile(r"\b(?:thank|thanks|thx|thnx|ty|shukriya|dhanyawad)\b")
GOODBYE_PATTERN = re.compile(r"^(?:bye|goodbye|see you|cya|later|tata|alvida|good night|gn|tc|take care)$")
HOW_ARE_YOU_PATTERN = re.compile(r"\b(?:how are you|how r u|how's it going|kaise ho|kya hal|what's up|whats up|howdy)\b")
WHO_ARE_YOU_PATTERN = re.compile(r"\b(?:who are you|your name|what are you)\b")
JOKE_PATTERN = re.compile(r"\b(?:joke|jokes|funny|make me laugh)\b")
HELP_PATTERN = re.compile(r"^/?help$|what can you do")
COMPLIMENT_PATTERN = re.compile(r"\b(?:awesome|great|good bot|nice|amazing|love you|best)\b")

HOW_ARE_YOU_REPLIES: Tuple[str, ...] = (
    "All good! Coding as usual 💻 What's up?",
    "Doing great! You? 😊",
    "Sab badhiya! Tell me what you need!",
    "Living the dream! 🔥 How can I help?",
)
JOKES: Tuple[str, ...] = (
    "Why don't scientists trust atoms? Because they make up everything! 🤣",
    "I told my wifi we need to talk. It's been disconnecting ever since 😂",
    "Why do programmers prefer dark mode? Because light attracts bugs! 🐛",
    "What's a computer's favorite snack? Microchips! 🍟",
    "Why did the developer go broke? Because he used up all his cache! 😅",
)
COMPLIMENT_REPLIES: Tuple[str, ...] = (
    "Thanks! You're awesome too! 🙌",
    "Haha glad I could help! 😊",
    "You're making me blush! 🥰",
    "That means a lot! Keep the questions coming! 🔥",
)

HELP_TEXT = """🤖 **What I can do:**

🔍 **Search:** Just ask anything!
🏏 **Sports:** "IPL score", "India vs Aus"
📰 **News:** "Tech news", "Latest headlines"
🎬 **Entertainment:** "Movies", "Songs", "Videos"
🛒 **Shopping:** "iPhone price", "Buy laptop"
🧮 **Math:** "25 * 4", "two plus three"
🌡️ **Convert:** "30c to f", "5km to miles"
📅 **Info:** "What time", "Today's date"

Just ask! I'll figure it out 😄"""


__all__ = [
    "TIME_PATTERN",
    "DATE_PATTERN",
    "DAY_OF_WEEK_PATTERN",
    "WEATHER_PATTERN",
    "RANDOM_PATTERN",
    "CELSIUS_TO_FAHRENHEIT",
    "FAHRENHEIT_TO_CELSIUS",
    "KM_TO_MILES",
    "MILES_TO_KM",
    "KG_TO_LBS",
    "USD_TO_INR",
    "SearchIntent",
    "SEARCH_INTENTS",
    "GREETING_PATTERN",
    "THANKS_PATTERN",
    "GOODBYE_PATTERN",
    "HOW_ARE_YOU_PATTERN",
    "WHO_ARE_YOU_PATTERN",
    "JOKE_PATTERN",
    "HELP_PATTERN",
    "COMPLIMENT_PATTERN",
    "HOW_ARE_YOU_REPLIES",
    "JOKES",
    "COMPLIMENT_REPLIES",
    "HELP_TEXT",
]
