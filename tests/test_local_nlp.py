import random
from datetime import datetime

import pytest

from core.local_nlp import DEFAULT_SEARCH_STAGE, STAGES, LocalNLP
from core.parsers.conversions import FixedRateProvider
from core.parsers.types import FALLBACK_STAGE, ActionKind
from core.profile import DEFAULT_FALLBACK_MESSAGE, Profile

FIXED_NOW = datetime(2026, 3, 14, 15, 9, 26)


def _nlp(profile=None, **kwargs):
    return LocalNLP(profile, rng=random.Random(7), clock=lambda: FIXED_NOW, **kwargs)


def _profile_with_kb():
    return Profile.from_dict(
        {
            "profile": {"name": "Asha"},
            "knowledgeBase": [
                {"patterns": ["your job", "work"], "answer": "I build chat tools."},
                {"patterns": ["work"], "answer": "second entry"},
            ],
            "quickResponses": {"greeting": "Heyyy! 👋"},
        }
    )


def test_stage_table_order():
    assert [name for name, _ in STAGES] == ["math", "knowledge_base", "common", "search", "conversation"]


def test_math_result_has_no_actions():
    result = _nlp().classify("12 + 3 * 2")
    assert result.stage == "math"
    assert "18" in result.text
    assert result.actions == ()


def test_knowledge_base_first_entry_wins():
    result = _nlp(_profile_with_kb()).classify("Where do you WORK?")
    assert result.stage == "knowledge_base"
    assert result.text == "I build chat tools."


def test_profile_argument_overrides_constructor_profile():
    nlp = _nlp()
    assert nlp.classify("where do you work", _profile_with_kb()).text == "I build chat tools."


def test_time_question_formats_clock():
    result = _nlp().classify("what time is it")
    assert result.stage == "time"
    assert "03:09 PM" in result.text
    assert result.actions == ()


def test_time_needs_clock_phrasing():
    assert _nlp().classify("what's the time?").stage == "time"
    assert _nlp().classify("current time please").stage == "time"
    complexity = _nlp().classify("what is the time complexity of quicksort")
    assert complexity.stage != "time"
    assert complexity.actions[0].kind == ActionKind.SMART_SEARCH


def test_date_question():
    result = _nlp().classify("what is today's date")
    assert result.stage == "date"
    assert "Saturday, 14 March 2026" in result.text


def test_celsius_conversion():
    result = _nlp().classify("30c to f")
    assert result.stage == "conversion"
    assert "86.0°F" in result.text
    assert result.actions == ()


def test_usd_conversion_uses_injected_rate():
    result = _nlp(rate_provider=FixedRateProvider(90)).classify("10 usd to inr")
    assert "₹900.00" in result.text


def test_malformed_conversion_falls_through():
    result = _nlp().classify("30 to f")
    assert result.stage != "conversion"


def test_weather_emits_search_action_with_original_case():
    result = _nlp().classify("Weather in Mumbai")
    assert result.stage == "weather"
    assert result.actions[0].kind == ActionKind.SMART_SEARCH
    assert result.actions[0].params["query"] == "Weather in Mumbai"


def test_ipl_score_routes_to_sports_with_original_query():
    result = _nlp().classify("IPL score today")
    assert len(result.actions) == 1
    assert result.actions[0].kind == ActionKind.SPORTS_SEARCH
    assert result.actions[0].params == {"query": "IPL score today"}


def test_sports_beats_news():
    result = _nlp().classify("cricket news")
    assert [action.kind for action in result.actions] == [ActionKind.SPORTS_SEARCH]


def test_news_query_strips_keywords():
    result = _nlp().classify("Tech news")
    assert result.actions[0].kind == ActionKind.NEWS_SEARCH
    assert result.actions[0].params["query"] == "Tech"


def test_news_without_topic_defaults_to_trending():
    result = _nlp().classify("latest headlines")
    assert result.actions[0].params["query"] == "trending"


def test_person_query_strips_prefix():
    result = _nlp().classify("who is Ada Lovelace")
    assert result.actions[0].kind == ActionKind.PERSON_SEARCH
    assert result.actions[0].params["query"] == "Ada Lovelace"
    assert "Ada Lovelace" in result.text


@pytest.mark.parametrize(
    "message, kind",
    [
        ("play some lofi music", ActionKind.MUSIC_SEARCH),
        ("best netflix series", ActionKind.MOVIE_SEARCH),
        ("python tutorial video", ActionKind.YOUTUBE_SEARCH),
        ("iphone price", ActionKind.AMAZON_SEARCH),
        ("pizza near me", ActionKind.LOCATION_SEARCH),
        ("new xbox game", ActionKind.GAME_SEARCH),
        ("sunset wallpaper", ActionKind.IMAGE_SEARCH),
        ("explain quantum computing", ActionKind.SMART_SEARCH),
    ],
)
def test_search_routing(message, kind):
    result = _nlp().classify(message)
    assert result.actions[0].kind == kind


def test_greeting_uses_quick_response():
    assert _nlp(_profile_with_kb()).classify("hi!").text == "Heyyy! 👋"
    assert _nlp().classify("hello").text == "Hey! 👋"


def test_small_talk_is_not_claimed_by_search():
    result = _nlp().classify("how are you")
    assert result.stage == "how_are_you"
    assert result.actions == ()


def test_joke_and_help():
    assert _nlp().classify("tell me a joke").stage == "joke"
    assert _nlp().classify("help").stage == "help"


def test_who_are_you_mentions_owner():
    assert "Asha" in _nlp(_profile_with_kb()).classify("who are you").text


def test_multi_word_fallback_is_generic_search():
    result = _nlp().classify("purple elephants dancing")
    assert result.stage == DEFAULT_SEARCH_STAGE
    assert result.actions[0].kind == ActionKind.SMART_SEARCH
    assert result.actions[0].params["query"] == "purple elephants dancing"
    assert not result.is_fallback


def test_single_word_fallback_uses_profile_message():
    result = _nlp().classify("xyzzy")
    assert result.stage == FALLBACK_STAGE
    assert result.text == DEFAULT_FALLBACK_MESSAGE
    assert result.is_fallback

    custom = Profile.from_dict({"botPersonality": {"fallbackMessage": "No idea!"}})
    assert _nlp(custom).classify("xyzzy").text == "No idea!"


def test_empty_message_is_fallback():
    assert _nlp().classify("   ").is_fallback


def test_classification_is_idempotent():
    nlp = _nlp(_profile_with_kb())
    for message in ("IPL score today", "30c to f", "what time is it", "where do you work"):
        assert nlp.classify(message) == nlp.classify(message)
