import asyncio
import json
import random
from datetime import date

from core.bot import ERROR_TEXT, RESULTS_HEADER, BotFacade, MessageContext
from core.conversation_memory import SessionStore
from core.learning_logger import LearningLogger
from core.local_nlp import LocalNLP
from core.orchestrator import ResponseOrchestrator
from core.parsers.types import ActionKind
from core.profile import PauseRegistry, Profile
from core.task_executor import ExecutionResult


class StubExecutor:
    def __init__(self, results=None) -> None:
        self.results = results or {}
        self.calls = []

    async def execute(self, kind, params):
        self.calls.append((kind, dict(params)))
        return self.results.get(kind, ExecutionResult(success=True, output=f"ran {kind}: {params.get('query')}"))


class ExplodingOrchestrator:
    profile = Profile()

    async def respond(self, message, history=(), profile=None):
        raise RuntimeError("OPENAI_API_KEY=sk-secret leaked")


def _profile(**overrides):
    data = {
        "profile": {"name": "Asha"},
        "festivals": [{"name": "Holi", "date": "4 March", "greeting": "Happy Holi! 🎨"}],
        "ownerTakeover": {"enabled": True, "pauseDurationSeconds": 300},
    }
    data.update(overrides)
    return Profile.from_dict(data)


def _bot(executor=None, profile=None, **kwargs):
    profile = profile or _profile()
    orchestrator = ResponseOrchestrator(LocalNLP(profile, rng=random.Random(3)), profile)
    return BotFacade(orchestrator, executor or StubExecutor(), **kwargs)


def _ctx(sender="alice", chat=None):
    return MessageContext(source="test", sender_id=sender, chat_id=chat)


def test_actions_are_executed_and_results_appended():
    executor = StubExecutor()
    bot = _bot(executor)

    response = asyncio.run(bot.handle("IPL score today", _ctx()))

    assert executor.calls == [(ActionKind.SPORTS_SEARCH, {"query": "IPL score today"})]
    assert RESULTS_HEADER in response.text
    assert response.text.endswith("ran sports_search: IPL score today")
    assert not response.error


def test_direct_answer_has_no_results_section():
    executor = StubExecutor()
    response = asyncio.run(_bot(executor).handle("30c to f", _ctx()))
    assert "86.0°F" in response.text
    assert RESULTS_HEADER not in response.text
    assert executor.calls == []


def test_failed_action_surfaces_error_text():
    executor = StubExecutor({ActionKind.SPORTS_SEARCH: ExecutionResult(success=False, error="feed offline")})
    response = asyncio.run(_bot(executor).handle("IPL score today", _ctx()))
    assert "❌ feed offline" in response.text
    assert not response.error


def test_attachments_and_image_url_are_collected():
    executor = StubExecutor(
        {
            ActionKind.IMAGE_SEARCH: ExecutionResult(
                success=True,
                output="pics",
                attachments=("a.png",),
                image_url="https://img.example/1.jpg",
            )
        }
    )
    response = asyncio.run(_bot(executor).handle("sunset wallpaper", _ctx()))
    assert response.attachments == ("a.png",)
    assert response.image_url == "https://img.example/1.jpg"


def test_unknown_action_kinds_are_dropped():
    executor = StubExecutor()
    bot = _bot(executor, allowed_kinds=[ActionKind.NEWS_SEARCH])
    asyncio.run(bot.handle("IPL score today", _ctx()))
    assert executor.calls == []


def test_history_records_user_then_assistant_without_results():
    sessions = SessionStore(max_turns=20)
    bot = _bot(sessions=sessions)
    asyncio.run(bot.handle("IPL score today", _ctx()))

    history = sessions.history("alice")
    assert [turn.role for turn in history] == ["user", "assistant"]
    assert history[0].content == "IPL score today"
    assert RESULTS_HEADER not in history[1].content


def test_session_is_bounded_across_turns():
    sessions = SessionStore(max_turns=20)
    bot = _bot(sessions=sessions)
    for index in range(15):
        asyncio.run(bot.handle(f"{index} + 1", _ctx()))
    history = sessions.history("alice")
    assert len(history) == 20
    assert history[-2].content == "14 + 1"


def test_unexpected_errors_become_generic_apology():
    bot = BotFacade(ExplodingOrchestrator(), StubExecutor())
    response = asyncio.run(bot.handle("anything at all", _ctx()))
    assert response.error
    assert response.text == ERROR_TEXT
    assert "sk-secret" not in response.text


def test_paused_chat_gets_no_reply_and_no_history():
    profile = _profile()
    pauses = PauseRegistry(profile)
    sessions = SessionStore()
    executor = StubExecutor()
    bot = _bot(executor, profile, pauses=pauses, sessions=sessions)

    bot.owner_takeover("group-1")
    response = asyncio.run(bot.handle("IPL score today", _ctx(chat="group-1")))

    assert response.paused
    assert response.text == ""
    assert executor.calls == []
    assert sessions.history("alice") == ()

    bot.resume("group-1")
    assert not asyncio.run(bot.handle("IPL score today", _ctx(chat="group-1"))).paused


def test_greeting_appends_festival_greeting():
    bot = _bot(today=lambda: date(2026, 3, 4))
    response = asyncio.run(bot.handle("hi", _ctx()))
    assert "Happy Holi! 🎨" in response.text

    plain = _bot(today=lambda: date(2026, 3, 5))
    assert "Holi" not in asyncio.run(plain.handle("hi", _ctx())).text


def test_slash_commands_bypass_the_classifier():
    executor = StubExecutor()
    bot = _bot(executor)
    response = asyncio.run(bot.handle("/yt lofi beats", _ctx()))
    assert executor.calls == [(ActionKind.YOUTUBE_SEARCH, {"query": "lofi beats"})]
    assert "ran youtube_search" in response.text


def test_turns_are_logged(tmp_path):
    log_path = tmp_path / "turns.jsonl"
    logger = LearningLogger(turn_log_path=log_path, redact=False)
    bot = _bot(turn_logger=logger)

    asyncio.run(bot.handle("IPL score today", _ctx()))

    record = json.loads(log_path.read_text(encoding="utf-8").strip())
    assert record["sender_id"] == "alice"
    assert record["channel"] == "test"
    assert record["stage"] == ActionKind.SPORTS_SEARCH
    assert record["response_source"] == "local"
    assert record["actions"] == [{"type": ActionKind.SPORTS_SEARCH, "success": True}]
    assert record["latency_ms"] >= 0


def test_owner_message_without_trigger_takes_over_chat():
    profile = _profile(profile={"name": "Asha", "contact": {"phone": "+91 98765 43210"}})
    executor = StubExecutor()
    bot = _bot(executor, profile, pauses=PauseRegistry(profile))
    owner = MessageContext(source="test", sender_id="919876543210@c.us", chat_id="group-1", addressed=False)

    taken_over = asyncio.run(bot.handle("I'll answer this one", owner))
    assert taken_over.paused
    assert taken_over.text == ""

    guest = asyncio.run(bot.handle("IPL score today", _ctx(sender="bob", chat="group-1")))
    assert guest.paused
    assert executor.calls == []


def test_owner_addressing_the_bot_gets_a_reply():
    profile = _profile(profile={"name": "Asha", "contact": {"phone": "+91 98765 43210"}})
    bot = _bot(profile=profile, pauses=PauseRegistry(profile))
    owner = MessageContext(source="test", sender_id="919876543210", chat_id="group-2")

    response = asyncio.run(bot.handle("30c to f", owner))
    assert not response.paused
    assert "86.0°F" in response.text


def test_plain_messages_from_others_are_answered():
    profile = _profile(profile={"name": "Asha", "contact": {"phone": "+91 98765 43210"}})
    bot = _bot(profile=profile, pauses=PauseRegistry(profile))
    stranger = MessageContext(source="test", sender_id="15550001111", chat_id="group-3", addressed=False)

    assert "86.0°F" in asyncio.run(bot.handle("30c to f", stranger)).text
