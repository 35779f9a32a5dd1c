import json

from core.learning_logger import LearningLogger, TurnRecord


def _record(**overrides):
    data = dict(
        sender_id="alice",
        channel="web",
        user_text="IPL score today",
        response_text="🏏 Getting the latest scores!",
        stage="sports_search",
        actions=[{"type": "sports_search", "success": True}],
        latency_ms=12,
    )
    data.update(overrides)
    return TurnRecord(**data)


def test_learning_logger_writes_jsonl_records(tmp_path):
    turn_path = tmp_path / "logs" / "turns.jsonl"
    logger = LearningLogger(turn_log_path=turn_path, enabled=True)

    logger.log_turn(_record())
    logger.log_turn(_record(user_text="hi", stage="greeting", actions=[]))

    lines = turn_path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["user_text"] == "IPL score today"
    assert first["stage"] == "sports_search"
    assert first["response_source"] == "local"
    assert first["actions"] == [{"type": "sports_search", "success": True}]
    assert first["timestamp"]


def test_disabled_logger_writes_nothing(tmp_path):
    turn_path = tmp_path / "turns.jsonl"
    LearningLogger(turn_log_path=turn_path, enabled=False).log_turn(_record())
    assert not turn_path.exists()


def test_redaction_scrubs_contact_details(tmp_path):
    turn_path = tmp_path / "turns.jsonl"
    logger = LearningLogger(turn_log_path=turn_path, redact=True)

    logger.log_turn(
        _record(
            sender_id="+91 98765 43210",
            user_text="mail me at asha@example.com or see https://example.com/cv",
            response_text="card 4111 1111 1111 1111 noted",
        )
    )

    record = json.loads(turn_path.read_text(encoding="utf-8"))
    assert record["sender_id"] == "[REDACTED_PHONE]"
    assert "[REDACTED_EMAIL]" in record["user_text"]
    assert "[REDACTED_URL]" in record["user_text"]
    assert "[REDACTED_CREDIT_CARD]" in record["response_text"]
    assert record["stage"] == "sports_search"


def test_redaction_can_be_limited_to_selected_patterns(tmp_path):
    turn_path = tmp_path / "turns.jsonl"
    logger = LearningLogger(turn_log_path=turn_path, patterns=["email"])
    logger.log_turn(_record(user_text="asha@example.com https://example.com"))

    record = json.loads(turn_path.read_text(encoding="utf-8"))
    assert record["user_text"] == "[REDACTED_EMAIL] https://example.com"


def test_rotation_keeps_backups(tmp_path):
    turn_path = tmp_path / "turns.jsonl"
    logger = LearningLogger(turn_log_path=turn_path, redact=False, max_bytes=300, backup_count=2)

    for index in range(6):
        logger.log_turn(_record(user_text=f"message {index} " + "x" * 100))

    assert turn_path.exists()
    assert (tmp_path / "turns.jsonl.1").exists()
    assert (tmp_path / "turns.jsonl.2").exists()
    assert not (tmp_path / "turns.jsonl.3").exists()
    newest = json.loads(turn_path.read_text(encoding="utf-8").strip().splitlines()[-1])
    assert newest["user_text"].startswith("message 5")


def test_write_failures_do_not_raise(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file", encoding="utf-8")
    logger = LearningLogger(turn_log_path=blocker / "turns.jsonl")
    logger.log_turn(_record())
