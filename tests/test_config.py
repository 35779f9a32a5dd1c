from pathlib import Path

from app import config


def test_defaults_when_env_is_empty():
    env: dict = {}
    assert config.get_llm_api_key(env) is None
    assert config.get_llm_model(env) == "gpt-4o-mini"
    assert config.get_llm_timeout(env) == 20.0
    assert config.get_llm_history_window(env) == 6
    assert config.get_profile_path(env) == Path("owner-profile.json")
    assert config.get_session_max_turns(env) == 20
    assert config.get_usd_inr_rate(env) == 83.0
    assert config.is_logging_enabled(env) is True
    assert config.get_turn_log_path(env) == Path("logs") / "turns.jsonl"
    assert config.get_log_level(env) == "INFO"
    assert config.get_allowed_senders(env) == []
    assert config.is_trigger_required(env) is False
    assert config.get_web_host(env) == "127.0.0.1"
    assert config.get_web_port(env) == 3000


def test_overrides_are_parsed():
    env = {
        "OPENAI_API_KEY": " sk-test ",
        "LLM_MODEL": "gpt-4o",
        "LLM_HISTORY_WINDOW": "2",
        "SESSION_MAX_TURNS": "8",
        "USD_INR_RATE": "84.5",
        "LOGGING_ENABLED": "off",
        "LOG_DIR": "/tmp/assistant-logs",
        "LOG_REDACTION_PATTERNS": "Email, url",
        "LOG_LEVEL": "debug",
        "BOT_ALLOWED_SENDERS": "911234567890, web-admin ,",
        "BOT_REQUIRE_TRIGGER": "yes",
        "WEB_PORT": "8080",
    }
    assert config.get_llm_api_key(env) == "sk-test"
    assert config.get_llm_model(env) == "gpt-4o"
    assert config.get_llm_history_window(env) == 2
    assert config.get_session_max_turns(env) == 8
    assert config.get_usd_inr_rate(env) == 84.5
    assert config.is_logging_enabled(env) is False
    assert config.get_turn_log_path(env) == Path("/tmp/assistant-logs/turns.jsonl")
    assert config.get_log_redaction_patterns(env) == ["email", "url"]
    assert config.get_log_level(env) == "DEBUG"
    assert config.get_allowed_senders(env) == ["911234567890", "web-admin"]
    assert config.is_trigger_required(env) is True
    assert config.get_web_port(env) == 8080


def test_invalid_values_fall_back_to_defaults():
    env = {
        "OPENAI_API_KEY": "   ",
        "LLM_TIMEOUT_SECONDS": "soon",
        "SESSION_MAX_TURNS": "0",
        "USD_INR_RATE": "-1",
        "LOGGING_ENABLED": "maybe",
        "LOG_LEVEL": "chatty",
        "WEB_PORT": "99999",
    }
    assert config.get_llm_api_key(env) is None
    assert config.get_llm_timeout(env) == 20.0
    assert config.get_session_max_turns(env) == 20
    assert config.get_usd_inr_rate(env) == 83.0
    assert config.is_logging_enabled(env) is True
    assert config.get_log_level(env) == "INFO"
    assert config.get_web_port(env) == 3000
