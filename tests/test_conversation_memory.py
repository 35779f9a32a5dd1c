import threading

from core.conversation_memory import ASSISTANT_ROLE, USER_ROLE, SessionStore


def test_session_keeps_most_recent_turns_in_order():
    store = SessionStore(max_turns=20)
    for index in range(13):
        store.append_exchange("alice", f"q{index}", f"a{index}")

    history = store.history("alice")
    assert len(history) == 20
    expected = [text for index in range(3, 13) for text in (f"q{index}", f"a{index}")]
    assert [turn.content for turn in history] == expected


def test_sessions_are_isolated_per_sender():
    store = SessionStore()
    store.append_exchange("alice", "hi", "hello alice")
    store.append_exchange("bob", "yo", "hello bob")

    assert [turn.role for turn in store.history("alice")] == [USER_ROLE, ASSISTANT_ROLE]
    assert store.history("bob")[1].content == "hello bob"
    assert store.history("carol") == ()


def test_clear_drops_session():
    store = SessionStore()
    store.append_exchange("alice", "hi", "hello")
    store.clear("alice")
    assert store.history("alice") == ()


def test_concurrent_appends_stay_bounded():
    store = SessionStore(max_turns=20)

    def writer(prefix: str) -> None:
        for index in range(50):
            store.append_exchange("shared", f"{prefix}-{index}", "ok")

    threads = [threading.Thread(target=writer, args=(name,)) for name in ("a", "b", "c")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    history = store.history("shared")
    assert len(history) == 20
    assert history[0].role == USER_ROLE
