import asyncio

import pytest

from core.task_executor import ActionRegistry, ExecutionResult


def test_register_rejects_duplicates():
    registry = ActionRegistry()
    registry.register("web_search", lambda params: ExecutionResult(success=True))
    with pytest.raises(ValueError):
        registry.register("web_search", lambda params: ExecutionResult(success=True))
    assert registry.known_kinds() == ("web_search",)


def test_execute_runs_sync_and_async_handlers():
    registry = ActionRegistry()
    registry.register("sync", lambda params: ExecutionResult(success=True, output=f"sync {params['query']}"))

    async def async_handler(params):
        return ExecutionResult(success=True, output=f"async {params['query']}")

    registry.register("async", async_handler)

    assert asyncio.run(registry.execute("sync", {"query": "a"})).output == "sync a"
    assert asyncio.run(registry.execute("async", {"query": "b"})).output == "async b"


def test_execute_never_raises():
    registry = ActionRegistry()

    def broken(params):
        raise RuntimeError("secret token abc123")

    registry.register("broken", broken)
    registry.register("bad_return", lambda params: "not a result")

    failed = asyncio.run(registry.execute("broken", {}))
    assert not failed.success
    assert "secret" not in failed.error

    assert not asyncio.run(registry.execute("bad_return", {})).success
    assert asyncio.run(registry.execute("missing", {})).error == "Unknown action: missing"
