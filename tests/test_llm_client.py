import asyncio
from types import SimpleNamespace

import httpx
import openai
import pytest

from core.llm_client import LLMClient, ModelError, PromptMessage, RateLimitedError


class FakeCompletions:
    def __init__(self, response=None, error=None) -> None:
        self.response = response
        self.error = error
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        return self.response


def _client(completions: FakeCompletions) -> LLMClient:
    fake = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return LLMClient("gpt-test", "sk-test", client=fake, temperature=0.5, max_tokens=64)


def _status_error(cls, status: int):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(status, request=request)
    return cls("failure", response=response, body=None)


def _reply(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def test_generate_sends_roles_and_returns_content():
    completions = FakeCompletions(response=_reply('{"response": "hey"}'))
    text = asyncio.run(
        _client(completions).generate([PromptMessage("system", "persona"), PromptMessage("user", "hi")])
    )
    assert text == '{"response": "hey"}'
    assert completions.kwargs["model"] == "gpt-test"
    assert completions.kwargs["messages"] == [
        {"role": "system", "content": "persona"},
        {"role": "user", "content": "hi"},
    ]
    assert completions.kwargs["temperature"] == 0.5
    assert completions.kwargs["max_tokens"] == 64


def test_rate_limit_maps_to_rate_limited_error():
    completions = FakeCompletions(error=_status_error(openai.RateLimitError, 429))
    with pytest.raises(RateLimitedError):
        asyncio.run(_client(completions).generate([PromptMessage("user", "hi")]))


def test_other_status_errors_map_to_model_error():
    completions = FakeCompletions(error=_status_error(openai.InternalServerError, 500))
    with pytest.raises(ModelError) as excinfo:
        asyncio.run(_client(completions).generate([PromptMessage("user", "hi")]))
    assert not isinstance(excinfo.value, RateLimitedError)


def test_empty_content_is_a_model_error():
    completions = FakeCompletions(response=_reply(""))
    with pytest.raises(ModelError):
        asyncio.run(_client(completions).generate([PromptMessage("user", "hi")]))
