"""Generative model client used when the local cascade has nothing to say.

The orchestrator treats the model as an opaque ``generate`` call: ordered
prompt messages in, raw text out. Failures are reported through two
exception types so callers can tell rate limiting apart from everything else.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

import openai
from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.8
DEFAULT_MAX_TOKENS = 1024


class ModelError(RuntimeError):
    """The model call failed for a reason other than rate limiting."""


class RateLimitedError(ModelError):
    """The provider refused the call because of quota or rate limits."""


@dataclass(frozen=True)
class PromptMessage:
    role: str
    text: str


class ModelClient(Protocol):
    async def generate(self, messages: Sequence[PromptMessage]) -> str:
        ...


class LLMClient:
    """Thin async wrapper around OpenAI chat completions."""

    def __init__(
        self,
        model: str,
        api_key: str | None,
        *,
        timeout: float = 20.0,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        client: Optional[Any] = None,
    ) -> None:
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        if client is not None:
            self._client = client
        else:
            # No retries here; a failed call degrades to the local result.
            self._client = AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    @property
    def model(self) -> str:
        return self._model

    # --- Message conversion ---------------------------------------------------
    @staticmethod
    def _to_openai(messages: Sequence[PromptMessage]) -> List[Dict[str, str]]:
        return [{"role": message.role, "content": message.text} for message in messages]

    async def generate(self, messages: Sequence[PromptMessage]) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=self._to_openai(messages),
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except openai.RateLimitError as exc:
            raise RateLimitedError(str(exc)) from exc
        except openai.APIStatusError as exc:
            if exc.status_code == 429:
                raise RateLimitedError(str(exc)) from exc
            raise ModelError(f"Model call failed with status {exc.status_code}") from exc
        except openai.OpenAIError as exc:
            raise ModelError(f"Model call failed: {exc.__class__.__name__}") from exc

        if not response.choices:
            raise ModelError("Model returned no choices")
        content = getattr(response.choices[0].message, "content", None)
        if not content:
            raise ModelError("Model returned an empty response")
        return content


__all__ = ["LLMClient", "ModelClient", "ModelError", "PromptMessage", "RateLimitedError"]
