"""Decide when a local answer is final and when to ask the generative model.

The local cascade always runs first. Direct answers and routed searches are
returned untouched; only the bare fallback (no stage matched and no search was
emitted) is escalated to the model. Model failures never reach the caller:
they degrade to the local result that was already computed.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from core.conversation_memory import ConversationTurn
from core.llm_client import ModelClient, ModelError, PromptMessage, RateLimitedError
from core.local_nlp import LocalNLP
from core.parsers.types import Action, ActionKind, ClassifiedResponse
from core.profile import Profile

logger = logging.getLogger(__name__)

RATE_LIMIT_PREFIX = "⏳ Rate limited, but I got you! "
MODEL_STAGE = "model"

SOURCE_LOCAL = "local"
SOURCE_MODEL = "model"
SOURCE_MODEL_RAW = "model_raw"
SOURCE_RATE_LIMITED = "degraded_rate_limit"
SOURCE_MODEL_ERROR = "degraded_error"

_SCALARS = (str, int, float, bool)


def extract_json_object(raw: str) -> Optional[Dict[str, Any]]:
    """Parse the outermost ``{...}`` span of ``raw``; prose or fences around it are ignored."""

    start = raw.find("{")
    end = raw.rfind("}")
    if start == -1 or end <= start:
        return None
    try:
        data = json.loads(raw[start : end + 1])
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def normalize_commands(commands: Any) -> Tuple[Action, ...]:
    """Turn the model's ``commands`` list into actions, dropping malformed entries."""

    if not isinstance(commands, list):
        return ()
    actions: List[Action] = []
    for entry in commands:
        if not isinstance(entry, Mapping):
            continue
        kind = entry.get("type")
        if not isinstance(kind, str) or not kind.strip():
            kind = ActionKind.SMART_SEARCH
        params = entry.get("params")
        if not isinstance(params, Mapping):
            params = {}
        clean = {str(key): value for key, value in params.items() if isinstance(value, _SCALARS)}
        actions.append(Action(kind=kind.strip(), params=clean))
    return tuple(actions)


class ResponseOrchestrator:
    """Blend the local classifier with an optional generative model."""

    def __init__(
        self,
        nlp: LocalNLP,
        profile: Optional[Profile] = None,
        model_client: Optional[ModelClient] = None,
        *,
        history_window: int = 6,
    ) -> None:
        self._nlp = nlp
        self._profile = profile or nlp.profile
        self._model = model_client
        self._history_window = max(0, history_window)
        self._system_prompt = self._profile.system_prompt()

    @property
    def profile(self) -> Profile:
        return self._profile

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    # WHAT: classify locally, then escalate the bare fallback to the model.
    # WHY: confident local answers and routed searches must never be paraphrased by the model.
    # HOW: check `is_fallback`, build the prompt, call the model and degrade on any failure.
    async def respond(
        self,
        message: str,
        history: Sequence[ConversationTurn] = (),
        profile: Optional[Profile] = None,
    ) -> ClassifiedResponse:
        """Return the local result or, for unmatched input, the model's reply."""
        active_profile = profile or self._profile
        local = self._nlp.classify(message, active_profile)
        if not local.is_fallback or self._model is None:
            return local

        prompt = self._build_messages(message, history, active_profile)
        try:
            raw = await self._model.generate(prompt)
        except RateLimitedError:
            logger.warning("Model rate limited; degrading to local reply")
            return replace(local, text=RATE_LIMIT_PREFIX + local.text, source=SOURCE_RATE_LIMITED)
        except ModelError as exc:
            logger.warning("Model call failed (%s); degrading to local reply", exc)
            return replace(local, source=SOURCE_MODEL_ERROR)
        except Exception as exc:  # noqa: BLE001 - any client failure degrades to the local reply
            logger.warning("Model client raised %s; degrading to local reply", type(exc).__name__)
            return replace(local, source=SOURCE_MODEL_ERROR)

        return self._parse_model_reply(raw)

    def _build_messages(
        self,
        message: str,
        history: Sequence[ConversationTurn],
        profile: Profile,
    ) -> List[PromptMessage]:
        system_prompt = self._system_prompt if profile is self._profile else profile.system_prompt()
        messages = [PromptMessage(role="system", text=system_prompt)]
        if self._history_window:
            for turn in list(history)[-self._history_window :]:
                messages.append(PromptMessage(role=turn.role, text=turn.content))
        messages.append(PromptMessage(role="user", text=message))
        return messages

    @staticmethod
    def _parse_model_reply(raw: str) -> ClassifiedResponse:
        data = extract_json_object(raw)
        if data is not None and isinstance(data.get("response"), str):
            return ClassifiedResponse(
                text=data["response"],
                actions=normalize_commands(data.get("commands")),
                stage=MODEL_STAGE,
                source=SOURCE_MODEL,
            )
        return ClassifiedResponse(text=raw.strip(), stage=MODEL_STAGE, source=SOURCE_MODEL_RAW)


__all__ = [
    "ResponseOrchestrator",
    "extract_json_object",
    "normalize_commands",
    "RATE_LIMIT_PREFIX",
    "SOURCE_LOCAL",
    "SOURCE_MODEL",
    "SOURCE_MODEL_RAW",
    "SOURCE_RATE_LIMITED",
    "SOURCE_MODEL_ERROR",
]
