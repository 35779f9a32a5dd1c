"""Registry of action handlers with a never-raising ``execute`` entry point.

Handlers receive the action parameters and return an ``ExecutionResult``.
They may be plain callables (run on a worker thread) or coroutine functions.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Protocol, Tuple, Union

from core.parsers.types import Scalar

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionResult:
    success: bool
    output: Optional[str] = None
    attachments: Tuple[str, ...] = field(default_factory=tuple)
    image_url: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> "ExecutionResult":
        return cls(success=False, error=error)


Handler = Callable[[Mapping[str, Scalar]], Union[ExecutionResult, Awaitable[ExecutionResult]]]


class TaskExecutor(Protocol):
    async def execute(self, kind: str, params: Mapping[str, Scalar]) -> ExecutionResult:
        ...


class ActionRegistry:
    """Maps action kinds to handlers."""

    def __init__(self) -> None:
        self._handlers: Dict[str, Handler] = {}

    # WHAT: register a handler under a unique action kind.
    # WHY: the facade only forwards kinds this registry knows about.
    # HOW: reject duplicates and store the callable in `_handlers`.
    def register(self, kind: str, handler: Handler) -> None:
        if kind in self._handlers:
            raise ValueError(f"Action '{kind}' is already registered")
        self._handlers[kind] = handler

    def known_kinds(self) -> Tuple[str, ...]:
        return tuple(self._handlers)

    # WHAT: run one action and report the outcome as an ExecutionResult.
    # WHY: a failing action must not abort the remaining actions or the reply.
    # HOW: await coroutine handlers, push sync ones to a thread, convert exceptions to failures.
    async def execute(self, kind: str, params: Mapping[str, Scalar]) -> ExecutionResult:
        handler = self._handlers.get(kind)
        if handler is None:
            return ExecutionResult.failure(f"Unknown action: {kind}")
        logger.info("Executing action: %s", kind)
        try:
            if inspect.iscoroutinefunction(handler):
                result: Any = await handler(params)
            else:
                result = await asyncio.to_thread(handler, params)
                if inspect.isawaitable(result):
                    result = await result
        except Exception as exc:  # noqa: BLE001 - handlers are third-party code
            logger.exception("Action %s failed", kind)
            return ExecutionResult.failure(f"{kind} failed: {exc.__class__.__name__}")
        if not isinstance(result, ExecutionResult):
            return ExecutionResult.failure(f"{kind} returned an invalid result")
        return result


__all__ = ["ActionRegistry", "ExecutionResult", "Handler", "TaskExecutor"]
