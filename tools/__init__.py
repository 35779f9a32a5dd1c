"""Register the built-in action handlers with the shared registry."""

from __future__ import annotations

from core.task_executor import ActionRegistry
from tools import web_search


def load_search_tools(registry: ActionRegistry) -> None:
    # One handler per search kind, smart_search included
    for kind, handler in web_search.HANDLERS.items():
        registry.register(kind, handler)
