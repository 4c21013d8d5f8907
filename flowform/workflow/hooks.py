from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable


LOGGER = logging.getLogger(__name__)

HookCallback = Callable[[dict[str, Any]], object]


@dataclass(slots=True)
class HookInvocation:
    event: str
    callback_name: str
    result: object | None


class WorkflowHookRegistry:
    """Editor event hook registry for graph mutations."""

    def __init__(self) -> None:
        self._callbacks: dict[str, list[HookCallback]] = defaultdict(list)

    def register(self, event: str, callback: HookCallback) -> None:
        if event not in DEFAULT_HOOK_EVENTS:
            raise ValueError(f"Unknown hook event '{event}'.")
        self._callbacks[event].append(callback)

    def clear(self, event: str | None = None) -> None:
        if event is None:
            self._callbacks.clear()
            return
        self._callbacks.pop(event, None)

    def callbacks_for(self, event: str) -> list[HookCallback]:
        return list(self._callbacks.get(event, []))

    def emit(self, event: str, context: dict[str, Any]) -> list[HookInvocation]:
        invocations: list[HookInvocation] = []
        for callback in self._callbacks.get(event, []):
            callback_name = getattr(callback, "__name__", callback.__class__.__name__)
            try:
                result = callback(context)
            except Exception:  # noqa: BLE001
                # Hooks should never break a graph mutation.
                LOGGER.debug("Hook '%s' for event '%s' failed", callback_name, event, exc_info=True)
                continue
            invocations.append(
                HookInvocation(
                    event=event,
                    callback_name=str(callback_name),
                    result=result,
                )
            )
        return invocations


DEFAULT_HOOK_EVENTS = {
    "block_added",
    "block_removed",
    "blocks_reordered",
    "connections_changed",
    "orphan_conflict",
}
