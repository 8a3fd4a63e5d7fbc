"""
The ai-hooks runtime engine.

Holds the resolved hook set, dispatches events to the matching chain and
applies the configured fail mode when a chain crashes.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass
from typing import Any, Iterable

from .config import Config, ConfigSettings, LOG_LEVELS, resolve_config
from .events import HookEvent, HookEventType, is_before_event
from .hooks import HookContext, HookDefinition, HookPhase, HookResult, ToolInfo
from .hooks.chain import execute_chain

logger = logging.getLogger("ai-hooks.engine")

_LEVEL_RANK = {name: rank for rank, name in enumerate(LOG_LEVELS)}
_STDLIB_LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


@dataclass(frozen=True)
class BlockVerdict:
    """Answer to "is this event blocked?"."""
    blocked: bool
    reason: str | None = None


class HookEngine:
    """Dispatch events to hook chains.

    Hooks are indexed by event type at construction time and treated as
    read-only afterwards, so concurrent ``emit`` calls need no locking.
    """

    def __init__(self, config: Config | None = None) -> None:
        self._hooks: dict[HookEventType, list[HookDefinition]] = {}

        settings = None
        if config is not None:
            config = resolve_config(config)
            settings = config.settings

        self._settings = dataclasses.replace(settings) if settings else ConfigSettings()
        if self._settings.cwd is None:
            self._settings.cwd = os.getcwd()

        if config is not None:
            self.register_all(config.hooks)

    @property
    def settings(self) -> ConfigSettings:
        """A copy of the effective settings."""
        return dataclasses.replace(self._settings)

    def register(self, hook: HookDefinition) -> None:
        """Register a hook for each of its event types."""
        for event_type in hook.events:
            self._hooks.setdefault(event_type, []).append(hook)
        self._log("debug", "Registered hook %s for %s", hook.id,
                  ", ".join(e.value for e in hook.events))

    def register_all(self, hooks: Iterable[HookDefinition]) -> None:
        for hook in hooks:
            self.register(hook)

    def unregister(self, hook_id: str) -> None:
        """Remove a hook by id from every event type."""
        for event_type in list(self._hooks):
            remaining = [h for h in self._hooks[event_type] if h.id != hook_id]
            if remaining:
                self._hooks[event_type] = remaining
            else:
                del self._hooks[event_type]

    def get_hooks(self, event_type: HookEventType | str | None = None) -> list[HookDefinition]:
        """Return registered hooks, optionally for one event type only."""
        if event_type is not None:
            return list(self._hooks.get(HookEventType(event_type), []))

        seen: set[str] = set()
        hooks = []
        for registered in self._hooks.values():
            for hook in registered:
                if hook.id not in seen:
                    seen.add(hook.id)
                    hooks.append(hook)
        return hooks

    async def emit(self, event: HookEvent, tool: ToolInfo) -> list[HookResult]:
        """Run the chain for ``event`` and return its results.

        Before events may produce blocking results; after events only
        observations. If the chain raises, fail-open returns no results
        and fail-closed returns a single blocking result.
        """
        phase = HookPhase.BEFORE if is_before_event(event) else HookPhase.AFTER
        hooks = [h for h in self._hooks.get(event.type, []) if h.phase is phase]
        if not hooks:
            return []

        ctx = HookContext(event=event, tool=tool, cwd=self._settings.cwd)

        try:
            return await execute_chain(hooks, ctx, self._settings.hook_timeout)
        except Exception as e:
            if self._settings.fail_mode == "open":
                self._log("error", "Hook chain error (fail-open): %s", e, exc_info=True)
                return []
            self._log("error", "Hook chain error (fail-closed): %s", e, exc_info=True)
            return [HookResult(blocked=True, reason=f"Hook chain error (fail-closed): {e}")]

    async def is_blocked(self, event: HookEvent, tool: ToolInfo) -> BlockVerdict:
        """Return whether any before hook blocked ``event``."""
        if not is_before_event(event):
            return BlockVerdict(blocked=False)

        results = await self.emit(event, tool)
        for result in results:
            if result.blocked:
                return BlockVerdict(blocked=True, reason=result.reason)
        return BlockVerdict(blocked=False)

    def _log(self, level: str, msg: str, *args: Any, exc_info: bool = False) -> None:
        """Log through the engine logger if ``settings.log_level`` allows it."""
        if _LEVEL_RANK[level] > _LEVEL_RANK[self._settings.log_level]:
            return
        logger.log(_STDLIB_LEVELS[level], msg, *args, exc_info=exc_info)


def apply_mutations(event: HookEvent, results: Iterable[HookResult]) -> HookEvent:
    """Return a copy of ``event`` with every result's ``mutated`` fields applied.

    Mutations are applied in result order, so later hooks win.

    Raises:
        ValueError: a mutation names a field the event does not have.
    """
    names = {f.name for f in dataclasses.fields(event)}
    for result in results:
        if not result.mutated:
            continue
        unknown = sorted(set(result.mutated) - names)
        if unknown:
            raise ValueError(
                f"Cannot mutate {event.type.value} event fields: {', '.join(unknown)}"
            )
        event = dataclasses.replace(event, **result.mutated)
    return event
