"""Fluent construction API for hooks and configs.

Example::

    from ai_hooks.hooks import Block, Continue
    from ai_hooks.hooks.define import define_config, hook

    async def no_force_push(ctx, next):
        if "push --force" in ctx.event.command:
            return Block("force push is not allowed")
        return Continue()

    config = define_config(
        hooks=[
            hook("before", ["shell:before"], no_force_push)
            .id("no-force-push")
            .priority(10)
            .build(),
        ],
    )
"""

from __future__ import annotations

import inspect
import itertools
from typing import Iterable

from ..events import HookEventType
from . import (
    DEFAULT_PRIORITY,
    FilterFn,
    HookDefinition,
    HookDefinitionError,
    HookFn,
    HookPhase,
)

# Distinguishes default ids of hooks built in the same process
_hook_counter = itertools.count(1)


def hook(
    phase: HookPhase | str,
    events: Iterable[HookEventType | str],
    handler: HookFn,
) -> HookBuilder:
    """Start building a hook for ``events`` running in ``phase``."""
    return HookBuilder(phase, events, handler)


class HookBuilder:
    """Collects hook metadata and produces a :class:`HookDefinition`."""

    def __init__(
        self,
        phase: HookPhase | str,
        events: Iterable[HookEventType | str],
        handler: HookFn,
    ) -> None:
        try:
            self._phase = HookPhase(phase)
            self._events = tuple(HookEventType(e) for e in events)
        except ValueError as e:
            raise HookDefinitionError(str(e)) from None

        self._handler = handler
        tags = [e.value for e in self._events]
        self._id = f"hook-{'-'.join(tags)}-{next(_hook_counter)}"
        self._name = f"Hook for {', '.join(tags)}"
        self._description: str | None = None
        self._priority = DEFAULT_PRIORITY
        self._filter: FilterFn | None = None
        self._enabled = True

    def id(self, hook_id: str) -> HookBuilder:
        self._id = hook_id
        return self

    def name(self, name: str) -> HookBuilder:
        self._name = name
        return self

    def description(self, description: str) -> HookBuilder:
        self._description = description
        return self

    def priority(self, priority: int) -> HookBuilder:
        self._priority = priority
        return self

    def filter(self, fn: FilterFn) -> HookBuilder:
        self._filter = fn
        return self

    def enabled(self, enabled: bool) -> HookBuilder:
        self._enabled = enabled
        return self

    def build(self) -> HookDefinition:
        return HookDefinition(
            id=self._id,
            name=self._name,
            events=self._events,
            phase=self._phase,
            handler=_ensure_async(self._handler),
            priority=self._priority,
            description=self._description,
            filter=self._filter,
            enabled=self._enabled,
        )


def _ensure_async(fn: HookFn) -> HookFn:
    """Wrap sync handlers so the chain can always await them.

    Sync handlers cannot await ``next``; they should return an outcome.
    """
    if inspect.iscoroutinefunction(fn):
        return fn

    sync_fn = fn

    async def async_wrapper(ctx, next, _fn=sync_fn):
        return _fn(ctx, next)

    async_wrapper.__name__ = getattr(sync_fn, "__name__", "async_wrapper")
    return async_wrapper


def define_config(hooks, settings=None, extends=None):
    """Build a :class:`~ai_hooks.config.Config` from Python objects.

    ``settings`` may be a :class:`~ai_hooks.config.ConfigSettings` or a
    plain dict.
    """
    from ..config import Config, ConfigSettings

    if isinstance(settings, dict):
        settings = ConfigSettings.from_dict(settings)
    return Config(
        hooks=list(hooks),
        settings=settings,
        extends=list(extends) if extends else None,
    )
