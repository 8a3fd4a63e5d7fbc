"""Named hooks and presets available to declarative configs."""

from __future__ import annotations

import logging

from ..config import Config
from . import HookDefinition

logger = logging.getLogger("ai-hooks.hooks")


class HookRegistry:
    """Lookup table of hooks by id and presets by name.

    Built once at startup and passed to the loader; nothing registers
    itself at import time.
    """

    def __init__(self) -> None:
        self._hooks: dict[str, HookDefinition] = {}
        self._presets: dict[str, Config] = {}

    def add(self, hook: HookDefinition) -> None:
        """Register a hook under its id."""
        if hook.id in self._hooks:
            raise ValueError(f"Hook already registered: {hook.id}")
        self._hooks[hook.id] = hook
        logger.debug("Registered hook: %s", hook.id)

    def get(self, hook_id: str) -> HookDefinition:
        try:
            return self._hooks[hook_id]
        except KeyError:
            raise KeyError(f"Unknown hook: {hook_id}") from None

    def add_preset(self, name: str, config: Config) -> None:
        """Register a preset config under ``name``."""
        if name in self._presets:
            raise ValueError(f"Preset already registered: {name}")
        self._presets[name] = config
        logger.debug("Registered preset: %s (%d hooks)", name, len(config.hooks))

    def preset(self, name: str) -> Config:
        try:
            return self._presets[name]
        except KeyError:
            raise KeyError(f"Unknown preset: {name}") from None

    def hook_ids(self) -> list[str]:
        return list(self._hooks)

    def preset_names(self) -> list[str]:
        return list(self._presets)


def default_registry() -> HookRegistry:
    """Return a new registry holding the built-in hooks and ``builtin`` preset."""
    from .builtin import BUILTIN_HOOKS

    registry = HookRegistry()
    for hook in BUILTIN_HOOKS:
        registry.add(hook)
    registry.add_preset("builtin", Config(hooks=list(BUILTIN_HOOKS)))
    return registry
