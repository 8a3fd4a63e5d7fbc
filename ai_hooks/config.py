"""
Configuration model and resolution for ai-hooks.

A :class:`Config` holds an ordered hook list, optional settings and an
optional list of preset configs to extend. :func:`resolve_config`
flattens presets into a single ordered hook list.

Config file search order (first match wins):
1. $AI_HOOKS_CONFIG (if set)
2. ./ai-hooks.yaml, ./ai-hooks.yml, ./.ai-hooks.yaml
3. $XDG_CONFIG_HOME/ai-hooks/config.yaml (default ~/.config)
"""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .hooks import HookDefinition

logger = logging.getLogger("ai-hooks.config")

CONFIG_FILENAMES = ("ai-hooks.yaml", "ai-hooks.yml", ".ai-hooks.yaml")

LOG_LEVELS = ("silent", "error", "warn", "info", "debug")
FAIL_MODES = ("open", "closed")

DEFAULT_HOOK_TIMEOUT = 5000  # ms


class ConfigError(Exception):
    """Base class for configuration problems."""


class ConfigValidationError(ConfigError):
    """The config is structurally invalid."""


class ConfigNotFoundError(ConfigError):
    """No config source could be located."""

    def __init__(self, search_path: str | Path) -> None:
        self.search_path = str(search_path)
        super().__init__(
            f"No ai-hooks config found. Searched in: {self.search_path}\n"
            "Create an ai-hooks.yaml file or run: ai-hooks init"
        )


# Accepted spellings for settings keys
_SETTINGS_ALIASES = {
    "cwd": "cwd",
    "log_level": "log_level",
    "logLevel": "log_level",
    "hook_timeout": "hook_timeout",
    "hookTimeout": "hook_timeout",
    "fail_mode": "fail_mode",
    "failMode": "fail_mode",
    "telemetry": "telemetry",
}


@dataclass
class ConfigSettings:
    """Global settings for hook execution."""
    cwd: str | None = None
    log_level: str = "warn"
    hook_timeout: int = DEFAULT_HOOK_TIMEOUT  # per-hook timeout in ms
    fail_mode: str = "open"
    telemetry: bool = False

    def __post_init__(self) -> None:
        if self.log_level not in LOG_LEVELS:
            raise ConfigValidationError(
                f"Invalid log_level {self.log_level!r}, expected one of: {', '.join(LOG_LEVELS)}"
            )
        if self.fail_mode not in FAIL_MODES:
            raise ConfigValidationError(
                f"Invalid fail_mode {self.fail_mode!r}, expected 'open' or 'closed'"
            )
        if (
            isinstance(self.hook_timeout, bool)
            or not isinstance(self.hook_timeout, (int, float))
            or self.hook_timeout <= 0
        ):
            raise ConfigValidationError(
                f"hook_timeout must be a positive number of milliseconds, got {self.hook_timeout!r}"
            )

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConfigSettings:
        if not isinstance(data, dict):
            raise ConfigValidationError(f"settings must be a mapping, got {type(data).__name__}")

        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = _SETTINGS_ALIASES.get(key)
            if name is None:
                raise ConfigValidationError(f"Unknown setting: {key}")
            kwargs[name] = value
        return cls(**kwargs)


@dataclass
class Config:
    """Top-level ai-hooks configuration."""
    hooks: list[HookDefinition]
    settings: ConfigSettings | None = None
    extends: list[Config] | None = None  # presets, merged before local hooks


def resolve_config(config: Config) -> Config:
    """Validate ``config`` and flatten its presets.

    Preset hooks come first, in the order the presets are listed, then
    the local hooks. The returned config has ``extends`` cleared. A
    config without presets is returned unchanged.

    Raises:
        ConfigValidationError: ``hooks`` is missing or not a list of
            :class:`HookDefinition`.
    """
    _validate_hooks(config)

    if not config.extends:
        return config

    merged: list[HookDefinition] = []
    for preset in config.extends:
        if not isinstance(preset, Config):
            raise ConfigValidationError(
                f"extends entries must be Config objects, got {type(preset).__name__}"
            )
        merged.extend(resolve_config(preset).hooks)
    merged.extend(config.hooks)

    logger.debug(
        "Resolved %d preset(s) into %d hooks", len(config.extends), len(merged)
    )
    return dataclasses.replace(config, hooks=merged, extends=None)


def _validate_hooks(config: Any) -> None:
    hooks = getattr(config, "hooks", None)
    if not isinstance(hooks, (list, tuple)):
        raise ConfigValidationError(
            "Config must have a `hooks` list. Did you forget to use `define_config()`?"
        )
    for entry in hooks:
        if not isinstance(entry, HookDefinition):
            raise ConfigValidationError(
                f"Config hooks must be HookDefinition objects, got {type(entry).__name__}"
            )


def get_user_config_file() -> Path:
    """Get path to the per-user config file.

    Priority order:
    1. $XDG_CONFIG_HOME/ai-hooks/config.yaml (if set)
    2. ~/.config/ai-hooks/config.yaml (default)
    """
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        base = Path(xdg_config)
    else:
        base = Path.home() / ".config"
    return base / "ai-hooks" / "config.yaml"


def find_config_file(cwd: str | Path | None = None) -> Path | None:
    """Locate the config file to use, or None if there is none."""
    explicit = os.environ.get("AI_HOOKS_CONFIG")
    if explicit:
        path = Path(explicit)
        return path if path.exists() else None

    base = Path(cwd) if cwd is not None else Path.cwd()
    for name in CONFIG_FILENAMES:
        candidate = base / name
        if candidate.exists():
            return candidate

    user_file = get_user_config_file()
    if user_file.exists():
        return user_file

    return None
