"""Load hook configs from YAML.

The format is declarative only: hooks are either picked from a
:class:`~ai_hooks.hooks.registry.HookRegistry` by id (``use:``) or
described as pattern blockers. No module in the config is imported or
executed.
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Any

import yaml

from ..config import (
    Config,
    ConfigNotFoundError,
    ConfigSettings,
    ConfigValidationError,
    find_config_file,
    resolve_config,
)
from . import HookDefinition, HookDefinitionError
from .builtin import pattern_blocker
from .registry import HookRegistry, default_registry

logger = logging.getLogger("ai-hooks.config")

_OVERRIDE_KEYS = ("name", "description", "priority", "enabled")
_USE_KEYS = {"use", *_OVERRIDE_KEYS}
_PATTERN_KEYS = {"id", "events", "field", "patterns", "ignore_case", *_OVERRIDE_KEYS}


def load_config(
    path: str | Path | None = None,
    cwd: str | Path | None = None,
    registry: HookRegistry | None = None,
) -> Config:
    """Load, validate and resolve a YAML config.

    When ``path`` is omitted the file is located with
    :func:`~ai_hooks.config.find_config_file`.

    Raises:
        ConfigNotFoundError: no config file was found.
        ConfigValidationError: the file is not a valid config.
    """
    if path is None:
        found = find_config_file(cwd)
        if found is None:
            raise ConfigNotFoundError(cwd if cwd is not None else Path.cwd())
        config_path = found
    else:
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigNotFoundError(config_path)

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Failed to parse {config_path}: {e}") from e

    logger.debug("Loading hooks config: %s", config_path)
    return parse_config(data, registry=registry)


def parse_config(data: Any, registry: HookRegistry | None = None) -> Config:
    """Build a resolved :class:`Config` from already-parsed YAML data."""
    if registry is None:
        registry = default_registry()

    if not isinstance(data, dict):
        raise ConfigValidationError(
            f"Config must be a mapping, got {type(data).__name__}"
        )

    unknown = sorted(set(data) - {"hooks", "settings", "extends"})
    if unknown:
        raise ConfigValidationError(f"Unknown config keys: {', '.join(unknown)}")

    hook_list = data.get("hooks")
    if not isinstance(hook_list, list):
        raise ConfigValidationError("Config must have a `hooks` list.")

    hooks = [_parse_hook(entry, registry, i) for i, entry in enumerate(hook_list)]

    settings = None
    if data.get("settings") is not None:
        settings = ConfigSettings.from_dict(data["settings"])

    extends = None
    if data.get("extends"):
        extends = [_lookup_preset(name, registry) for name in _as_list(data["extends"], "extends")]

    resolved = resolve_config(Config(hooks=hooks, settings=settings, extends=extends))
    if extends is None:
        return resolved

    # A local hook replaces the preset hook with the same id
    local_ids = {h.id for h in hooks}
    preset_hooks = resolved.hooks[: len(resolved.hooks) - len(hooks)]
    replaced = [h.id for h in preset_hooks if h.id in local_ids]
    if replaced:
        logger.debug("Local hooks replace preset hooks: %s", ", ".join(replaced))
    merged = [h for h in preset_hooks if h.id not in local_ids] + hooks
    return dataclasses.replace(resolved, hooks=merged)


def _parse_hook(entry: Any, registry: HookRegistry, index: int) -> HookDefinition:
    if not isinstance(entry, dict):
        raise ConfigValidationError(f"hooks[{index}] must be a mapping")

    if "use" in entry:
        _check_keys(entry, _USE_KEYS, index)
        try:
            base = registry.get(entry["use"])
        except KeyError as e:
            raise ConfigValidationError(f"hooks[{index}]: {e.args[0]}") from None
        overrides = {k: entry[k] for k in _OVERRIDE_KEYS if k in entry}
        if not overrides:
            return base
        try:
            return dataclasses.replace(base, **overrides)
        except HookDefinitionError as e:
            raise ConfigValidationError(f"hooks[{index}]: {e}") from None

    _check_keys(entry, _PATTERN_KEYS, index)
    ignore_case = entry.get("ignore_case", False)
    if not isinstance(ignore_case, bool):
        raise ConfigValidationError(
            f"hooks[{index}].ignore_case must be true or false, got {ignore_case!r}"
        )
    missing = [k for k in ("id", "events", "field", "patterns") if k not in entry]
    if missing:
        raise ConfigValidationError(
            f"hooks[{index}] needs either `use` or {', '.join(missing)}"
        )

    try:
        return pattern_blocker(
            entry["id"],
            _as_list(entry["events"], f"hooks[{index}].events"),
            entry["field"],
            _parse_patterns(entry["patterns"], index),
            ignore_case=ignore_case,
            name=entry.get("name"),
            description=entry.get("description"),
            priority=entry.get("priority", 50),
            enabled=entry.get("enabled", True),
        )
    except (HookDefinitionError, ValueError) as e:
        raise ConfigValidationError(f"hooks[{index}]: {e}") from None


def _parse_patterns(raw: Any, index: int) -> list[tuple[str, str]]:
    patterns = []
    for item in _as_list(raw, f"hooks[{index}].patterns"):
        if isinstance(item, str):
            patterns.append((item, item))
        elif isinstance(item, dict) and "pattern" in item:
            patterns.append((item["pattern"], item.get("description", item["pattern"])))
        else:
            raise ConfigValidationError(
                f"hooks[{index}].patterns entries must be strings or have a `pattern` key"
            )
    return patterns


def _lookup_preset(name: Any, registry: HookRegistry) -> Config:
    try:
        return registry.preset(name)
    except KeyError as e:
        raise ConfigValidationError(e.args[0]) from None


def _check_keys(entry: dict, allowed: set[str], index: int) -> None:
    unknown = sorted(set(entry) - allowed)
    if unknown:
        raise ConfigValidationError(f"hooks[{index}] has unknown keys: {', '.join(unknown)}")


def _as_list(value: Any, what: str) -> list:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ConfigValidationError(f"{what} must be a list")
    return value
