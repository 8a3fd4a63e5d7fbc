"""ai-hooks: guardrail middleware for AI coding tools.

Lifecycle events (prompts, tool calls, file writes, shell commands, MCP
calls) run through a prioritized chain of hooks that can block, observe
or annotate the action.
"""

from .config import (
    Config,
    ConfigError,
    ConfigNotFoundError,
    ConfigSettings,
    ConfigValidationError,
    find_config_file,
    resolve_config,
)
from .engine import BlockVerdict, HookEngine, apply_mutations
from .events import HookEventType, event_from_dict, event_to_dict, is_before_event
from .hooks import (
    Block,
    Continue,
    HookContext,
    HookDefinition,
    HookDefinitionError,
    HookPhase,
    HookResult,
    Observe,
    ToolInfo,
)
from .hooks.builtin import BUILTIN_HOOKS, pattern_blocker
from .hooks.chain import HookTimeoutError, execute_chain
from .hooks.define import define_config, hook
from .hooks.loader import load_config
from .hooks.registry import HookRegistry, default_registry

__version__ = "0.1.0"

__all__ = [
    "BUILTIN_HOOKS",
    "Block",
    "BlockVerdict",
    "Config",
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigSettings",
    "ConfigValidationError",
    "Continue",
    "HookContext",
    "HookDefinition",
    "HookDefinitionError",
    "HookEngine",
    "HookEventType",
    "HookPhase",
    "HookRegistry",
    "HookResult",
    "HookTimeoutError",
    "Observe",
    "ToolInfo",
    "apply_mutations",
    "default_registry",
    "define_config",
    "event_from_dict",
    "event_to_dict",
    "execute_chain",
    "find_config_file",
    "hook",
    "is_before_event",
    "load_config",
    "pattern_blocker",
    "resolve_config",
]
