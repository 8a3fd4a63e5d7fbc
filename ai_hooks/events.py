"""Universal lifecycle events emitted by AI coding tools.

Every event is a small dataclass tagged with a :class:`HookEventType`.
The tag decides both the field set and whether the event is a
"before" event (the action has not happened yet and can be blocked)
or an "after" event (observe-only).
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, ClassVar, Union


class HookEventType(str, Enum):
    """Event tags shared across all supported tools."""

    # Before events (blockable)
    SESSION_START = "session:start"
    PROMPT_SUBMIT = "prompt:submit"
    TOOL_BEFORE = "tool:before"
    FILE_WRITE = "file:write"
    FILE_EDIT = "file:edit"
    FILE_DELETE = "file:delete"
    SHELL_BEFORE = "shell:before"
    MCP_BEFORE = "mcp:before"

    # After events (observe-only)
    SESSION_END = "session:end"
    PROMPT_RESPONSE = "prompt:response"
    TOOL_AFTER = "tool:after"
    FILE_READ = "file:read"
    SHELL_AFTER = "shell:after"
    MCP_AFTER = "mcp:after"
    NOTIFICATION = "notification"


BEFORE_EVENT_TYPES = frozenset({
    HookEventType.SESSION_START,
    HookEventType.PROMPT_SUBMIT,
    HookEventType.TOOL_BEFORE,
    HookEventType.FILE_WRITE,
    HookEventType.FILE_EDIT,
    HookEventType.FILE_DELETE,
    HookEventType.SHELL_BEFORE,
    HookEventType.MCP_BEFORE,
})


# ── Lifecycle ────────────────────────────────────────────────────


@dataclass
class SessionStartEvent:
    type: ClassVar[HookEventType] = HookEventType.SESSION_START
    tool: str
    version: str
    working_directory: str
    timestamp: float = field(default_factory=time.time)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class SessionEndEvent:
    type: ClassVar[HookEventType] = HookEventType.SESSION_END
    tool: str
    duration: float
    timestamp: float = field(default_factory=time.time)
    metadata: dict[str, Any] = field(default_factory=dict)


# ── User input ───────────────────────────────────────────────────


@dataclass
class PromptSubmitEvent:
    type: ClassVar[HookEventType] = HookEventType.PROMPT_SUBMIT
    prompt: str
    timestamp: float = field(default_factory=time.time)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class PromptResponseEvent:
    type: ClassVar[HookEventType] = HookEventType.PROMPT_RESPONSE
    response: str
    model: str
    tokens: dict[str, int] = field(default_factory=lambda: {"input": 0, "output": 0})
    timestamp: float = field(default_factory=time.time)
    metadata: dict[str, Any] = field(default_factory=dict)


# ── Tool use ─────────────────────────────────────────────────────


@dataclass
class ToolCallEvent:
    type: ClassVar[HookEventType] = HookEventType.TOOL_BEFORE
    tool_name: str
    input: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class ToolResultEvent:
    type: ClassVar[HookEventType] = HookEventType.TOOL_AFTER
    tool_name: str
    input: dict[str, Any] = field(default_factory=dict)
    output: Any = None
    duration: float = 0.0
    timestamp: float = field(default_factory=time.time)
    metadata: dict[str, Any] = field(default_factory=dict)


# ── File operations ──────────────────────────────────────────────


@dataclass
class FileReadEvent:
    type: ClassVar[HookEventType] = HookEventType.FILE_READ
    path: str
    timestamp: float = field(default_factory=time.time)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class FileWriteEvent:
    type: ClassVar[HookEventType] = HookEventType.FILE_WRITE
    path: str
    content: str
    timestamp: float = field(default_factory=time.time)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class FileEditEvent:
    type: ClassVar[HookEventType] = HookEventType.FILE_EDIT
    path: str
    old_content: str
    new_content: str
    timestamp: float = field(default_factory=time.time)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class FileDeleteEvent:
    type: ClassVar[HookEventType] = HookEventType.FILE_DELETE
    path: str
    timestamp: float = field(default_factory=time.time)
    metadata: dict[str, Any] = field(default_factory=dict)


# ── Shell ────────────────────────────────────────────────────────


@dataclass
class ShellBeforeEvent:
    type: ClassVar[HookEventType] = HookEventType.SHELL_BEFORE
    command: str
    cwd: str = ""
    timestamp: float = field(default_factory=time.time)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class ShellAfterEvent:
    type: ClassVar[HookEventType] = HookEventType.SHELL_AFTER
    command: str
    cwd: str = ""
    exit_code: int = 0
    stdout: str = ""
    stderr: str = ""
    duration: float = 0.0
    timestamp: float = field(default_factory=time.time)
    metadata: dict[str, Any] = field(default_factory=dict)


# ── MCP ──────────────────────────────────────────────────────────


@dataclass
class McpCallEvent:
    type: ClassVar[HookEventType] = HookEventType.MCP_BEFORE
    server: str
    method: str
    params: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class McpResultEvent:
    type: ClassVar[HookEventType] = HookEventType.MCP_AFTER
    server: str
    method: str
    params: dict[str, Any] = field(default_factory=dict)
    result: Any = None
    duration: float = 0.0
    timestamp: float = field(default_factory=time.time)
    metadata: dict[str, Any] = field(default_factory=dict)


# ── Notifications ────────────────────────────────────────────────


@dataclass
class NotificationEvent:
    type: ClassVar[HookEventType] = HookEventType.NOTIFICATION
    message: str
    level: str = "info"  # "info" | "warn" | "error"
    timestamp: float = field(default_factory=time.time)
    metadata: dict[str, Any] = field(default_factory=dict)


HookEvent = Union[
    SessionStartEvent,
    PromptSubmitEvent,
    ToolCallEvent,
    FileWriteEvent,
    FileEditEvent,
    FileDeleteEvent,
    ShellBeforeEvent,
    McpCallEvent,
    SessionEndEvent,
    PromptResponseEvent,
    ToolResultEvent,
    FileReadEvent,
    ShellAfterEvent,
    McpResultEvent,
    NotificationEvent,
]

EVENT_CLASSES: dict[HookEventType, type] = {
    cls.type: cls
    for cls in (
        SessionStartEvent,
        PromptSubmitEvent,
        ToolCallEvent,
        FileWriteEvent,
        FileEditEvent,
        FileDeleteEvent,
        ShellBeforeEvent,
        McpCallEvent,
        SessionEndEvent,
        PromptResponseEvent,
        ToolResultEvent,
        FileReadEvent,
        ShellAfterEvent,
        McpResultEvent,
        NotificationEvent,
    )
}


def is_before_event(event: HookEvent) -> bool:
    """Return True if ``event`` happens before the action and can block it."""
    return event.type in BEFORE_EVENT_TYPES


def phase_of(event_type: HookEventType | str) -> str:
    """Return ``"before"`` or ``"after"`` for an event tag."""
    return "before" if HookEventType(event_type) in BEFORE_EVENT_TYPES else "after"


def event_to_dict(event: HookEvent) -> dict[str, Any]:
    """Serialize an event to a plain dict with its ``type`` tag."""
    data: dict[str, Any] = {"type": event.type.value}
    for f in fields(event):
        data[f.name] = getattr(event, f.name)
    return data


def event_from_dict(data: dict[str, Any]) -> HookEvent:
    """Rebuild an event from a dict produced by :func:`event_to_dict`.

    Raises:
        ValueError: unknown ``type`` tag, unknown fields, or missing
            required fields.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Event must be a mapping, got {type(data).__name__}")

    tag = data.get("type")
    try:
        event_type = HookEventType(tag)
    except ValueError:
        raise ValueError(f"Unknown event type: {tag!r}") from None

    cls = EVENT_CLASSES[event_type]
    known = {f.name for f in fields(cls)}
    kwargs = {k: v for k, v in data.items() if k != "type"}

    unknown = sorted(set(kwargs) - known)
    if unknown:
        raise ValueError(f"Unknown fields for {event_type.value}: {', '.join(unknown)}")

    try:
        return cls(**kwargs)
    except TypeError as e:
        raise ValueError(f"Invalid {event_type.value} event: {e}") from None
