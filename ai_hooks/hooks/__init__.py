"""Hook model for the ai-hooks engine.

A hook is an async function that receives a :class:`HookContext` and a
``next`` continuation. Hooks run in priority order; a hook passes
control downstream by awaiting ``next()`` or by returning an outcome
(:class:`Continue`, :class:`Block`, :class:`Observe`). A hook that does
neither halts the chain.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

from ..events import HookEvent, HookEventType, phase_of

DEFAULT_PRIORITY = 100


class HookPhase(str, Enum):
    """When a hook runs relative to the action."""

    BEFORE = "before"  # Can block
    AFTER = "after"  # Observe only


class HookDefinitionError(ValueError):
    """A hook definition is structurally invalid."""


@dataclass(frozen=True)
class ToolInfo:
    """The AI tool that emitted an event."""

    name: str
    version: str = ""


@dataclass
class HookResult:
    """One entry in the result list of a chain execution."""

    blocked: bool = False
    reason: str | None = None
    mutated: dict[str, Any] | None = None
    data: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"blocked": self.blocked}
        if self.reason is not None:
            out["reason"] = self.reason
        if self.mutated is not None:
            out["mutated"] = self.mutated
        if self.data is not None:
            out["data"] = self.data
        return out


@dataclass
class HookContext:
    """Context shared by every hook in one chain execution.

    ``state`` is a scratch area for hooks to talk to each other and
    ``results`` accumulates what they report. Both belong to this
    execution only.
    """

    event: HookEvent
    tool: ToolInfo
    cwd: str
    state: dict[str, Any] = field(default_factory=dict)
    results: list[HookResult] = field(default_factory=list)
    started_at: float = field(default_factory=time.time)

    def is_blocked(self) -> bool:
        """Return True if any hook so far recorded a block."""
        return any(r.blocked for r in self.results)


# ── Outcomes ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Continue:
    """Pass the event on to the next hook."""


@dataclass(frozen=True)
class Block:
    """Record a block with ``reason`` and stop the chain."""

    reason: str


@dataclass(frozen=True)
class Observe:
    """Attach ``data`` to the results and pass the event on."""

    data: dict[str, Any]


Outcome = Union[Continue, Block, Observe]

NextFn = Callable[[], Awaitable[None]]
HookFn = Callable[[HookContext, NextFn], Awaitable[Optional[Outcome]]]
FilterFn = Callable[[HookEvent], bool]


@dataclass(frozen=True)
class HookDefinition:
    """Immutable metadata plus handler for a single hook.

    ``phase`` must agree with the phase class of every event in
    ``events``; a "before" hook cannot listen to "after" events.
    """

    id: str
    name: str
    events: tuple[HookEventType, ...]
    phase: HookPhase
    handler: HookFn
    priority: int = DEFAULT_PRIORITY
    description: str | None = None
    filter: FilterFn | None = None
    enabled: bool = True

    def __post_init__(self) -> None:
        try:
            events = tuple(HookEventType(e) for e in self.events)
            phase = HookPhase(self.phase)
        except ValueError as e:
            raise HookDefinitionError(f"Hook {self.id}: {e}") from None

        if not events:
            raise HookDefinitionError(f"Hook {self.id} must listen to at least one event")

        # bool is an int subclass; reject it as a priority
        if not isinstance(self.priority, int) or isinstance(self.priority, bool):
            raise HookDefinitionError(
                f"Hook {self.id}: priority must be an integer, got {self.priority!r}"
            )
        if not isinstance(self.enabled, bool):
            raise HookDefinitionError(
                f"Hook {self.id}: enabled must be true or false, got {self.enabled!r}"
            )

        mismatched = [e.value for e in events if phase_of(e) != phase.value]
        if mismatched:
            raise HookDefinitionError(
                f"Hook {self.id} has phase {phase.value!r} but listens to "
                f"{', '.join(mismatched)}"
            )

        # Normalize string inputs on the frozen instance
        object.__setattr__(self, "events", events)
        object.__setattr__(self, "phase", phase)

    def listens_to(self, event_type: HookEventType | str) -> bool:
        return HookEventType(event_type) in self.events
