"""Hook chain executor with priority ordering, veto and timeouts."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Sequence

from . import (
    Block,
    Continue,
    HookContext,
    HookDefinition,
    HookPhase,
    HookResult,
    Observe,
)

logger = logging.getLogger("ai-hooks.hooks")


class HookTimeoutError(Exception):
    """A hook did not finish within the configured timeout.

    Used to describe the condition; the chain records it as a
    non-blocking result instead of raising it.
    """

    def __init__(self, hook_id: str, timeout: int) -> None:
        self.hook_id = hook_id
        self.timeout = timeout
        super().__init__(f"hook {hook_id} timed out after {timeout}ms")


class _HandlerTimeout(Exception):
    """Carries a ``TimeoutError`` raised by a handler past the chain's timer."""

    def __init__(self, error: BaseException) -> None:
        self.error = error
        super().__init__(str(error))


async def execute_chain(
    hooks: Sequence[HookDefinition],
    ctx: HookContext,
    timeout: int,
) -> list[HookResult]:
    """Run ``hooks`` against ``ctx`` and return the accumulated results.

    Hooks run one at a time in ascending priority; equal priorities keep
    their list order. Each hook either hands control on (``await next()``
    or a :class:`Continue`/:class:`Observe` outcome) or stops the chain.
    Once any result is blocking, the remaining "before" hooks are skipped.

    A hook that exceeds ``timeout`` milliseconds is cancelled and a
    non-blocking diagnostic result is recorded; the chain then moves on.
    Any other exception raised by a hook propagates to the caller.
    """
    if not hooks:
        return ctx.results

    ordered = sorted(hooks, key=lambda h: h.priority)
    index = 0

    async def advance() -> None:
        nonlocal index
        while index < len(ordered):
            hook = ordered[index]
            index += 1

            if not hook.enabled:
                logger.debug("Skipping disabled hook %s", hook.id)
                continue

            if hook.filter is not None and not hook.filter(ctx.event):
                logger.debug("Hook %s filtered out %s", hook.id, ctx.event.type.value)
                continue

            if hook.phase is HookPhase.BEFORE and ctx.is_blocked():
                logger.debug("Chain blocked before %s", hook.id)
                return

            await _run_hook(hook)
            return

    async def _run_hook(hook: HookDefinition) -> None:
        called = False

        async def next_() -> None:
            nonlocal called
            if called:
                return
            called = True
            await advance()

        try:
            outcome = await asyncio.wait_for(
                _invoke(hook, ctx, next_), timeout=timeout / 1000
            )
        except asyncio.TimeoutError:
            err = HookTimeoutError(hook.id, timeout)
            logger.warning("%s", err)
            ctx.results.append(HookResult(blocked=False, reason=str(err)))
            await advance()
            return
        except _HandlerTimeout as e:
            raise e.error from None

        if outcome is None:
            return
        if isinstance(outcome, Block):
            ctx.results.append(HookResult(blocked=True, reason=outcome.reason))
            return
        if isinstance(outcome, Observe):
            ctx.results.append(HookResult(data=outcome.data))
        elif not isinstance(outcome, Continue):
            raise TypeError(
                f"Hook {hook.id} returned {type(outcome).__name__}; "
                "expected Continue, Block, Observe or None"
            )
        await next_()

    await advance()
    return ctx.results


async def _invoke(hook: HookDefinition, ctx: HookContext, next_) -> object:
    # Only the chain's own timer may surface as asyncio.TimeoutError from
    # wait_for; on 3.11+ that is also the builtin TimeoutError handlers raise.
    try:
        outcome = hook.handler(ctx, next_)
        # Sync handlers on hand-built definitions return the outcome directly
        if inspect.isawaitable(outcome):
            outcome = await outcome
    except asyncio.TimeoutError as e:
        raise _HandlerTimeout(e) from e
    return outcome
