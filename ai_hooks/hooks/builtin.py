"""Built-in hooks for common guardrails and auditing."""

from __future__ import annotations

import re
from dataclasses import fields
from typing import Any, Iterable, Sequence

from ..events import EVENT_CLASSES, HookEventType
from . import (
    Block,
    Continue,
    HookContext,
    HookDefinition,
    HookDefinitionError,
    HookResult,
    Observe,
)
from .define import hook

# Ordered: the first matching pattern names the block reason
DANGEROUS_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"rm\s+(-[a-zA-Z]*f[a-zA-Z]*\s+)?/\s*$"), "rm -rf /"),
    (re.compile(r"rm\s+-[a-zA-Z]*f[a-zA-Z]*\s+~/?\s*$"), "rm -rf ~"),
    (re.compile(r"mkfs\."), "filesystem format"),
    (re.compile(r"dd\s+.*of=/dev/[sh]d"), "disk overwrite"),
    (re.compile(r":\(\)\s*\{\s*:\|:&\s*\}\s*;:"), "fork bomb"),
    (re.compile(r">\s*/dev/[sh]d"), "device overwrite"),
    (re.compile(r"chmod\s+(-R\s+)?777\s+/"), "chmod 777 /"),
    # SQL intent is matched regardless of case
    (re.compile(r"DROP\s+DATABASE", re.IGNORECASE), "DROP DATABASE"),
    (re.compile(r"DROP\s+TABLE", re.IGNORECASE), "DROP TABLE"),
    (re.compile(r"TRUNCATE\s+TABLE", re.IGNORECASE), "TRUNCATE TABLE"),
]

SECRET_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (
        re.compile(r"(?:api[_-]?key|apikey)\s*[:=]\s*['\"][a-zA-Z0-9]{20,}['\"]", re.IGNORECASE),
        "API key",
    ),
    (
        re.compile(r"(?:secret|token|password|passwd|pwd)\s*[:=]\s*['\"][^'\"]{8,}['\"]", re.IGNORECASE),
        "Secret/token/password",
    ),
    # Literal credential prefixes are case-sensitive
    (re.compile(r"-----BEGIN (?:RSA |EC |DSA )?PRIVATE KEY-----"), "Private key"),
    (re.compile(r"ghp_[a-zA-Z0-9]{36}"), "GitHub personal access token"),
    (re.compile(r"sk-[a-zA-Z0-9]{20,}"), "OpenAI/Stripe secret key"),
    (re.compile(r"AKIA[0-9A-Z]{16}"), "AWS access key ID"),
    (re.compile(r"xox[bpors]-[a-zA-Z0-9-]{10,}"), "Slack token"),
]

SENSITIVE_FILES = (
    ".env",
    ".env.local",
    ".env.production",
    "credentials.json",
    "service-account.json",
    "id_rsa",
    "id_ed25519",
    ".npmrc",
    ".pypirc",
)


def _first_match(
    patterns: Iterable[tuple[re.Pattern[str], str]], text: str
) -> str | None:
    """Return the description of the first pattern found in ``text``."""
    for pattern, description in patterns:
        if pattern.search(text):
            return description
    return None


async def _block_dangerous_commands(ctx: HookContext, next) -> None:
    found = _first_match(DANGEROUS_PATTERNS, ctx.event.command)
    if found:
        ctx.results.append(
            HookResult(blocked=True, reason=f"Blocked dangerous command: {found}")
        )
        return
    await next()


async def _scan_secrets(ctx: HookContext, next) -> None:
    event = ctx.event
    if event.type is HookEventType.FILE_WRITE:
        content = event.content
    else:
        content = event.new_content

    found = _first_match(SECRET_PATTERNS, content)
    if found:
        ctx.results.append(
            HookResult(
                blocked=True,
                reason=f"Potential secret detected: {found}. Use environment variables instead.",
            )
        )
        return
    await next()


async def _protect_sensitive_files(ctx: HookContext, next) -> None:
    path = ctx.event.path
    if any(path.endswith(name) for name in SENSITIVE_FILES):
        ctx.results.append(
            HookResult(
                blocked=True,
                reason=f"Cannot write to sensitive file: {path}. This file should be managed manually.",
            )
        )
        return
    await next()


async def _audit_shell_commands(ctx: HookContext, next) -> Observe:
    event = ctx.event
    return Observe({
        "audit": {
            "type": "shell",
            "command": event.command,
            "exit_code": event.exit_code,
            "duration": event.duration,
            "timestamp": event.timestamp,
            "tool": ctx.tool.name,
        }
    })


block_dangerous_commands = (
    hook("before", ["shell:before"], _block_dangerous_commands)
    .id("ai-hooks:block-dangerous-commands")
    .name("Block Dangerous Commands")
    .description("Prevents destructive shell commands like rm -rf /, DROP DATABASE, etc.")
    .priority(1)
    .build()
)

scan_secrets = (
    hook("before", ["file:write", "file:edit"], _scan_secrets)
    .id("ai-hooks:scan-secrets")
    .name("Scan for Secrets")
    .description("Prevents hardcoded API keys, tokens, and credentials in file writes.")
    .priority(2)
    .build()
)

protect_sensitive_files = (
    hook("before", ["file:write"], _protect_sensitive_files)
    .id("ai-hooks:protect-sensitive-files")
    .name("Protect Sensitive Files")
    .description("Prevents AI tools from overwriting .env, credentials, and other sensitive files.")
    .priority(3)
    .build()
)

audit_shell_commands = (
    hook("after", ["shell:after"], _audit_shell_commands)
    .id("ai-hooks:audit-shell")
    .name("Audit Shell Commands")
    .description("Records all shell command executions for an audit trail.")
    .priority(999)
    .build()
)

BUILTIN_HOOKS: list[HookDefinition] = [
    block_dangerous_commands,
    scan_secrets,
    protect_sensitive_files,
    audit_shell_commands,
]


def pattern_blocker(
    hook_id: str,
    events: Sequence[HookEventType | str],
    field: str,
    patterns: Sequence[tuple[str, str]],
    *,
    ignore_case: bool = False,
    name: str | None = None,
    description: str | None = None,
    priority: int = 50,
    enabled: bool = True,
) -> HookDefinition:
    """Build a before-hook that blocks when ``field`` matches a pattern.

    ``patterns`` is an ordered list of ``(regex, description)`` pairs;
    the first match wins and its description goes into the reason.
    Every event in ``events`` must have ``field``.
    """
    event_types = [HookEventType(e) for e in events]
    for event_type in event_types:
        names = {f.name for f in fields(EVENT_CLASSES[event_type])}
        if field not in names:
            raise HookDefinitionError(
                f"Hook {hook_id}: {event_type.value} events have no field {field!r}"
            )

    flags = re.IGNORECASE if ignore_case else 0
    try:
        compiled = [(re.compile(p, flags), desc) for p, desc in patterns]
    except re.error as e:
        raise HookDefinitionError(f"Hook {hook_id}: invalid pattern: {e}") from None

    async def handler(ctx: HookContext, next) -> Block | Continue:
        value: Any = getattr(ctx.event, field)
        found = _first_match(compiled, value if isinstance(value, str) else str(value))
        if found:
            return Block(f"Blocked by {hook_id}: {found}")
        return Continue()

    builder = (
        hook("before", event_types, handler)
        .id(hook_id)
        .name(name or hook_id)
        .priority(priority)
        .enabled(enabled)
    )
    if description:
        builder.description(description)
    return builder.build()
