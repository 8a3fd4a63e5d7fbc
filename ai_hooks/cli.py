#!/usr/bin/env python3
"""
ai-hooks - guardrail middleware for AI coding tools.

Checks lifecycle events against the configured hook chain.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

CONFIG_TEMPLATE = """# ai-hooks configuration
#
# Hooks run in priority order (lower first). A "before" hook can block
# the action; "after" hooks only observe.

# Presets are merged before the hooks listed below.
extends:
  - builtin

settings:
  hook_timeout: 5000     # per-hook timeout in ms
  fail_mode: open        # open | closed
  log_level: warn        # silent | error | warn | info | debug

hooks: []
# Reference a registered hook and override its metadata. A local hook
# replaces the preset hook with the same id:
#  - use: ai-hooks:scan-secrets
#    priority: 5
#
# Or block on a pattern:
#  - id: no-force-push
#    events: [shell:before]
#    field: command
#    patterns:
#      - pattern: "git push (-f|--force)"
#        description: force push
"""


def main() -> int:
    parser = argparse.ArgumentParser(
        prog="ai-hooks",
        description="Guardrail middleware for AI coding tools",
    )
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug output")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # init
    init_p = subparsers.add_parser("init", help="Create an ai-hooks.yaml template")
    init_p.add_argument("--dir", help="Directory path (default: cwd)")
    init_p.add_argument("--force", "-f", action="store_true", help="Overwrite existing file")

    # list
    list_p = subparsers.add_parser("list", help="List configured hooks")
    list_p.add_argument("--config", "-c", help="Config file (default: search)")

    # check
    check_p = subparsers.add_parser("check", help="Check whether an event is blocked")
    check_p.add_argument("--config", "-c", help="Config file (default: search)")
    check_p.add_argument("--event", "-e", help="Event JSON (default: read stdin)")
    check_p.add_argument("--tool", default="unknown", help="Name of the emitting tool")
    check_p.add_argument("--tool-version", default="", help="Version of the emitting tool")
    check_p.add_argument("--json", action="store_true", help="Print the verdict as JSON")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(name)s: %(levelname)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    # Dispatch
    if args.command == "init":
        return cmd_init(args)
    elif args.command == "list":
        return cmd_list(args)
    elif args.command == "check":
        return cmd_check(args)
    else:
        parser.print_help()
        return 1


def cmd_init(args: argparse.Namespace) -> int:
    """Handle init command."""
    directory = Path(args.dir) if args.dir else Path.cwd()
    config_file = directory / "ai-hooks.yaml"

    if config_file.exists() and not args.force:
        print(f"Config already exists: {config_file}", file=sys.stderr)
        print("Use 'ai-hooks init --force' to overwrite", file=sys.stderr)
        return 1

    directory.mkdir(parents=True, exist_ok=True)
    config_file.write_text(CONFIG_TEMPLATE, encoding="utf-8")
    print(f"Created: {config_file}")
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """Handle list command."""
    from .config import ConfigError
    from .hooks.loader import load_config

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not config.hooks:
        print("No hooks configured")
        return 0

    for hook in sorted(config.hooks, key=lambda h: h.priority):
        events = ", ".join(e.value for e in hook.events)
        marker = "" if hook.enabled else " (disabled)"
        print(f"  [{hook.priority:>4}] {hook.phase.value:<6} {hook.id}{marker}")
        print(f"         {hook.name} -> {events}")
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Handle check command.

    Exit codes: 0 allowed, 1 usage/config error, 2 blocked.
    """
    from .config import ConfigError
    from .engine import HookEngine
    from .events import event_from_dict
    from .hooks import ToolInfo
    from .hooks.loader import load_config

    raw = args.event if args.event is not None else sys.stdin.read()
    try:
        event = event_from_dict(json.loads(raw))
    except json.JSONDecodeError as e:
        print(f"Error: Invalid event JSON: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    engine = HookEngine(config)
    tool = ToolInfo(name=args.tool, version=args.tool_version)
    verdict = asyncio.run(engine.is_blocked(event, tool))

    if args.json:
        print(json.dumps({"blocked": verdict.blocked, "reason": verdict.reason}))
    elif verdict.blocked:
        print(f"Blocked: {verdict.reason}", file=sys.stderr)

    return 2 if verdict.blocked else 0


if __name__ == "__main__":
    sys.exit(main())
