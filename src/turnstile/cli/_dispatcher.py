"""
Auto-discovery CLI dispatcher for Turnstile.

Every module under ``turnstile.cli.commands`` that does not start with an
underscore becomes a subcommand. A command module exposes:

- ``SUMMARY``: one-line help text
- ``register_args(parser)``: adds its arguments
- ``main(args) -> int``: runs it and returns the exit code
"""
from __future__ import annotations

import argparse
import importlib
import logging
import sys
from functools import lru_cache
from pathlib import Path
from typing import Any

from turnstile.core.exceptions import TurnstileError
from turnstile.core.stdlib_logging import configure_logging

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@lru_cache(maxsize=1)
def discover_commands() -> dict[str, dict[str, Any]]:
    """Import every command module under cli/commands."""
    commands_dir = Path(__file__).parent / "commands"
    commands: dict[str, dict[str, Any]] = {}

    for item in sorted(commands_dir.glob("*.py")):
        if item.name.startswith("_"):
            continue
        cmd_name = item.stem
        module = importlib.import_module(f"turnstile.cli.commands.{cmd_name}")
        commands[cmd_name] = {
            "module": module,
            "summary": getattr(module, "SUMMARY", cmd_name),
            "register_args": getattr(module, "register_args", None),
            "main": getattr(module, "main", None),
        }
    return commands


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with every discovered command."""
    parser = argparse.ArgumentParser(
        prog="turnstile",
        description="Turnstile - validate, document and simulate state machine definitions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        type=str.upper,
        help="Log engine activity to stderr at this level (default: from configuration)",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )
    for cmd_name, cmd_info in discover_commands().items():
        primary_name = cmd_name.replace("_", "-")
        aliases = [cmd_name] if primary_name != cmd_name else []
        cmd_parser = subparsers.add_parser(primary_name, aliases=aliases, help=cmd_info["summary"])
        if cmd_info["register_args"]:
            cmd_info["register_args"](cmd_parser)
        if cmd_info["main"]:
            cmd_parser.set_defaults(_func=cmd_info["main"])

    return parser


def _get_version() -> str:
    from turnstile import __version__

    return __version__


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the Turnstile CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command or not getattr(args, "_func", None):
        parser.print_help()
        return 0

    try:
        if args.log_level:
            configure_logging(level=args.log_level)
        return int(args._func(args) or 0)
    except TurnstileError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
