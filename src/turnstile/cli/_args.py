"""Common CLI argument registration utilities."""
from __future__ import annotations

import argparse


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    """Add --json flag for JSON output mode."""
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )


def add_definition_arg(parser: argparse.ArgumentParser) -> None:
    """Add the positional machine definition path."""
    parser.add_argument("definition", help="Path to a machine definition (.yaml)")


__all__ = ["add_json_flag", "add_definition_arg"]
