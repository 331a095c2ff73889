"""Turnstile render command.

SUMMARY: Render a Markdown routing report for a machine definition.
"""
from __future__ import annotations

import argparse
from pathlib import Path

from turnstile.cli import OutputFormatter, add_definition_arg
from turnstile.core.definition import load_definition
from turnstile.core.exceptions import DefinitionError
from turnstile.core.report import render_definition

SUMMARY = "Render a Markdown routing report"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_definition_arg(parser)
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        help="Write the report to this file instead of stdout",
    )


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter()
    try:
        definition = load_definition(args.definition)
    except DefinitionError as exc:
        formatter.error(exc, error_code="invalid_definition")
        return 1

    report = render_definition(definition)
    if not args.output:
        formatter.text(report.rstrip("\n"))
        return 0

    out = Path(args.output)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(report, encoding="utf-8")
    formatter.text(f"✓ Wrote {out}")
    return 0
