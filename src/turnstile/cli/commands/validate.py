"""Turnstile validate command.

SUMMARY: Validate a machine definition against the bundled schema.
"""
from __future__ import annotations

import argparse
from pathlib import Path

import yaml

from turnstile.cli import OutputFormatter, add_definition_arg, add_json_flag
from turnstile.core.definition import validate_definition

SUMMARY = "Validate a machine definition file"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_definition_arg(parser)
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    path = Path(str(args.definition))
    if not path.exists():
        formatter.error(f"File not found: {path}", error_code="not_found")
        return 1

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        formatter.error(exc, f"Invalid YAML in {path}: {exc}", error_code="invalid_yaml")
        return 1

    errors = validate_definition(data)
    if errors:
        if formatter.json_mode:
            formatter.json_output({"ok": False, "path": str(path), "errors": errors})
        else:
            formatter.text(f"✗ {path} is not a valid machine definition:")
            for error in errors:
                formatter.text(f"  - {error}")
        return 1

    formatter.success(
        {"ok": True, "path": str(path), "name": data["name"]},
        f"✓ {path} is a valid machine definition ({data['name']})",
    )
    return 0
