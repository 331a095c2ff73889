"""Turnstile simulate command.

SUMMARY: Drive a machine definition through a sequence of requests.

Each STEP is a target state (``try_state``), or an event with ``--events``
(``try_event``). Steps are parsed as YAML scalars so ``1`` and ``true`` match
integer and boolean states.
"""
from __future__ import annotations

import argparse
from typing import Any, Dict, List

import yaml

from turnstile.cli import OutputFormatter, add_definition_arg, add_json_flag
from turnstile.core.definition import build_machine, load_definition
from turnstile.core.exceptions import DefinitionError

SUMMARY = "Simulate transitions against a machine definition"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_definition_arg(parser)
    parser.add_argument("steps", nargs="+", metavar="STEP", help="Target states (or events with --events)")
    parser.add_argument(
        "--events",
        action="store_true",
        help="Treat steps as events instead of target states",
    )
    add_json_flag(parser)


def _parse_step(raw: str) -> Any:
    try:
        value = yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw
    return raw if value is None or isinstance(value, (dict, list)) else value


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        definition = load_definition(args.definition)
    except DefinitionError as exc:
        formatter.error(exc, error_code="invalid_definition")
        return 1

    machine = build_machine(definition)
    initial = machine.state
    steps: List[Dict[str, Any]] = []
    for raw in args.steps:
        request = _parse_step(raw)
        before = machine.state
        ok = machine.try_event(request) if args.events else machine.try_state(request)
        steps.append({"request": request, "from": before, "to": machine.state, "ok": ok})

    all_ok = all(step["ok"] for step in steps)
    if formatter.json_mode:
        formatter.json_output(
            {"ok": all_ok, "name": definition["name"], "initial": initial, "steps": steps, "final": machine.state}
        )
    else:
        verb = "event" if args.events else "state"
        for step in steps:
            if step["ok"]:
                formatter.text(f"✓ {step['from']} -> {step['to']} ({verb} {step['request']})")
            else:
                formatter.text(f"✗ {step['from']}: no route ({verb} {step['request']})")
        formatter.text(f"Final state: {machine.state}")
    return 0 if all_ok else 1
