"""Markdown routing reports rendered from definitions."""
from __future__ import annotations

from typing import Any, Dict, List

from jinja2 import Environment, StrictUndefined

from turnstile.data import read_text

from .definition import WILDCARD, definition_states

TEMPLATE_FILE = "ROUTING.md.j2"


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(_cell(v) for v in value)
    return "any" if value == WILDCARD else str(value)


def _report_context(definition: Dict[str, Any]) -> Dict[str, Any]:
    routes: List[Dict[str, str]] = []
    for spec in definition.get("routes") or []:
        routes.append(
            {
                "event": _cell(spec.get("event")),
                "source": _cell(spec["from"]),
                "target": _cell(spec["to"]),
                "guard": spec.get("guard") or "",
                "on_enter": spec.get("on_enter") or "",
            }
        )
    chains = [
        {
            "states": [_cell(s) for s in spec["states"]],
            "guard": spec.get("guard") or "",
            "on_complete": spec.get("on_complete") or "",
            "on_break": spec.get("on_break") or "",
        }
        for spec in definition.get("chains") or []
    ]
    return {
        "name": definition["name"],
        "description": definition.get("description", ""),
        "initial": _cell(definition["initial"]),
        "states": [_cell(s) for s in definition_states(definition)],
        "routes": routes,
        "chains": chains,
        "error_actions": list(definition.get("error_actions") or []),
    }


def render_definition(definition: Dict[str, Any]) -> str:
    """Render ``definition`` (already validated) as a Markdown document."""
    # Control blocks sit on their own lines in the template.
    env = Environment(trim_blocks=True, lstrip_blocks=True, undefined=StrictUndefined)
    template = env.from_string(read_text("templates", TEMPLATE_FILE))
    return template.render(**_report_context(definition)).rstrip() + "\n"


__all__ = ["render_definition"]
