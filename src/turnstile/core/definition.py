"""Declarative machine definitions.

A definition is a YAML mapping validated against the bundled JSON Schema
``turnstile/data/schemas/machine.schema.yaml``::

    name: door
    initial: closed
    routes:
      - from: closed
        to: open
        guard: always_allow
        on_enter: log_transition
      - event: lock
        from: closed
        to: locked
    chains:
      - states: [closed, open, closed]
        on_complete: log_transition
    error_actions: [log_transition]

Guard and action names resolve through the registries in
:mod:`turnstile.core.state.registries`, using the definition's ``name`` as
the domain. ``"*"`` stands for any state (or any event).
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from jsonschema import Draft202012Validator

from turnstile.data import read_yaml as read_bundled_yaml

from .exceptions import DefinitionError
from .state.context import Guard, Handler, TransitionContext
from .state.identity import ANY, Identity
from .state.registries import ActionRegistry, GuardRegistry, action_registry, guard_registry
from .state.route import Route, RouteChain, route_between, route_from_any_of, route_to_any_of
from .state.state_machine import StateMachine
from .state.transition import Transition, TransitionChain

logger = logging.getLogger(__name__)

WILDCARD = "*"
SCHEMA_FILE = "machine.schema.yaml"


def load_schema() -> Dict[str, Any]:
    """Return the bundled definition schema."""
    return read_bundled_yaml("schemas", SCHEMA_FILE)


def _schema_errors(data: Any) -> List[str]:
    validator = Draft202012Validator(load_schema())
    errors: List[str] = []
    for error in sorted(validator.iter_errors(data), key=lambda e: str(e.path)):
        if error.path:
            path_str = ".".join(str(p) for p in error.path)
            errors.append(f"{path_str}: {error.message}")
        else:
            errors.append(error.message)
    return errors


def validate_definition(
    data: Any,
    *,
    guards: Optional[GuardRegistry] = None,
    actions: Optional[ActionRegistry] = None,
) -> List[str]:
    """Return error messages for ``data``; an empty list means valid.

    Beyond the schema, checks that ``initial`` is concrete and that every
    guard and action name is registered for the definition's domain.
    """
    errors = _schema_errors(data)
    if errors:
        return errors

    guards = guard_registry if guards is None else guards
    actions = action_registry if actions is None else actions
    domain = data["name"]

    if data["initial"] == WILDCARD:
        errors.append("initial: must be a concrete state, not '*'")

    for idx, route in enumerate(data.get("routes") or []):
        if route.get("guard") and not guards.has(route["guard"], domain):
            errors.append(f"routes.{idx}.guard: unknown guard '{route['guard']}'")
        if route.get("on_enter") and not actions.has(route["on_enter"], domain):
            errors.append(f"routes.{idx}.on_enter: unknown action '{route['on_enter']}'")

    for idx, chain in enumerate(data.get("chains") or []):
        if chain.get("guard") and not guards.has(chain["guard"], domain):
            errors.append(f"chains.{idx}.guard: unknown guard '{chain['guard']}'")
        for key in ("on_complete", "on_break"):
            if chain.get(key) and not actions.has(chain[key], domain):
                errors.append(f"chains.{idx}.{key}: unknown action '{chain[key]}'")

    for idx, name in enumerate(data.get("error_actions") or []):
        if not actions.has(name, domain):
            errors.append(f"error_actions.{idx}: unknown action '{name}'")

    return errors


def load_definition(
    path: Union[str, Path],
    *,
    guards: Optional[GuardRegistry] = None,
    actions: Optional[ActionRegistry] = None,
) -> Dict[str, Any]:
    """Read and validate a definition file. Raises :class:`DefinitionError`."""
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise DefinitionError(f"Cannot read definition {path}: {exc}", context={"path": str(path)}) from exc
    except yaml.YAMLError as exc:
        raise DefinitionError(f"Invalid YAML in {path}: {exc}", context={"path": str(path)}) from exc

    errors = validate_definition(data, guards=guards, actions=actions)
    if errors:
        raise DefinitionError(
            f"Invalid definition {path}:\n" + "\n".join(f"- {e}" for e in errors),
            errors=errors,
            context={"path": str(path)},
        )
    logger.debug("Loaded definition %r from %s", data["name"], path)
    return data


# ========== Building ==========


def _identity(value: Any) -> Union[Identity[Any], Any]:
    return ANY if value == WILDCARD else value


def _both(first: Optional[Guard], second: Optional[Guard]) -> Optional[Guard]:
    if first is None:
        return second
    if second is None:
        return first
    return lambda ctx: first(ctx) and second(ctx)


def _as_list(value: Any) -> Optional[List[Any]]:
    """Lists of two or more states; single-item lists collapse to a scalar."""
    if isinstance(value, list):
        return value if len(value) > 1 else None
    return None


def _scalar(value: Any) -> Any:
    return value[0] if isinstance(value, list) else value


def build_route(spec: Dict[str, Any], guard: Optional[Guard] = None) -> Route:
    """Turn one ``routes`` entry into a :class:`Route`, adding ``guard``."""
    froms, tos = _as_list(spec["from"]), _as_list(spec["to"])
    if froms is not None and tos is not None:
        base = route_between(froms, tos)
    elif froms is not None:
        base = route_from_any_of(froms, _identity(_scalar(spec["to"])))
    elif tos is not None:
        base = route_to_any_of(_identity(_scalar(spec["from"])), tos)
    else:
        base = Route(Transition.of(_identity(_scalar(spec["from"])), _identity(_scalar(spec["to"]))))
    return Route(base.transition, _both(base.guard, guard))


def _only_on(route: Route, action: Handler) -> Handler:
    """Restrict an event handler to transitions ``route`` covers."""

    def _handler(ctx: TransitionContext) -> None:
        if route.transition.accepts(ctx.from_state, ctx.to_state) and route.passes(ctx):
            action(ctx)

    return _handler


def build_machine(
    definition: Dict[str, Any],
    *,
    guards: Optional[GuardRegistry] = None,
    actions: Optional[ActionRegistry] = None,
) -> StateMachine:
    """Create a :class:`StateMachine` in the definition's initial state.

    Chains only observe transitions; the routes they travel must be declared
    under ``routes``.
    """
    guards = guard_registry if guards is None else guards
    actions = action_registry if actions is None else actions
    domain = definition["name"]

    def guard_named(name: Optional[str]) -> Optional[Guard]:
        return guards.require(name, domain) if name else None

    def action_named(name: str) -> Handler:
        return actions.require(name, domain)

    if definition["initial"] == WILDCARD:
        raise DefinitionError("Initial state must be concrete", context={"name": domain})

    machine: StateMachine = StateMachine(definition["initial"])

    for spec in definition.get("routes") or []:
        route = build_route(spec, guard_named(spec.get("guard")))
        on_enter = action_named(spec["on_enter"]) if spec.get("on_enter") else None
        if "event" in spec:
            event = _identity(spec["event"])
            machine.add_routes(event, [route])
            if on_enter is not None:
                machine.add_handler(event, _only_on(route, on_enter))
        else:
            machine.add_route(route, handler=on_enter)

    for spec in definition.get("chains") or []:
        states = TransitionChain.of(*(_identity(s) for s in spec["states"]))
        route_chain = RouteChain.from_chain(states, guard_named(spec.get("guard")))
        if spec.get("on_complete"):
            machine.add_chain_handler(route_chain, action_named(spec["on_complete"]))
        if spec.get("on_break"):
            machine.add_chain_error_handler(route_chain, action_named(spec["on_break"]))

    for name in definition.get("error_actions") or []:
        machine.add_error_handler(action_named(name))

    logger.debug("Built machine %r in state %r", domain, machine.state)
    return machine


def definition_states(definition: Dict[str, Any]) -> List[Any]:
    """Every concrete state the definition mentions, in first-seen order."""
    seen: List[Any] = []

    def _add(value: Any) -> None:
        for item in value if isinstance(value, list) else [value]:
            if item != WILDCARD and item not in seen:
                seen.append(item)

    _add(definition["initial"])
    for spec in definition.get("routes") or []:
        _add(spec["from"])
        _add(spec["to"])
    for spec in definition.get("chains") or []:
        _add(spec["states"])
    return seen


__all__ = [
    "WILDCARD",
    "load_schema",
    "validate_definition",
    "load_definition",
    "build_route",
    "build_machine",
    "definition_states",
]
