"""Routing tables, transition engines and chain tracking.

Typical use::

    from turnstile.core.state import ANY, StateMachine, transition

    machine = StateMachine("s0")
    machine.add_route(transition("s0", "s1"))
    machine.add_route(ANY >> "s2", handler=lambda ctx: print(ctx.payload))
    machine.try_state("s1")
"""
from __future__ import annotations

from .chain import ChainTracker
from .context import Guard, Handler, TransitionContext
from .disposable import CompositeDisposable, Disposable
from .handlers import HandlerInfo
from .identity import ANY, Identity, matches, wrap
from .keys import KeyGenerator
from .machine import Machine, RouteMapping
from .registries import (
    ActionRegistry,
    GuardRegistry,
    action_registry,
    guard_registry,
    register_action,
    register_guard,
)
from .route import (
    Route,
    RouteChain,
    route_between,
    route_from_any_of,
    route_to_any_of,
)
from .state_machine import StateMachine, StateRouteMapping
from .transition import Transition, TransitionChain, chain, transition

__all__ = [
    "ANY",
    "Identity",
    "wrap",
    "matches",
    "Transition",
    "TransitionChain",
    "transition",
    "chain",
    "Route",
    "RouteChain",
    "route_from_any_of",
    "route_to_any_of",
    "route_between",
    "TransitionContext",
    "Guard",
    "Handler",
    "HandlerInfo",
    "KeyGenerator",
    "Disposable",
    "CompositeDisposable",
    "Machine",
    "RouteMapping",
    "StateMachine",
    "StateRouteMapping",
    "ChainTracker",
    "GuardRegistry",
    "ActionRegistry",
    "guard_registry",
    "action_registry",
    "register_guard",
    "register_action",
]
