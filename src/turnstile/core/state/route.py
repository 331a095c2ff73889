"""Routes (guarded transitions) and route chains.

The ``route_*`` helpers express fan-in/fan-out without enumerating every
pair: ``route_from_any_of(["a", "b"], "c")`` is ``ANY => c`` gated by
membership of the concrete from-state.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Collection, Hashable, Iterable, Optional, Tuple, Union

from ..exceptions import ChainConfigurationError
from .context import Guard, TransitionContext, can_pass
from .identity import ANY, Identity
from .transition import Transition, TransitionChain


@dataclass(frozen=True)
class Route:
    """A transition plus an optional guard."""

    transition: Transition
    guard: Optional[Guard] = None

    def passes(self, context: TransitionContext) -> bool:
        return can_pass(self.guard, context)

    def __str__(self) -> str:
        suffix = " [guarded]" if self.guard is not None else ""
        return f"{self.transition}{suffix}"


def as_route(item: Union[Route, Transition], guard: Optional[Guard] = None) -> Route:
    """Normalize a transition or route; ``guard`` only applies to bare transitions."""
    if isinstance(item, Route):
        return item
    if isinstance(item, Transition):
        return Route(item, guard)
    raise TypeError(f"Expected Route or Transition, got {type(item).__name__}")


def route_from_any_of(froms: Collection[Hashable], to: Union[Hashable, Identity[Any]]) -> Route:
    """``ANY => to`` restricted to the listed from-states."""
    allowed = tuple(froms)
    return Route(Transition.of(ANY, to), lambda ctx: ctx.from_state in allowed)


def route_to_any_of(from_: Union[Hashable, Identity[Any]], tos: Collection[Hashable]) -> Route:
    """``from_ => ANY`` restricted to the listed to-states."""
    allowed = tuple(tos)
    return Route(Transition.of(from_, ANY), lambda ctx: ctx.to_state in allowed)


def route_between(froms: Collection[Hashable], tos: Collection[Hashable]) -> Route:
    """``ANY => ANY`` restricted to every listed from/to combination."""
    allowed_from, allowed_to = tuple(froms), tuple(tos)
    return Route(
        Transition(ANY, ANY),
        lambda ctx: ctx.from_state in allowed_from and ctx.to_state in allowed_to,
    )


@dataclass(frozen=True)
class RouteChain:
    """Consecutive routes watched as one sequence by chain handlers.

    A single-route chain is allowed and behaves like a route plus handler.
    """

    routes: Tuple[Route, ...]

    def __post_init__(self) -> None:
        if not self.routes:
            raise ChainConfigurationError("A route chain needs at least one route")

    @classmethod
    def from_routes(cls, routes: Iterable[Union[Route, Transition]]) -> "RouteChain":
        return cls(tuple(as_route(r) for r in routes))

    @classmethod
    def from_chain(cls, transitions: TransitionChain, guard: Optional[Guard] = None) -> "RouteChain":
        """One route per adjacent pair of ``transitions``, all sharing ``guard``."""
        return cls(tuple(Route(t, guard) for t in transitions.transitions))

    @property
    def first(self) -> Route:
        return self.routes[0]

    @property
    def last(self) -> Route:
        return self.routes[-1]

    def __len__(self) -> int:
        return len(self.routes)

    def __iter__(self):
        return iter(self.routes)

    def __str__(self) -> str:
        return "[" + ", ".join(str(r.transition) for r in self.routes) + "]"


def as_route_chain(
    item: Union[RouteChain, TransitionChain, Route, Transition],
    guard: Optional[Guard] = None,
) -> RouteChain:
    """Normalize anything chain-like; ``guard`` only applies to bare transitions."""
    if isinstance(item, RouteChain):
        return item
    if isinstance(item, TransitionChain):
        return RouteChain.from_chain(item, guard)
    return RouteChain((as_route(item, guard),))


__all__ = [
    "Route",
    "RouteChain",
    "as_route",
    "as_route_chain",
    "route_from_any_of",
    "route_to_any_of",
    "route_between",
]
