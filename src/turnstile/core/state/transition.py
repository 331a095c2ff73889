"""Transitions and transition chains.

``a >> b`` reads as "a to b" whenever one side is an :class:`Identity` or a
:class:`Transition`; for two raw values use :func:`transition`::

    transition("idle", "running")          # idle => running
    ANY >> "stopped"                       # * => stopped
    transition("a", "b") >> "c"            # chain a => b => c
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Hashable, Iterable, List, Tuple, Union

from ..exceptions import ChainConfigurationError
from .identity import ANY, Identity, wrap


@dataclass(frozen=True)
class Transition:
    """An ordered (from, to) pair of identities. Hashable; used as a table key."""

    from_: Identity[Any]
    to: Identity[Any]

    @classmethod
    def of(cls, from_: Union[Hashable, Identity[Any]], to: Union[Hashable, Identity[Any]]) -> "Transition":
        return cls(wrap(from_), wrap(to))

    @property
    def is_concrete(self) -> bool:
        return not (self.from_.is_any or self.to.is_any)

    def accepts(self, from_state: Any, to_state: Any) -> bool:
        """Wildcard-aware check of a concrete (from, to) pair against this pattern."""
        return self.from_.accepts(from_state) and self.to.accepts(to_state)

    def __rshift__(self, other: Any) -> "TransitionChain":
        return TransitionChain((self.from_, self.to)) >> other

    def __rrshift__(self, other: Any) -> "TransitionChain":
        return other >> TransitionChain((self.from_, self.to))

    def __str__(self) -> str:
        return f"{self.from_} => {self.to}"


def transition(from_: Union[Hashable, Identity[Any]], to: Union[Hashable, Identity[Any]]) -> Transition:
    """Build a :class:`Transition` from raw values or identities."""
    return Transition.of(from_, to)


@dataclass(frozen=True)
class TransitionChain:
    """An ordered run of two or more states, read as consecutive transitions."""

    states: Tuple[Identity[Any], ...]

    def __post_init__(self) -> None:
        if len(self.states) < 2:
            raise ChainConfigurationError(
                "A transition chain needs at least two states",
                context={"states": [str(s) for s in self.states]},
            )

    @classmethod
    def of(cls, *states: Union[Hashable, Identity[Any]]) -> "TransitionChain":
        return cls(tuple(wrap(s) for s in states))

    @classmethod
    def from_transition(cls, t: Transition) -> "TransitionChain":
        return cls((t.from_, t.to))

    @property
    def transitions(self) -> List[Transition]:
        return [Transition(a, b) for a, b in zip(self.states, self.states[1:])]

    def __rshift__(self, other: Any) -> "TransitionChain":
        if isinstance(other, TransitionChain):
            return TransitionChain(self.states + other.states)
        if isinstance(other, Transition):
            return TransitionChain(self.states + (other.from_, other.to))
        return TransitionChain(self.states + (wrap(other),))

    def __rrshift__(self, other: Any) -> "TransitionChain":
        return TransitionChain((wrap(other),) + self.states)

    def __str__(self) -> str:
        return " => ".join(str(s) for s in self.states)


def chain(*states: Union[Hashable, Identity[Any]]) -> TransitionChain:
    """Build a :class:`TransitionChain` from raw values or identities."""
    return TransitionChain.of(*states)


def closure(from_state: Any, to_state: Any) -> List[Transition]:
    """Every table key that can authorize the concrete ``from_state -> to_state``."""
    f, t = Identity.of(from_state), Identity.of(to_state)
    return [Transition(f, t), Transition(f, ANY), Transition(ANY, t), Transition(ANY, ANY)]


def as_transitions(items: Iterable[Union[Transition, Tuple[Any, Any]]]) -> List[Transition]:
    """Normalize ``(from, to)`` tuples and transitions into transitions."""
    result: List[Transition] = []
    for item in items:
        if isinstance(item, Transition):
            result.append(item)
        else:
            from_, to = item
            result.append(Transition.of(from_, to))
    return result


__all__ = [
    "Transition",
    "TransitionChain",
    "transition",
    "chain",
    "closure",
    "as_transitions",
]
