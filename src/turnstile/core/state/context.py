"""Read-only snapshot handed to guards and handlers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class TransitionContext:
    """A transition request or outcome.

    ``event`` is None for state-driven transitions. For failed transitions
    ``to_state`` equals ``from_state`` (the unchanged current state).
    """

    event: Optional[Any]
    from_state: Any
    to_state: Any
    payload: Any = None


Guard = Callable[[TransitionContext], bool]
Handler = Callable[[TransitionContext], None]


def can_pass(guard: Optional[Guard], context: TransitionContext) -> bool:
    """Unguarded routes always pass."""
    return guard is None or bool(guard(context))


__all__ = ["TransitionContext", "Guard", "Handler", "can_pass"]
