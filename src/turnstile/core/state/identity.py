"""State and event identities with wildcard support.

An :class:`Identity` is either a concrete value or the wildcard :data:`ANY`.
Two levels of equality are used throughout the engine:

- strict equality (``==`` / hashing) is used for table keys: ``ANY`` equals
  only ``ANY`` and a concrete value never equals ``ANY``;
- :func:`matches` applies wildcard semantics and is used during resolution.

Keeping the two apart is what lets ``ANY``-keyed routes live in the same
dictionaries as concrete ones without swallowing exact lookups.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, Hashable, Optional, TypeVar, Union

if TYPE_CHECKING:
    from .transition import Transition

T = TypeVar("T", bound=Hashable)


@dataclass(frozen=True)
class Identity(Generic[T]):
    """A concrete state/event value, or the wildcard."""

    value: Optional[T] = None
    is_any: bool = False

    @classmethod
    def of(cls, value: T) -> "Identity[T]":
        return cls(value=value)

    def accepts(self, value: Any) -> bool:
        """Return True when the raw ``value`` matches this identity as a pattern."""
        return self.is_any or self.value == value

    def __rshift__(self, other: Any) -> "Transition":
        from .transition import Transition, TransitionChain

        if isinstance(other, (Transition, TransitionChain)):
            return NotImplemented
        return Transition.of(self, other)

    def __rrshift__(self, other: Any) -> "Transition":
        from .transition import Transition

        return Transition.of(other, self)

    def __repr__(self) -> str:
        if self.is_any:
            return "ANY"
        return f"Identity({self.value!r})"

    def __str__(self) -> str:
        return "*" if self.is_any else str(self.value)


ANY: Identity[Any] = Identity(is_any=True)


def wrap(value: Union[T, Identity[T]]) -> Identity[T]:
    """Wrap a raw value; identities pass through unchanged."""
    if isinstance(value, Identity):
        return value
    return Identity.of(value)


def matches(candidate: Identity[T], pattern: Identity[T]) -> bool:
    """Wildcard-aware match: ``pattern`` is ANY, or both are concrete and equal."""
    if pattern.is_any:
        return True
    return not candidate.is_any and candidate.value == pattern.value


__all__ = ["Identity", "ANY", "wrap", "matches"]
