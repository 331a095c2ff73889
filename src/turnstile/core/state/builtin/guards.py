"""Built-in guards.

Guards are fail-closed: anything they cannot evaluate counts as a rejection.
"""
from __future__ import annotations

from typing import Dict

from ..context import Guard, TransitionContext


def always_allow(ctx: TransitionContext) -> bool:
    return True


def never_allow(ctx: TransitionContext) -> bool:
    return False


def has_payload(ctx: TransitionContext) -> bool:
    """Pass only when the request carries a payload."""
    return ctx.payload is not None


BUILTIN_GUARDS: Dict[str, Guard] = {
    "always_allow": always_allow,
    "never_allow": never_allow,
    "has_payload": has_payload,
}

__all__ = ["always_allow", "never_allow", "has_payload", "BUILTIN_GUARDS"]
