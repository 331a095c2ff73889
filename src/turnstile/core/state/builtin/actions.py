"""Built-in actions."""
from __future__ import annotations

import logging
from typing import Dict

from ..context import Handler, TransitionContext

logger = logging.getLogger(__name__)


def log_transition(ctx: TransitionContext) -> None:
    """Log the transition at INFO level."""
    if ctx.event is None:
        logger.info("Transition %s -> %s", ctx.from_state, ctx.to_state)
    else:
        logger.info("Transition %s -> %s on %s", ctx.from_state, ctx.to_state, ctx.event)


BUILTIN_ACTIONS: Dict[str, Handler] = {
    "log_transition": log_transition,
}

__all__ = ["log_transition", "BUILTIN_ACTIONS"]
