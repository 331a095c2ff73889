"""Sequence detection on top of ordinary transition handlers.

A :class:`ChainTracker` watches one :class:`RouteChain` and fires its
callback when every route of the chain happened back-to-back (success
tracker) or when an armed chain is interrupted (break tracker).

Per dispatch pass the installed handlers run in this order:

1. ``order``: arm handler (first route), then one position handler per route;
2. ``order + watch_offset``: watcher on ``ANY => ANY``;
3. ``order + finish_offset``: finisher on the last route.
"""
from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING, Optional

from turnstile.core.config import chain_offsets

from .context import Handler, TransitionContext
from .disposable import CompositeDisposable
from .identity import ANY
from .route import Route, RouteChain
from .transition import Transition

if TYPE_CHECKING:
    from .state_machine import StateMachine

logger = logging.getLogger(__name__)


class ChainTracker:
    """Counter-based tracker for one chain registration.

    ``matched`` counts chain positions that fired while armed, ``observed``
    counts every transition seen while armed. The chain completes when both
    equal the number of routes and breaks as soon as ``matched`` falls behind.
    """

    def __init__(self, route_chain: RouteChain, handler: Handler, *, on_break: bool = False) -> None:
        self.route_chain = route_chain
        self.handler = handler
        self.on_break = on_break
        self.armed = False
        self.matched = 0
        self.observed = 0
        self._increment_allowed = True

    def __repr__(self) -> str:
        kind = "break" if self.on_break else "complete"
        return (
            f"ChainTracker({self.route_chain}, on={kind}, armed={self.armed}, "
            f"matched={self.matched}, observed={self.observed})"
        )

    def install(self, machine: "StateMachine", order: int) -> CompositeDisposable:
        """Register the tracker's handlers on ``machine``; dispose to uninstall."""
        watch_offset, finish_offset = chain_offsets()
        first, last = self.route_chain.first, self.route_chain.last
        disposables = [machine.add_handler(first.transition, self._arm, order=order)]
        for route in self.route_chain:
            disposables.append(machine.add_handler(route.transition, partial(self._advance, route), order=order))
        disposables.append(machine.add_handler(Transition(ANY, ANY), self._observe, order=order + watch_offset))
        disposables.append(machine.add_handler(last.transition, self._finish, order=order + finish_offset))
        return CompositeDisposable(disposables)

    def _arm(self, context: TransitionContext) -> None:
        if self.armed or not self.route_chain.first.passes(context):
            return
        self.armed = True
        self.matched = 0
        self.observed = 0
        logger.debug("Chain %s armed at %s", self.route_chain, context.from_state)

    def _advance(self, route: Route, context: TransitionContext) -> None:
        if not self._increment_allowed or not self.armed:
            return
        if route.passes(context):
            self.matched += 1
            self._increment_allowed = False

    def _observe(self, context: TransitionContext) -> None:
        self._increment_allowed = True
        if not self.armed:
            return
        self.observed += 1
        if self.matched < self.observed:
            self.armed = False
            logger.debug("Chain %s broken at %s => %s", self.route_chain, context.from_state, context.to_state)
            if self.on_break:
                self.handler(context)

    def _finish(self, context: TransitionContext) -> None:
        if not self.armed or not self.route_chain.last.passes(context):
            return
        expected = len(self.route_chain)
        if self.matched == self.observed == expected:
            self.armed = False
            logger.debug("Chain %s completed at %s", self.route_chain, context.to_state)
            if not self.on_break:
                self.handler(context)


def install_chain(
    machine: "StateMachine",
    route_chain: RouteChain,
    handler: Handler,
    order: int,
    *,
    on_break: bool = False,
) -> CompositeDisposable:
    return ChainTracker(route_chain, handler, on_break=on_break).install(machine, order)


__all__ = ["ChainTracker", "install_chain"]
