"""State-driven engine with transition-keyed routes and handlers.

:class:`StateMachine` extends :class:`~turnstile.core.state.machine.Machine`
with ``try_state``: a transition requested by destination rather than by
event. Routes and handlers are keyed by :class:`Transition` patterns, and
dispatch collects handlers from the whole wildcard closure of the concrete
``(from, to)`` pair, so ``ANY => to``, ``from => ANY`` and ``ANY => ANY``
handlers run alongside exact ones.

Chains (``a => b => c``) are watched by :class:`ChainTracker` instances that
ride on the same handler lists.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from .chain import install_chain
from .context import Guard, Handler, TransitionContext, can_pass
from .disposable import CompositeDisposable, Disposable, weak_disposable
from .handlers import HandlerInfo, dispatch, insert_handler, merge_handlers, remove_handler
from .identity import ANY, Identity
from .machine import E, Machine, S
from .route import Route, RouteChain, as_route, as_route_chain
from .transition import Transition, TransitionChain, closure

logger = logging.getLogger(__name__)

# (from_state, payload) -> acceptable destinations, or None to decline.
StateRouteMapping = Callable[[Any, Any], Optional[Iterable[Any]]]

ChainLike = Union[RouteChain, TransitionChain, Route, Transition]


class StateMachine(Machine[S, E]):
    """Machine that also accepts direct state requests.

    Example::

        machine = StateMachine("s0")
        machine.add_route(transition("s0", "s1"))
        machine.add_handler(ANY >> "s1", on_enter_s1)
        machine.try_state("s1")
    """

    def __init__(self, state: S, setup: Optional[Callable[["StateMachine[S, E]"], None]] = None) -> None:
        # Own tables exist before ``setup`` runs inside Machine.__init__.
        self._transition_routes: Dict[Transition, Dict[int, Optional[Guard]]] = {}
        self._state_route_mappings: Dict[int, StateRouteMapping] = {}
        self._transition_handlers: Dict[Transition, List[HandlerInfo]] = {}
        super().__init__(state, setup)

    # ========== Queries ==========

    def has_state_route(self, from_state: S, to_state: S, payload: Any = None) -> bool:
        """Check transition routes, state mappings, then event routes under any event."""
        if self._has_transition_route_in_table(from_state, to_state, payload):
            return True
        if self._resolve_state_route_mapping(from_state, to_state, payload):
            return True
        return self._has_route(None, from_state, to_state, payload)

    def has_transition(self, t: Transition, payload: Any = None) -> bool:
        """:meth:`has_state_route` for a concrete transition. Wildcards never match."""
        if not t.is_concrete:
            return False
        return self.has_state_route(t.from_.value, t.to.value, payload)

    def can_try_state(self, to_state: S, payload: Any = None) -> bool:
        return self.has_state_route(self._state, to_state, payload)

    # ========== Transitions ==========

    def try_state(self, to_state: S, payload: Any = None) -> bool:
        """Move to ``to_state`` if some route allows it. Returns the outcome."""
        from_state = self._state
        if not self.can_try_state(to_state, payload):
            logger.debug("No route %r -> %r", from_state, to_state)
            dispatch(self._error_handlers, TransitionContext(None, from_state, from_state, payload))
            return False

        infos = merge_handlers(*(self._transition_handlers.get(t, ()) for t in closure(from_state, to_state)))
        self._state = to_state
        logger.debug("State moved %r -> %r", from_state, to_state)
        dispatch(infos, TransitionContext(None, from_state, to_state, payload))
        return True

    # ========== Routes ==========

    def add_route(
        self,
        item: Union[Route, Transition],
        guard: Optional[Guard] = None,
        handler: Optional[Handler] = None,
        order: Optional[int] = None,
    ) -> Disposable:
        """Allow ``item`` for ``try_state``.

        With ``handler``, also run it on matching transitions whose guard passes.
        """
        route = as_route(item, guard)
        key = self._keys.next_key()
        t = route.transition
        self._transition_routes.setdefault(t, {})[key] = route.guard
        logger.debug("Added route %s (key=%d)", route, key)
        route_disposable = weak_disposable(self, lambda machine: machine._remove_transition_route(t, key))
        if handler is None:
            return route_disposable

        def _route_handler(context: TransitionContext) -> None:
            if route.passes(context):
                handler(context)

        handler_disposable = self._add_transition_handler(t, _route_handler, order)
        return CompositeDisposable([route_disposable, handler_disposable])

    def _remove_transition_route(self, t: Transition, key: int) -> bool:
        guards = self._transition_routes.get(t)
        if guards is None or key not in guards:
            return False
        del guards[key]
        if not guards:
            del self._transition_routes[t]
        logger.debug("Removed route %s (key=%d)", t, key)
        return True

    def add_state_route_mapping(
        self,
        mapping: StateRouteMapping,
        handler: Optional[Handler] = None,
        order: Optional[int] = None,
    ) -> Disposable:
        """Add a free-form state route: ``mapping(from_state, payload)`` lists destinations.

        With ``handler``, it runs for state transitions the mapping approved.
        """
        key = self._keys.next_key()
        self._state_route_mappings[key] = mapping
        route_disposable = weak_disposable(self, lambda machine: machine._state_route_mappings.pop(key, None))
        if handler is None:
            return route_disposable

        def _mapped_handler(context: TransitionContext) -> None:
            if context.event is not None:
                return
            preferred = mapping(context.from_state, context.payload)
            if preferred is not None and context.to_state in preferred:
                handler(context)

        handler_disposable = self._add_transition_handler(Transition(ANY, ANY), _mapped_handler, order)
        return CompositeDisposable([route_disposable, handler_disposable])

    # ========== Handlers ==========

    def add_handler(
        self,
        key: Union[Transition, E, Identity[E]],
        handler: Handler,
        order: Optional[int] = None,
    ) -> Disposable:
        """Transition keys register for ``try_state``; anything else is an event."""
        if isinstance(key, Transition):
            return self._add_transition_handler(key, handler, order)
        return super().add_handler(key, handler, order=order)

    def add_any_handler(self, t: Transition, handler: Handler, order: Optional[int] = None) -> Disposable:
        """Run ``handler`` for state- and event-driven transitions matching ``t``."""
        state_disposable = self._add_transition_handler(t, handler, order)

        def _event_handler(context: TransitionContext) -> None:
            if t.accepts(context.from_state, context.to_state):
                handler(context)

        event_disposable = super().add_handler(ANY, _event_handler, order=order)
        return CompositeDisposable([state_disposable, event_disposable])

    def _add_transition_handler(self, t: Transition, handler: Handler, order: Optional[int]) -> Disposable:
        key = self._keys.next_key()
        info = HandlerInfo(self._resolve_order(order), key, handler)
        insert_handler(self._transition_handlers.setdefault(t, []), info)
        return weak_disposable(self, lambda machine: machine._remove_transition_handler(t, key))

    def _remove_transition_handler(self, t: Transition, key: int) -> bool:
        infos = self._transition_handlers.get(t)
        if infos is None or not remove_handler(infos, key):
            return False
        if not infos:
            del self._transition_handlers[t]
        return True

    # ========== Chains ==========

    def add_route_chain(
        self,
        item: ChainLike,
        guard: Optional[Guard] = None,
        handler: Optional[Handler] = None,
        order: Optional[int] = None,
    ) -> Disposable:
        """Add every route of a chain, plus a completion handler when given."""
        route_chain = as_route_chain(item, guard)
        disposables: List[Disposable] = [self.add_route(route) for route in route_chain]
        if handler is not None:
            disposables.append(self.add_chain_handler(route_chain, handler, order=order))
        return CompositeDisposable(disposables)

    def add_chain_handler(self, item: ChainLike, handler: Handler, order: Optional[int] = None) -> Disposable:
        """Run ``handler`` when the chain's transitions happen back-to-back."""
        return install_chain(self, as_route_chain(item), handler, self._resolve_order(order))

    def add_chain_error_handler(self, item: ChainLike, handler: Handler, order: Optional[int] = None) -> Disposable:
        """Run ``handler`` when a started chain is interrupted."""
        return install_chain(self, as_route_chain(item), handler, self._resolve_order(order), on_break=True)

    # ========== Internals ==========

    def _has_transition_route_in_table(self, from_state: Any, to_state: Any, payload: Any) -> bool:
        if not self._transition_routes:
            return False
        context = TransitionContext(None, from_state, to_state, payload)
        for t in closure(from_state, to_state):
            for guard in list(self._transition_routes.get(t, {}).values()):
                if can_pass(guard, context):
                    return True
        return False

    def _resolve_state_route_mapping(self, from_state: Any, to_state: Any, payload: Any) -> bool:
        """The first mapping with an opinion decides."""
        for mapping in list(self._state_route_mappings.values()):
            preferred = mapping(from_state, payload)
            if preferred is not None:
                return to_state in preferred
        return False


__all__ = ["StateMachine", "StateRouteMapping"]
