"""Event-driven routing and dispatch engine.

A :class:`Machine` stores routes per event (or per ``ANY`` event), resolves
``try_event`` requests against the current state, mutates the state and
dispatches handlers in priority order. Failed requests leave the state
untouched and dispatch the error handlers instead; failure is reported by
the boolean result, never by an exception.

Example::

    machine = Machine("idle")
    machine.add_routes("start", [transition("idle", "running")])
    machine.add_handler("start", lambda ctx: print(ctx.from_state, "->", ctx.to_state))
    machine.try_event("start")  # True, state is now "running"
"""
from __future__ import annotations

import logging
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Hashable,
    Iterable,
    List,
    Optional,
    TypeVar,
    Union,
)

from turnstile.core.config import default_handler_order

from .context import Guard, Handler, TransitionContext, can_pass
from .disposable import CompositeDisposable, Disposable, weak_disposable
from .handlers import HandlerInfo, dispatch, insert_handler, merge_handlers, remove_handler
from .identity import ANY, Identity, wrap
from .keys import KeyGenerator
from .route import Route, as_route
from .transition import Transition, closure

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=Hashable)
E = TypeVar("E", bound=Hashable)

# (event, from_state, payload) -> preferred destination, or None to decline.
RouteMapping = Callable[[Optional[Any], Any, Any], Optional[Any]]

# Transition -> registration key -> guard (None = always passes)
RouteTable = Dict[Transition, Dict[int, Optional[Guard]]]

_UNSET: Any = object()


class Machine(Generic[S, E]):
    """Event-driven state machine.

    States and events may be any hashable values except None. Pass
    :data:`ANY` wherever an event or state pattern is expected to match
    everything.
    """

    def __init__(self, state: S, setup: Optional[Callable[["Machine[S, E]"], None]] = None) -> None:
        self._state: S = state
        self._keys = KeyGenerator()
        self._default_order = default_handler_order()
        self._routes: Dict[Identity[Any], RouteTable] = {}
        self._route_mappings: Dict[int, RouteMapping] = {}
        self._handlers: Dict[Identity[Any], List[HandlerInfo]] = {}
        self._error_handlers: List[HandlerInfo] = []
        if setup is not None:
            setup(self)

    @property
    def state(self) -> S:
        """The current state. Only a successful transition changes it."""
        return self._state

    def configure(self, setup: Callable[["Machine[S, E]"], None]) -> None:
        """Run ``setup`` against this machine to add routes and handlers."""
        setup(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(state={self._state!r})"

    # ========== Queries ==========

    def has_route(self, event: Union[E, Identity[E]], from_state: S, to_state: S, payload: Any = None) -> bool:
        """Check routes and route mappings for ``from_state -> to_state`` under ``event``.

        A concrete event consults routes keyed by that event or by ``ANY``.
        Passing ``ANY`` asks whether any event at all allows the transition,
        so every event's routes are consulted and mappings see ``None``.
        """
        event_value = None if wrap(event).is_any else wrap(event).value
        return self._has_route(event_value, from_state, to_state, payload)

    def has_transition_route(self, event: Union[E, Identity[E]], t: Transition, payload: Any = None) -> bool:
        """Like :meth:`has_route`, for a concrete transition. Wildcards never match."""
        if not t.is_concrete:
            return False
        return self.has_route(event, t.from_.value, t.to.value, payload)

    def can_try_event(self, event: E, payload: Any = None) -> Optional[S]:
        """Return the state ``event`` would move to from the current state, or None.

        A route whose destination is ``ANY`` keeps the current state.
        """
        current = self._state
        for event_key in (Identity.of(event), ANY):
            table = self._routes.get(event_key)
            if not table:
                continue
            for t, guards in list(table.items()):
                if not t.from_.accepts(current):
                    continue
                to_state = current if t.to.is_any else t.to.value
                context = TransitionContext(event, current, to_state, payload)
                for guard in list(guards.values()):
                    if can_pass(guard, context):
                        return to_state
        mapped = self._resolve_route_mapping(event, current, _UNSET, payload)
        return None if mapped is _UNSET else mapped

    # ========== Transitions ==========

    def try_event(self, event: E, payload: Any = None) -> bool:
        """Trigger ``event``. Returns True if the state changed (or self-looped)."""
        from_state = self._state
        to_state = self.can_try_event(event, payload)
        if to_state is None:
            logger.debug("No route for event %r from %r", event, from_state)
            dispatch(self._error_handlers, TransitionContext(event, from_state, from_state, payload))
            return False

        self._state = to_state
        logger.debug("Event %r moved %r -> %r", event, from_state, to_state)
        infos = merge_handlers(self._handlers.get(Identity.of(event), ()), self._handlers.get(ANY, ()))
        dispatch(infos, TransitionContext(event, from_state, to_state, payload))
        return True

    # ========== Routes ==========

    def add_routes(
        self,
        event: Union[E, Identity[E]],
        routes: Iterable[Union[Route, Transition]],
        guard: Optional[Guard] = None,
        handler: Optional[Handler] = None,
        order: Optional[int] = None,
    ) -> Disposable:
        """Add routes triggered by ``event`` (or by any event when ``ANY``).

        ``guard`` applies to bare transitions only; routes keep their own.
        With ``handler``, also registers it for ``event``.
        """
        event_id = wrap(event)
        disposables: List[Disposable] = [self._add_route(event_id, as_route(r, guard)) for r in routes]
        if handler is not None:
            disposables.append(self.add_handler(event_id, handler, order=order))
        return CompositeDisposable(disposables)

    def _add_route(self, event_id: Identity[Any], route: Route) -> Disposable:
        key = self._keys.next_key()
        self._routes.setdefault(event_id, {}).setdefault(route.transition, {})[key] = route.guard
        logger.debug("Added route %s on event %s (key=%d)", route, event_id, key)
        t = route.transition
        return weak_disposable(self, lambda machine: machine._remove_route(event_id, t, key))

    def _remove_route(self, event_id: Identity[Any], t: Transition, key: int) -> bool:
        table = self._routes.get(event_id)
        if table is None:
            return False
        guards = table.get(t)
        removed = guards is not None and guards.pop(key, _UNSET) is not _UNSET
        if guards is not None and not guards:
            del table[t]
        if not table:
            del self._routes[event_id]
        if removed:
            logger.debug("Removed route %s on event %s (key=%d)", t, event_id, key)
        return removed

    # ========== Route Mappings ==========

    def add_route_mapping(
        self,
        mapping: RouteMapping,
        handler: Optional[Handler] = None,
        order: Optional[int] = None,
    ) -> Disposable:
        """Add a free-form route: ``mapping(event, from_state, payload)`` returns the destination.

        With ``handler``, it runs for event transitions the mapping itself approved.
        """
        key = self._keys.next_key()
        self._route_mappings[key] = mapping
        route_disposable = weak_disposable(self, lambda machine: machine._remove_route_mapping(key))
        if handler is None:
            return route_disposable

        def _mapped_handler(context: TransitionContext) -> None:
            preferred = mapping(context.event, context.from_state, context.payload)
            if preferred is not None and preferred == context.to_state:
                handler(context)

        handler_disposable = self._add_event_handler(ANY, _mapped_handler, order)
        return CompositeDisposable([route_disposable, handler_disposable])

    def _remove_route_mapping(self, key: int) -> bool:
        return self._route_mappings.pop(key, None) is not None

    # ========== Handlers ==========

    def add_handler(
        self,
        event: Union[E, Identity[E]],
        handler: Handler,
        order: Optional[int] = None,
    ) -> Disposable:
        """Run ``handler`` after every successful transition triggered by ``event``."""
        event_id = wrap(event)

        def _event_handler(context: TransitionContext) -> None:
            if context.event is None:
                return
            if event_id.accepts(context.event):
                handler(context)

        return self._add_event_handler(event_id, _event_handler, order)

    def _add_event_handler(self, event_id: Identity[Any], handler: Handler, order: Optional[int]) -> Disposable:
        key = self._keys.next_key()
        info = HandlerInfo(self._resolve_order(order), key, handler)
        insert_handler(self._handlers.setdefault(event_id, []), info)
        return weak_disposable(self, lambda machine: machine._remove_event_handler(event_id, key))

    def _remove_event_handler(self, event_id: Identity[Any], key: int) -> bool:
        infos = self._handlers.get(event_id)
        if infos is None or not remove_handler(infos, key):
            return False
        if not infos:
            del self._handlers[event_id]
        return True

    def add_error_handler(self, handler: Handler, order: Optional[int] = None) -> Disposable:
        """Run ``handler`` after every failed transition request.

        The context's ``to_state`` is the unchanged current state.
        """
        key = self._keys.next_key()
        insert_handler(self._error_handlers, HandlerInfo(self._resolve_order(order), key, handler))
        return weak_disposable(self, lambda machine: remove_handler(machine._error_handlers, key))

    # ========== Internals ==========

    def _resolve_order(self, order: Optional[int]) -> int:
        return self._default_order if order is None else int(order)

    def _route_tables(self, event: Optional[Any]) -> List[RouteTable]:
        if event is None:
            return list(self._routes.values())
        return [
            table
            for event_id, table in self._routes.items()
            if event_id.is_any or event_id.value == event
        ]

    def _has_route(self, event: Optional[Any], from_state: Any, to_state: Any, payload: Any) -> bool:
        if self._has_route_in_tables(event, from_state, to_state, payload):
            return True
        return self._resolve_route_mapping(event, from_state, to_state, payload) is not _UNSET

    def _has_route_in_tables(self, event: Optional[Any], from_state: Any, to_state: Any, payload: Any) -> bool:
        tables = self._route_tables(event)
        if not tables:
            return False
        context = TransitionContext(event, from_state, to_state, payload)
        for t in closure(from_state, to_state):
            for table in tables:
                for guard in list(table.get(t, {}).values()):
                    if can_pass(guard, context):
                        return True
        return False

    def _resolve_route_mapping(self, event: Optional[Any], from_state: Any, to_state: Any, payload: Any) -> Any:
        """First mapping (registration order) that approves; ``_UNSET`` if none.

        With ``to_state`` unset, any non-None preference approves.
        """
        for mapping in list(self._route_mappings.values()):
            preferred = mapping(event, from_state, payload)
            if preferred is None:
                continue
            if to_state is _UNSET or preferred == to_state:
                return preferred
        return _UNSET


__all__ = ["Machine", "RouteMapping"]
