"""Routes, route sugar and route chains."""
import pytest

from turnstile.core.exceptions import ChainConfigurationError
from turnstile.core.state import (
    ANY,
    Route,
    RouteChain,
    TransitionContext,
    chain,
    route_between,
    route_from_any_of,
    route_to_any_of,
    transition,
)
from turnstile.core.state.route import as_route, as_route_chain


def ctx(from_state, to_state, payload=None):
    return TransitionContext(None, from_state, to_state, payload)


def test_unguarded_route_always_passes():
    assert Route(transition("a", "b")).passes(ctx("a", "b"))


def test_guard_decides():
    route = Route(transition("a", "b"), lambda c: c.payload == "ok")
    assert route.passes(ctx("a", "b", "ok"))
    assert not route.passes(ctx("a", "b", "nope"))


def test_as_route_applies_guard_only_to_bare_transitions():
    guard = lambda c: False
    existing = Route(transition("a", "b"))
    assert as_route(existing, guard) is existing
    assert as_route(transition("a", "b"), guard).guard is guard
    with pytest.raises(TypeError):
        as_route("a")


def test_route_from_any_of_is_wildcard_source_with_membership_guard():
    route = route_from_any_of(["a", "b"], "c")
    assert route.transition == (ANY >> "c")
    assert route.passes(ctx("a", "c"))
    assert route.passes(ctx("b", "c"))
    assert not route.passes(ctx("x", "c"))


def test_route_to_any_of_is_wildcard_destination_with_membership_guard():
    route = route_to_any_of("a", ["b", "c"])
    assert route.transition == ("a" >> ANY)
    assert route.passes(ctx("a", "c"))
    assert not route.passes(ctx("a", "d"))


def test_route_between_checks_both_sides():
    route = route_between(["a", "b"], ["c", "d"])
    assert route.transition == (ANY >> ANY)
    assert route.passes(ctx("b", "d"))
    assert not route.passes(ctx("b", "a"))
    assert not route.passes(ctx("x", "c"))


class TestRouteChain:
    def test_from_chain_shares_guard(self):
        guard = lambda c: True
        rc = RouteChain.from_chain(chain("a", "b", "c"), guard)
        assert len(rc) == 2
        assert [r.transition for r in rc] == [transition("a", "b"), transition("b", "c")]
        assert all(r.guard is guard for r in rc)
        assert rc.first.transition == transition("a", "b")
        assert rc.last.transition == transition("b", "c")

    def test_empty_chain_is_rejected(self):
        with pytest.raises(ChainConfigurationError):
            RouteChain(())
        with pytest.raises(ChainConfigurationError):
            RouteChain.from_routes([])

    def test_single_route_chain_is_allowed(self):
        rc = as_route_chain(transition("a", "b"))
        assert len(rc) == 1
        assert rc.first is rc.last

    def test_as_route_chain_normalizes(self):
        rc = RouteChain.from_routes([transition("a", "b")])
        assert as_route_chain(rc) is rc
        assert len(as_route_chain(chain("a", "b", "c"))) == 2
        assert str(as_route_chain(chain("a", "b", "c"))) == "[a => b, b => c]"
