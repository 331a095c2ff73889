"""Revocation handles."""
import gc
import weakref

from turnstile.core.state import ANY, CompositeDisposable, Disposable, Machine, StateMachine, chain, transition
from turnstile.core.state.disposable import weak_disposable


def test_dispose_runs_action_once():
    calls = []
    d = Disposable(lambda: calls.append(1))
    assert not d.disposed
    d.dispose()
    d()
    assert d.disposed
    assert calls == [1]


def test_context_manager_disposes_on_exit():
    calls = []
    with Disposable(lambda: calls.append(1)) as d:
        assert not d.disposed
    assert calls == [1]


def test_composite_disposes_children_in_order():
    calls = []
    composite = CompositeDisposable([Disposable(lambda: calls.append("a")), Disposable(lambda: calls.append("b"))])
    composite.dispose()
    composite.dispose()
    assert calls == ["a", "b"]


def test_weak_disposable_does_not_keep_owner_alive():
    class Owner:
        removed = False

    owner = Owner()
    ref = weakref.ref(owner)
    handle = weak_disposable(owner, lambda o: setattr(o, "removed", True))
    del owner
    gc.collect()
    assert ref() is None
    handle.dispose()
    assert handle.disposed


def test_live_handles_do_not_keep_the_machine_alive(recorder):
    machine = StateMachine("a")
    ref = weakref.ref(machine)
    handles = [
        machine.add_route(transition("a", "b"), handler=recorder.append),
        machine.add_route_chain(chain("a", "b", "c"), handler=recorder.append),
        machine.add_state_route_mapping(lambda from_state, payload: ["z"], handler=recorder.append),
        machine.add_route_mapping(lambda event, from_state, payload: "y", handler=recorder.append),
        machine.add_any_handler(ANY >> "b", recorder.append),
        machine.add_error_handler(recorder.append),
    ]
    del machine
    gc.collect()
    assert ref() is None

    for handle in handles:
        handle.dispose()
    assert all(handle.disposed for handle in handles)
    assert recorder == []


def test_revoked_handler_never_fires_and_double_revoke_is_harmless(recorder):
    machine = StateMachine("a")
    machine.add_route(transition("a", "b"))
    machine.add_route(transition("b", "a"))
    first = machine.add_handler(transition("a", "b"), lambda ctx: recorder.append("first"))
    machine.add_handler(transition("a", "b"), lambda ctx: recorder.append("second"))

    first.dispose()
    first.dispose()
    machine.try_state("b")
    assert recorder == ["second"]


def test_revoked_route_blocks_transition():
    machine = StateMachine("a")
    handle = machine.add_route(transition("a", "b"))
    assert machine.can_try_state("b")
    handle.dispose()
    assert not machine.can_try_state("b")
    assert machine._transition_routes == {}


def test_handler_disposed_mid_dispatch_does_not_fire(recorder):
    machine = StateMachine("a")
    machine.add_route(transition("a", "b"))
    handles = {}

    def early(ctx):
        recorder.append("early")
        handles["late"].dispose()

    machine.add_handler(transition("a", "b"), early, order=1)
    handles["late"] = machine.add_handler(transition("a", "b"), lambda ctx: recorder.append("late"), order=2)
    machine.try_state("b")
    assert recorder == ["early"]


def test_event_handler_disposed_mid_dispatch_does_not_fire(recorder):
    machine = Machine("idle")
    machine.add_routes("go", [transition("idle", "busy")])
    handles = {}

    def early(ctx):
        recorder.append("early")
        handles["late"].dispose()

    machine.add_handler("go", early, order=1)
    handles["late"] = machine.add_handler(ANY, lambda ctx: recorder.append("late"), order=2)
    machine.try_event("go")
    assert recorder == ["early"]
