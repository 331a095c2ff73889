"""Identity equality, wildcard matching and transition building."""
import pytest

from turnstile.core.exceptions import ChainConfigurationError
from turnstile.core.state import ANY, Identity, Transition, TransitionChain, chain, matches, transition, wrap
from turnstile.core.state.transition import as_transitions, closure


class TestIdentity:
    def test_concrete_equality_follows_values(self):
        assert Identity.of("a") == Identity.of("a")
        assert Identity.of("a") != Identity.of("b")
        assert hash(Identity.of(3)) == hash(Identity.of(3))

    def test_any_is_strictly_distinct_from_concrete_values(self):
        assert ANY == Identity(is_any=True)
        assert ANY != Identity.of("a")
        assert Identity.of("a") != ANY

    def test_wrap_passes_identities_through(self):
        ident = Identity.of("x")
        assert wrap(ident) is ident
        assert wrap(ANY) is ANY
        assert wrap("x") == ident

    def test_matches_applies_wildcard_only_on_pattern_side(self):
        assert matches(Identity.of("a"), ANY)
        assert matches(ANY, ANY)
        assert matches(Identity.of("a"), Identity.of("a"))
        assert not matches(ANY, Identity.of("a"))
        assert not matches(Identity.of("a"), Identity.of("b"))

    def test_accepts_raw_values(self):
        assert ANY.accepts("anything")
        assert Identity.of(1).accepts(1)
        assert not Identity.of(1).accepts(2)

    def test_string_forms(self):
        assert str(ANY) == "*"
        assert repr(ANY) == "ANY"
        assert str(Identity.of("idle")) == "idle"
        assert repr(Identity.of("idle")) == "Identity('idle')"


class TestTransition:
    def test_transition_helper_wraps_raw_values(self):
        t = transition("a", "b")
        assert t == Transition(Identity.of("a"), Identity.of("b"))
        assert t.is_concrete
        assert str(t) == "a => b"

    def test_rshift_with_identity_builds_transition(self):
        assert (ANY >> "b") == Transition(ANY, Identity.of("b"))
        assert ("a" >> ANY) == Transition(Identity.of("a"), ANY)
        assert not (ANY >> "b").is_concrete

    def test_transitions_are_usable_as_keys(self):
        table = {transition("a", "b"): 1}
        assert table[transition("a", "b")] == 1
        assert transition("a", ANY) not in table

    def test_accepts_uses_wildcards(self):
        assert transition("a", ANY).accepts("a", "zzz")
        assert (ANY >> "b").accepts("q", "b")
        assert not transition("a", "b").accepts("a", "c")

    def test_closure_lists_every_authorizing_key(self):
        assert closure("a", "b") == [
            transition("a", "b"),
            transition("a", ANY),
            Transition(ANY, Identity.of("b")),
            Transition(ANY, ANY),
        ]

    def test_as_transitions_accepts_tuples(self):
        assert as_transitions([("a", "b"), transition("b", "c")]) == [transition("a", "b"), transition("b", "c")]


class TestTransitionChain:
    def test_transition_rshift_extends_into_chain(self):
        c = transition("a", "b") >> "c"
        assert isinstance(c, TransitionChain)
        assert c.transitions == [transition("a", "b"), transition("b", "c")]
        assert str(c) == "a => b => c"

    def test_chain_helper_and_further_extension(self):
        c = chain("a", "b") >> ANY
        assert c.states == (Identity.of("a"), Identity.of("b"), ANY)

    def test_prepending_a_value(self):
        c = "z" >> chain("a", "b")
        assert c.states[0] == Identity.of("z")

    def test_chain_needs_two_states(self):
        with pytest.raises(ChainConfigurationError):
            chain("only")
        with pytest.raises(ValueError):
            TransitionChain(())

    def test_from_transition(self):
        assert TransitionChain.from_transition(transition("a", "b")).transitions == [transition("a", "b")]
