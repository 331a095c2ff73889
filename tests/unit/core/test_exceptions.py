"""Error hierarchy."""
from turnstile.core.exceptions import ChainConfigurationError, ConfigError, DefinitionError, TurnstileError


def test_errors_share_a_base_and_builtin_category():
    assert issubclass(ChainConfigurationError, ValueError)
    assert issubclass(DefinitionError, ValueError)
    assert issubclass(ConfigError, RuntimeError)
    for cls in (ChainConfigurationError, DefinitionError, ConfigError):
        assert issubclass(cls, TurnstileError)


def test_to_json_error_reprs_non_primitive_context():
    err = DefinitionError("bad", errors=["x"], context={"path": "m.yaml", "states": ["a"]})
    payload = err.to_json_error()
    assert payload == {
        "message": "bad",
        "code": "DefinitionError",
        "context": {"path": "m.yaml", "states": "['a']"},
    }
    assert err.errors == ["x"]


def test_context_is_copied():
    ctx = {"k": 1}
    err = TurnstileError("m", context=ctx)
    ctx["k"] = 2
    assert err.context == {"k": 1}
