"""Library logging setup."""
import logging

from turnstile.core.state import StateMachine, transition
from turnstile.core.stdlib_logging import LIBRARY_LOGGER, configure_logging, reset_logging_for_tests


def _own_handlers():
    return [h for h in logging.getLogger(LIBRARY_LOGGER).handlers if not isinstance(h, logging.NullHandler)]


def test_configure_is_idempotent_per_destination():
    first = configure_logging(level="DEBUG")
    second = configure_logging(level="DEBUG")
    assert first is second
    assert _own_handlers() == [first]


def test_level_defaults_to_configuration(monkeypatch):
    monkeypatch.setenv("TURNSTILE_LOGGING__LEVEL", "ERROR")
    handler = configure_logging()
    assert handler.level == logging.ERROR


def test_file_destination_receives_engine_debug_logs(tmp_path):
    log_path = tmp_path / "logs" / "turnstile.log"
    configure_logging(level="DEBUG", log_path=log_path)

    machine = StateMachine("a")
    machine.add_route(transition("a", "b"))
    machine.try_state("b")
    machine.try_state("zzz")

    for handler in _own_handlers():
        handler.flush()
    text = log_path.read_text(encoding="utf-8")
    assert "State moved 'a' -> 'b'" in text
    assert "No route 'b' -> 'zzz'" in text


def test_switching_destination_replaces_handler(tmp_path):
    configure_logging(level="INFO")
    configure_logging(level="INFO", log_path=tmp_path / "x.log")
    handlers = _own_handlers()
    assert len(handlers) == 1
    assert isinstance(handlers[0], logging.FileHandler)


def test_reset_removes_handler():
    configure_logging(level="INFO")
    reset_logging_for_tests()
    assert _own_handlers() == []
