import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'turnstile'
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from turnstile.core.config import clear_config_cache
from turnstile.core.stdlib_logging import reset_logging_for_tests
from turnstile.core.state.registries import action_registry, guard_registry


@pytest.fixture(autouse=True)
def _isolate_turnstile(monkeypatch):
    """Fresh configuration, logging and registries for every test."""
    for key in list(os.environ):
        if key.startswith("TURNSTILE_"):
            monkeypatch.delenv(key, raising=False)
    clear_config_cache()
    reset_logging_for_tests()
    guard_registry.reset()
    action_registry.reset()
    yield
    clear_config_cache()
    reset_logging_for_tests()
    guard_registry.reset()
    action_registry.reset()


@pytest.fixture
def recorder():
    """List that handlers append (label, context) tuples to."""
    return []


@pytest.fixture
def write_yaml(tmp_path):
    """Write a YAML document (given as text) and return its path."""

    def _write(text: str, name: str = "machine.yaml") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
