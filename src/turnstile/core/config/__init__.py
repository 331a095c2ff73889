"""Configuration access for Turnstile.

Typed accessors keep engine code free of dict plumbing.
"""
from __future__ import annotations

from typing import Any, Tuple

from turnstile.core.exceptions import ConfigError

from .cache import clear_config_cache, get_config, is_cached
from .manager import CONFIG_PATH_ENV, ENV_PREFIX, ConfigManager


def _as_int(value: Any, key: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer, got {value!r}", context={"key": key})
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be an integer, got {value!r}", context={"key": key}) from exc


def default_handler_order() -> int:
    """Dispatch order used when a registration does not specify one."""
    return _as_int(get_config()["handlers"]["default_order"], "handlers.default_order")


def chain_offsets() -> Tuple[int, int]:
    """Return (watch_offset, finish_offset) for chain trackers.

    The watcher must run after every position handler and the finisher
    after the watcher, so ``0 <= watch_offset < finish_offset``.
    """
    chains = get_config()["chains"]
    watch = _as_int(chains["watch_offset"], "chains.watch_offset")
    finish = _as_int(chains["finish_offset"], "chains.finish_offset")
    if not 0 <= watch < finish:
        raise ConfigError(
            f"Chain offsets must satisfy 0 <= watch_offset < finish_offset, got {watch} and {finish}",
            context={"watch_offset": watch, "finish_offset": finish},
        )
    return watch, finish


__all__ = [
    "ConfigManager",
    "ENV_PREFIX",
    "CONFIG_PATH_ENV",
    "get_config",
    "clear_config_cache",
    "is_cached",
    "default_handler_order",
    "chain_offsets",
]
