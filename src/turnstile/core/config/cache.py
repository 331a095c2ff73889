"""Centralized configuration caching.

Engines read dispatch orders on every registration, so the merged config is
cached per (config file, TURNSTILE_* environment) fingerprint.
"""
from __future__ import annotations

import hashlib
import os
from typing import Any, Dict

from .manager import ENV_PREFIX, ConfigManager

_config_cache: Dict[str, Dict[str, Any]] = {}


def _cache_key() -> str:
    env_items = sorted((k, v) for k, v in os.environ.items() if k.startswith(ENV_PREFIX))
    env_fp = hashlib.sha256(repr(env_items).encode("utf-8")).hexdigest()[:12]

    cfg_fp = "none"
    manager = ConfigManager()
    if manager.path is not None:
        try:
            st = manager.path.stat()
            cfg_fp = f"{manager.path}:{st.st_mtime_ns}:{st.st_size}"
        except OSError:
            cfg_fp = f"{manager.path}:missing"
    return f"env={env_fp}:cfg={cfg_fp}"


def get_config() -> Dict[str, Any]:
    """Get the merged configuration (cached; treat as immutable)."""
    key = _cache_key()
    if key not in _config_cache:
        _config_cache[key] = ConfigManager().load_config(strict=True)
    return _config_cache[key]


def clear_config_cache() -> None:
    """Drop every cached configuration (tests, config file rewrites)."""
    _config_cache.clear()


def is_cached() -> bool:
    """Check whether the current configuration is cached."""
    return _cache_key() in _config_cache


__all__ = ["get_config", "clear_config_cache", "is_cached"]
