from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

LIBRARY_LOGGER = "turnstile"

_CONFIGURED_KEY: tuple[str, str] | None = None
_TURNSTILE_HANDLER: logging.Handler | None = None


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(*, level: Optional[str] = None, log_path: Optional[Path] = None) -> logging.Handler:
    """Attach a Turnstile-owned handler to the ``turnstile`` logger.

    Writes to ``log_path`` when given, otherwise to stderr. The root logger is
    never touched. Idempotent per-process: if already configured for the same
    destination and level, no-op.
    """
    global _CONFIGURED_KEY, _TURNSTILE_HANDLER

    from turnstile.core.config import get_config

    log_cfg = get_config().get("logging") or {}
    level_name = level or str(log_cfg.get("level", "WARNING"))
    destination = str(Path(log_path).resolve()) if log_path is not None else "<stderr>"
    key = (destination, level_name.upper())

    if _CONFIGURED_KEY == key and _TURNSTILE_HANDLER is not None:
        return _TURNSTILE_HANDLER

    lib_logger = logging.getLogger(LIBRARY_LOGGER)

    # Replace the previously installed handler when switching destinations.
    if _TURNSTILE_HANDLER is not None:
        lib_logger.removeHandler(_TURNSTILE_HANDLER)
        _TURNSTILE_HANDLER.close()
        _TURNSTILE_HANDLER = None

    handler: logging.Handler
    if log_path is not None:
        Path(destination).parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(destination, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(_level_from_name(level_name))
    handler.setFormatter(logging.Formatter(str(log_cfg.get("format") or logging.BASIC_FORMAT)))

    lib_logger.setLevel(_level_from_name(level_name))
    lib_logger.addHandler(handler)

    _TURNSTILE_HANDLER = handler
    _CONFIGURED_KEY = key
    return handler


def reset_logging_for_tests() -> None:
    """Test-only: remove the handler installed by configure_logging()."""
    global _CONFIGURED_KEY, _TURNSTILE_HANDLER
    lib_logger = logging.getLogger(LIBRARY_LOGGER)
    if _TURNSTILE_HANDLER is not None:
        lib_logger.removeHandler(_TURNSTILE_HANDLER)
        _TURNSTILE_HANDLER.close()
    lib_logger.setLevel(logging.NOTSET)
    _CONFIGURED_KEY = None
    _TURNSTILE_HANDLER = None


__all__ = ["LIBRARY_LOGGER", "configure_logging", "reset_logging_for_tests"]
