"""Core engine, configuration and declarative definitions for Turnstile."""
from __future__ import annotations

from .exceptions import (
    ChainConfigurationError,
    ConfigError,
    DefinitionError,
    TurnstileError,
)

__all__ = [
    "TurnstileError",
    "ChainConfigurationError",
    "DefinitionError",
    "ConfigError",
]
