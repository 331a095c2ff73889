from __future__ import annotations

from typing import Any, Dict, Mapping


class TurnstileError(Exception):
    """Base exception for Turnstile."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": {k: repr(v) if not isinstance(v, (str, int, float, bool)) else v
                        for k, v in self.context.items()},
        }


class ChainConfigurationError(TurnstileError, ValueError):
    """Raised when a transition or route chain is malformed (e.g. empty)."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        TurnstileError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class DefinitionError(TurnstileError, ValueError):
    """Raised when a declarative machine definition is invalid."""

    def __init__(
        self,
        message: str = "",
        *,
        errors: list[str] | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        TurnstileError.__init__(self, message, context=context)
        ValueError.__init__(self, message)
        self.errors = list(errors or [])


class ConfigError(TurnstileError, RuntimeError):
    """Raised when configuration files or TURNSTILE_* overrides are malformed."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        TurnstileError.__init__(self, message, context=context)
        RuntimeError.__init__(self, message)


__all__ = [
    "TurnstileError",
    "ChainConfigurationError",
    "DefinitionError",
    "ConfigError",
]
