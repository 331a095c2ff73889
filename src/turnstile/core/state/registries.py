"""Domain-aware registries of named guards and actions.

Declarative definitions refer to guards and actions by name. Each name can be
registered once for all machines (the shared domain) and overridden per
machine, using the machine's name as the domain:

    guard_registry.register("can_open", shared_fn)
    guard_registry.register("can_open", door_fn, domain="door")

    guard_registry.get("can_open", domain="door")    # door_fn
    guard_registry.get("can_open", domain="window")  # shared_fn
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

from ..exceptions import DefinitionError
from .context import Guard, Handler, TransitionContext

T = TypeVar("T", bound=Callable[..., Any])


class DomainRegistry(Generic[T], ABC):
    """Name -> callable registry with per-domain overrides."""

    SHARED_DOMAIN = "shared"
    KIND = "handler"

    def __init__(self, *, preload_defaults: bool = True) -> None:
        self._handlers: Dict[str, T] = {}
        if preload_defaults:
            self.register_defaults()

    def _make_key(self, name: str, domain: str = SHARED_DOMAIN) -> str:
        if domain == self.SHARED_DOMAIN:
            return name
        return f"{domain}:{name}"

    def register(self, name: str, handler: T, domain: str = SHARED_DOMAIN) -> None:
        if not callable(handler):
            raise TypeError(f"{self.KIND} {name!r} must be callable")
        self._handlers[self._make_key(name, domain)] = handler

    def add(self, name: str, handler: T, domain: str = SHARED_DOMAIN) -> None:
        """Alias for :meth:`register`."""
        self.register(name, handler, domain)

    def get(self, name: str, domain: str = SHARED_DOMAIN) -> Optional[T]:
        """Domain-specific entry first, then the shared one."""
        if domain != self.SHARED_DOMAIN:
            key = self._make_key(name, domain)
            if key in self._handlers:
                return self._handlers[key]
        return self._handlers.get(name)

    def require(self, name: str, domain: str = SHARED_DOMAIN) -> T:
        """Like :meth:`get`, but unknown names raise :class:`DefinitionError`."""
        handler = self.get(name, domain)
        if handler is None:
            raise DefinitionError(
                f"Unknown {self.KIND}: {name} (domain: {domain})",
                context={"name": name, "domain": domain, "kind": self.KIND},
            )
        return handler

    def has(self, name: str, domain: str = SHARED_DOMAIN) -> bool:
        return self.get(name, domain) is not None

    def list_handlers(self, domain: Optional[str] = None) -> Dict[str, T]:
        """All entries, or the effective view for one domain."""
        if domain is None:
            return dict(self._handlers)

        result: Dict[str, T] = {}
        prefix = f"{domain}:"
        for key, handler in self._handlers.items():
            if key.startswith(prefix):
                result[key[len(prefix):]] = handler
            elif ":" not in key and key not in result:
                result[key] = handler
        return result

    def reset(self) -> None:
        """Drop every registration and reload the built-ins."""
        self._handlers.clear()
        self.register_defaults()

    @abstractmethod
    def register_defaults(self) -> None:
        """Register the built-in entries."""


class GuardRegistry(DomainRegistry[Guard]):
    KIND = "guard"

    def register_defaults(self) -> None:
        from .builtin.guards import BUILTIN_GUARDS

        for name, fn in BUILTIN_GUARDS.items():
            self.register(name, fn)

    def check(self, name: str, context: TransitionContext, domain: str = DomainRegistry.SHARED_DOMAIN) -> bool:
        return bool(self.require(name, domain)(context))


class ActionRegistry(DomainRegistry[Handler]):
    KIND = "action"

    def register_defaults(self) -> None:
        from .builtin.actions import BUILTIN_ACTIONS

        for name, fn in BUILTIN_ACTIONS.items():
            self.register(name, fn)

    def execute(self, name: str, context: TransitionContext, domain: str = DomainRegistry.SHARED_DOMAIN) -> None:
        self.require(name, domain)(context)


guard_registry = GuardRegistry()
action_registry = ActionRegistry()


def register_guard(name: str, domain: str = DomainRegistry.SHARED_DOMAIN):
    """Decorator registering a guard on the default registry."""

    def decorator(fn):
        guard_registry.register(name, fn, domain)
        return fn

    return decorator


def register_action(name: str, domain: str = DomainRegistry.SHARED_DOMAIN):
    """Decorator registering an action on the default registry."""

    def decorator(fn):
        action_registry.register(name, fn, domain)
        return fn

    return decorator


__all__ = [
    "DomainRegistry",
    "GuardRegistry",
    "ActionRegistry",
    "guard_registry",
    "action_registry",
    "register_guard",
    "register_action",
]
