"""Revocation handles returned by every registration.

Handles never keep their engine alive: :func:`weak_disposable` stores only a
``weakref`` to the owner, so disposing after the engine is gone is a no-op.
"""
from __future__ import annotations

import weakref
from types import TracebackType
from typing import Callable, Iterable, Optional, Type, TypeVar

T = TypeVar("T")


class Disposable:
    """Runs its action at most once."""

    def __init__(self, action: Optional[Callable[[], None]] = None) -> None:
        self._action = action
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        action, self._action = self._action, None
        if action is not None:
            action()

    def __call__(self) -> None:
        self.dispose()

    def __enter__(self) -> "Disposable":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.dispose()


class CompositeDisposable(Disposable):
    """Disposes every child, in registration order."""

    def __init__(self, disposables: Iterable[Disposable]) -> None:
        self._children = list(disposables)
        super().__init__(self._dispose_children)

    def _dispose_children(self) -> None:
        children, self._children = self._children, []
        for child in children:
            child.dispose()


def weak_disposable(owner: T, remove: Callable[[T], object]) -> Disposable:
    """Handle that calls ``remove(owner)`` while ``owner`` is still alive.

    ``remove`` must not close over ``owner`` itself.
    """
    ref = weakref.ref(owner)

    def _dispose() -> None:
        target = ref()
        if target is not None:
            remove(target)

    return Disposable(_dispose)


__all__ = ["Disposable", "CompositeDisposable", "weak_disposable"]
