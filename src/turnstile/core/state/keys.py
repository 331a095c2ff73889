"""Registration keys.

Keys are monotonically increasing integers scoped to one engine and never
reused while it lives, so two registrations can never collide.
"""
from __future__ import annotations

from itertools import count


class KeyGenerator:
    def __init__(self, start: int = 1) -> None:
        self._counter = count(start)

    def next_key(self) -> int:
        return next(self._counter)


__all__ = ["KeyGenerator"]
