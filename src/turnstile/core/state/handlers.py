"""Priority-ordered handler lists.

Lists are kept in non-decreasing ``order``. A new entry is inserted after
every entry whose order is less than or equal to its own, so equal-order
handlers run in registration order.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from itertools import chain
from operator import attrgetter
from typing import Iterable, List, MutableSequence

from .context import Handler, TransitionContext

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class HandlerInfo:
    order: int
    key: int
    handler: Handler
    # Cleared on removal so a pass already in progress skips it.
    active: bool = field(default=True, repr=False)


def insert_handler(infos: MutableSequence[HandlerInfo], info: HandlerInfo) -> None:
    idx = len(infos)
    while idx > 0 and infos[idx - 1].order > info.order:
        idx -= 1
    infos.insert(idx, info)


def remove_handler(infos: MutableSequence[HandlerInfo], key: int) -> bool:
    for idx, info in enumerate(infos):
        if info.key == key:
            info.active = False
            del infos[idx]
            return True
    return False


def merge_handlers(*lists: Iterable[HandlerInfo]) -> List[HandlerInfo]:
    """Concatenate lists and stable-sort by order only."""
    return sorted(chain.from_iterable(lists), key=attrgetter("order"))


def dispatch(infos: Iterable[HandlerInfo], context: TransitionContext) -> int:
    """Run handlers synchronously in list order. Returns how many ran.

    Iterates over a snapshot, so handlers added during the pass wait for the
    next one. Handlers disposed during the pass are skipped.
    """
    ran = 0
    for info in list(infos):
        if not info.active:
            continue
        info.handler(context)
        ran += 1
    if ran:
        logger.debug("Dispatched %d handler(s) for %r", ran, context)
    return ran


__all__ = [
    "HandlerInfo",
    "insert_handler",
    "remove_handler",
    "merge_handlers",
    "dispatch",
]
