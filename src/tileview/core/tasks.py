"""Deterministic replacement for idle-time callbacks."""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Callable, Hashable

_LOGGER = logging.getLogger(__name__)


class DeferredTaskQueue:
    """Collect follow-up work and run it once at a well defined point.

    Tasks are keyed so that repeated requests for the same work (for example
    "reposition every tile") collapse into a single call.  The controller
    drains the queue at the end of every reconciliation cycle, which keeps
    ordering deterministic without an event loop.
    """

    def __init__(self) -> None:
        self._tasks: OrderedDict[Hashable, Callable[[], None]] = OrderedDict()
        self._draining = False

    # ------------------------------------------------------------------
    def defer(self, key: Hashable, task: Callable[[], None]) -> None:
        """Schedule *task* under *key*, replacing any pending task with that key."""

        self._tasks.pop(key, None)
        self._tasks[key] = task

    # ------------------------------------------------------------------
    def drain(self) -> int:
        """Run pending tasks, including ones queued while draining."""

        if self._draining:
            return 0
        self._draining = True
        executed = 0
        try:
            while self._tasks:
                _, task = self._tasks.popitem(last=False)
                task()
                executed += 1
        finally:
            self._draining = False
        if executed:
            _LOGGER.debug("Drained %d deferred tasks", executed)
        return executed

    # ------------------------------------------------------------------
    def clear(self) -> None:
        self._tasks.clear()

    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._tasks)


__all__ = ["DeferredTaskQueue"]
