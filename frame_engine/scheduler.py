"""
Delayed-callback schedulers for the capture session.

Callbacks are fire-and-forget; the session decides at fire time whether
a callback is still relevant.
"""

import asyncio
import heapq
import itertools
from typing import Callable, List, Optional, Protocol, Tuple


class Scheduler(Protocol):
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> None:
        ...


class AsyncioScheduler:
    """Runs callbacks on an asyncio event loop (same thread as the handlers)."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> None:
        loop = self._loop or asyncio.get_running_loop()
        loop.call_later(delay_s, callback)


class ManualScheduler:
    """
    Virtual clock for replays and tests.

    Nothing fires until advance() moves the clock past a callback's due
    time. Callbacks due at the same instant fire in scheduling order.
    """

    def __init__(self, start_time: float = 0.0):
        self.now = start_time
        self._queue: List[Tuple[float, int, Callable[[], None]]] = []
        self._counter = itertools.count()

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> None:
        heapq.heappush(self._queue, (self.now + delay_s, next(self._counter), callback))

    @property
    def pending(self) -> int:
        return len(self._queue)

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, firing every callback that falls due.

        Returns:
            Number of callbacks fired
        """
        return self.advance_to(self.now + seconds)

    def advance_to(self, timestamp: float) -> int:
        fired = 0
        while self._queue and self._queue[0][0] <= timestamp:
            due, _, callback = heapq.heappop(self._queue)
            self.now = due
            callback()
            fired += 1
        self.now = max(self.now, timestamp)
        return fired
