"""FIFO dispatch throttler for address-sequential provider calls."""
from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Any, Awaitable, Callable, TypeVar

from .constants import THROTTLE_INTERVAL_SECONDS

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Throttler:
    """Space out dispatches of queued async work by a fixed interval.

    Items are started in FIFO order, one per interval. The drain loop does not
    wait for a started item to finish before sleeping and moving on, so the
    dispatch rate is capped while completion latency stays independent of it.

    One instance is meant to be shared by every caller hitting the same
    provider quota.

    Example:
        throttler = Throttler(interval_seconds=1.0)
        balance = await throttler.throttle(lambda: client.token_balance(addr))
    """

    def __init__(self, interval_seconds: float = THROTTLE_INTERVAL_SECONDS) -> None:
        self.interval_seconds = interval_seconds
        self._queue: deque[tuple[Callable[[], Awaitable[Any]], asyncio.Future]] = deque()
        self._drain_task: asyncio.Task | None = None
        self._running: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of items queued but not yet dispatched."""
        return len(self._queue)

    async def throttle(self, work: Callable[[], Awaitable[T]]) -> T:
        """Queue ``work`` and return its result (or raise its exception)."""
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()
        self._queue.append((work, future))

        if self._drain_task is None or self._drain_task.done():
            self._drain_task = loop.create_task(self._drain())

        return await future

    async def _drain(self) -> None:
        while self._queue:
            work, future = self._queue.popleft()
            if future.cancelled():
                continue

            logger.debug("Dispatching throttled call (%d still queued)", len(self._queue))
            task = asyncio.ensure_future(self._run(work, future))
            self._running.add(task)
            task.add_done_callback(self._running.discard)

            await asyncio.sleep(self.interval_seconds)

    @staticmethod
    async def _run(work: Callable[[], Awaitable[Any]], future: asyncio.Future) -> None:
        try:
            result = await work()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            if not future.done():
                future.set_exception(e)
            return

        if not future.done():
            future.set_result(result)
