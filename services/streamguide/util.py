from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional, Set
from urllib.parse import urlparse


def path_of(url: str) -> str:
    return urlparse(url).path or "/"


class Debouncer:
    """Runs the most recently scheduled callback once `delay` seconds pass without a new schedule.

    Rescheduling cancels the pending timer, not a callback that already started.
    """

    def __init__(self, delay: float):
        self.delay = delay
        self._timer: Optional[asyncio.TimerHandle] = None
        self._running: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def schedule(self, func: Callable[..., Awaitable[Any]], *args: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.delay, self._fire, func, args)

    def _fire(self, func: Callable[..., Awaitable[Any]], args: tuple) -> None:
        self._timer = None
        task = asyncio.ensure_future(func(*args))
        self._running.add(task)
        task.add_done_callback(self._running.discard)

    async def drain(self) -> None:
        """Wait for the pending timer (if any) and every started callback to finish."""
        while self._timer is not None or self._running:
            if self._running:
                await asyncio.gather(*list(self._running))
            else:
                await asyncio.sleep(self.delay / 4 or 0)
