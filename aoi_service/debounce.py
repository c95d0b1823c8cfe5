"""
Debounce Module
===============

Rate-limits bursts of events (pan, zoom, keystrokes) on the asyncio loop.

Design:
- Each call cancels the pending timer and schedules a new one
- Only the last arguments of a burst reach the callback
- Coroutine callbacks are wrapped in a task; the latest task is kept so
  callers can await it
"""

import asyncio
import inspect
from typing import Any, Callable, Optional


class Debouncer:
    """
    Calls `callback` once `delay_ms` have passed without a new call.

    Usage:
        on_view = Debouncer(150, store_view)
        on_view(center, zoom)   # inside a running event loop
        on_view(center, zoom)   # resets the timer
    """

    def __init__(
        self,
        delay_ms: float,
        callback: Callable[..., Any],
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        if delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {delay_ms}")

        self.delay = delay_ms / 1000.0
        self.callback = callback
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self.task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        loop = self._loop or asyncio.get_running_loop()
        self.cancel()
        self._handle = loop.call_later(self.delay, self._fire, args, kwargs)

    def _fire(self, args: tuple, kwargs: dict) -> None:
        self._handle = None
        result = self.callback(*args, **kwargs)
        if inspect.isawaitable(result):
            self.task = asyncio.ensure_future(result)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def __repr__(self) -> str:
        return f"Debouncer(delay={self.delay}s, pending={self.pending})"
