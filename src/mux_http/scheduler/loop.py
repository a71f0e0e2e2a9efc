"""事件循环集成：调度器所需的最小事件循环接口及其 asyncio 实现。

Event loop integration.

The scheduler only needs three primitives from its host loop: run a callback
on the next iteration, run a callback periodically, and cancel a periodic
callback. It also needs futures bound to that loop.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable


@runtime_checkable
class EventLoop(Protocol):
    """Primitives the scheduler consumes from its host loop."""

    def schedule(self, callback: Callable[[], Any]) -> None: ...

    def add_periodic_timer(
        self, interval: float, callback: Callable[[], Any]
    ) -> Any: ...

    def cancel_timer(self, timer: Any) -> None: ...

    def create_future(self) -> asyncio.Future[Any]: ...


class PeriodicTimer:
    """Repeating ``call_later`` chain on an asyncio loop."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        interval: float,
        callback: Callable[[], Any],
    ) -> None:
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._cancelled = False
        self._schedule_next()

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def _schedule_next(self) -> None:
        self._handle = self._loop.call_later(self._interval, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        # Re-arm first so the callback may cancel this timer.
        self._schedule_next()
        self._callback()

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class AsyncioEventLoop:
    """EventLoop backed by an asyncio loop.

    When no loop is given, the running loop is resolved on first use, so the
    scheduler can be constructed outside of a coroutine.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def schedule(self, callback: Callable[[], Any]) -> None:
        self.loop.call_soon(callback)

    def add_periodic_timer(
        self, interval: float, callback: Callable[[], Any]
    ) -> PeriodicTimer:
        return PeriodicTimer(self.loop, interval, callback)

    def cancel_timer(self, timer: PeriodicTimer) -> None:
        timer.cancel()

    def create_future(self) -> asyncio.Future[Any]:
        return self.loop.create_future()
