"""Root pytest fixtures for mux-http tests."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import pytest

from mux_http.scheduler import AsyncHttpScheduler, SchedulerConfig
from mux_http.transport import CompletionResult, RawResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    from mux_http.transport import Handle


class ManualTimer:
    """Periodic timer that only fires when the test says so."""

    def __init__(self, interval: float, callback: Callable[[], Any]) -> None:
        self.interval = interval
        self.callback = callback
        self.cancelled = False


class ManualEventLoop:
    """EventLoop whose callbacks and timers are run explicitly by tests.

    Futures are created on the running asyncio loop, so tests using it must
    be coroutines.
    """

    def __init__(self) -> None:
        self.scheduled: list[Callable[[], Any]] = []
        self.timers: list[ManualTimer] = []
        self.timer_log: list[tuple[str, float]] = []

    def schedule(self, callback: Callable[[], Any]) -> None:
        self.scheduled.append(callback)

    def add_periodic_timer(self, interval: float, callback: Callable[[], Any]) -> ManualTimer:
        timer = ManualTimer(interval, callback)
        self.timers.append(timer)
        self.timer_log.append(("add", interval))
        return timer

    def cancel_timer(self, timer: ManualTimer) -> None:
        timer.cancelled = True
        if timer in self.timers:
            self.timers.remove(timer)
        self.timer_log.append(("cancel", timer.interval))

    def create_future(self) -> asyncio.Future[Any]:
        return asyncio.get_running_loop().create_future()

    @property
    def active_timer(self) -> ManualTimer | None:
        return self.timers[0] if self.timers else None

    def run_scheduled(self) -> int:
        """Run callbacks queued with ``schedule``; returns how many ran."""
        callbacks, self.scheduled = self.scheduled, []
        for callback in callbacks:
            callback()
        return len(callbacks)

    def fire_timers(self) -> None:
        """Fire each active timer once."""
        for timer in list(self.timers):
            if not timer.cancelled:
                timer.callback()


class ScriptedMultiplexer:
    """Multiplexer whose completions are scripted by the test."""

    def __init__(self) -> None:
        self.registered: dict[int, Handle] = {}
        self.register_log: list[int] = []
        self.unregister_log: list[int] = []
        self.drive_calls = 0
        self.closed = False
        self._completions: list[CompletionResult] = []

    @property
    def active_count(self) -> int:
        return len(self.registered)

    def register(self, handle: Handle) -> None:
        self.registered[handle.id] = handle
        self.register_log.append(handle.id)

    def unregister(self, handle: Handle) -> None:
        self.registered.pop(handle.id, None)
        self.unregister_log.append(handle.id)

    def complete(
        self,
        handle_id: int,
        status_code: int = 200,
        body: bytes = b"",
        headers: list[tuple[bytes, bytes]] | None = None,
    ) -> None:
        raw = RawResponse(
            status_code=status_code,
            reason="OK" if status_code == 200 else "",
            headers=headers or [],
            body=body,
        )
        self._completions.append(CompletionResult.success(self.registered[handle_id], raw))

    def fail(self, handle_id: int, error: str) -> None:
        self._completions.append(CompletionResult.failure(self.registered[handle_id], error))

    def drive(self) -> list[CompletionResult]:
        self.drive_calls += 1
        completions, self._completions = self._completions, []
        return completions

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def manual_loop() -> ManualEventLoop:
    """Event loop driven by the test."""
    return ManualEventLoop()


@pytest.fixture
def mux() -> ScriptedMultiplexer:
    """Multiplexer with scripted completions."""
    return ScriptedMultiplexer()


@pytest.fixture
def make_scheduler(
    manual_loop: ManualEventLoop, mux: ScriptedMultiplexer
) -> Callable[..., AsyncHttpScheduler]:
    """Build a scheduler wired to the manual loop and scripted multiplexer."""

    def factory(**config: Any) -> AsyncHttpScheduler:
        return AsyncHttpScheduler(
            SchedulerConfig(**config), loop=manual_loop, multiplexer=mux
        )

    return factory
