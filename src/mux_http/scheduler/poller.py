"""完成轮询器：仅在有未完成请求时周期性推进多路复用器。

Completion poller.

A periodic task that exists only while requests are outstanding. Each tick
drives the multiplexer, hands completions to the correlator, refills the
running set from the pending queue, and cancels itself once both are empty.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mux_http.scheduler.config import DEFAULT_POLLING_INTERVAL, check_interval
from mux_http.telemetry import get_logger

if TYPE_CHECKING:
    from mux_http.scheduler.correlator import ResultCorrelator
    from mux_http.scheduler.loop import EventLoop
    from mux_http.scheduler.queue import QueueManager
    from mux_http.transport.multiplexer import Multiplexer

logger = get_logger("mux_http.scheduler.poller")


class CompletionPoller:
    """Periodic completion check, armed lazily."""

    def __init__(
        self,
        loop: EventLoop,
        multiplexer: Multiplexer,
        queue: QueueManager,
        correlator: ResultCorrelator,
        interval: float = DEFAULT_POLLING_INTERVAL,
    ) -> None:
        self._loop = loop
        self._multiplexer = multiplexer
        self._queue = queue
        self._correlator = correlator
        self._interval = check_interval(interval)
        self._timer: Any = None
        self._ticks = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_armed(self) -> bool:
        return self._timer is not None

    @property
    def ticks(self) -> int:
        return self._ticks

    def arm(self) -> None:
        """Register the periodic task if it is not already registered."""
        if self._timer is None:
            self._timer = self._loop.add_periodic_timer(self._interval, self.tick)
            logger.debug("Polling enabled", interval=self._interval)

    def disarm(self) -> None:
        """Cancel the periodic task if registered."""
        if self._timer is not None:
            self._loop.cancel_timer(self._timer)
            self._timer = None
            logger.debug("Polling disabled")

    def set_interval(self, interval: float) -> None:
        """Change the polling interval.

        An armed poller is re-armed with the new interval; queue entries are
        not touched. An idle poller uses it the next time it is armed.
        """
        interval = check_interval(interval)
        if interval == self._interval:
            return
        self._interval = interval
        if self._timer is not None:
            self.disarm()
            self.arm()

    def tick(self) -> int:
        """Run one polling step.

        Returns:
            Number of entries settled by this step
        """
        self._ticks += 1
        settled = 0

        for result in self._multiplexer.drive():
            self._multiplexer.unregister(result.handle)
            entry = self._queue.complete(result.handle.id)
            if entry is None:
                continue
            if self._correlator.settle(entry, result):
                settled += 1
            logger.debug(
                "Request completed",
                handle_id=result.handle.id,
                ok=result.ok,
                url=result.handle.url,
            )

        self._queue.admit_available()

        if self._queue.is_empty():
            self.disarm()
        return settled
