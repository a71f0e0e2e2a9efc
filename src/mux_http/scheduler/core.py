"""异步 HTTP 调度器：在共享多路复用传输上提交请求并返回 future。

Asynchronous HTTP request scheduler.

Callers submit requests and receive an asyncio future. Requests share one
multiplexing transport; at most ``max_parallel_requests`` run at a time and
the rest wait in FIFO order. A periodic poller, active only while work is
outstanding, collects completions and settles the futures.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from mux_http.errors import SchedulerClosedError
from mux_http.scheduler.config import SchedulerConfig
from mux_http.scheduler.correlator import ResultCorrelator
from mux_http.scheduler.loop import AsyncioEventLoop, EventLoop
from mux_http.scheduler.poller import CompletionPoller
from mux_http.scheduler.queue import EntryState, QueueManager
from mux_http.telemetry import get_logger
from mux_http.transport.handle import HandleFactory
from mux_http.transport.multiplexer import HttpxMultiplexer, Multiplexer
from mux_http.transport.parser import parse_response
from mux_http.types.request import HeadersInput, Request, build_request

if TYPE_CHECKING:
    from collections.abc import Callable

    from mux_http.transport.parser import RawResponse
    from mux_http.types.response import Response

logger = get_logger("mux_http.scheduler")


class AsyncHttpScheduler:
    """Schedules HTTP requests over one shared multiplexer.

    Example:
        >>> async with AsyncHttpScheduler(SchedulerConfig(max_parallel_requests=5)) as http:
        ...     futures = [http.get(url) for url in urls]
        ...     responses = await asyncio.gather(*futures, return_exceptions=True)

    The pending queue is unbounded. Submitting far more requests than the
    ceiling allows keeps them all in memory until they are admitted.
    """

    def __init__(
        self,
        config: SchedulerConfig | None = None,
        *,
        loop: EventLoop | asyncio.AbstractEventLoop | None = None,
        multiplexer: Multiplexer | None = None,
        parser: Callable[[RawResponse], Response] = parse_response,
    ) -> None:
        """Initialize the scheduler.

        Args:
            config: Scheduler configuration
            loop: Host event loop (default: the running asyncio loop)
            multiplexer: Transport multiplexer (default: HttpxMultiplexer)
            parser: Raw response parser

        Raises:
            MultiplexerInitError: If the transport cannot be created
            ValidationError: If the configuration is invalid
        """
        self._config = (config or SchedulerConfig.default()).validate()

        if loop is None or isinstance(loop, asyncio.AbstractEventLoop):
            self._loop: EventLoop = AsyncioEventLoop(loop)
        else:
            self._loop = loop

        self._factory = HandleFactory(self._config.transport)
        self._multiplexer = (
            multiplexer
            if multiplexer is not None
            else HttpxMultiplexer(self._config.transport)
        )
        self._queue = QueueManager(
            self._multiplexer,
            max_parallel_requests=self._config.max_parallel_requests,
            max_parallel_requests_per_host=self._config.max_parallel_requests_per_host,
        )
        self._correlator = ResultCorrelator(parser)
        self._poller = CompletionPoller(
            self._loop,
            self._multiplexer,
            self._queue,
            self._correlator,
            interval=self._config.polling_interval,
        )

        self._admission_scheduled = False
        self._closed = False
        self._submitted = 0

    # Submission

    def send(self, request: Request) -> asyncio.Future[Response]:
        """Submit a request.

        Args:
            request: Request to send

        Returns:
            Future resolving to a Response, or rejecting with TransportError

        Raises:
            SchedulerClosedError: If the scheduler is closed
        """
        if self._closed:
            raise SchedulerClosedError(url=request.url)

        handle = self._factory.create(request)
        future: asyncio.Future[Response] = self._loop.create_future()

        was_empty = self._queue.is_empty()
        self._queue.enqueue(handle, future)
        self._submitted += 1

        if was_empty:
            self._poller.arm()
        if not self._admission_scheduled:
            self._admission_scheduled = True
            self._loop.schedule(self._admit_pending)

        logger.debug(
            "Request queued",
            handle_id=handle.id,
            method=request.method,
            url=request.url,
        )
        return future

    def request(
        self,
        method: str,
        url: str,
        headers: HeadersInput = None,
        body: bytes | str | None = None,
    ) -> asyncio.Future[Response]:
        """Build and submit a request."""
        return self.send(build_request(method, url, headers, body))

    def get(self, url: str, headers: HeadersInput = None) -> asyncio.Future[Response]:
        """Submit a GET request."""
        return self.send(build_request("GET", url, headers))

    def _admit_pending(self) -> None:
        self._admission_scheduled = False
        if self._closed:
            return
        self._queue.admit_available()

    # Configuration

    @property
    def config(self) -> SchedulerConfig:
        return self._config

    @property
    def polling_interval(self) -> float:
        return self._poller.interval

    def set_polling_interval(self, interval: float) -> None:
        """Change the polling interval, re-arming an active poller."""
        self._poller.set_interval(interval)

    @property
    def max_parallel_requests(self) -> int:
        return self._queue.max_parallel_requests

    def set_max_parallel_requests(self, value: int) -> AsyncHttpScheduler:
        """Change the concurrency ceiling.

        Lowering it below the running count cancels nothing; it takes
        effect as running requests drain.

        Returns:
            self, for chaining
        """
        self._queue.set_max_parallel_requests(value)
        return self

    # State

    @property
    def pending_count(self) -> int:
        return self._queue.pending_count

    @property
    def running_count(self) -> int:
        return self._queue.running_count

    @property
    def is_polling(self) -> bool:
        return self._poller.is_armed

    @property
    def is_closed(self) -> bool:
        return self._closed

    def get_stats(self) -> dict[str, Any]:
        """Get scheduler statistics."""
        return {
            "submitted": self._submitted,
            "pending": self._queue.pending_count,
            "running": self._queue.running_count,
            "polling": self._poller.is_armed,
            "polling_interval": self._poller.interval,
            "ticks": self._poller.ticks,
            "max_parallel_requests": self._queue.max_parallel_requests,
            **self._correlator.get_stats(),
        }

    # Lifecycle

    async def close(self) -> None:
        """Tear down the scheduler.

        Every outstanding request is rejected once with SchedulerClosedError,
        the poller is cancelled and the multiplexer released. Submissions made
        after this starts raise SchedulerClosedError.
        """
        if self._closed:
            return
        self._closed = True
        self._poller.disarm()

        entries = self._queue.drain()
        for entry in entries:
            if entry.state is EntryState.RUNNING:
                self._multiplexer.unregister(entry.handle)
            self._correlator.reject(
                entry,
                SchedulerClosedError(
                    "Scheduler closed with request outstanding",
                    url=entry.handle.url,
                    handle_id=entry.id,
                ),
            )

        logger.info("Scheduler closed", rejected=len(entries))
        await self._multiplexer.aclose()

    async def __aenter__(self) -> AsyncHttpScheduler:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
