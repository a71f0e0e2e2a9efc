"""多路复用传输适配器：在共享的 httpx 客户端上并发推进多个请求。

Transport multiplexer adapter.

Owns the single shared httpx client (and its connection pool) that carries
every request of a scheduler. Handles are registered to start them and
unregistered once their completion has been collected; ``drive()`` reports
which handles finished since the previous call.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import httpx

from mux_http.errors import MultiplexerInitError
from mux_http.telemetry import get_logger
from mux_http.transport.handle import Handle, TransportOptions
from mux_http.transport.parser import RawResponse

logger = get_logger("mux_http.transport.multiplexer")


@dataclass
class CompletionResult:
    """Outcome of one finished transport operation.

    Exactly one of ``raw`` and ``error`` is set.
    """

    handle: Handle
    ok: bool
    raw: RawResponse | None = None
    error: str | None = None

    @classmethod
    def success(cls, handle: Handle, raw: RawResponse) -> CompletionResult:
        return cls(handle=handle, ok=True, raw=raw)

    @classmethod
    def failure(cls, handle: Handle, error: str) -> CompletionResult:
        return cls(handle=handle, ok=False, error=error)


@runtime_checkable
class Multiplexer(Protocol):
    """Interface the scheduler drives."""

    @property
    def active_count(self) -> int: ...

    def register(self, handle: Handle) -> None: ...

    def unregister(self, handle: Handle) -> None: ...

    def drive(self) -> list[CompletionResult]: ...

    async def aclose(self) -> None: ...


def transport_error_text(exc: BaseException) -> str:
    """Native error text of a transport exception."""
    return str(exc) or type(exc).__name__


class HttpxMultiplexer:
    """Multiplexer backed by one httpx.AsyncClient.

    Each registered handle runs as an asyncio task on the shared client. The
    event loop performs the socket I/O between scheduler ticks, so ``drive``
    never blocks: it only drains the operations that finished.

    Example:
        >>> mux = HttpxMultiplexer()
        >>> mux.register(handle)
        >>> ...  # later, from a loop callback
        >>> for result in mux.drive():
        ...     mux.unregister(result.handle)
        >>> await mux.aclose()
    """

    def __init__(
        self,
        options: TransportOptions | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the multiplexer.

        Args:
            options: Fixed transport option table
            transport: Override the httpx transport (tests, proxies)

        Raises:
            MultiplexerInitError: If the client cannot be created
        """
        self._options = options or TransportOptions()
        try:
            self._client = httpx.AsyncClient(
                transport=transport or self._options.to_httpx_transport(),
                timeout=self._options.to_httpx_timeout(),
                follow_redirects=False,
            )
        except Exception as e:
            raise MultiplexerInitError(
                f"Failed to initialize multiplexer: {e}", cause=e
            ) from e

        self._active: dict[int, asyncio.Task[None]] = {}
        self._finished: list[CompletionResult] = []
        self._cancelling: set[asyncio.Task[None]] = set()
        self._closed = False

    @property
    def active_count(self) -> int:
        """Number of registered handles."""
        return len(self._active)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def register(self, handle: Handle) -> None:
        """Start a handle's transfer on the shared client.

        Must be called from within the running event loop.
        """
        if self._closed:
            raise RuntimeError("Multiplexer is closed")
        if handle.id in self._active:
            return

        loop = asyncio.get_running_loop()
        self._active[handle.id] = loop.create_task(
            self._perform(handle), name=f"mux-http-{handle.id}"
        )
        logger.debug("Handle registered", handle_id=handle.id, url=handle.url)

    def unregister(self, handle: Handle) -> None:
        """Remove a handle, cancelling its transfer if still running."""
        task = self._active.pop(handle.id, None)
        if task is not None and not task.done():
            task.cancel()
            self._cancelling.add(task)
            task.add_done_callback(self._cancelling.discard)

    def drive(self) -> list[CompletionResult]:
        """Collect the operations that finished since the last call."""
        if not self._finished:
            return []
        finished, self._finished = self._finished, []
        return finished

    async def _perform(self, handle: Handle) -> None:
        try:
            response = await self._client.send(handle.http_request, stream=True)
            try:
                body = b"".join([chunk async for chunk in response.aiter_raw()])
            finally:
                await response.aclose()
        except Exception as e:
            result = CompletionResult.failure(handle, transport_error_text(e))
        else:
            result = CompletionResult.success(handle, RawResponse.from_httpx(response, body))

        if handle.id in self._active:
            self._finished.append(result)

    async def aclose(self) -> None:
        """Cancel outstanding transfers and close the client."""
        if self._closed:
            return
        self._closed = True

        tasks = [*self._active.values(), *self._cancelling]
        self._active.clear()
        self._cancelling.clear()
        self._finished.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        await self._client.aclose()
