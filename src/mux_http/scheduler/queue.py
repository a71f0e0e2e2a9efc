"""准入与队列管理：在全局并发上限内将请求从等待队列移入运行集合。

Admission and queue management.

Entries wait in a FIFO pending queue and are admitted into the running set
while it is below the concurrency ceiling. Admission registers the entry's
handle with the multiplexer. An entry is in exactly one of the two
collections from submission until it completes.
"""

from __future__ import annotations

import asyncio
from collections import Counter, deque
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from mux_http.scheduler.config import DEFAULT_MAX_PARALLEL_REQUESTS, check_max_parallel
from mux_http.telemetry import get_logger

if TYPE_CHECKING:
    from mux_http.transport.handle import Handle
    from mux_http.transport.multiplexer import Multiplexer

logger = get_logger("mux_http.scheduler.queue")


class EntryState(str, Enum):
    """Which collection an entry is in."""

    PENDING = "pending"
    RUNNING = "running"


@dataclass
class QueueEntry:
    """A handle paired with the future awaiting its result."""

    handle: Handle
    future: asyncio.Future[Any]
    state: EntryState = EntryState.PENDING

    @property
    def id(self) -> int:
        return self.handle.id


class QueueManager:
    """Pending/running collections with a global concurrency ceiling.

    Example:
        >>> queue = QueueManager(multiplexer, max_parallel_requests=2)
        >>> queue.enqueue(handle, future)
        >>> queue.admit_available()
        [QueueEntry(...)]
    """

    def __init__(
        self,
        multiplexer: Multiplexer,
        max_parallel_requests: int = DEFAULT_MAX_PARALLEL_REQUESTS,
        max_parallel_requests_per_host: int | None = None,
    ) -> None:
        """Initialize the queue manager.

        Args:
            multiplexer: Receives handles as they are admitted
            max_parallel_requests: Ceiling on running entries
            max_parallel_requests_per_host: Per-host ceiling, None to disable
        """
        self._multiplexer = multiplexer
        self._max_parallel = check_max_parallel(max_parallel_requests)
        self._max_per_host = (
            check_max_parallel(
                max_parallel_requests_per_host, "max_parallel_requests_per_host"
            )
            if max_parallel_requests_per_host is not None
            else None
        )
        self._pending: deque[QueueEntry] = deque()
        self._running: dict[int, QueueEntry] = {}
        self._running_per_host: Counter[str] = Counter()

    @property
    def max_parallel_requests(self) -> int:
        return self._max_parallel

    @property
    def max_parallel_requests_per_host(self) -> int | None:
        return self._max_per_host

    def set_max_parallel_requests(self, value: int) -> None:
        """Change the ceiling; takes effect at the next admission pass.

        Running entries are never evicted. A ceiling below the running
        count holds admission until enough of them complete.
        """
        self._max_parallel = check_max_parallel(value)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def running_count(self) -> int:
        return len(self._running)

    def is_empty(self) -> bool:
        return not self._pending and not self._running

    def __len__(self) -> int:
        return len(self._pending) + len(self._running)

    def pending_entries(self) -> list[QueueEntry]:
        """Pending entries in admission order."""
        return list(self._pending)

    def running_entries(self) -> list[QueueEntry]:
        return list(self._running.values())

    def get_running(self, handle_id: int) -> QueueEntry | None:
        return self._running.get(handle_id)

    def running_for_host(self, host: str) -> int:
        return self._running_per_host[host]

    def enqueue(self, handle: Handle, future: asyncio.Future[Any]) -> QueueEntry:
        """Append a pending entry.

        Returns:
            The new entry
        """
        entry = QueueEntry(handle=handle, future=future)
        self._pending.append(entry)
        return entry

    def admit_available(self) -> list[QueueEntry]:
        """Move pending entries into running while capacity allows.

        Entries are taken from the front of the pending queue. With a
        per-host ceiling, entries whose host is saturated stay queued in
        their original order and later entries may be admitted ahead of them.

        Returns:
            Entries admitted by this pass, in admission order
        """
        admitted: list[QueueEntry] = []
        skipped: deque[QueueEntry] = deque()

        while self._pending and len(self._running) < self._max_parallel:
            entry = self._pending.popleft()
            if (
                self._max_per_host is not None
                and self._running_per_host[entry.handle.host] >= self._max_per_host
            ):
                skipped.append(entry)
                continue
            self._admit(entry)
            admitted.append(entry)

        if skipped:
            skipped.extend(self._pending)
            self._pending = skipped

        if admitted:
            logger.debug(
                "Admitted requests",
                admitted=len(admitted),
                running=len(self._running),
                pending=len(self._pending),
            )
        return admitted

    def _admit(self, entry: QueueEntry) -> None:
        entry.state = EntryState.RUNNING
        self._running[entry.id] = entry
        self._running_per_host[entry.handle.host] += 1
        self._multiplexer.register(entry.handle)

    def complete(self, handle_id: int) -> QueueEntry | None:
        """Remove a running entry.

        Returns:
            The entry, or None if the handle is not running
        """
        entry = self._running.pop(handle_id, None)
        if entry is None:
            return None

        host = entry.handle.host
        self._running_per_host[host] -= 1
        if self._running_per_host[host] <= 0:
            del self._running_per_host[host]
        return entry

    def drain(self) -> list[QueueEntry]:
        """Remove every entry, running first then pending."""
        entries = list(self._running.values()) + list(self._pending)
        self._running.clear()
        self._running_per_host.clear()
        self._pending.clear()
        return entries
