"""
Scheduler - admission control, completion polling and result correlation.
"""

from mux_http.scheduler.config import (
    DEFAULT_MAX_PARALLEL_REQUESTS,
    DEFAULT_POLLING_INTERVAL,
    SchedulerConfig,
)
from mux_http.scheduler.core import AsyncHttpScheduler
from mux_http.scheduler.correlator import ResultCorrelator
from mux_http.scheduler.loop import AsyncioEventLoop, EventLoop, PeriodicTimer
from mux_http.scheduler.poller import CompletionPoller
from mux_http.scheduler.queue import EntryState, QueueEntry, QueueManager

__all__ = [
    "DEFAULT_MAX_PARALLEL_REQUESTS",
    "DEFAULT_POLLING_INTERVAL",
    "AsyncHttpScheduler",
    "AsyncioEventLoop",
    "CompletionPoller",
    "EntryState",
    "EventLoop",
    "PeriodicTimer",
    "QueueEntry",
    "QueueManager",
    "ResultCorrelator",
    "SchedulerConfig",
]
