"""mux-http: asynchronous HTTP request scheduler over one shared transport.

Submit many HTTP requests from an asyncio program without one task or
connection per request: admission is bounded by a concurrency ceiling, a
lazily armed poller collects completions, and each caller gets a future.
"""
from __future__ import annotations

from mux_http.errors import (
    MultiplexerInitError,
    MuxHttpError,
    ParseError,
    SchedulerClosedError,
    TransportError,
    ValidationError,
)
from mux_http.scheduler import AsyncHttpScheduler, SchedulerConfig
from mux_http.transport import TransportOptions
from mux_http.types import Request, Response, build_request

__version__ = "0.1.0"

__all__ = [
    # Scheduler
    "AsyncHttpScheduler",
    "SchedulerConfig",
    "TransportOptions",
    # Types
    "Request",
    "Response",
    "build_request",
    # Errors
    "MultiplexerInitError",
    "MuxHttpError",
    "ParseError",
    "SchedulerClosedError",
    "TransportError",
    "ValidationError",
    # Version
    "__version__",
]
