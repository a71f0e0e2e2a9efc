"""错误体系：调度器与传输层的结构化错误类型。

Error hierarchy for mux-http.
"""

from mux_http.errors.base import (
    ErrorContext,
    MultiplexerInitError,
    MuxHttpError,
    ParseError,
    SchedulerClosedError,
    TransportError,
    ValidationError,
)

__all__ = [
    "ErrorContext",
    "MultiplexerInitError",
    "MuxHttpError",
    "ParseError",
    "SchedulerClosedError",
    "TransportError",
    "ValidationError",
]
