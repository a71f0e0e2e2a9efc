"""错误基类：提供分层错误体系和结构化错误上下文。

Base error classes for mux-http.

Provides a layered error hierarchy:
- MuxHttpError: Base class for all library errors
- TransportError: Network/transport failures of a single request
- ParseError: Malformed response received from the transport
- SchedulerClosedError: Request rejected because the scheduler shut down
- MultiplexerInitError: The shared transport could not be created
- ValidationError: Invalid scheduler configuration values
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ErrorContext:
    """Structured error context for diagnostics.

    Provides actionable information for debugging and error handling.
    """

    field_path: str | None = None
    """Path to the problematic field (e.g., 'max_parallel_requests')"""

    details: dict[str, Any] = field(default_factory=dict)
    """Additional details about the error"""

    source: str | None = None
    """Error source (e.g., 'transport', 'parser', 'scheduler')"""

    hint: str | None = None
    """Actionable hint for resolving the error"""

    def __str__(self) -> str:
        parts = []
        if self.source:
            parts.append(f"[{self.source}]")
        if self.field_path:
            parts.append(f"at '{self.field_path}'")
        if self.hint:
            parts.append(f"(hint: {self.hint})")
        return " ".join(parts)


class MuxHttpError(Exception):
    """Base class for all mux-http errors.

    All errors from this library inherit from this class, making it easy
    to catch all library errors with a single except clause.

    Attributes:
        message: Human-readable error message
        context: Optional structured error context
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
    ) -> None:
        self.message = message
        self.context = context or ErrorContext()
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message."""
        ctx_str = str(self.context)
        if ctx_str:
            return f"{self.message} {ctx_str}"
        return self.message

    def with_hint(self, hint: str) -> MuxHttpError:
        """Add a hint to this error."""
        self.context.hint = hint
        return self


class TransportError(MuxHttpError):
    """Error reported by the transport for one request.

    Raised when:
    - Network connection failure
    - Connect timeout
    - SSL/TLS errors
    - The connection dropped while reading the response

    ``message`` carries the transport's own error text unchanged.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        url: str | None = None,
        handle_id: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="transport")
        if url:
            ctx.details["url"] = url
        if handle_id is not None:
            ctx.details["handle_id"] = handle_id
        super().__init__(message, ctx)
        self.url = url
        self.handle_id = handle_id
        self.__cause__ = cause


class ParseError(TransportError):
    """The transport succeeded but the response could not be parsed."""

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        url: str | None = None,
        handle_id: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="parser")
        super().__init__(message, ctx, url=url, handle_id=handle_id, cause=cause)


class SchedulerClosedError(TransportError):
    """Scheduler was torn down before the request completed.

    Also raised synchronously by submissions made after ``close()`` began.
    """

    def __init__(
        self,
        message: str = "Scheduler is closed",
        context: ErrorContext | None = None,
        *,
        url: str | None = None,
        handle_id: int | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="scheduler")
        super().__init__(message, ctx, url=url, handle_id=handle_id)


class MultiplexerInitError(MuxHttpError):
    """The multiplexing transport failed to initialize.

    Fatal: raised from scheduler construction, no request can be processed.
    """

    def __init__(
        self,
        message: str = "Failed to initialize multiplexer",
        context: ErrorContext | None = None,
        *,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="multiplexer")
        super().__init__(message, ctx)
        self.__cause__ = cause


class ValidationError(MuxHttpError):
    """Validation error for scheduler configuration values.

    Raised when:
    - A concurrency ceiling or polling interval is not positive
    - An environment variable cannot be parsed

    Malformed requests are rejected by the ``Request`` model itself with
    ``pydantic.ValidationError``.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        field: str | None = None,
        expected: Any = None,
        actual: Any = None,
    ) -> None:
        ctx = context or ErrorContext(source="validation")
        if field:
            ctx.field_path = field
        if expected is not None:
            ctx.details["expected"] = expected
        if actual is not None:
            ctx.details["actual"] = actual
        super().__init__(message, ctx)
        self.field = field
        self.expected = expected
        self.actual = actual
