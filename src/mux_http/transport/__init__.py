"""
Transport layer - handles, response parsing and the shared multiplexer.

Provides httpx-based transport with:
- Fixed per-handle option table
- One pooled client shared by all requests
- Non-blocking completion draining
- Raw response parsing
"""

from mux_http.transport.handle import Handle, HandleFactory, TransportOptions
from mux_http.transport.multiplexer import (
    CompletionResult,
    HttpxMultiplexer,
    Multiplexer,
    transport_error_text,
)
from mux_http.transport.parser import RawResponse, parse_response

__all__ = [
    "CompletionResult",
    "Handle",
    "HandleFactory",
    "HttpxMultiplexer",
    "Multiplexer",
    "RawResponse",
    "TransportOptions",
    "parse_response",
    "transport_error_text",
]
