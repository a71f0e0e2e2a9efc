"""传输句柄：为每个请求构建带固定选项表的传输句柄。

Transport handles.

A handle is one in-flight transport operation. It is created once per
submitted request with the fixed option table baked in, and identified by a
monotonically increasing id issued by the factory that created it.
"""

from __future__ import annotations

import itertools
import socket
import ssl
from dataclasses import dataclass, field
from typing import Any

import httpx

from mux_http.types.request import Request

# 512 KiB receive buffer
_DEFAULT_BUFFER_SIZE = 512 * 1024
_DEFAULT_CONNECT_TIMEOUT = 5.0


@dataclass(frozen=True)
class TransportOptions:
    """Fixed option table applied to every handle.

    Responses always carry their headers and a fully buffered body; the
    multiplexer reads every transfer to completion before reporting it.

    Attributes:
        connect_timeout: Connect timeout in seconds
        verify_peer: Verify the TLS peer certificate
        verify_host: Verify the certificate matches the host name
        accept_encoding: Value sent as Accept-Encoding
        tcp_nodelay: Disable Nagle's algorithm
        tcp_keepalive: Enable TCP keep-alive probes
        buffer_size: Socket receive buffer size in bytes
        capture_sent_headers: Record outgoing headers on the handle
    """

    connect_timeout: float = _DEFAULT_CONNECT_TIMEOUT
    verify_peer: bool = True
    verify_host: bool = True
    accept_encoding: str = "gzip"
    tcp_nodelay: bool = True
    tcp_keepalive: bool = True
    buffer_size: int = _DEFAULT_BUFFER_SIZE
    capture_sent_headers: bool = True

    def to_httpx_timeout(self) -> httpx.Timeout:
        """Only the connect phase is bounded."""
        return httpx.Timeout(None, connect=self.connect_timeout)

    def to_verify(self) -> ssl.SSLContext | bool:
        """TLS verification setting for httpx."""
        if not self.verify_peer:
            return False
        if self.verify_host:
            return True
        context = ssl.create_default_context()
        context.check_hostname = False
        return context

    def socket_options(self) -> list[tuple[int, int, int]]:
        """Socket options applied to every connection."""
        options: list[tuple[int, int, int]] = []
        if self.tcp_nodelay:
            options.append((socket.IPPROTO_TCP, socket.TCP_NODELAY, 1))
        if self.tcp_keepalive:
            options.append((socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1))
        if self.buffer_size > 0:
            options.append((socket.SOL_SOCKET, socket.SO_RCVBUF, self.buffer_size))
        return options

    def to_httpx_transport(self) -> httpx.AsyncHTTPTransport:
        """Build the connection-pooling transport shared by all handles."""
        return httpx.AsyncHTTPTransport(
            verify=self.to_verify(),
            socket_options=self.socket_options(),
            limits=httpx.Limits(
                max_connections=None,
                max_keepalive_connections=20 if self.tcp_keepalive else 0,
            ),
        )


@dataclass
class Handle:
    """One transport operation.

    Attributes:
        id: Identifier unique within the issuing factory
        request: The submitted request
        options: Option table baked in at creation
        http_request: Prepared httpx request sent by the multiplexer
        sent_headers: Outgoing headers, when capture is enabled
    """

    id: int
    request: Request
    options: TransportOptions
    http_request: httpx.Request = field(repr=False)
    sent_headers: list[tuple[str, str]] = field(default_factory=list, repr=False)

    @property
    def host(self) -> str:
        return self.request.host

    @property
    def url(self) -> str:
        return self.request.url

    def __hash__(self) -> int:
        return hash(self.id)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Handle):
            return NotImplemented
        return self.id == other.id


class HandleFactory:
    """Creates handles with the fixed option table.

    Example:
        >>> factory = HandleFactory()
        >>> handle = factory.create(get("https://example.com/"))
        >>> handle.id
        1
    """

    def __init__(self, options: TransportOptions | None = None) -> None:
        self._options = options or TransportOptions()
        self._ids = itertools.count(1)

    @property
    def options(self) -> TransportOptions:
        return self._options

    def create(self, request: Request) -> Handle:
        """Create a handle for a request.

        Args:
            request: Request to send

        Returns:
            New handle with the next id
        """
        headers = request.header_lines()
        if self._options.accept_encoding and not any(
            name.lower() == "accept-encoding" for name, _ in headers
        ):
            headers.append(("Accept-Encoding", self._options.accept_encoding))

        http_request = httpx.Request(
            request.method,
            request.url,
            headers=headers,
            content=request.body,
            extensions={"timeout": self._options.to_httpx_timeout().as_dict()},
        )

        sent_headers: list[tuple[str, str]] = []
        if self._options.capture_sent_headers:
            sent_headers = [
                (name.decode("latin-1"), value.decode("latin-1"))
                for name, value in http_request.headers.raw
            ]

        return Handle(
            id=next(self._ids),
            request=request,
            options=self._options,
            http_request=http_request,
            sent_headers=sent_headers,
        )
