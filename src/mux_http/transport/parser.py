"""响应解析器：将传输层读取的原始响应转换为结构化响应。

Response parser.

Turns what the transport read off the wire into a structured Response:
- Status line and header validation
- Repeated headers grouped by name, in order
- Content-Encoding (gzip, deflate, ...) removed from the body

Accepts either a RawResponse captured by the multiplexer or the bytes of a
complete HTTP/1.x response message.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

import httpx

from mux_http.errors import ParseError
from mux_http.types.response import Response

_STATUS_LINE = re.compile(rb"^(HTTP/\d(?:\.\d)?) (\d{3})(?: (.*))?$")
_HEADER_END = b"\r\n\r\n"


@dataclass
class RawResponse:
    """Response as read from the transport, before decoding.

    Attributes:
        status_code: Status code from the status line
        reason: Reason phrase
        http_version: Protocol version string
        headers: Raw ``(name, value)`` header pairs
        body: Body bytes, still content-encoded
    """

    status_code: int
    reason: str = ""
    http_version: str = "HTTP/1.1"
    headers: list[tuple[bytes, bytes]] = field(default_factory=list)
    body: bytes = b""

    @classmethod
    def from_httpx(cls, response: httpx.Response, body: bytes) -> RawResponse:
        """Capture a streamed httpx response and its raw body."""
        return cls(
            status_code=response.status_code,
            reason=response.reason_phrase,
            http_version=response.http_version,
            headers=list(response.headers.raw),
            body=body,
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> RawResponse:
        """Split a complete HTTP/1.x message into its parts.

        Interim 1xx header blocks (e.g. ``100 Continue``) are skipped.

        Raises:
            ParseError: If the message is truncated or malformed
        """
        rest = data
        while True:
            head, sep, body = rest.partition(_HEADER_END)
            if not sep:
                raise ParseError("Incomplete response: missing end of headers")

            lines = head.split(b"\r\n")
            match = _STATUS_LINE.match(lines[0])
            if match is None:
                raise ParseError(f"Invalid status line: {lines[0][:80]!r}")

            status_code = int(match.group(2))
            if 100 <= status_code < 200 and status_code != 101:
                rest = body
                continue

            headers: list[tuple[bytes, bytes]] = []
            for line in lines[1:]:
                name, colon, value = line.partition(b":")
                if not colon or not name or name != name.strip():
                    raise ParseError(f"Invalid header line: {line[:80]!r}")
                headers.append((name, value.strip()))

            return cls(
                status_code=status_code,
                reason=(match.group(3) or b"").decode("latin-1"),
                http_version=match.group(1).decode("ascii"),
                headers=headers,
                body=body,
            )


def parse_response(raw: RawResponse | bytes) -> Response:
    """Parse a raw response into a Response.

    Args:
        raw: RawResponse from the multiplexer, or full message bytes

    Returns:
        Structured response with the decoded body

    Raises:
        ParseError: On malformed status, headers or content encoding
    """
    if isinstance(raw, (bytes, bytearray)):
        raw = RawResponse.from_bytes(bytes(raw))

    if not 100 <= raw.status_code <= 599:
        raise ParseError(f"Invalid status code: {raw.status_code}")
    if not raw.http_version.startswith("HTTP/"):
        raise ParseError(f"Invalid HTTP version: {raw.http_version!r}")

    decoder = httpx.Response(
        raw.status_code,
        headers=raw.headers,
        stream=httpx.ByteStream(raw.body),
    )
    try:
        body = decoder.read()
    except httpx.DecodingError as e:
        raise ParseError(f"Failed to decode response body: {e}", cause=e) from e

    headers: dict[str, list[str]] = {}
    for name, value in raw.headers:
        headers.setdefault(name.decode("latin-1"), []).append(value.decode("latin-1"))

    return Response(
        status_code=raw.status_code,
        reason=raw.reason,
        http_version=raw.http_version,
        headers=headers,
        body=body,
    )
