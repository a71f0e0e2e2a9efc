"""Tests for the response parser."""

import gzip

import pytest

from mux_http.errors import ParseError
from mux_http.transport import RawResponse, parse_response


class TestRawResponseFromBytes:
    """Tests for splitting raw HTTP/1.x messages."""

    def test_simple_message(self) -> None:
        """Status line, headers and body are split."""
        raw = RawResponse.from_bytes(
            b"HTTP/1.1 404 Not Found\r\nContent-Type: text/plain\r\nX-A: 1\r\n\r\nmissing"
        )
        assert raw.status_code == 404
        assert raw.reason == "Not Found"
        assert raw.http_version == "HTTP/1.1"
        assert raw.headers == [(b"Content-Type", b"text/plain"), (b"X-A", b"1")]
        assert raw.body == b"missing"

    def test_interim_response_skipped(self) -> None:
        """A leading 100 Continue block is skipped."""
        raw = RawResponse.from_bytes(
            b"HTTP/1.1 100 Continue\r\n\r\nHTTP/1.1 201 Created\r\nLocation: /x\r\n\r\n"
        )
        assert raw.status_code == 201
        assert raw.headers == [(b"Location", b"/x")]
        assert raw.body == b""

    def test_missing_reason(self) -> None:
        """Reason phrase is optional."""
        raw = RawResponse.from_bytes(b"HTTP/2 204\r\n\r\n")
        assert raw.status_code == 204
        assert raw.reason == ""
        assert raw.http_version == "HTTP/2"

    def test_truncated(self) -> None:
        """Headers without a terminating blank line are rejected."""
        with pytest.raises(ParseError, match="Incomplete"):
            RawResponse.from_bytes(b"HTTP/1.1 200 OK\r\nContent-Type: text/plain")

    def test_bad_status_line(self) -> None:
        """Garbage status lines are rejected."""
        with pytest.raises(ParseError, match="status line"):
            RawResponse.from_bytes(b"HELLO\r\n\r\n")

    def test_bad_header_line(self) -> None:
        """Header lines without a colon are rejected."""
        with pytest.raises(ParseError, match="header line"):
            RawResponse.from_bytes(b"HTTP/1.1 200 OK\r\nbroken\r\n\r\n")


class TestParseResponse:
    """Tests for parse_response."""

    def test_from_bytes(self) -> None:
        """Full message bytes parse into a Response."""
        response = parse_response(
            b"HTTP/1.1 200 OK\r\nContent-Type: text/html; charset=latin-1\r\n\r\ncaf\xe9"
        )
        assert response.status_code == 200
        assert response.is_success
        assert response.encoding == "latin-1"
        assert response.text == "café"

    def test_repeated_headers_grouped(self) -> None:
        """Repeated headers keep every value in order."""
        raw = RawResponse(
            status_code=200,
            headers=[(b"Set-Cookie", b"a=1"), (b"Vary", b"Accept"), (b"Set-Cookie", b"b=2")],
        )
        response = parse_response(raw)
        assert response.headers == {"Set-Cookie": ["a=1", "b=2"], "Vary": ["Accept"]}
        assert response.header("set-cookie") == "a=1"

    def test_gzip_decoded(self) -> None:
        """gzip content encoding is removed."""
        raw = RawResponse(
            status_code=200,
            headers=[(b"Content-Encoding", b"gzip")],
            body=gzip.compress(b'{"n": 1}'),
        )
        assert parse_response(raw).parse_json() == {"n": 1}

    def test_corrupt_gzip(self) -> None:
        """Undecodable bodies raise ParseError."""
        raw = RawResponse(
            status_code=200,
            headers=[(b"Content-Encoding", b"gzip")],
            body=b"definitely not gzip",
        )
        with pytest.raises(ParseError, match="decode"):
            parse_response(raw)

    def test_invalid_status(self) -> None:
        """Status codes outside 100-599 are rejected."""
        with pytest.raises(ParseError, match="status code"):
            parse_response(RawResponse(status_code=700))

    def test_invalid_version(self) -> None:
        """Non-HTTP versions are rejected."""
        with pytest.raises(ParseError, match="version"):
            parse_response(RawResponse(status_code=200, http_version="SPDY/3"))
