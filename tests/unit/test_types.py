"""Tests for request and response types."""

import pydantic
import pytest

from mux_http.types import Request, Response, build_request, get, normalize_headers


class TestNormalizeHeaders:
    """Tests for header normalization."""

    def test_none(self) -> None:
        assert normalize_headers(None) == {}

    def test_mapping_of_strings_and_lists(self) -> None:
        """Single values become one-element lists."""
        headers = normalize_headers({"Accept": "text/html", "X-Tag": ["a", "b"]})
        assert headers == {"Accept": ["text/html"], "X-Tag": ["a", "b"]}

    def test_pairs_grouped_in_order(self) -> None:
        """Repeated pairs are grouped by name."""
        headers = normalize_headers([("Cookie", "a=1"), ("Accept", "*/*"), ("Cookie", "b=2")])
        assert headers == {"Cookie": ["a=1", "b=2"], "Accept": ["*/*"]}


class TestRequest:
    """Tests for Request."""

    def test_method_upper_cased(self) -> None:
        assert Request(method="patch", url="https://example.com/").method == "PATCH"

    def test_immutable(self) -> None:
        """Requests cannot be changed after creation."""
        request = get("https://example.com/")
        with pytest.raises(pydantic.ValidationError):
            request.url = "https://other.example.com/"  # type: ignore[misc]

    def test_url_requires_host(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            Request(method="GET", url="/relative/path")

    def test_empty_method(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            Request(method="  ", url="https://example.com/")

    def test_host(self) -> None:
        assert get("https://API.Example.com:8443/x").host == "api.example.com"

    def test_header_lines(self) -> None:
        """Headers flatten to one pair per value."""
        request = get("https://example.com/", headers={"X-Tag": ["a", "b"], "Accept": "*/*"})
        assert request.header_lines() == [("X-Tag", "a"), ("X-Tag", "b"), ("Accept", "*/*")]

    def test_build_request_text_body(self) -> None:
        """Text bodies are encoded as UTF-8."""
        request = build_request("POST", "https://example.com/", body="héllo")
        assert request.body == "héllo".encode()

    def test_get_has_no_body(self) -> None:
        request = get("https://example.com/")
        assert request.method == "GET"
        assert request.body is None
        assert request.headers == {}


class TestResponse:
    """Tests for Response."""

    def test_header_lookup_case_insensitive(self) -> None:
        response = Response(status_code=200, headers={"Content-Type": ["text/plain"]})
        assert response.header("content-type") == "text/plain"
        assert response.header("missing", "default") == "default"
        assert response.header_values("missing") == []

    def test_is_success(self) -> None:
        assert Response(status_code=204).is_success
        assert not Response(status_code=301).is_success
        assert not Response(status_code=500).is_success

    def test_text_default_encoding(self) -> None:
        response = Response(status_code=200, body="naïve".encode())
        assert response.encoding == "utf-8"
        assert response.text == "naïve"

    def test_unknown_charset_falls_back(self) -> None:
        """Unknown charsets decode as UTF-8."""
        response = Response(
            status_code=200,
            headers={"Content-Type": ["text/plain; charset=bogus-charset"]},
            body=b"ok",
        )
        assert response.text == "ok"

    def test_parse_json(self) -> None:
        response = Response(status_code=200, body=b'{"items": [1, 2]}')
        assert response.parse_json() == {"items": [1, 2]}
