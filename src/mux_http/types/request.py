"""
Request model submitted to the scheduler.

A request is immutable once built. Headers keep every value given for a
name, in order, so repeated headers (e.g. ``Cookie`` or ``Accept``) are
sent exactly as the caller supplied them.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

HeaderValues = str | list[str] | tuple[str, ...]
HeadersInput = Mapping[str, HeaderValues] | list[tuple[str, str]] | None


def normalize_headers(headers: Any) -> dict[str, list[str]]:
    """Normalize header input to ``name -> [values...]``.

    Accepts a mapping whose values are a string or a sequence of strings,
    or a list of ``(name, value)`` pairs. Names keep their original case;
    pairs sharing a name are grouped in order of appearance.
    """
    if headers is None:
        return {}

    result: dict[str, list[str]] = {}
    if isinstance(headers, Mapping):
        items = headers.items()
    else:
        items = headers

    for name, value in items:
        values = result.setdefault(str(name), [])
        if isinstance(value, (list, tuple)):
            values.extend(str(v) for v in value)
        else:
            values.append(str(value))
    return result


class Request(BaseModel):
    """HTTP request to be scheduled.

    Attributes:
        method: HTTP method, upper-cased
        url: Absolute URL
        headers: Header name to ordered list of values
        body: Optional raw request body
    """

    model_config = ConfigDict(frozen=True)

    method: str = Field(description="HTTP method")
    url: str = Field(description="Absolute request URL")
    headers: dict[str, list[str]] = Field(default_factory=dict)
    body: bytes | None = Field(default=None)

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any) -> str:
        method = str(value).strip().upper()
        if not method:
            raise ValueError("method must not be empty")
        return method

    @field_validator("url", mode="before")
    @classmethod
    def _check_url(cls, value: Any) -> str:
        url = str(value).strip()
        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL as e:
            raise ValueError(str(e)) from e
        if not parsed.host:
            raise ValueError(f"URL has no host: {url!r}")
        return url

    @field_validator("headers", mode="before")
    @classmethod
    def _normalize_headers(cls, value: Any) -> dict[str, list[str]]:
        return normalize_headers(value)

    @property
    def host(self) -> str:
        """Host part of the URL, lower-cased."""
        return httpx.URL(self.url).host.lower()

    def header_lines(self) -> list[tuple[str, str]]:
        """Flatten headers to ``(name, value)`` pairs, one per value."""
        return [(name, value) for name, values in self.headers.items() for value in values]


def build_request(
    method: str,
    url: str,
    headers: HeadersInput = None,
    body: bytes | str | None = None,
) -> Request:
    """Build a request from convenience arguments.

    Args:
        method: HTTP method
        url: Absolute URL
        headers: Mapping or list of pairs
        body: Body as bytes, or text encoded as UTF-8

    Returns:
        Immutable Request
    """
    if isinstance(body, str):
        body = body.encode("utf-8")
    return Request(method=method, url=url, headers=headers, body=body)


def get(url: str, headers: HeadersInput = None) -> Request:
    """Build a GET request."""
    return build_request("GET", url, headers)
