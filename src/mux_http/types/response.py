"""
Structured response produced by the response parser.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Response(BaseModel):
    """Parsed HTTP response.

    Attributes:
        status_code: HTTP status code
        reason: Reason phrase from the status line
        http_version: Protocol version, e.g. ``HTTP/1.1``
        headers: Header name to ordered list of values, as received
        body: Decoded body bytes (content-encoding already removed)
    """

    model_config = ConfigDict(frozen=True)

    status_code: int
    reason: str = ""
    http_version: str = "HTTP/1.1"
    headers: dict[str, list[str]] = Field(default_factory=dict)
    body: bytes = b""

    def header_values(self, name: str) -> list[str]:
        """All values of a header, matched case-insensitively."""
        lowered = name.lower()
        values: list[str] = []
        for key, key_values in self.headers.items():
            if key.lower() == lowered:
                values.extend(key_values)
        return values

    def header(self, name: str, default: str | None = None) -> str | None:
        """First value of a header, or ``default``."""
        values = self.header_values(name)
        return values[0] if values else default

    @property
    def is_success(self) -> bool:
        """True for 2xx status codes."""
        return 200 <= self.status_code < 300

    @property
    def encoding(self) -> str:
        """Charset from Content-Type, defaulting to utf-8."""
        content_type = self.header("content-type") or ""
        for part in content_type.split(";")[1:]:
            key, _, value = part.strip().partition("=")
            if key.lower() == "charset" and value:
                return value.strip("\"'")
        return "utf-8"

    @property
    def text(self) -> str:
        """Body decoded as text."""
        try:
            return self.body.decode(self.encoding, errors="replace")
        except LookupError:
            return self.body.decode("utf-8", errors="replace")

    def parse_json(self) -> Any:
        """Body decoded as JSON."""
        return json.loads(self.text)
