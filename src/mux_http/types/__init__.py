"""
Types layer - request and response models.
"""

from mux_http.types.request import Request, build_request, get, normalize_headers
from mux_http.types.response import Response

__all__ = [
    "Request",
    "Response",
    "build_request",
    "get",
    "normalize_headers",
]
