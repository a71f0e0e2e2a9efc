"""
Telemetry - structured logging.
"""

from mux_http.telemetry.logger import (
    JsonFormatter,
    LogLevel,
    MuxHttpLogger,
    SensitiveDataMasker,
    TextFormatter,
    get_logger,
)

__all__ = [
    "JsonFormatter",
    "LogLevel",
    "MuxHttpLogger",
    "SensitiveDataMasker",
    "TextFormatter",
    "get_logger",
]
