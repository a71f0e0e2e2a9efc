"""
Scheduler configuration.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace

from mux_http.errors import ValidationError
from mux_http.transport.handle import TransportOptions

DEFAULT_MAX_PARALLEL_REQUESTS = 30
DEFAULT_POLLING_INTERVAL = 0.03


@dataclass
class SchedulerConfig:
    """Configuration for the request scheduler.

    Attributes:
        max_parallel_requests: Ceiling on concurrently running requests
        max_parallel_requests_per_host: Per-host ceiling (None = not enforced)
        polling_interval: Seconds between completion checks while busy
        transport: Fixed option table applied to every handle

    The pending queue is unbounded: requests beyond the ceiling wait until
    capacity frees up and are never rejected for lack of room.
    """

    max_parallel_requests: int = DEFAULT_MAX_PARALLEL_REQUESTS
    max_parallel_requests_per_host: int | None = None
    polling_interval: float = DEFAULT_POLLING_INTERVAL
    transport: TransportOptions = field(default_factory=TransportOptions)

    @classmethod
    def default(cls) -> SchedulerConfig:
        """Create default configuration."""
        return cls()

    @classmethod
    def from_env(cls) -> SchedulerConfig:
        """Create configuration from environment variables.

        Reads MUX_HTTP_MAX_PARALLEL, MUX_HTTP_MAX_PER_HOST and
        MUX_HTTP_POLLING_INTERVAL; unset variables keep their defaults.
        """
        per_host = os.getenv("MUX_HTTP_MAX_PER_HOST")
        try:
            return cls(
                max_parallel_requests=int(
                    os.getenv("MUX_HTTP_MAX_PARALLEL", str(DEFAULT_MAX_PARALLEL_REQUESTS))
                ),
                max_parallel_requests_per_host=int(per_host) if per_host else None,
                polling_interval=float(
                    os.getenv("MUX_HTTP_POLLING_INTERVAL", str(DEFAULT_POLLING_INTERVAL))
                ),
            ).validate()
        except ValueError as e:
            raise ValidationError(f"Invalid scheduler environment: {e}") from e

    def with_overrides(self, **changes: object) -> SchedulerConfig:
        """Copy with some fields replaced."""
        return replace(self, **changes).validate()  # type: ignore[arg-type]

    def validate(self) -> SchedulerConfig:
        """Check limits and interval are positive.

        Returns:
            self, for chaining

        Raises:
            ValidationError: On a non-positive value
        """
        check_max_parallel(self.max_parallel_requests)
        if self.max_parallel_requests_per_host is not None:
            check_max_parallel(
                self.max_parallel_requests_per_host, "max_parallel_requests_per_host"
            )
        check_interval(self.polling_interval)
        return self


def check_max_parallel(value: int, name: str = "max_parallel_requests") -> int:
    if value < 1:
        raise ValidationError(
            f"{name} must be at least 1",
            field=name,
            expected=">= 1",
            actual=value,
        )
    return value


def check_interval(value: float) -> float:
    if value <= 0:
        raise ValidationError(
            "polling_interval must be positive",
            field="polling_interval",
            expected="> 0",
            actual=value,
        )
    return value
