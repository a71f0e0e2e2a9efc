"""
Example: fetching many URLs through one scheduler.

Key features:
- Concurrency ceiling with an unbounded FIFO backlog
- Error isolation: one failed request does not affect the others
- Polling interval tuned while requests are in flight
"""

import asyncio
import os
import time

from mux_http import AsyncHttpScheduler, SchedulerConfig, TransportError
from mux_http.telemetry import LogLevel, MuxHttpLogger

BASE_URL = os.getenv("MUX_HTTP_EXAMPLE_URL", "https://httpbin.org")


async def main() -> None:
    MuxHttpLogger.configure(level=LogLevel.INFO, format="text")
    config = SchedulerConfig.from_env().with_overrides(max_parallel_requests=4)

    async with AsyncHttpScheduler(config) as http:
        start = time.perf_counter()
        futures = [http.get(f"{BASE_URL}/delay/1", {"X-Request-Index": str(i)}) for i in range(10)]
        futures.append(http.get("https://unreachable.invalid/"))

        print(f"queued: running={http.running_count} pending={http.pending_count}")
        http.set_polling_interval(0.01)

        results = await asyncio.gather(*futures, return_exceptions=True)
        elapsed = time.perf_counter() - start

    for i, result in enumerate(results):
        if isinstance(result, TransportError):
            print(f"{i:2d} failed: {result.message}")
        else:
            print(f"{i:2d} {result.status_code} {len(result.body)} bytes")
    print(f"done in {elapsed:.2f}s")


if __name__ == "__main__":
    asyncio.run(main())
