"""
Result correlation - settles the future behind a finished handle.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from mux_http.errors import ParseError, TransportError
from mux_http.transport.parser import parse_response

if TYPE_CHECKING:
    from collections.abc import Callable

    from mux_http.scheduler.queue import QueueEntry
    from mux_http.transport.multiplexer import CompletionResult
    from mux_http.transport.parser import RawResponse
    from mux_http.types.response import Response


class ResultCorrelator:
    """Resolves or rejects an entry's future from its completion.

    A future is settled at most once. Futures that are already done, for
    instance because the caller cancelled them, are left untouched.
    """

    def __init__(
        self,
        parser: Callable[[RawResponse], Response] = parse_response,
    ) -> None:
        """Initialize the correlator.

        Args:
            parser: Turns raw transport output into a Response
        """
        self._parser = parser
        self._resolved = 0
        self._rejected = 0

    def settle(self, entry: QueueEntry, result: CompletionResult) -> bool:
        """Settle an entry from its completion result.

        Args:
            entry: Entry already removed from the running set
            result: Completion reported by the multiplexer

        Returns:
            True if the future was settled by this call
        """
        if entry.future.done():
            return False

        if not result.ok or result.raw is None:
            return self.reject(
                entry,
                TransportError(
                    result.error or "Transport failure",
                    url=entry.handle.url,
                    handle_id=entry.id,
                ),
            )

        try:
            response = self._parser(result.raw)
        except ParseError as e:
            e.url = entry.handle.url
            e.handle_id = entry.id
            e.context.details.update(url=entry.handle.url, handle_id=entry.id)
            return self.reject(entry, e)
        except Exception as e:
            return self.reject(
                entry,
                ParseError(
                    f"Failed to parse response: {e}",
                    url=entry.handle.url,
                    handle_id=entry.id,
                    cause=e,
                ),
            )

        entry.future.set_result(response)
        self._resolved += 1
        return True

    def reject(self, entry: QueueEntry, error: BaseException) -> bool:
        """Reject an entry's future unless it is already settled."""
        if entry.future.done():
            return False
        entry.future.set_exception(error)
        self._rejected += 1
        return True

    def get_stats(self) -> dict[str, int]:
        return {"resolved": self._resolved, "rejected": self._rejected}
