from contextlib import asynccontextmanager

from utils.errors import SubmissionInProgressError


class SubmissionGuard:
    """
    In-flight flags per target (order id, store order id).

    A second submission for the same target while the first is still
    running is refused, not queued.
    """

    def __init__(self):
        self._in_flight: set[str] = set()

    def is_in_flight(self, key: str) -> bool:
        return key in self._in_flight

    @asynccontextmanager
    async def hold(self, key: str):
        if key in self._in_flight:
            raise SubmissionInProgressError(key)

        self._in_flight.add(key)
        try:
            yield
        finally:
            self._in_flight.discard(key)
