"""Caller-supplied deadline / cancellation token for analytics queries."""

import time
from collections.abc import Iterable, Iterator

from barfer.exceptions import AnalyticsError


class Deadline:
    """
    Time budget for one analytics call.

    Usage:
        deadline = Deadline(seconds=10)
        ClientAnalyticsService.get_client_categorization(deadline=deadline)

    ``cancel()`` may be called from another thread; the next ``check()``
    raises. A Deadline with ``seconds=None`` never expires but can still be
    cancelled.
    """

    def __init__(self, seconds: float | None = None, clock=time.monotonic):
        self._clock = clock
        self._expires_at = None if seconds is None else clock() + seconds
        self._cancelled = False

    @classmethod
    def from_settings(cls) -> "Deadline | None":
        from barfer.conf import barfer_settings

        seconds = barfer_settings.ANALYTICS_TIMEOUT_SECONDS
        return cls(seconds) if seconds is not None else None

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def remaining(self) -> float | None:
        """Seconds left, None when unbounded. Never negative."""
        if self._expires_at is None:
            return None
        return max(self._expires_at - self._clock(), 0.0)

    @property
    def expired(self) -> bool:
        return self._cancelled or self.remaining() == 0.0

    def check(self) -> None:
        """
        Raise if the deadline passed or the call was cancelled.

        Raises:
            AnalyticsError: ANALYTICS_TIMEOUT, retryable
        """
        if self._cancelled:
            raise AnalyticsError(
                "ANALYTICS_TIMEOUT",
                message="Analytics query was cancelled",
                retryable=True,
            )
        if self.remaining() == 0.0:
            raise AnalyticsError("ANALYTICS_TIMEOUT", retryable=True)


def check(deadline: Deadline | None) -> None:
    """Check an optional deadline."""
    if deadline is not None:
        deadline.check()


def watch(records: Iterable, deadline: Deadline | None, every: int = 500) -> Iterator:
    """Yield records, checking the deadline every ``every`` items and at the end."""
    for n, record in enumerate(records, start=1):
        if n % every == 0:
            check(deadline)
        yield record
    check(deadline)
