"""Timestamp source for document rows."""

from datetime import UTC, datetime, timedelta


class UtcClock:
    """ISO-8601 UTC timestamps with microsecond precision, strictly increasing.

    Two calls never return the same value within one process, so a tombstone
    identifies exactly one trash operation and updatedAt ordering is total.
    """

    def __init__(self) -> None:
        self._last: datetime | None = None

    def now(self) -> str:
        current = datetime.now(tz=UTC)
        if self._last is not None and current <= self._last:
            current = self._last + timedelta(microseconds=1)
        self._last = current
        return current.isoformat(timespec="microseconds")
