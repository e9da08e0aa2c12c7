"""Bounded, timestamp-ordered position history."""

from __future__ import annotations

import bisect
from collections.abc import Iterator

from pybusride.models.gps import GpsPoint


def _timestamp(point: GpsPoint) -> int:
    return point.timestamp_ms or 0


class PositionHistory:
    """The most recent fixes of one session, oldest first.

    Late samples are inserted in timestamp order (ties keep arrival
    order). Once the cap is exceeded the oldest timestamp is evicted, so a
    sample older than everything in a full history is dropped straight away.
    """

    def __init__(self, capacity: int = 50) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._points: list[GpsPoint] = []

    @property
    def capacity(self) -> int:
        return self._capacity

    def add(self, point: GpsPoint) -> None:
        if not point.has_fix or point.timestamp_ms is None:
            raise ValueError("only located, timestamped points can be stored")
        bisect.insort_right(self._points, point, key=_timestamp)
        overflow = len(self._points) - self._capacity
        if overflow > 0:
            del self._points[:overflow]

    def clear(self) -> None:
        self._points.clear()

    @property
    def latest(self) -> GpsPoint | None:
        return self._points[-1] if self._points else None

    def snapshot(self) -> tuple[GpsPoint, ...]:
        """Immutable copy of the stored points, oldest first."""
        return tuple(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[GpsPoint]:
        return iter(tuple(self._points))
