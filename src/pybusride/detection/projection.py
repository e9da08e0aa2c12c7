"""Next-stop projection along the route."""

from __future__ import annotations

from pybusride._constants import UNKNOWN_HALT
from pybusride.geo import along_distance
from pybusride.models.gps import GpsPoint
from pybusride.models.route import RouteConfig


class RouteProjector:
    """Resolves the next upcoming stop for a position on a fixed route.

    Stop along-route distances are computed once; stops are assumed to be
    listed in travel order.
    """

    def __init__(self, route: RouteConfig, *, buffer_m: float = 50.0) -> None:
        self._route = route
        self._buffer_m = buffer_m
        coordinates = route.polyline.coordinates
        self._stop_offsets: list[tuple[str, float]] = []
        for stop in route.stops:
            offset = along_distance(stop.location, coordinates)
            self._stop_offsets.append((stop.name, offset if offset is not None else 0.0))

    @property
    def route(self) -> RouteConfig:
        return self._route

    def next_halt(self, point: GpsPoint) -> str:
        """Name of the first stop more than the buffer ahead of *point*.

        Returns the route's end label once every stop is behind the rider,
        and ``"Unknown"`` without a fix or on a degenerate route.
        """
        if not point.has_fix:
            return UNKNOWN_HALT
        rider_along = along_distance(point.lng_lat, self._route.polyline.coordinates)
        if rider_along is None:
            return UNKNOWN_HALT
        for name, stop_along in self._stop_offsets:
            if stop_along > rider_along + self._buffer_m:
                return name
        return self._route.end_label


def next_halt(point: GpsPoint, route: RouteConfig, *, buffer_m: float = 50.0) -> str:
    """One-shot form of :meth:`RouteProjector.next_halt`."""
    return RouteProjector(route, buffer_m=buffer_m).next_halt(point)
