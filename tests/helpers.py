"""Shared builders for the test suite."""

from __future__ import annotations

from pybusride.models.gps import GpsPoint
from pybusride.routes import ROUTE_138

FORT = ROUTE_138.stops[0]
TOWN_HALL = ROUTE_138.stops[1]
HOMAGAMA = ROUTE_138.stops[-1]

BASE_MS = 1_770_000_000_000


def fix(
    lng_lat: tuple[float, float],
    *,
    ts: int = BASE_MS,
    speed: float | None = 0.0,
    dlat: float = 0.0,
) -> GpsPoint:
    return GpsPoint(latitude=lng_lat[1] + dlat, longitude=lng_lat[0], timestamp_ms=ts, speed_mps=speed)
