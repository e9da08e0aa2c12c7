"""Scripted position source ("ghost ride").

Replays a simulated Route 138 trip (Fort, Town Hall, Nugegoda,
Maharagama, Homagama) with a 45 second halt at each of the four stops, so
the engine can be exercised without a live GPS sensor.
"""

from __future__ import annotations

import asyncio
import random
import time
from collections.abc import AsyncIterator, Sequence

from pybusride.models.gps import GpsPoint

# (lat, lng, speed m/s, offset ms) for the moving legs.
_LEG_TO_TOWN_HALL = (
    (6.9271, 79.8612, 8.3, 0),
    (6.9265, 79.8620, 9.7, 1000),
    (6.9258, 79.8630, 11.1, 2000),
    (6.9250, 79.8640, 10.0, 3000),
    (6.9240, 79.8650, 9.0, 4000),
    (6.9210, 79.8690, 5.5, 5000),
)
_LEG_TO_NUGEGODA = (
    (6.9190, 79.8710, 5.0, 52000),
    (6.9100, 79.8800, 11.1, 60000),
    (6.9000, 79.8900, 11.1, 120000),
)
_LEG_TO_MAHARAGAMA = (
    (6.8850, 79.9050, 10.0, 175000),
    (6.8800, 79.9100, 12.0, 240000),
)
_LEG_TO_HOMAGAMA = (
    (6.8600, 79.9300, 12.0, 300000),
    (6.8500, 79.9400, 8.0, 360000),
)

# (lat, lng, first offset ms) for each halt.
_HALTS = (
    (6.9200, 79.8700, 6000),
    (6.8900, 79.9000, 125000),
    (6.8800, 79.9100, 245000),
    (6.8500, 79.9400, 365000),
)

HALT_SAMPLES = 45
JITTER_DEG = 0.00005


def _halt(rng: random.Random, lat: float, lng: float, first_ms: int, start_ms: int) -> list[GpsPoint]:
    return [
        GpsPoint(
            latitude=lat + rng.uniform(-JITTER_DEG, JITTER_DEG),
            longitude=lng + rng.uniform(-JITTER_DEG, JITTER_DEG),
            timestamp_ms=start_ms + first_ms + i * 1000,
            speed_mps=0.0,
        )
        for i in range(HALT_SAMPLES)
    ]


def _leg(leg: Sequence[tuple[float, float, float, int]], start_ms: int) -> list[GpsPoint]:
    return [
        GpsPoint(latitude=lat, longitude=lng, timestamp_ms=start_ms + offset, speed_mps=speed)
        for lat, lng, speed, offset in leg
    ]


def ghost_ride_path(seed: int | None = None, *, start_ms: int | None = None) -> list[GpsPoint]:
    """Build the simulated trip, timestamps relative to *start_ms*.

    *start_ms* defaults to the current wall clock; ``0`` gives a relative clock.

    Halt samples carry a small random jitter; pass *seed* for a
    reproducible path.
    """
    if start_ms is None:
        start_ms = int(time.time() * 1000)
    rng = random.Random(seed)
    legs = (_LEG_TO_TOWN_HALL, _LEG_TO_NUGEGODA, _LEG_TO_MAHARAGAMA, _LEG_TO_HOMAGAMA)
    path: list[GpsPoint] = []
    for leg, (lat, lng, first_ms) in zip(legs, _HALTS, strict=True):
        path.extend(_leg(leg, start_ms))
        path.extend(_halt(rng, lat, lng, first_ms, start_ms))
    return path


async def replay(
    points: Sequence[GpsPoint],
    *,
    interval: float = 1.0,
    loop: bool = False,
    restamp: bool = True,
) -> AsyncIterator[GpsPoint]:
    """Yield *points* one per *interval* seconds.

    With *restamp* each point is stamped with the wall clock at emission,
    the way a live sensor would report it. With *loop* the path restarts
    after the last point until the consumer stops iterating.
    """
    if not points:
        return
    while True:
        for point in points:
            if restamp:
                point = point.model_copy(update={"timestamp_ms": int(time.time() * 1000)})
            yield point
            if interval > 0:
                await asyncio.sleep(interval)
        if not loop:
            return
