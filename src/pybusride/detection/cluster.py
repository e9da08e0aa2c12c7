"""Multi-rider cluster corroboration."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from itertools import combinations

from pybusride.geo import distance_point_to_point
from pybusride.models.gps import GpsPoint


def _agree(a: GpsPoint, b: GpsPoint, radius_m: float, speed_delta_mps: float) -> bool:
    if distance_point_to_point(a.lng_lat, b.lng_lat) > radius_m:
        return False
    return abs((a.speed_mps or 0.0) - (b.speed_mps or 0.0)) < speed_delta_mps


def validate_cluster(
    points: Sequence[GpsPoint],
    *,
    radius_m: float = 10.0,
    speed_delta_mps: float = 2.0,
) -> bool:
    """Whether any two riders are within *radius_m* and moving at a similar speed.

    Points without a fix are ignored. Short-circuits on the first agreeing pair.
    """
    located = [p for p in points if p.has_fix]
    if len(located) < 2:
        return False
    return any(_agree(a, b, radius_m, speed_delta_mps) for a, b in combinations(located, 2))


def corroborates(
    point: GpsPoint,
    peers: Iterable[GpsPoint],
    *,
    radius_m: float = 10.0,
    speed_delta_mps: float = 2.0,
) -> bool:
    """Whether at least one peer forms an agreeing pair with *point*."""
    return any(validate_cluster((point, peer), radius_m=radius_m, speed_delta_mps=speed_delta_mps) for peer in peers)
