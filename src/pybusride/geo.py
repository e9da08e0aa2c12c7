"""Geospatial primitives on (longitude, latitude) degree pairs.

All distances are great-circle meters (haversine on a spherical Earth).
Nearest points on a segment are found in a local equirectangular frame
centred on the query point, which is accurate to well under a meter for
segments of a few kilometers, then measured with haversine.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from pybusride._constants import EARTH_RADIUS_M
from pybusride.models.route import LngLat


@dataclass(frozen=True)
class PolylineProjection:
    """Closest point on a polyline to a query point."""

    location: LngLat
    distance_m: float
    along_m: float
    segment_index: int


def distance_point_to_point(a: LngLat, b: LngLat) -> float:
    """Great-circle distance in meters between two ``(lng, lat)`` points."""
    lon1, lat1, lon2, lat2 = map(math.radians, (a[0], a[1], b[0], b[1]))
    dlon = lon2 - lon1
    dlat = lat2 - lat1
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    # Clamp guards against h drifting past 1.0 for antipodal points.
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(min(1.0, h)))


def _nearest_on_segment(point: LngLat, start: LngLat, end: LngLat) -> tuple[LngLat, float]:
    """Return the nearest point on ``start -> end`` and its fraction along the segment."""
    scale_x = math.cos(math.radians(point[1]))
    ax = (start[0] - point[0]) * scale_x
    ay = start[1] - point[1]
    dx = (end[0] - start[0]) * scale_x
    dy = end[1] - start[1]
    length_sq = dx * dx + dy * dy
    if length_sq == 0.0:
        return start, 0.0
    t = max(0.0, min(1.0, -(ax * dx + ay * dy) / length_sq))
    nearest = (start[0] + t * (end[0] - start[0]), start[1] + t * (end[1] - start[1]))
    return nearest, t


def segment_lengths(coordinates: Sequence[LngLat]) -> list[float]:
    """Great-circle length of each consecutive segment."""
    return [distance_point_to_point(coordinates[i], coordinates[i + 1]) for i in range(len(coordinates) - 1)]


def project_onto_polyline(point: LngLat, coordinates: Sequence[LngLat]) -> PolylineProjection | None:
    """Project *point* onto the polyline treated as a chain of straight segments.

    Returns ``None`` for a degenerate polyline (fewer than two vertices).
    On equal distances the earliest segment wins.
    """
    if len(coordinates) < 2:
        return None

    best: PolylineProjection | None = None
    travelled = 0.0
    for index, length in enumerate(segment_lengths(coordinates)):
        start = coordinates[index]
        nearest, _fraction = _nearest_on_segment(point, start, coordinates[index + 1])
        distance = distance_point_to_point(point, nearest)
        if best is None or distance < best.distance_m:
            best = PolylineProjection(
                location=nearest,
                distance_m=distance,
                along_m=travelled + min(length, distance_point_to_point(start, nearest)),
                segment_index=index,
            )
        travelled += length
    return best


def distance_point_to_polyline(point: LngLat, coordinates: Sequence[LngLat]) -> float:
    """Minimum distance in meters from *point* to the polyline.

    A degenerate polyline is infinitely far away.
    """
    projection = project_onto_polyline(point, coordinates)
    if projection is None:
        return math.inf
    return projection.distance_m


def along_distance(point: LngLat, coordinates: Sequence[LngLat]) -> float | None:
    """Along-route distance in meters from the first vertex to *point*'s projection."""
    projection = project_onto_polyline(point, coordinates)
    if projection is None:
        return None
    return projection.along_m
