"""Route corridor matching."""

from __future__ import annotations

from pybusride.geo import distance_point_to_polyline
from pybusride.models.gps import GpsPoint
from pybusride.models.route import RoutePolyline


def is_on_route(point: GpsPoint, polyline: RoutePolyline, *, radius_m: float = 20.0) -> bool:
    """Whether *point* lies within *radius_m* of the route polyline.

    A fix without coordinates or a degenerate route is never on-route.
    """
    if not point.has_fix or polyline.is_degenerate:
        return False
    return distance_point_to_polyline(point.lng_lat, polyline.coordinates) <= radius_m
