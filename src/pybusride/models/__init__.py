"""Data models for positions, routes and backend records."""

from pybusride.models._base import BusRideBaseModel
from pybusride.models.gps import GpsPoint
from pybusride.models.report import BusLocationReport, LatLng, PeerSession
from pybusride.models.route import BusStop, LngLat, RouteConfig, RoutePolyline

__all__ = [
    "BusLocationReport",
    "BusRideBaseModel",
    "BusStop",
    "GpsPoint",
    "LatLng",
    "LngLat",
    "PeerSession",
    "RouteConfig",
    "RoutePolyline",
]
