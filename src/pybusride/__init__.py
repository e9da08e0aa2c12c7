"""pybusride - GPS ride detection for passengers on a fixed bus route."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pybusride")
except PackageNotFoundError:
    __version__ = "0+local"
from pybusride.client import BusRideClient
from pybusride.config import BusRideConfig, DetectionConfig
from pybusride.detection import (
    RouteProjector,
    corroborates,
    detect_stop,
    is_on_route,
    next_halt,
    validate_cluster,
)
from pybusride.exceptions import BusRideConfigError, BusRideError, BusRideTransportError
from pybusride.geo import (
    PolylineProjection,
    distance_point_to_point,
    distance_point_to_polyline,
    project_onto_polyline,
)
from pybusride.ingestion.cluster_feed import ClusterFeed, ClusterSnapshot
from pybusride.ingestion.reports import ReportDispatcher
from pybusride.models import (
    BusLocationReport,
    BusStop,
    GpsPoint,
    LatLng,
    PeerSession,
    RouteConfig,
    RoutePolyline,
)
from pybusride.replay import ghost_ride_path, replay
from pybusride.routes import ROUTE_138
from pybusride.state.history import PositionHistory
from pybusride.state.machine import RideState, RideStatus, SourceError
from pybusride.state.session import RideSession
from pybusride.tracker import PassengerTracker, TrackerUpdate

__all__ = [
    "__version__",
    "BusLocationReport",
    "BusRideClient",
    "BusRideConfig",
    "BusRideConfigError",
    "BusRideError",
    "BusRideTransportError",
    "BusStop",
    "ClusterFeed",
    "ClusterSnapshot",
    "DetectionConfig",
    "GpsPoint",
    "LatLng",
    "PassengerTracker",
    "PeerSession",
    "PolylineProjection",
    "PositionHistory",
    "ROUTE_138",
    "ReportDispatcher",
    "RideSession",
    "RideState",
    "RideStatus",
    "RouteConfig",
    "RoutePolyline",
    "RouteProjector",
    "SourceError",
    "TrackerUpdate",
    "corroborates",
    "detect_stop",
    "distance_point_to_point",
    "distance_point_to_polyline",
    "ghost_ride_path",
    "is_on_route",
    "next_halt",
    "project_onto_polyline",
    "replay",
    "validate_cluster",
]
