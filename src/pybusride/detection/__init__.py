"""Ride-detection filters.

Each filter is a pure function over immutable inputs; the orchestrator in
:mod:`pybusride.tracker` combines them per fix.
"""

from pybusride.detection.cluster import corroborates, validate_cluster
from pybusride.detection.dwell import detect_stop, stopped_duration_ms
from pybusride.detection.matching import is_on_route
from pybusride.detection.projection import RouteProjector, next_halt

__all__ = [
    "RouteProjector",
    "corroborates",
    "detect_stop",
    "is_on_route",
    "next_halt",
    "stopped_duration_ms",
    "validate_cluster",
]
