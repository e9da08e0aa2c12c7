"""Internal constants shared across the library."""

BASE_URL = "http://localhost:8000"
USER_AGENT = "pybusride/1"
RECORDS_PATH = "/api/database/records"
DEFAULT_COLLECTION = "bus_sessions"
DEFAULT_ROUTE_ID = "138"

#: Mean Earth radius in meters, as used by the haversine formula.
EARTH_RADIUS_M = 6_371_000.0

MPS_TO_KMH = 3.6

# Display labels for the presentation layer.
SEARCHING_LABEL = "Searching..."
UNKNOWN_HALT = "Unknown"


def mps_to_kmh(speed_mps: float | None) -> float:
    """Convert a speed in m/s to km/h. Absent speed counts as stopped."""
    return (speed_mps or 0.0) * MPS_TO_KMH
