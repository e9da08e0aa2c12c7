"""Built-in route data.

Route 138, Colombo Fort to Homagama. Vertices and stops are
``(longitude, latitude)``; stops are listed in direction of travel.
"""

from __future__ import annotations

from pybusride.models.route import BusStop, RouteConfig, RoutePolyline

ROUTE_138_POLYLINE = RoutePolyline(
    coordinates=(
        (79.8612, 6.9271),  # Fort
        (79.8650, 6.9250),
        (79.8700, 6.9200),  # Town Hall
        (79.8800, 6.9100),
        (79.8900, 6.9000),  # Nugegoda approach
        (79.9000, 6.8900),
        (79.9100, 6.8800),  # Maharagama
        (79.9200, 6.8700),
        (79.9300, 6.8600),  # Kottawa
        (79.9400, 6.8500),  # Homagama
    )
)

ROUTE_138_STOPS: tuple[BusStop, ...] = (
    BusStop(id="stop_1", name="Fort Main", location=(79.8612, 6.9271)),
    BusStop(id="stop_2", name="Town Hall", location=(79.8700, 6.9200)),
    BusStop(id="stop_3", name="Nugegoda", location=(79.8900, 6.9000)),
    BusStop(id="stop_4", name="Maharagama", location=(79.9100, 6.8800)),
    BusStop(id="stop_5", name="Homagama", location=(79.9400, 6.8500)),
)

ROUTE_138 = RouteConfig(
    route_id="138",
    name="Route 138",
    polyline=ROUTE_138_POLYLINE,
    stops=ROUTE_138_STOPS,
    end_label="Homagama (End)",
)
