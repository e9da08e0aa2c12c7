"""Tests for pydantic model parsing of fixes, reports, peers and routes."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from pybusride.exceptions import BusRideConfigError
from pybusride.models.gps import GpsPoint
from pybusride.models.report import BusLocationReport, LatLng, PeerSession
from pybusride.models.route import BusStop, RouteConfig, RoutePolyline

# ------------------------------------------------------------------
# GpsPoint
# ------------------------------------------------------------------


class TestGpsPoint:
    def test_browser_style_payload(self) -> None:
        point = GpsPoint.model_validate({"lat": "6.92", "lng": 79.87, "timestamp": 1_770_000_000_000, "speed": None})

        assert point.latitude == 6.92
        assert point.longitude == 79.87
        assert point.timestamp_ms == 1_770_000_000_000
        assert point.speed_mps is None
        assert point.speed_kmh == 0.0
        assert point.lng_lat == (79.87, 6.92)

    def test_millisecond_timestamp_is_stored_as_given(self) -> None:
        assert GpsPoint(timestamp_ms=10_000).timestamp_ms == 10_000
        assert GpsPoint.model_validate({"timestampMs": 0}).timestamp_ms == 0
        assert GpsPoint.model_validate({"timestamp": "2500"}).timestamp_ms == 2500

    def test_second_resolution_timestamp_is_scaled(self) -> None:
        assert GpsPoint.model_validate({"time": 1_770_000_000}).timestamp_ms == 1_770_000_000_000

    def test_explicit_ms_key_wins_over_loose_time(self) -> None:
        point = GpsPoint.model_validate({"timestamp": 10_000, "time": 10})
        assert point.timestamp_ms == 10_000

    def test_datetime_timestamp(self) -> None:
        ts = datetime(2026, 1, 1, tzinfo=UTC)
        assert GpsPoint(timestamp_ms=ts).timestamp_ms == int(ts.timestamp() * 1000)

    @pytest.mark.parametrize("bad", ["--", "", "abc", float("nan"), True])
    def test_unusable_coordinates_mean_no_fix(self, bad: object) -> None:
        point = GpsPoint.model_validate({"latitude": bad, "longitude": 79.87})
        assert point.latitude is None
        assert point.has_fix is False

    def test_out_of_range_coordinates_are_dropped(self) -> None:
        point = GpsPoint(latitude=123.0, longitude=-200.0)
        assert point.latitude is None
        assert point.longitude is None

    def test_lng_lat_requires_fix(self) -> None:
        with pytest.raises(ValueError):
            _ = GpsPoint().lng_lat

    def test_speed_conversion(self) -> None:
        assert GpsPoint(speed_mps=10.0).speed_kmh == pytest.approx(36.0)

    def test_is_frozen(self) -> None:
        point = GpsPoint(latitude=6.92, longitude=79.87)
        with pytest.raises(ValidationError):
            point.latitude = 7.0  # type: ignore[misc]


# ------------------------------------------------------------------
# BusLocationReport / PeerSession
# ------------------------------------------------------------------


class TestBusLocationReport:
    def test_payload_uses_record_keys(self) -> None:
        report = BusLocationReport(
            session_id="session_1_abc",
            location=LatLng(lat=6.92, lng=79.87),
            speed=11.1,
            confidence=0.5,
            last_updated=datetime(2026, 1, 1, tzinfo=UTC),
            route_id="138",
        )

        assert report.to_payload() == {
            "id": "session_1_abc",
            "location": {"lat": 6.92, "lng": 79.87},
            "speed": 11.1,
            "confidence": 0.5,
            "lastUpdated": "2026-01-01T00:00:00.000Z",
            "routeId": "138",
        }

    def test_last_updated_defaults_to_now(self) -> None:
        before = datetime.now(UTC)
        report = BusLocationReport(session_id="s", location=LatLng(lat=0.0, lng=0.0), route_id="138")
        assert report.last_updated >= before
        assert report.to_payload()["lastUpdated"].endswith("Z")

    @pytest.mark.parametrize("confidence", [-0.1, 1.5])
    def test_confidence_must_be_unit_interval(self, confidence: float) -> None:
        with pytest.raises(ValidationError):
            BusLocationReport(
                session_id="s",
                location=LatLng(lat=0.0, lng=0.0),
                confidence=confidence,
                route_id="138",
            )


class TestPeerSession:
    def test_parses_backend_row(self) -> None:
        peer = PeerSession.model_validate(
            {
                "id": 42,
                "location": {"lat": 6.92, "lng": 79.87},
                "speed": "11.5",
                "confidence": 0.7,
                "lastUpdated": "2026-01-01T00:00:30.000Z",
                "routeId": "138",
                "extra": "ignored",
            }
        )

        assert peer.session_id == "42"
        assert peer.speed == 11.5
        assert peer.last_updated == datetime(2026, 1, 1, 0, 0, 30, tzinfo=UTC)
        assert peer.route_id == "138"

    def test_placeholders_fall_back_to_defaults(self) -> None:
        peer = PeerSession.model_validate(
            {"id": "s", "location": {"lat": 1.0, "lng": 2.0}, "speed": "--", "lastUpdated": None}
        )
        assert peer.speed is None
        assert peer.last_updated is None

    def test_missing_location_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PeerSession.model_validate({"id": "s"})

    def test_to_gps_point(self) -> None:
        peer = PeerSession.model_validate(
            {"id": "s", "location": {"lat": 6.92, "lng": 79.87}, "speed": 4.0, "lastUpdated": "2026-01-01T00:00:00Z"}
        )
        point = peer.to_gps_point()

        assert point.lng_lat == (79.87, 6.92)
        assert point.speed_mps == 4.0
        assert point.timestamp_ms == int(datetime(2026, 1, 1, tzinfo=UTC).timestamp() * 1000)


# ------------------------------------------------------------------
# RouteConfig
# ------------------------------------------------------------------

_LINE = {
    "type": "Feature",
    "properties": {},
    "geometry": {"type": "LineString", "coordinates": [[79.8612, 6.9271], [79.87, 6.92], [79.89, 6.90]]},
}
_STOPS = [
    {"id": "a", "name": "Fort", "location": [79.8612, 6.9271]},
    {"id": "b", "name": "Town Hall", "location": [79.87, 6.92]},
]


class TestRouteConfig:
    def test_from_geojson_feature(self) -> None:
        route = RouteConfig.from_geojson(_LINE, _STOPS, route_id=" 138 ", name="Route 138", end_label="Nugegoda (End)")

        assert route.route_id == "138"
        assert len(route.polyline.coordinates) == 3
        assert [s.id for s in route.stops] == ["a", "b"]
        assert route.stops[1].latitude == 6.92
        assert route.end_label == "Nugegoda (End)"

    def test_from_bare_geometry_keeps_default_end_label(self) -> None:
        route = RouteConfig.from_geojson(_LINE["geometry"], [], route_id="138")
        assert route.end_label == "End of Route"
        assert route.stops == ()

    @pytest.mark.parametrize(
        "feature",
        [
            {"type": "Point", "coordinates": [79.87, 6.92]},
            {"type": "LineString", "coordinates": [[79.87, 6.92]]},
            {"type": "LineString", "coordinates": [[79.87, 6.92], ["x"]]},
            {"type": "Feature", "geometry": None},
        ],
    )
    def test_from_geojson_rejects_bad_geometry(self, feature: dict) -> None:
        with pytest.raises(BusRideConfigError):
            RouteConfig.from_geojson(feature, _STOPS, route_id="138")

    def test_from_geojson_rejects_bad_stop(self) -> None:
        with pytest.raises(BusRideConfigError):
            RouteConfig.from_geojson(_LINE, [{"id": "a", "name": "Fort"}], route_id="138")

    def test_duplicate_stop_ids_rejected(self) -> None:
        stop = BusStop(id="a", name="A", location=(79.87, 6.92))
        with pytest.raises(ValidationError):
            RouteConfig(route_id="138", polyline=RoutePolyline(coordinates=((0.0, 0.0), (1.0, 1.0))), stops=(stop, stop))

    def test_blank_route_id_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RouteConfig(route_id="  ", polyline=RoutePolyline(coordinates=()))

    def test_degenerate_polyline_is_allowed_directly(self) -> None:
        route = RouteConfig(route_id="x", polyline=RoutePolyline(coordinates=((79.87, 6.92),)))
        assert route.polyline.is_degenerate is True
