"""Records exchanged with the persistence collaborator."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import Field, field_serializer, field_validator

from pybusride.ingestion.normalize import parse_iso_datetime, safe_float, to_iso8601
from pybusride.models._base import BusRideBaseModel
from pybusride.models.gps import GpsPoint


def _utcnow() -> datetime:
    return datetime.now(UTC)


class LatLng(BusRideBaseModel):
    """Record-level location, ``{"lat": ..., "lng": ...}``."""

    lat: float
    lng: float


class BusLocationReport(BusRideBaseModel):
    """Upsert payload for one confirmed-bus session.

    Keyed by ``session_id`` (serialized as ``id``); the backend keeps the
    last write per session.
    """

    session_id: str = Field(alias="id")
    location: LatLng
    speed: float = Field(default=0.0, ge=0.0)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    last_updated: datetime = Field(default_factory=_utcnow)
    route_id: str

    @field_serializer("last_updated")
    def _serialize_last_updated(self, value: datetime) -> str:
        return to_iso8601(value)

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-ready record body."""
        return self.model_dump(by_alias=True, mode="json")


class PeerSession(BusRideBaseModel):
    """Another rider's last reported position, as returned by the peer feed."""

    session_id: str = Field(alias="id")
    location: LatLng
    speed: float | None = None
    confidence: float | None = None
    last_updated: datetime | None = None
    route_id: str | None = None

    @field_validator("session_id", "route_id", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("speed", "confidence", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> float | None:
        return safe_float(value)

    @field_validator("last_updated", mode="before")
    @classmethod
    def _coerce_last_updated(cls, value: Any) -> datetime | None:
        return parse_iso_datetime(value)

    def to_gps_point(self) -> GpsPoint:
        """Convert to a :class:`GpsPoint` for cluster corroboration."""
        timestamp_ms = int(self.last_updated.timestamp() * 1000) if self.last_updated is not None else None
        return GpsPoint(
            latitude=self.location.lat,
            longitude=self.location.lng,
            timestamp_ms=timestamp_ms,
            speed_mps=self.speed,
        )
