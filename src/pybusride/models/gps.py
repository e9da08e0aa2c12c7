"""GPS fix model."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from pybusride._constants import mps_to_kmh
from pybusride.ingestion.normalize import epoch_ms, safe_float, to_epoch_ms

_MS_KEYS = ("timestamp_ms", "timestampMs", "timestamp")


class GpsPoint(BaseModel):
    """One location sample from the position source.

    Coordinates are ``None`` when the source delivered no usable fix;
    such points are never stored in a position history.

    Parameters
    ----------
    latitude : float or None
        Latitude in degrees.
    longitude : float or None
        Longitude in degrees.
    timestamp_ms : int or None
        Milliseconds, stored as given (a relative replay clock is fine).
        Only the loose ``time`` payload key is read as epoch seconds when
        it is too small to be epoch milliseconds.
    speed_mps : float or None
        Ground speed in m/s, ``None`` when the sensor did not report one.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    latitude: float | None = Field(default=None, validation_alias=AliasChoices("latitude", "lat"))
    longitude: float | None = Field(default=None, validation_alias=AliasChoices("longitude", "lng", "lon"))
    timestamp_ms: int | None = Field(
        default=None,
        validation_alias=AliasChoices("timestamp_ms", "timestampMs", "timestamp", "time"),
    )
    speed_mps: float | None = Field(default=None, validation_alias=AliasChoices("speed_mps", "speedMps", "speed"))

    @field_validator("latitude", "longitude", "speed_mps", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> float | None:
        return safe_float(value)

    @field_validator("latitude")
    @classmethod
    def _check_latitude(cls, value: float | None) -> float | None:
        if value is not None and not -90.0 <= value <= 90.0:
            return None
        return value

    @field_validator("longitude")
    @classmethod
    def _check_longitude(cls, value: float | None) -> float | None:
        if value is not None and not -180.0 <= value <= 180.0:
            return None
        return value

    @model_validator(mode="before")
    @classmethod
    def _scale_loose_time(cls, values: Any) -> Any:
        if isinstance(values, dict) and "time" in values and not any(k in values for k in _MS_KEYS):
            return {**values, "time": to_epoch_ms(values["time"])}
        return values

    @field_validator("timestamp_ms", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> int | None:
        return epoch_ms(value)

    @property
    def has_fix(self) -> bool:
        """Whether both coordinates are present."""
        return self.latitude is not None and self.longitude is not None

    @property
    def lng_lat(self) -> tuple[float, float]:
        """``(longitude, latitude)`` pair, the vertex order used for routes."""
        if self.latitude is None or self.longitude is None:
            raise ValueError("GPS point has no fix")
        return (self.longitude, self.latitude)

    @property
    def speed_kmh(self) -> float:
        """Speed in km/h; an absent speed counts as 0."""
        return mps_to_kmh(self.speed_mps)
