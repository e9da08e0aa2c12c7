"""Static route configuration: polyline, ordered stops and labels."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from pybusride.exceptions import BusRideConfigError

LngLat = tuple[float, float]
"""A ``(longitude, latitude)`` vertex in degrees, GeoJSON order."""


class BusStop(BaseModel):
    """A named stop on the route.

    Parameters
    ----------
    id : str
        Unique stop identifier.
    name : str
        Display name.
    location : tuple[float, float]
        ``(longitude, latitude)`` in degrees.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    id: str
    name: str
    location: LngLat

    @property
    def longitude(self) -> float:
        return self.location[0]

    @property
    def latitude(self) -> float:
        return self.location[1]


class RoutePolyline(BaseModel):
    """Ordered route vertices.

    Construction does not enforce a minimum vertex count; detection code
    degrades on a degenerate polyline instead of failing.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    coordinates: tuple[LngLat, ...]

    @property
    def is_degenerate(self) -> bool:
        return len(self.coordinates) < 2


class RouteConfig(BaseModel):
    """A fixed route: corridor geometry plus stops in direction of travel."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    route_id: str
    name: str = ""
    polyline: RoutePolyline
    stops: tuple[BusStop, ...] = ()
    end_label: str = "End of Route"

    @field_validator("route_id")
    @classmethod
    def _normalize_route_id(cls, value: str) -> str:
        route_id = value.strip()
        if not route_id:
            raise ValueError("route_id must be non-empty")
        return route_id

    @model_validator(mode="after")
    def _check_unique_stop_ids(self) -> RouteConfig:
        seen: set[str] = set()
        for stop in self.stops:
            if stop.id in seen:
                raise ValueError(f"duplicate stop id {stop.id!r}")
            seen.add(stop.id)
        return self

    @classmethod
    def from_geojson(
        cls,
        feature: Mapping[str, Any],
        stops: Sequence[Mapping[str, Any] | BusStop],
        *,
        route_id: str,
        name: str = "",
        end_label: str | None = None,
    ) -> RouteConfig:
        """Build a route from a GeoJSON ``LineString`` Feature and a stop list.

        Unlike direct construction this rejects a degenerate route.

        Raises
        ------
        BusRideConfigError
            If the feature is not a LineString with at least two vertices,
            or the stop list is invalid.
        """
        geometry = feature.get("geometry") if feature.get("type") == "Feature" else feature
        if not isinstance(geometry, Mapping) or geometry.get("type") != "LineString":
            raise BusRideConfigError("Route geometry must be a GeoJSON LineString")

        raw_coords = geometry.get("coordinates")
        if not isinstance(raw_coords, Sequence) or len(raw_coords) < 2:
            raise BusRideConfigError("Route polyline needs at least two vertices")

        try:
            coordinates = tuple((float(vertex[0]), float(vertex[1])) for vertex in raw_coords)
        except (TypeError, ValueError, IndexError) as exc:
            raise BusRideConfigError(f"Invalid route vertex: {exc}") from exc

        kwargs: dict[str, Any] = {
            "route_id": route_id,
            "name": name,
            "polyline": RoutePolyline(coordinates=coordinates),
        }
        if end_label is not None:
            kwargs["end_label"] = end_label
        try:
            kwargs["stops"] = tuple(
                stop if isinstance(stop, BusStop) else BusStop.model_validate(stop) for stop in stops
            )
            return cls(**kwargs)
        except ValidationError as exc:
            raise BusRideConfigError(f"Invalid route configuration: {exc}") from exc
