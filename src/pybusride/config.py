"""Client and detection configuration for pybusride."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pybusride._constants import BASE_URL, DEFAULT_COLLECTION, DEFAULT_ROUTE_ID
from pybusride.exceptions import BusRideConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, raw: str, cast: type[float] | type[int]) -> float | int:
    try:
        return cast(raw)
    except ValueError as exc:
        raise BusRideConfigError(f"{env_key} must be numeric, got {raw!r}") from exc


@dataclasses.dataclass(frozen=True)
class DetectionConfig:
    """Tunable thresholds for the ride-detection engine.

    Parameters
    ----------
    route_match_radius_m : float
        Corridor half-width around the route polyline.
    stop_speed_threshold_kmh : float
        Samples at or below this speed count as stopped.
    stop_min_dwell_s : float
        Minimum contiguous stopped duration for a stop event.
    stop_max_dwell_s : float
        Documented upper dwell bound. Only applied when
        ``enforce_max_dwell`` is set.
    enforce_max_dwell : bool
        Reject dwells longer than ``stop_max_dwell_s`` (e.g. a traffic
        standstill) instead of reporting them as a stop.
    stop_lookback_s : float
        Window before "now" scanned for a dwell.
    stop_match_radius_m : float
        Radius around a configured stop that counts as "at" it.
    cluster_radius_m : float
        Maximum distance between two riders for cluster agreement.
    cluster_speed_delta_mps : float
        Maximum (exclusive) speed difference for cluster agreement.
    moving_speed_kmh : float
        On-route samples above this speed confirm a ride.
    report_speed_gate_kmh : float
        Reports are only sent above this speed.
    report_confidence_gate : float
        Unconfirmed sessions report only above this confidence.
    stopped_confidence, moving_confidence : float
        Confidence assigned to stop and moving classifications.
    cluster_confidence_boost : float
        Confidence added when a peer corroborates the current fix.
    halt_buffer_m : float
        A stop must be this far ahead along the route to be the next halt.
    history_size : int
        Cap on the per-session position history.
    """

    route_match_radius_m: float = 20.0
    stop_speed_threshold_kmh: float = 5.0
    stop_min_dwell_s: float = 30.0
    stop_max_dwell_s: float = 60.0
    enforce_max_dwell: bool = False
    stop_lookback_s: float = 90.0
    stop_match_radius_m: float = 30.0
    cluster_radius_m: float = 10.0
    cluster_speed_delta_mps: float = 2.0
    moving_speed_kmh: float = 15.0
    report_speed_gate_kmh: float = 15.0
    report_confidence_gate: float = 0.4
    stopped_confidence: float = 0.8
    moving_confidence: float = 0.5
    cluster_confidence_boost: float = 0.2
    halt_buffer_m: float = 50.0
    history_size: int = 50

    def __post_init__(self) -> None:
        if self.history_size < 1:
            raise BusRideConfigError(f"history_size must be >= 1, got {self.history_size}")
        if self.stop_max_dwell_s < self.stop_min_dwell_s:
            raise BusRideConfigError("stop_max_dwell_s must not be smaller than stop_min_dwell_s")


@dataclasses.dataclass(frozen=True)
class BusRideConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Records backend base URL.
    project_id : str
        Backend project identifier (informational, sent nowhere).
    api_key : str or None
        Backend API key. Keys starting with ``ik_`` are sent as a bearer
        token, anything else as ``x-api-key``. Without a key, reports and
        peer polls are skipped.
    collection : str
        Records table holding one row per ride session.
    route_id : str
        Route identifier stamped on every report.
    poll_interval : float
        Seconds between peer-feed polls.
    peer_window_s : float
        Only peers reported within this many seconds are returned.
    request_timeout : float
        Total timeout for one HTTP request, in seconds.
    detection : DetectionConfig
        Engine thresholds.
    """

    base_url: str = BASE_URL
    project_id: str = ""
    api_key: str | None = None
    collection: str = DEFAULT_COLLECTION
    route_id: str = DEFAULT_ROUTE_ID
    poll_interval: float = 5.0
    peer_window_s: float = 60.0
    request_timeout: float = 10.0
    detection: DetectionConfig = dataclasses.field(default_factory=DetectionConfig)

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_env(cls, **overrides: Any) -> BusRideConfig:
        """Create configuration from environment variables.

        Reads ``BUSRIDE_BASE_URL``, ``BUSRIDE_PROJECT_ID``, ``BUSRIDE_API_KEY``
        and the optional ``BUSRIDE_*`` tuning variables. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        BusRideConfig
            Populated configuration.
        """
        env = os.environ

        detection_kwargs: dict[str, Any] = {}
        _ENV_DETECTION_MAP: dict[str, tuple[str, type[float] | type[int]]] = {
            "BUSRIDE_ROUTE_MATCH_RADIUS_M": ("route_match_radius_m", float),
            "BUSRIDE_STOP_SPEED_THRESHOLD_KMH": ("stop_speed_threshold_kmh", float),
            "BUSRIDE_STOP_MIN_DWELL_S": ("stop_min_dwell_s", float),
            "BUSRIDE_STOP_MAX_DWELL_S": ("stop_max_dwell_s", float),
            "BUSRIDE_STOP_MATCH_RADIUS_M": ("stop_match_radius_m", float),
            "BUSRIDE_CLUSTER_RADIUS_M": ("cluster_radius_m", float),
            "BUSRIDE_CLUSTER_SPEED_DELTA_MPS": ("cluster_speed_delta_mps", float),
            "BUSRIDE_REPORT_SPEED_GATE_KMH": ("report_speed_gate_kmh", float),
            "BUSRIDE_HISTORY_SIZE": ("history_size", int),
        }
        for env_key, (field_name, cast) in _ENV_DETECTION_MAP.items():
            val = env.get(env_key)
            if val is not None:
                detection_kwargs[field_name] = _env_number(env_key, val, cast)

        enforce_env = env.get("BUSRIDE_ENFORCE_MAX_DWELL")
        if enforce_env is not None:
            detection_kwargs["enforce_max_dwell"] = _env_bool(enforce_env, False)

        # Allow overriding detection fields via a nested dict
        detection_overrides = overrides.pop("detection", None)
        if isinstance(detection_overrides, dict):
            detection_kwargs.update(detection_overrides)
        elif isinstance(detection_overrides, DetectionConfig):
            detection_kwargs = dataclasses.asdict(detection_overrides)

        detection = DetectionConfig(**detection_kwargs)

        _ENV_CONFIG_MAP = {
            "BUSRIDE_BASE_URL": "base_url",
            "BUSRIDE_PROJECT_ID": "project_id",
            "BUSRIDE_API_KEY": "api_key",
            "BUSRIDE_COLLECTION": "collection",
            "BUSRIDE_ROUTE_ID": "route_id",
        }
        config_kwargs: dict[str, Any] = {"detection": detection}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_FLOAT_MAP = {
            "BUSRIDE_POLL_INTERVAL": "poll_interval",
            "BUSRIDE_PEER_WINDOW_S": "peer_window_s",
            "BUSRIDE_REQUEST_TIMEOUT": "request_timeout",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, float)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
