"""Stop-dwell detection over a bounded position history."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pybusride.config import DetectionConfig
from pybusride.geo import distance_point_to_point
from pybusride.models.gps import GpsPoint
from pybusride.models.route import BusStop

_logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = DetectionConfig()


def _recent_points(history: Sequence[GpsPoint], now_ms: int, lookback_s: float) -> list[GpsPoint]:
    window_ms = lookback_s * 1000
    return [
        p for p in history if p.has_fix and p.timestamp_ms is not None and now_ms - p.timestamp_ms <= window_ms
    ]


def stopped_duration_ms(points: Sequence[GpsPoint], *, speed_threshold_kmh: float) -> int:
    """Length of the trailing run of slow samples, newest timestamp minus oldest.

    Walks from the newest point backward and stops at the first sample
    faster than *speed_threshold_kmh*. Absent speeds count as stopped.
    """
    if not points:
        return 0
    latest_ts = points[-1].timestamp_ms or 0
    duration = 0
    for p in reversed(points):
        if p.speed_kmh > speed_threshold_kmh:
            break
        duration = latest_ts - (p.timestamp_ms or 0)
    return duration


def detect_stop(
    history: Sequence[GpsPoint],
    stops: Sequence[BusStop],
    *,
    now_ms: int,
    config: DetectionConfig = _DEFAULT_CONFIG,
) -> str | None:
    """Return the id of the stop the rider is dwelling at, or ``None``.

    *history* must be ordered oldest to newest. *now_ms* is the caller's
    clock; only samples within ``config.stop_lookback_s`` of it are used.
    Stops are checked in configured order and the first one within
    ``config.stop_match_radius_m`` of the newest sample wins.
    """
    if len(history) < 2:
        return None

    recent = _recent_points(history, now_ms, config.stop_lookback_s)
    if not recent:
        return None

    duration_s = stopped_duration_ms(recent, speed_threshold_kmh=config.stop_speed_threshold_kmh) / 1000
    if duration_s < config.stop_min_dwell_s:
        return None
    if config.enforce_max_dwell and duration_s > config.stop_max_dwell_s:
        _logger.debug("Dwell of %.1fs exceeds max %.1fs; not a stop", duration_s, config.stop_max_dwell_s)
        return None

    current = recent[-1].lng_lat
    for stop in stops:
        if distance_point_to_point(current, stop.location) <= config.stop_match_radius_m:
            _logger.debug("Dwell of %.1fs matched stop %s", duration_s, stop.id)
            return stop.id
    return None
