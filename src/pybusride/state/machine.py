"""Deterministic ride state machine.

This module contains *no* geometry. The orchestrator evaluates the
detection filters and hands the results here; the transition table below
is the single place that decides state, status, ride flag and confidence.

==============================  =============  =========  ==================
Observation                     State          Ride flag  Confidence
==============================  =============  =========  ==================
off the corridor                Idle           False      0.0
on-route, dwelling at a stop    ConfirmedRide  True       stopped (0.8)
on-route, faster than gate      ConfirmedRide  True       moving (0.5)
on-route, slow, flag was set    ConfirmedRide  True       0.0
on-route, slow, flag not set    Candidate      False      0.0
==============================  =============  =========  ==================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from pybusride.config import DetectionConfig


class RideState(StrEnum):
    IDLE = "idle"
    CANDIDATE = "candidate"
    CONFIRMED = "confirmed"


class RideStatus(StrEnum):
    INITIALIZING = "initializing"
    NO_FIX = "no-fix"
    OFF_ROUTE = "off-route"
    CANDIDATE = "on-route-candidate"
    STOPPED = "stopped-at"
    MOVING = "moving-on-route"
    SLOW = "moving-on-route (slow/traffic)"
    SOURCE_ERROR = "source-error"


class SourceError(StrEnum):
    """Position-source failures surfaced as status only."""

    UNSUPPORTED = "geolocation-unsupported"
    PERMISSION_DENIED = "permission-denied"
    UNAVAILABLE = "position-unavailable"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class Observation:
    """Detection results for the newest fix."""

    on_route: bool
    stop_id: str | None
    speed_kmh: float


@dataclass(frozen=True)
class Decision:
    state: RideState
    status: RideStatus
    ride_flag: bool
    confidence: float
    stop_id: str | None = None

    @property
    def label(self) -> str:
        """Status string for the presentation layer."""
        if self.status == RideStatus.STOPPED and self.stop_id:
            return f"{self.status.value}-{self.stop_id}"
        return self.status.value


def decide(observation: Observation, *, ride_flag: bool, config: DetectionConfig) -> Decision:
    """Apply the transition table to one observation.

    Leaving the corridor always demotes; a slow on-route sample never does.
    """
    if not observation.on_route:
        return Decision(RideState.IDLE, RideStatus.OFF_ROUTE, ride_flag=False, confidence=0.0)
    if observation.stop_id is not None:
        return Decision(
            RideState.CONFIRMED,
            RideStatus.STOPPED,
            ride_flag=True,
            confidence=config.stopped_confidence,
            stop_id=observation.stop_id,
        )
    if observation.speed_kmh > config.moving_speed_kmh:
        return Decision(RideState.CONFIRMED, RideStatus.MOVING, ride_flag=True, confidence=config.moving_confidence)
    if ride_flag:
        return Decision(RideState.CONFIRMED, RideStatus.SLOW, ride_flag=True, confidence=0.0)
    return Decision(RideState.CANDIDATE, RideStatus.CANDIDATE, ride_flag=False, confidence=0.0)


def should_report(*, speed_kmh: float, ride_flag: bool, confidence: float, config: DetectionConfig) -> bool:
    """Only fast samples from a confirmed or likely ride are persisted."""
    if speed_kmh <= config.report_speed_gate_kmh:
        return False
    return ride_flag or confidence > config.report_confidence_gate
