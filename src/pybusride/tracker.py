"""Per-session ride classifier.

:class:`PassengerTracker` owns the position history and ride state of one
session. Each fix is processed to completion (history update, route
match, stop dwell, cluster boost, next-halt projection, report decision)
before the call returns. Reporting is handed to an injected callback and
never awaited here.
"""

from __future__ import annotations

import dataclasses
import logging
import math
import time
from collections.abc import Callable, Sequence

from pydantic import BaseModel, ConfigDict

from pybusride._constants import SEARCHING_LABEL
from pybusride.config import DetectionConfig
from pybusride.detection.cluster import corroborates
from pybusride.detection.dwell import detect_stop
from pybusride.detection.matching import is_on_route
from pybusride.detection.projection import RouteProjector
from pybusride.models.gps import GpsPoint
from pybusride.models.report import BusLocationReport, LatLng, PeerSession
from pybusride.models.route import RouteConfig
from pybusride.routes import ROUTE_138
from pybusride.state.history import PositionHistory
from pybusride.state.machine import (
    Decision,
    Observation,
    RideState,
    RideStatus,
    SourceError,
    decide,
    should_report,
)
from pybusride.state.session import RideSession

_logger = logging.getLogger(__name__)

LocationReporter = Callable[[BusLocationReport], None]
"""Fire-and-forget sink for location reports (e.g. ``ReportDispatcher.submit``)."""

PeerSource = Callable[[], Sequence[PeerSession]]
"""Returns the latest immutable snapshot of other active sessions."""


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


class TrackerUpdate(BaseModel):
    """Output published to the presentation layer after every fix.

    Parameters
    ----------
    status : str
        Human/machine readable status, e.g. ``"stopped-at-stop_2"``.
    state : RideState
        Explicit ride state.
    ride_flag : bool
        Whether the session is currently considered a bus ride.
    confidence : float
        Heuristic score in ``[0, 1]`` used to gate reporting.
    current_location : GpsPoint or None
        Newest stored fix.
    current_speed_kmh : int
        Speed of the newest fix, halves rounded up.
    next_halt : str
        Name of the next stop ahead, the end label, or a placeholder.
    stop_id : str or None
        Stop the rider is dwelling at, if any.
    report_submitted : bool
        Whether this fix was handed to the reporter.
    """

    model_config = ConfigDict(frozen=True)

    status: str
    state: RideState
    ride_flag: bool
    confidence: float = 0.0
    current_location: GpsPoint | None = None
    current_speed_kmh: int = 0
    next_halt: str = SEARCHING_LABEL
    stop_id: str | None = None
    report_submitted: bool = False


class PassengerTracker:
    """Classifies a stream of GPS fixes against one fixed route.

    Usage::

        tracker = PassengerTracker(ROUTE_138, reporter=dispatcher.submit, peer_source=feed.peers)
        for point in source:
            update = tracker.process(point)
    """

    def __init__(
        self,
        route: RouteConfig = ROUTE_138,
        *,
        config: DetectionConfig | None = None,
        session_id: str | None = None,
        route_id: str | None = None,
        reporter: LocationReporter | None = None,
        peer_source: PeerSource | None = None,
        clock_ms: Callable[[], int] | None = None,
    ) -> None:
        self._route = route
        self._config = config or DetectionConfig()
        self._route_id = route_id or route.route_id
        self._reporter = reporter
        self._peer_source = peer_source
        self._clock_ms = clock_ms
        self._history = PositionHistory(self._config.history_size)
        self._projector = RouteProjector(route, buffer_m=self._config.halt_buffer_m)
        self._session = RideSession(session_id=session_id) if session_id else RideSession()
        self._last_update = TrackerUpdate(status=self._session.last_status, state=self._session.state, ride_flag=False)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def session(self) -> RideSession:
        return self._session

    @property
    def session_id(self) -> str:
        return self._session.session_id

    @property
    def route(self) -> RouteConfig:
        return self._route

    @property
    def history(self) -> tuple[GpsPoint, ...]:
        return self._history.snapshot()

    @property
    def last_update(self) -> TrackerUpdate:
        return self._last_update

    # ------------------------------------------------------------------
    # Position source entry points
    # ------------------------------------------------------------------

    def process(self, point: GpsPoint) -> TrackerUpdate:
        """Store one fix, classify the session and decide whether to report.

        A late fix (older than the newest stored one) updates the history and
        classification but is never reported.
        """
        if not point.has_fix:
            _logger.debug("Ignoring fix without coordinates session=%s", self.session_id)
            return self._publish_status(RideStatus.NO_FIX.value)

        if point.timestamp_ms is None:
            point = point.model_copy(update={"timestamp_ms": _wall_clock_ms()})
        self._history.add(point)

        decision, latest = self._evaluate()
        if latest is not point:
            _logger.debug(
                "Late fix ts=%s behind newest ts=%s; not reporting session=%s",
                point.timestamp_ms,
                latest.timestamp_ms,
                self.session_id,
            )
            return self._apply(decision, latest, report_submitted=False)

        submitted = False
        if should_report(
            speed_kmh=latest.speed_kmh,
            ride_flag=decision.ride_flag,
            confidence=decision.confidence,
            config=self._config,
        ):
            submitted = self._submit(latest, decision.confidence)
        return self._apply(decision, latest, report_submitted=submitted)

    def classify(self) -> TrackerUpdate:
        """Re-run classification over the stored history without reporting.

        Running this again with no new fixes yields the same result.
        """
        latest = self._history.latest
        if latest is None:
            return self._last_update
        decision, latest = self._evaluate()
        return self._apply(decision, latest, report_submitted=False)

    def source_error(self, kind: SourceError, message: str = "") -> TrackerUpdate:
        """Surface a position-source failure as a status; ride state is untouched."""
        _logger.debug("Position source error kind=%s message=%s", kind.value, message)
        status = f"{RideStatus.SOURCE_ERROR.value}: {kind.value}"
        if message:
            status = f"{status} ({message})"
        return self._publish_status(status)

    def reset(self) -> None:
        """Discard history and ride state; the session id is kept."""
        self._history.clear()
        self._session = RideSession(session_id=self._session.session_id)
        self._last_update = TrackerUpdate(status=self._session.last_status, state=self._session.state, ride_flag=False)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _now_ms(self, latest: GpsPoint) -> int:
        if self._clock_ms is not None:
            return self._clock_ms()
        return latest.timestamp_ms or 0

    def _evaluate(self) -> tuple[Decision, GpsPoint]:
        latest = self._history.latest
        assert latest is not None  # noqa: S101

        on_route = is_on_route(latest, self._route.polyline, radius_m=self._config.route_match_radius_m)
        stop_id = None
        if on_route:
            stop_id = detect_stop(
                self._history.snapshot(),
                self._route.stops,
                now_ms=self._now_ms(latest),
                config=self._config,
            )

        decision = decide(
            Observation(on_route=on_route, stop_id=stop_id, speed_kmh=latest.speed_kmh),
            ride_flag=self._session.ride_flag,
            config=self._config,
        )
        if decision.state != RideState.IDLE and self._corroborated(latest):
            boosted = min(1.0, decision.confidence + self._config.cluster_confidence_boost)
            decision = dataclasses.replace(decision, confidence=boosted)
        return decision, latest

    def _corroborated(self, latest: GpsPoint) -> bool:
        if self._peer_source is None:
            return False
        try:
            peers = [p.to_gps_point() for p in self._peer_source() if p.session_id != self.session_id]
        except Exception:
            _logger.debug("Peer snapshot unavailable; skipping cluster check", exc_info=True)
            return False
        return corroborates(
            latest,
            peers,
            radius_m=self._config.cluster_radius_m,
            speed_delta_mps=self._config.cluster_speed_delta_mps,
        )

    def _submit(self, latest: GpsPoint, confidence: float) -> bool:
        if self._reporter is None:
            return False
        try:
            report = BusLocationReport(
                session_id=self.session_id,
                location=LatLng(lat=latest.latitude, lng=latest.longitude),
                speed=latest.speed_mps or 0.0,
                confidence=confidence,
                route_id=self._route_id,
            )
            self._reporter(report)
        except Exception:
            _logger.warning("Failed to submit location report session=%s", self.session_id, exc_info=True)
            return False
        return True

    def _apply(self, decision: Decision, latest: GpsPoint, *, report_submitted: bool) -> TrackerUpdate:
        if decision.state != self._session.state:
            _logger.debug(
                "Ride state %s -> %s session=%s",
                self._session.state.value,
                decision.state.value,
                self.session_id,
            )
        self._session = self._session.model_copy(
            update={"ride_flag": decision.ride_flag, "state": decision.state, "last_status": decision.label}
        )
        self._last_update = TrackerUpdate(
            status=decision.label,
            state=decision.state,
            ride_flag=decision.ride_flag,
            confidence=decision.confidence,
            current_location=latest,
            current_speed_kmh=math.floor(latest.speed_kmh + 0.5),
            next_halt=self._projector.next_halt(latest),
            stop_id=decision.stop_id,
            report_submitted=report_submitted,
        )
        return self._last_update

    def _publish_status(self, status: str) -> TrackerUpdate:
        self._session = self._session.model_copy(update={"last_status": status})
        self._last_update = self._last_update.model_copy(update={"status": status, "report_submitted": False})
        return self._last_update
