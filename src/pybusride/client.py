"""High-level async client for the bus-session records backend."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import AsyncIterator
from datetime import UTC, datetime, timedelta
from typing import Any

import aiohttp
from pydantic import ValidationError

from pybusride._transport import RecordsTransport, Transport
from pybusride.config import BusRideConfig
from pybusride.exceptions import BusRideError
from pybusride.ingestion.cluster_feed import ClusterFeed
from pybusride.ingestion.normalize import to_iso8601
from pybusride.ingestion.reports import ReportDispatcher
from pybusride.models.report import BusLocationReport, PeerSession
from pybusride.models.route import RouteConfig
from pybusride.routes import ROUTE_138
from pybusride.tracker import PassengerTracker

_logger = logging.getLogger(__name__)

_UPSERT_PREFER = "resolution=merge-duplicates, return=representation"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def parse_peer_rows(rows: Any) -> list[PeerSession]:
    """Parse backend rows into peers, skipping anything malformed."""
    if not isinstance(rows, list):
        return []
    peers: list[PeerSession] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        try:
            peers.append(PeerSession.model_validate(row))
        except ValidationError:
            _logger.debug("Skipping malformed session row id=%s", row.get("id"), exc_info=True)
    return peers


class BusRideClient:
    """Async client for the bus-session records backend.

    Usage::

        async with BusRideClient(config) as client:
            async with client.ride() as tracker:
                update = tracker.process(point)
    """

    def __init__(
        self,
        config: BusRideConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._external_transport = transport is not None

    @property
    def config(self) -> BusRideConfig:
        return self._config

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> BusRideClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = RecordsTransport(self._config, self._http_session)
        if not self._config.has_credentials:
            _logger.warning("No API key configured; location reports and peer polls are disabled")
        else:
            _logger.debug("Client ready project=%s base_url=%s", self._config.project_id, self._config.base_url)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise BusRideError("Client not initialized. Use 'async with BusRideClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Records API
    # ------------------------------------------------------------------

    async def send_bus_location(self, report: BusLocationReport) -> None:
        """Upsert *report* keyed by its session id (last write wins).

        Skipped without credentials.

        Raises
        ------
        BusRideTransportError
            On network failure or a non-2xx response.
        """
        if not self._config.has_credentials:
            _logger.debug("Skipping location report session=%s; no API key", report.session_id)
            return
        transport = self._require_transport()
        await transport.request(
            "POST",
            self._config.collection,
            payload=report.to_payload(),
            prefer=_UPSERT_PREFER,
        )
        _logger.debug("Location report stored session=%s", report.session_id)

    async def get_active_sessions(self, now: datetime | None = None) -> list[PeerSession]:
        """Sessions updated within ``config.peer_window_s`` of *now*.

        Returns an empty list without credentials.

        Raises
        ------
        BusRideTransportError
            On network failure or a non-2xx response.
        """
        if not self._config.has_credentials:
            return []
        transport = self._require_transport()
        since = (now or _utcnow()) - timedelta(seconds=self._config.peer_window_s)
        rows = await transport.request(
            "GET",
            self._config.collection,
            params={"lastUpdated": f"gt.{to_iso8601(since)}", "select": "*"},
        )
        return parse_peer_rows(rows)

    # ------------------------------------------------------------------
    # Ride sessions
    # ------------------------------------------------------------------

    @contextlib.asynccontextmanager
    async def ride(
        self,
        route: RouteConfig = ROUTE_138,
        *,
        session_id: str | None = None,
    ) -> AsyncIterator[PassengerTracker]:
        """Run one ride session with reporting and peer polling attached.

        On exit the peer poll is stopped, pending reports are dropped and
        the tracker's history is discarded.
        """
        self._require_transport()
        dispatcher = ReportDispatcher(self)
        feed = ClusterFeed(self, interval=self._config.poll_interval)
        tracker = PassengerTracker(
            route,
            config=self._config.detection,
            session_id=session_id,
            route_id=self._config.route_id,
            reporter=dispatcher.submit,
            peer_source=feed.peers,
        )
        _logger.debug("Ride session started session=%s route=%s", tracker.session_id, route.route_id)
        feed.start()
        try:
            yield tracker
        finally:
            await feed.stop()
            await dispatcher.close()
            tracker.reset()
            _logger.debug("Ride session ended session=%s", tracker.session_id)
