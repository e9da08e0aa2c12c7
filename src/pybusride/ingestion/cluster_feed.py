"""Periodic peer feed for cluster corroboration.

The backend offers no push channel, so other riders' positions are pulled
on a fixed interval. Each successful poll replaces the published
:class:`ClusterSnapshot` as a whole; readers never see a partially
updated snapshot and no lock is required.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Protocol

from pybusride.models.report import PeerSession

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ActiveSessionSource(Protocol):
    async def get_active_sessions(self) -> list[PeerSession]:
        ...


@dataclass(frozen=True)
class ClusterSnapshot:
    """Immutable view of other active sessions at one poll."""

    peers: tuple[PeerSession, ...] = ()
    fetched_at: datetime | None = None


class ClusterFeed:
    """Background task that keeps a fresh :class:`ClusterSnapshot`.

    Usage::

        async with ClusterFeed(client, interval=5.0) as feed:
            tracker = PassengerTracker(peer_source=feed.peers)
    """

    def __init__(
        self,
        source: ActiveSessionSource,
        *,
        interval: float = 5.0,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._source = source
        self._interval = interval
        self._clock = clock
        self._snapshot = ClusterSnapshot()
        self._task: asyncio.Task[None] | None = None

    @property
    def snapshot(self) -> ClusterSnapshot:
        return self._snapshot

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def peers(self) -> tuple[PeerSession, ...]:
        """Peers from the latest snapshot (usable as a tracker ``peer_source``)."""
        return self._snapshot.peers

    async def poll_once(self) -> ClusterSnapshot:
        """Fetch once and publish the result; failures keep the previous snapshot."""
        try:
            peers = await self._source.get_active_sessions()
        except Exception:
            _logger.warning("Peer feed poll failed; keeping previous snapshot", exc_info=True)
            return self._snapshot
        self._snapshot = ClusterSnapshot(peers=tuple(peers), fetched_at=self._clock())
        _logger.debug("Peer feed refreshed peers=%d", len(self._snapshot.peers))
        return self._snapshot

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="pybusride-cluster-feed")

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        self._snapshot = ClusterSnapshot()

    async def _run(self) -> None:
        while True:
            await self.poll_once()
            await asyncio.sleep(self._interval)

    async def __aenter__(self) -> ClusterFeed:
        self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()
