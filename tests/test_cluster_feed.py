from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import pytest

from pybusride.ingestion.cluster_feed import ClusterFeed, ClusterSnapshot
from pybusride.models.report import PeerSession

_FETCHED = datetime(2026, 1, 1, tzinfo=UTC)


def _peer(session_id: str) -> PeerSession:
    return PeerSession.model_validate({"id": session_id, "location": {"lat": 6.92, "lng": 79.87}, "speed": 5.0})


class _FakeSource:
    def __init__(self, *batches: list[PeerSession] | Exception) -> None:
        self._batches = list(batches)
        self.calls = 0

    async def get_active_sessions(self) -> list[PeerSession]:
        self.calls += 1
        batch = self._batches.pop(0) if len(self._batches) > 1 else self._batches[0]
        if isinstance(batch, Exception):
            raise batch
        return batch


def test_interval_must_be_positive() -> None:
    with pytest.raises(ValueError):
        ClusterFeed(_FakeSource([]), interval=0)


@pytest.mark.asyncio
async def test_poll_once_publishes_snapshot() -> None:
    feed = ClusterFeed(_FakeSource([_peer("a"), _peer("b")]), clock=lambda: _FETCHED)

    snapshot = await feed.poll_once()

    assert [p.session_id for p in snapshot.peers] == ["a", "b"]
    assert snapshot.fetched_at == _FETCHED
    assert feed.peers() == snapshot.peers
    assert feed.snapshot is snapshot


@pytest.mark.asyncio
async def test_failed_poll_keeps_previous_snapshot() -> None:
    feed = ClusterFeed(_FakeSource([_peer("a")], RuntimeError("down")))

    first = await feed.poll_once()
    second = await feed.poll_once()

    assert second is first
    assert [p.session_id for p in feed.peers()] == ["a"]


@pytest.mark.asyncio
async def test_published_snapshot_is_not_mutated_by_later_polls() -> None:
    feed = ClusterFeed(_FakeSource([_peer("a")], [_peer("b")]))

    held = await feed.poll_once()
    await feed.poll_once()

    assert [p.session_id for p in held.peers] == ["a"]
    assert [p.session_id for p in feed.peers()] == ["b"]


@pytest.mark.asyncio
async def test_background_task_polls_until_stopped() -> None:
    source = _FakeSource([_peer("a")])
    feed = ClusterFeed(source, interval=0.01)

    async with feed:
        assert feed.is_running
        await asyncio.sleep(0.05)
        assert [p.session_id for p in feed.peers()] == ["a"]

    assert feed.is_running is False
    assert feed.snapshot == ClusterSnapshot()
    calls = source.calls
    assert calls >= 2
    await asyncio.sleep(0.02)
    assert source.calls == calls


@pytest.mark.asyncio
async def test_start_is_idempotent_and_stop_without_start_is_noop() -> None:
    feed = ClusterFeed(_FakeSource([]), interval=10)
    await feed.stop()

    feed.start()
    task = feed._task
    feed.start()
    assert feed._task is task
    await feed.stop()
