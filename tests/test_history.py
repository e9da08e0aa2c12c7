from __future__ import annotations

import pytest

from helpers import BASE_MS, FORT, fix
from pybusride.models.gps import GpsPoint
from pybusride.state.history import PositionHistory


def test_history_keeps_newest_points_up_to_capacity() -> None:
    history = PositionHistory()
    for i in range(60):
        history.add(fix(FORT.location, ts=BASE_MS + i * 1000))

    assert len(history) == 50
    stamps = [p.timestamp_ms for p in history]
    assert stamps[0] == BASE_MS + 10_000
    assert stamps[-1] == BASE_MS + 59_000


def test_late_sample_is_inserted_in_timestamp_order() -> None:
    history = PositionHistory(capacity=5)
    for offset in (0, 2000, 3000):
        history.add(fix(FORT.location, ts=BASE_MS + offset))
    history.add(fix(FORT.location, ts=BASE_MS + 1000, speed=7.0))

    stamps = [p.timestamp_ms for p in history.snapshot()]
    assert stamps == sorted(stamps)
    assert history.snapshot()[1].speed_mps == 7.0
    assert history.latest is not None
    assert history.latest.timestamp_ms == BASE_MS + 3000


def test_sample_older_than_full_history_is_dropped() -> None:
    history = PositionHistory(capacity=2)
    history.add(fix(FORT.location, ts=BASE_MS + 1000))
    history.add(fix(FORT.location, ts=BASE_MS + 2000))
    history.add(fix(FORT.location, ts=BASE_MS))

    assert [p.timestamp_ms for p in history] == [BASE_MS + 1000, BASE_MS + 2000]


def test_rejects_points_without_fix_or_timestamp() -> None:
    history = PositionHistory()
    with pytest.raises(ValueError):
        history.add(GpsPoint(timestamp_ms=BASE_MS))
    with pytest.raises(ValueError):
        history.add(GpsPoint(latitude=6.9, longitude=79.9))
    assert len(history) == 0
    assert history.latest is None


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        PositionHistory(capacity=0)


def test_snapshot_is_detached_from_later_updates() -> None:
    history = PositionHistory()
    history.add(fix(FORT.location))
    snapshot = history.snapshot()
    history.add(fix(FORT.location, ts=BASE_MS + 1000))
    history.clear()

    assert len(snapshot) == 1
    assert len(history) == 0
