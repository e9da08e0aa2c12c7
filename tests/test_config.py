from __future__ import annotations

import pytest

from pybusride.config import BusRideConfig, DetectionConfig
from pybusride.exceptions import BusRideConfigError

_ENV_KEYS = (
    "BUSRIDE_BASE_URL",
    "BUSRIDE_PROJECT_ID",
    "BUSRIDE_API_KEY",
    "BUSRIDE_COLLECTION",
    "BUSRIDE_ROUTE_ID",
    "BUSRIDE_POLL_INTERVAL",
    "BUSRIDE_PEER_WINDOW_S",
    "BUSRIDE_REQUEST_TIMEOUT",
    "BUSRIDE_ROUTE_MATCH_RADIUS_M",
    "BUSRIDE_STOP_MIN_DWELL_S",
    "BUSRIDE_HISTORY_SIZE",
    "BUSRIDE_ENFORCE_MAX_DWELL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_detection_defaults() -> None:
    config = DetectionConfig()

    assert config.route_match_radius_m == 20.0
    assert config.stop_speed_threshold_kmh == 5.0
    assert config.stop_min_dwell_s == 30.0
    assert config.stop_max_dwell_s == 60.0
    assert config.enforce_max_dwell is False
    assert config.stop_lookback_s == 90.0
    assert config.stop_match_radius_m == 30.0
    assert config.cluster_radius_m == 10.0
    assert config.cluster_speed_delta_mps == 2.0
    assert config.report_speed_gate_kmh == 15.0
    assert config.history_size == 50


@pytest.mark.parametrize(
    "kwargs",
    [{"history_size": 0}, {"stop_min_dwell_s": 90.0, "stop_max_dwell_s": 60.0}],
)
def test_detection_rejects_inconsistent_values(kwargs: dict) -> None:
    with pytest.raises(BusRideConfigError):
        DetectionConfig(**kwargs)


def test_from_env_without_variables_uses_defaults() -> None:
    config = BusRideConfig.from_env()

    assert config.base_url == "http://localhost:8000"
    assert config.api_key is None
    assert config.has_credentials is False
    assert config.collection == "bus_sessions"
    assert config.route_id == "138"
    assert config.detection == DetectionConfig()


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUSRIDE_BASE_URL", "https://records.example.com")
    monkeypatch.setenv("BUSRIDE_API_KEY", "ik_secret")
    monkeypatch.setenv("BUSRIDE_ROUTE_ID", "177")
    monkeypatch.setenv("BUSRIDE_POLL_INTERVAL", "2.5")
    monkeypatch.setenv("BUSRIDE_ROUTE_MATCH_RADIUS_M", "35")
    monkeypatch.setenv("BUSRIDE_HISTORY_SIZE", "20")
    monkeypatch.setenv("BUSRIDE_ENFORCE_MAX_DWELL", "yes")

    config = BusRideConfig.from_env()

    assert config.base_url == "https://records.example.com"
    assert config.has_credentials is True
    assert config.route_id == "177"
    assert config.poll_interval == 2.5
    assert config.detection.route_match_radius_m == 35.0
    assert config.detection.history_size == 20
    assert config.detection.enforce_max_dwell is True


def test_explicit_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUSRIDE_API_KEY", "from-env")
    monkeypatch.setenv("BUSRIDE_POLL_INTERVAL", "2.5")
    monkeypatch.setenv("BUSRIDE_STOP_MIN_DWELL_S", "20")

    config = BusRideConfig.from_env(api_key="explicit", poll_interval=1.0, detection={"stop_min_dwell_s": 40.0})

    assert config.api_key == "explicit"
    assert config.poll_interval == 1.0
    assert config.detection.stop_min_dwell_s == 40.0


def test_detection_instance_override() -> None:
    detection = DetectionConfig(cluster_radius_m=15.0)
    assert BusRideConfig.from_env(detection=detection).detection == detection


@pytest.mark.parametrize(
    ("key", "value"),
    [("BUSRIDE_POLL_INTERVAL", "fast"), ("BUSRIDE_HISTORY_SIZE", "1.5"), ("BUSRIDE_ROUTE_MATCH_RADIUS_M", "")],
)
def test_non_numeric_env_value_is_config_error(monkeypatch: pytest.MonkeyPatch, key: str, value: str) -> None:
    monkeypatch.setenv(key, value)
    with pytest.raises(BusRideConfigError, match=key):
        BusRideConfig.from_env()


def test_zero_history_from_env_is_config_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUSRIDE_HISTORY_SIZE", "0")
    with pytest.raises(BusRideConfigError):
        BusRideConfig.from_env()
