from __future__ import annotations

from typing import Iterable, Iterator

import pytest

from services.dispatcher import build_default_dispatcher
from settings import get_settings

_ENV_NAMES = (
    "HOST",
    "INFLUXDB_HOST",
    "INFLUXDB_DATABASE",
    "MQTT_URL",
    "MQTT_TOPIC",
    "MQTT_DISCOVERY_PREFIX",
    "MQTT_HUB_STATUS_TOPIC",
    "FORWARD_TO_ACURITE",
    "ACURITE_HOST",
    "ACURITE_IPS",
    "UNITS",
    "SINK_WORKER_COUNT",
    "LOG_LEVEL",
)


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch) -> Iterator[None]:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    _clear_caches((get_settings, build_default_dispatcher))
    yield
    _clear_caches((get_settings, build_default_dispatcher))


def test_defaults() -> None:
    settings = get_settings()

    assert settings.host is None
    assert settings.influxdb_enabled is False
    assert settings.influxdb_database == "acurite"
    assert settings.mqtt_enabled is False
    assert settings.mqtt_topic == "acurite"
    assert settings.mqtt_discovery_prefix == "homeassistant/sensor"
    assert settings.mqtt_hub_status_topic == "homeassistant/status"
    assert settings.forward_to_acurite is True
    assert settings.acurite_host == "atlasapi.myacurite.com"
    assert settings.acurite_ips == ()
    assert settings.metric is True
    assert settings.sink_workers == 4
    assert settings.log_level == "INFO"


def test_environment_overrides_apply(monkeypatch) -> None:
    monkeypatch.setenv("HOST", "bridge.example.com")
    monkeypatch.setenv("INFLUXDB_HOST", "http://influx:8086/")
    monkeypatch.setenv("INFLUXDB_DATABASE", "weather")
    monkeypatch.setenv("MQTT_URL", "mqtt://broker:1884")
    monkeypatch.setenv("MQTT_TOPIC", "weather/")
    monkeypatch.setenv("FORWARD_TO_ACURITE", "FALSE")
    monkeypatch.setenv("ACURITE_IPS", "192.168.1.20, not-an-ip ,10.0.0.7,")
    monkeypatch.setenv("UNITS", "F")
    monkeypatch.setenv("SINK_WORKER_COUNT", "2")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = get_settings()

    assert settings.host == "bridge.example.com"
    assert settings.influxdb_host == "http://influx:8086"
    assert settings.influxdb_database == "weather"
    assert settings.mqtt_url == "mqtt://broker:1884"
    assert settings.mqtt_topic == "weather"
    assert settings.forward_to_acurite is False
    assert settings.acurite_ips == ("192.168.1.20", "10.0.0.7")
    assert settings.metric is False
    assert settings.sink_workers == 2
    assert settings.log_level == "DEBUG"

    dispatcher = build_default_dispatcher()
    try:
        assert dispatcher.executor._max_workers == 2
        assert dispatcher.metric is False
        assert dispatcher.influxdb.enabled is True
        assert dispatcher.influxdb.database == "weather"
        assert dispatcher.mqtt.enabled is True
        assert dispatcher.mqtt.endpoint.port == 1884
        assert dispatcher.mqtt.availability_topic == "weather/status"
        assert dispatcher.relay is not None and dispatcher.relay.enabled is False
    finally:
        dispatcher.shutdown()


@pytest.mark.parametrize("value", ["0", "-3", "many", "  "])
def test_invalid_worker_count_falls_back(monkeypatch, value: str) -> None:
    monkeypatch.setenv("SINK_WORKER_COUNT", value)

    assert get_settings().sink_workers == 4


@pytest.mark.parametrize("value", ["false", "0", "no", ""])
def test_forwarding_only_disabled_by_exact_flag(monkeypatch, value: str) -> None:
    monkeypatch.setenv("FORWARD_TO_ACURITE", value)

    assert get_settings().forward_to_acurite is True
