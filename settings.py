from __future__ import annotations

import os
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple


_HOST_ENV = "HOST"
_INFLUXDB_HOST_ENV = "INFLUXDB_HOST"
_INFLUXDB_DATABASE_ENV = "INFLUXDB_DATABASE"
_MQTT_URL_ENV = "MQTT_URL"
_MQTT_TOPIC_ENV = "MQTT_TOPIC"
_MQTT_DISCOVERY_PREFIX_ENV = "MQTT_DISCOVERY_PREFIX"
_MQTT_HUB_STATUS_TOPIC_ENV = "MQTT_HUB_STATUS_TOPIC"
_FORWARD_ENV = "FORWARD_TO_ACURITE"
_ACURITE_HOST_ENV = "ACURITE_HOST"
_ACURITE_IPS_ENV = "ACURITE_IPS"
_UNITS_ENV = "UNITS"
_WORKER_COUNT_ENV = "SINK_WORKER_COUNT"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_IPV4_PATTERN = re.compile(r"^(?:[0-9]{1,3}\.){3}[0-9]{1,3}$")


@dataclass(frozen=True)
class Settings:
    host: Optional[str]
    influxdb_host: Optional[str]
    influxdb_database: str
    mqtt_url: Optional[str]
    mqtt_topic: str
    mqtt_discovery_prefix: str
    mqtt_hub_status_topic: str
    forward_to_acurite: bool
    acurite_host: str
    acurite_ips: Tuple[str, ...]
    metric: bool
    sink_workers: int
    log_level: str

    @property
    def influxdb_enabled(self) -> bool:
        return self.influxdb_host is not None

    @property
    def mqtt_enabled(self) -> bool:
        return self.mqtt_url is not None


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_worker_count(default: int) -> int:
    value = os.getenv(_WORKER_COUNT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


def _read_hub_ips() -> Tuple[str, ...]:
    value = os.getenv(_ACURITE_IPS_ENV) or ""
    candidates = (ip.strip() for ip in value.split(","))
    return tuple(ip for ip in candidates if _IPV4_PATTERN.match(ip))


def _read_forwarding() -> bool:
    # Forwarding stays on unless explicitly switched off.
    return os.getenv(_FORWARD_ENV) != "FALSE"


def _read_metric() -> bool:
    return os.getenv(_UNITS_ENV) != "F"


@lru_cache
def get_settings() -> Settings:
    influxdb_host = _read_optional_env(_INFLUXDB_HOST_ENV)
    return Settings(
        host=_read_optional_env(_HOST_ENV),
        influxdb_host=influxdb_host.rstrip("/") if influxdb_host else None,
        influxdb_database=_read_str_env(_INFLUXDB_DATABASE_ENV, "acurite"),
        mqtt_url=_read_optional_env(_MQTT_URL_ENV),
        mqtt_topic=_read_str_env(_MQTT_TOPIC_ENV, "acurite").rstrip("/"),
        mqtt_discovery_prefix=_read_str_env(
            _MQTT_DISCOVERY_PREFIX_ENV, "homeassistant/sensor"
        ).rstrip("/"),
        mqtt_hub_status_topic=_read_str_env(
            _MQTT_HUB_STATUS_TOPIC_ENV, "homeassistant/status"
        ),
        forward_to_acurite=_read_forwarding(),
        acurite_host=_read_str_env(_ACURITE_HOST_ENV, "atlasapi.myacurite.com"),
        acurite_ips=_read_hub_ips(),
        metric=_read_metric(),
        sink_workers=_read_worker_count(4),
        log_level=_read_log_level("INFO"),
    )
