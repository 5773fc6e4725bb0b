from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_TIMEOUT = 10.0

_BASE_URL_ENV = "API_BASE_URL"
_TIMEOUT_ENV = "CLI_TIMEOUT"
_HOST_ENV = "HOST"
_HUB_IPS_ENV = "ACURITE_IPS"

_IPV4_PATTERN = re.compile(r"^(?:[0-9]{1,3}\.){3}[0-9]{1,3}$")


@dataclass(frozen=True)
class CLIConfig:
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    host: Optional[str] = None
    hub_ips: Tuple[str, ...] = field(default_factory=tuple)


def _read_float(value: Optional[str], default: float) -> float:
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _valid_ips(values: Sequence[str]) -> Tuple[str, ...]:
    candidates = (value.strip() for value in values)
    return tuple(ip for ip in candidates if _IPV4_PATTERN.match(ip))


def load_config(
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
    host: Optional[str] = None,
    hub_ips: Optional[Sequence[str]] = None,
) -> CLIConfig:
    url = base_url or os.getenv(_BASE_URL_ENV) or DEFAULT_BASE_URL
    if timeout is None:
        timeout = _read_float(os.getenv(_TIMEOUT_ENV), DEFAULT_TIMEOUT)
    if not hub_ips:
        hub_ips = (os.getenv(_HUB_IPS_ENV) or "").split(",")
    return CLIConfig(
        base_url=url.rstrip("/"),
        timeout=timeout,
        host=host or os.getenv(_HOST_ENV) or None,
        hub_ips=_valid_ips(hub_ips),
    )
