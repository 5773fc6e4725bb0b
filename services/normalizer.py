"""Renaming, unit conversion, and identity extraction for decoded uploads."""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Mapping, Optional

from models.records import AttributeValue, NormalizedReading

logger = logging.getLogger(__name__)

_MINUTE_MS = 60_000
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Legacy unit-suffixed keys sent by the hub and their unit-less names.
KEYS_TO_RENAME: Mapping[str, str] = {
    "baromin": "barom",
    "tempf": "temp",
    "dewptf": "dewpt",
    "dailyrainin": "dailyrain",
    "rainin": "rain",
    "windgustmph": "windgust",
    "windspeedmph": "windspeed",
    "windspeedavgmph": "windspeedavg",
    "ptempf": "ptemp",
    "indoortempf": "indoortemp",
}

_SENSOR_KEYS = ("sensor", "ID")
_MODEL_KEY = "mt"
_TIMESTAMP_KEY = "dateutc"


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like the hub firmware does; ``round()`` would round half to even."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def fahrenheit_to_celsius(value: float) -> float:
    return round_half_up((value - 32) * 5 / 9, 1)


def mph_to_kmh(value: float) -> int:
    return int(round_half_up(value * 1.60934))


def miles_to_km(value: float) -> float:
    return round_half_up(value * 1.60934, 1)


def inches_to_mm(value: float) -> int:
    return int(round_half_up(value * 25.4))


def inhg_to_pascals(value: float) -> int:
    return int(round_half_up(value * 3386))


KEYS_TO_CONVERT: Mapping[str, Callable[[float], AttributeValue]] = {
    "barom": inhg_to_pascals,
    "temp": fahrenheit_to_celsius,
    "dewpt": fahrenheit_to_celsius,
    "windchill": fahrenheit_to_celsius,
    "heatindex": fahrenheit_to_celsius,
    "feelslike": fahrenheit_to_celsius,
    "ptemp": fahrenheit_to_celsius,
    "indoortemp": fahrenheit_to_celsius,
    "dailyrain": inches_to_mm,
    "rain": inches_to_mm,
    "windgust": mph_to_kmh,
    "windspeed": mph_to_kmh,
    "windspeedavg": mph_to_kmh,
    "last_strike_distance": miles_to_km,
}


def quantize_timestamp(value: AttributeValue) -> Optional[int]:
    """Parse a naive UTC ``dateutc`` and round it to the nearest minute.

    Returns epoch milliseconds, or ``None`` when the value cannot be parsed.
    The Weather Underground upload protocol also allows the literal ``now``.
    """
    if not isinstance(value, str):
        return None
    candidate = value.strip()
    if candidate.lower() == "now":
        parsed = datetime.now(timezone.utc)
    else:
        try:
            parsed = datetime.fromisoformat(candidate)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)

    epoch_ms = (parsed - _EPOCH) // timedelta(milliseconds=1)
    return (epoch_ms + _MINUTE_MS // 2) // _MINUTE_MS * _MINUTE_MS


def rename_keys(values: Dict[str, AttributeValue]) -> None:
    for legacy, canonical in KEYS_TO_RENAME.items():
        if legacy in values:
            values[canonical] = values.pop(legacy)


def convert_units(values: Dict[str, AttributeValue]) -> None:
    for key, convert in KEYS_TO_CONVERT.items():
        value = values.get(key)
        # Strings stay untouched; only decoded numbers are converted.
        if isinstance(value, (int, float)):
            values[key] = convert(value)


def _pop_sensor_id(values: Dict[str, AttributeValue]) -> Optional[str]:
    for key in _SENSOR_KEYS:
        if key in values:
            return str(values.pop(key))
    return None


def normalize(
    decoded: Mapping[str, AttributeValue], metric: bool
) -> Optional[NormalizedReading]:
    """Build a :class:`NormalizedReading`, or ``None`` when identity is incomplete."""
    values = dict(decoded)

    timestamp = None
    if _TIMESTAMP_KEY in values:
        timestamp = quantize_timestamp(values.pop(_TIMESTAMP_KEY))

    rename_keys(values)
    if metric:
        convert_units(values)

    sensor_id = _pop_sensor_id(values)
    model_type = values.pop(_MODEL_KEY, None)

    if sensor_id is None or model_type is None or timestamp is None:
        logger.debug(
            "Dropping incomplete reading",
            extra={
                "sensor_id": sensor_id,
                "model_type": model_type,
                "reason": "missing sensor, mt or dateutc",
            },
        )
        return None

    return NormalizedReading(
        sensor_id=sensor_id,
        model_type=str(model_type),
        timestamp=timestamp,
        attributes=values,
    )
