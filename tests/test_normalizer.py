"""Unit tests for renaming, unit conversion, and identity extraction."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from services.decoder import decode
from services.normalizer import (
    fahrenheit_to_celsius,
    inches_to_mm,
    inhg_to_pascals,
    mph_to_kmh,
    normalize,
    quantize_timestamp,
    rename_keys,
    round_half_up,
)


def _epoch_ms(*parts: int) -> int:
    return int(datetime(*parts, tzinfo=timezone.utc).timestamp() * 1000)


def test_quantize_rounds_down_before_half_minute() -> None:
    assert quantize_timestamp("2023-01-01 00:00:29") == _epoch_ms(2023, 1, 1, 0, 0, 0)


def test_quantize_rounds_up_after_half_minute() -> None:
    assert quantize_timestamp("2023-01-01 00:00:31") == _epoch_ms(2023, 1, 1, 0, 1, 0)


def test_quantize_rounds_half_minute_up() -> None:
    assert quantize_timestamp("2023-01-01 00:00:30") == _epoch_ms(2023, 1, 1, 0, 1, 0)


def test_quantize_accepts_iso_separator() -> None:
    assert quantize_timestamp("2023-01-01T10:15:00") == _epoch_ms(2023, 1, 1, 10, 15, 0)


def test_quantize_now_is_current_minute() -> None:
    before = datetime.now(timezone.utc).timestamp() * 1000
    value = quantize_timestamp("now")

    assert value is not None
    assert value % 60_000 == 0
    assert abs(value - before) <= 60_000


@pytest.mark.parametrize("raw", ["not-a-date", "", "2023-13-01 00:00:00", 1685620845])
def test_quantize_unparsable_is_absent(raw) -> None:
    assert quantize_timestamp(raw) is None


def test_unit_conversions() -> None:
    assert fahrenheit_to_celsius(32) == 0.0
    assert fahrenheit_to_celsius(212) == 100.0
    assert fahrenheit_to_celsius(98.6) == 37.0
    assert mph_to_kmh(10) == 16
    assert inches_to_mm(1) == 25
    assert inhg_to_pascals(29.92) == 101309


def test_round_half_up_differs_from_bankers_rounding() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(-0.25, 1) == -0.2
    assert round(2.5) == 2


def test_rename_is_idempotent() -> None:
    values = {"tempf": 70, "baromin": 30.1, "humidity": 40}

    rename_keys(values)
    once = dict(values)
    rename_keys(values)

    assert once == {"temp": 70, "barom": 30.1, "humidity": 40}
    assert values == once


def test_normalize_end_to_end_metric() -> None:
    decoded = decode(
        {
            "dateutc": "2023-06-01 12:00:45",
            "ID": "5",
            "mt": "Hub",
            "tempf": "98.6",
            "baromin": "29.92",
        }
    )

    reading = normalize(decoded, metric=True)

    assert reading is not None
    assert reading.sensor_id == "5"
    assert reading.model_type == "Hub"
    assert reading.timestamp == _epoch_ms(2023, 6, 1, 12, 1, 0)
    assert dict(reading.attributes) == {"temp": 37.0, "barom": 101309}


def test_normalize_imperial_skips_conversion() -> None:
    decoded = decode(
        {"dateutc": "2023-06-01 12:00:00", "sensor": "42", "mt": "tower", "tempf": "50.5"}
    )

    reading = normalize(decoded, metric=False)

    assert reading is not None
    assert dict(reading.attributes) == {"temp": 50.5}


def test_normalize_prefers_sensor_over_id() -> None:
    decoded = decode(
        {"dateutc": "2023-06-01 12:00:00", "sensor": "777", "ID": "hub-1", "mt": "5N1"}
    )

    reading = normalize(decoded, metric=True)

    assert reading is not None
    assert reading.sensor_id == "777"
    assert reading.attributes["ID"] == "hub-1"


def test_normalize_leaves_text_values_of_convertible_keys() -> None:
    decoded = decode(
        {"dateutc": "2023-06-01 12:00:00", "sensor": "1", "mt": "5N1", "tempf": "n/a"}
    )

    reading = normalize(decoded, metric=True)

    assert reading is not None
    assert reading.attributes["temp"] == "n/a"


@pytest.mark.parametrize("missing", ["sensor", "mt", "dateutc"])
def test_normalize_incomplete_reading_is_none(missing: str) -> None:
    raw = {"dateutc": "2023-06-01 12:00:00", "sensor": "1", "mt": "5N1", "humidity": "40"}
    del raw[missing]

    assert normalize(decode(raw), metric=True) is None


def test_normalize_unparsable_timestamp_is_incomplete() -> None:
    raw = {"dateutc": "yesterday", "sensor": "1", "mt": "5N1"}

    assert normalize(decode(raw), metric=True) is None


def test_normalized_reading_is_read_only() -> None:
    reading = normalize(
        decode({"dateutc": "2023-06-01 12:00:00", "sensor": "1", "mt": "5N1", "humidity": "40"}),
        metric=True,
    )

    assert reading is not None
    with pytest.raises(TypeError):
        reading.attributes["humidity"] = 10  # type: ignore[index]
