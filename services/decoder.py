"""Type coercion for the raw query-string values sent by a hub."""

from __future__ import annotations

import re
from typing import Dict, Mapping

from models.records import AttributeValue

_NUMERIC_PATTERN = re.compile(r"-?[0-9]+(\.[0-9]+)?")

# Model type is an opaque identifier even when it looks numeric.
_VERBATIM_KEYS = frozenset({"mt"})


def _coerce(value: str) -> AttributeValue:
    match = _NUMERIC_PATTERN.fullmatch(value)
    if match is None:
        return value
    if match.group(1) is None:
        return int(value)
    return float(value)


def decode(raw: Mapping[str, str]) -> Dict[str, AttributeValue]:
    """Return a typed copy of ``raw`` with empty values removed."""
    decoded: Dict[str, AttributeValue] = {}
    for key, value in raw.items():
        if value == "":
            continue
        if key in _VERBATIM_KEYS:
            decoded[key] = value
            continue
        decoded[key] = _coerce(value)
    return decoded
