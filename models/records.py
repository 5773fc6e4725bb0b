"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Union

AttributeValue = Union[int, float, str]


@dataclass(frozen=True, slots=True)
class NormalizedReading:
    """A single hub upload after decoding, renaming, and unit conversion."""

    sensor_id: str
    model_type: str
    timestamp: int  # epoch milliseconds, quantized to the minute
    attributes: Mapping[str, AttributeValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    @property
    def tags(self) -> dict[str, str]:
        return {"sensor": self.sensor_id, "mt": self.model_type}
