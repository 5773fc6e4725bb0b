"""Home Assistant discovery metadata for every measurement the hub reports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional


@dataclass(frozen=True)
class SensorDescription:
    name: str
    device_class: Optional[str] = None
    unit_kind: Optional[str] = None  # resolved through UNIT_SYSTEMS
    unit: Optional[str] = None  # fixed unit, independent of the unit system
    state_class: Optional[str] = "measurement"
    entity_category: Optional[str] = None
    precision: Optional[int] = None

    def unit_for(self, metric: bool) -> Optional[str]:
        if self.unit_kind is not None:
            return UNIT_SYSTEMS[metric][self.unit_kind]
        return self.unit


UNIT_SYSTEMS: Mapping[bool, Mapping[str, str]] = {
    True: {
        "temperature": "°C",
        "pressure": "Pa",
        "length": "mm",
        "speed": "km/h",
        "rate": "mm/h",
        "distance": "km",
    },
    False: {
        "temperature": "°F",
        "pressure": "inHg",
        "length": "in",
        "speed": "mph",
        "rate": "in/h",
        "distance": "mi",
    },
}


SENSORS: Dict[str, SensorDescription] = {
    "barom": SensorDescription("Barometric Pressure", "pressure", unit_kind="pressure"),
    "dailyrain": SensorDescription(
        "Daily Rain", "precipitation", unit_kind="length", state_class="total_increasing"
    ),
    "rain": SensorDescription("Rain Rate", "precipitation_intensity", unit_kind="rate"),
    "temp": SensorDescription("Temperature", "temperature", unit_kind="temperature", precision=1),
    "dewpt": SensorDescription("Dewpoint", "temperature", unit_kind="temperature", precision=1),
    "feelslike": SensorDescription("Feels Like", "temperature", unit_kind="temperature", precision=1),
    "heatindex": SensorDescription("Heat Index", "temperature", unit_kind="temperature", precision=1),
    "windchill": SensorDescription("Wind Chill", "temperature", unit_kind="temperature", precision=1),
    "ptemp": SensorDescription("Probe Temperature", "temperature", unit_kind="temperature", precision=1),
    "indoortemp": SensorDescription(
        "Indoor Temperature", "temperature", unit_kind="temperature", precision=1
    ),
    "humidity": SensorDescription("Humidity", "humidity", unit="%"),
    "indoorhumidity": SensorDescription("Indoor Humidity", "humidity", unit="%"),
    "lightintensity": SensorDescription("Light Intensity", "illuminance", unit="lx"),
    "measured_light_seconds": SensorDescription("Light Seconds", "duration", unit="s"),
    "uvindex": SensorDescription("UV Index"),
    "winddir": SensorDescription(
        "Wind Direction", "wind_direction", unit="°", state_class="measurement_angle"
    ),
    "windgustdir": SensorDescription(
        "Wind Direction (Gust)", "wind_direction", unit="°", state_class="measurement_angle"
    ),
    "windspeed": SensorDescription("Wind Speed", "wind_speed", unit_kind="speed"),
    "windspeedavg": SensorDescription("Wind Speed (Avg)", "wind_speed", unit_kind="speed"),
    "windgust": SensorDescription("Wind Gust", "wind_speed", unit_kind="speed"),
    "strikecount": SensorDescription("Lightning Strikes", state_class="total_increasing"),
    "last_strike_distance": SensorDescription(
        "Last Strike Distance", "distance", unit_kind="distance", precision=1
    ),
    "last_strike_ts": SensorDescription("Last Strike", "timestamp", state_class=None),
    "interference": SensorDescription(
        "Lightning Interference", state_class=None, entity_category="diagnostic"
    ),
    "rssi": SensorDescription(
        "Signal Strength", unit="rssi", entity_category="diagnostic"
    ),
    "battery": SensorDescription("Battery", state_class=None, entity_category="diagnostic"),
    "hubbattery": SensorDescription(
        "Hub Battery", state_class=None, entity_category="diagnostic"
    ),
}
