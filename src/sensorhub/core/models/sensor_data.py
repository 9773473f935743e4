"""
Sensor reading models.

One immutable record per sensor kind. Derived fields (magnitude, field
strength, light condition, charging flag) are computed once at construction.
"""

import math
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from sensorhub.core.models.sensor_enum import SensorKind


def vector_norm(x: float, y: float, z: float) -> float:
    """Euclidean norm of a 3-axis vector."""
    return math.sqrt(x * x + y * y + z * z)


class BatteryState(Enum):
    CHARGING = "charging"
    DISCHARGING = "discharging"
    FULL = "full"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, text: str) -> "BatteryState":
        """Map a platform battery state string (e.g. 'BatteryState.charging') to the enum."""
        name = str(text).strip().lower().rsplit(".", 1)[-1]
        if name == "low":
            return cls.DISCHARGING
        for state in cls:
            if state.value == name:
                return state
        return cls.UNKNOWN


class LightCondition(Enum):
    DARK = "dark"
    DIM = "dim"
    NORMAL = "normal"
    BRIGHT = "bright"
    VERY_BRIGHT = "very_bright"

    @classmethod
    def from_lux(cls, lux: float) -> "LightCondition":
        if lux < 10:
            return cls.DARK
        if lux < 200:
            return cls.DIM
        if lux < 400:
            return cls.NORMAL
        if lux < 1000:
            return cls.BRIGHT
        return cls.VERY_BRIGHT


@dataclass(frozen=True, kw_only=True)
class SensorReading:
    """
    Base class for a single sensor reading.
    """
    timestamp: float = field(default_factory=time.time)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    kind = None  # type: Optional[SensorKind]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "timestamp": self.timestamp,
            "sensor_type": self.kind.value,
        }
        for name in self.__dataclass_fields__:
            if name in data:
                continue
            value = getattr(self, name)
            data[name] = value.value if isinstance(value, Enum) else value
        return data


@dataclass(frozen=True, kw_only=True)
class AccelerometerReading(SensorReading):
    x: float
    y: float
    z: float
    magnitude: float = field(init=False)

    kind = SensorKind.ACCELEROMETER

    def __post_init__(self):
        object.__setattr__(self, "magnitude", vector_norm(self.x, self.y, self.z))


@dataclass(frozen=True, kw_only=True)
class GyroscopeReading(SensorReading):
    x: float
    y: float
    z: float

    kind = SensorKind.GYROSCOPE

    @property
    def rotation_rate(self) -> float:
        return vector_norm(self.x, self.y, self.z)


@dataclass(frozen=True, kw_only=True)
class MagnetometerReading(SensorReading):
    x: float
    y: float
    z: float
    field_strength: float = field(init=False)

    kind = SensorKind.MAGNETOMETER

    def __post_init__(self):
        object.__setattr__(self, "field_strength", vector_norm(self.x, self.y, self.z))


@dataclass(frozen=True, kw_only=True)
class LocationReading(SensorReading):
    latitude: float
    longitude: float
    altitude: float
    accuracy: float
    speed: Optional[float] = None

    kind = SensorKind.LOCATION

    def __post_init__(self):
        if not self.accuracy >= 0:
            raise ValueError(f"Location accuracy must be >= 0, got {self.accuracy}")


@dataclass(frozen=True, kw_only=True)
class BatteryReading(SensorReading):
    level: int
    state: BatteryState = BatteryState.UNKNOWN
    is_charging: bool = field(init=False)

    kind = SensorKind.BATTERY

    def __post_init__(self):
        if not 0 <= self.level <= 100:
            raise ValueError(f"Battery level must be within [0, 100], got {self.level}")
        object.__setattr__(self, "is_charging", self.state == BatteryState.CHARGING)


@dataclass(frozen=True, kw_only=True)
class LightReading(SensorReading):
    lux: float
    condition: LightCondition = field(init=False)

    kind = SensorKind.LIGHT

    def __post_init__(self):
        if not self.lux >= 0:
            raise ValueError(f"Lux must be >= 0, got {self.lux}")
        object.__setattr__(self, "condition", LightCondition.from_lux(self.lux))


@dataclass(frozen=True, kw_only=True)
class ProximityReading(SensorReading):
    is_near: bool
    distance: Optional[float] = None

    kind = SensorKind.PROXIMITY

    def __post_init__(self):
        if self.is_near and self.distance is not None:
            raise ValueError("A near proximity reading carries no distance")


READING_TYPES = {
    SensorKind.ACCELEROMETER: AccelerometerReading,
    SensorKind.GYROSCOPE: GyroscopeReading,
    SensorKind.MAGNETOMETER: MagnetometerReading,
    SensorKind.LOCATION: LocationReading,
    SensorKind.BATTERY: BatteryReading,
    SensorKind.LIGHT: LightReading,
    SensorKind.PROXIMITY: ProximityReading,
}


def reading_from_dict(data: Dict[str, Any]) -> SensorReading:
    """Rebuild a reading from the output of `SensorReading.to_dict()`."""
    kind = SensorKind(data["sensor_type"])
    cls = READING_TYPES[kind]
    kwargs = {}
    for name, f in cls.__dataclass_fields__.items():
        if not f.init or name not in data:
            continue
        kwargs[name] = data[name]
    if kind == SensorKind.BATTERY and "state" in kwargs:
        kwargs["state"] = BatteryState.parse(kwargs["state"])
    return cls(**kwargs)
