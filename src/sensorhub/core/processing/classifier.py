"""
Static-threshold classifiers.

Every function here is pure and total: an unmatched or non-finite input
yields the UNKNOWN label rather than an error.
"""
import math
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from sensorhub.core.models.sensor_data import (
    AccelerometerReading,
    BatteryReading,
    LightReading,
    LocationReading,
    SensorReading,
)
from sensorhub.core.models.sensor_enum import SensorKind


class ActivityLabel(Enum):
    STATIONARY = "stationary"
    WALKING = "walking"
    RUNNING = "running"
    DRIVING = "driving"
    UNKNOWN = "unknown"


class EnvironmentLabel(Enum):
    DARK = "dark"
    INDOOR = "indoor"
    OUTDOOR = "outdoor"
    BRIGHT = "bright"
    UNKNOWN = "unknown"


class BatteryLevelLabel(Enum):
    CRITICAL = "critical"
    LOW = "low"
    NORMAL = "normal"
    GOOD = "good"
    HIGH = "high"
    UNKNOWN = "unknown"


# Half-open [min, max) ranges
STATIONARY_MAGNITUDE = (0.0, 2.0)
WALKING_MAGNITUDE = (2.0, 8.0)
RUNNING_MAGNITUDE = (8.0, 25.0)
DRIVING_MAGNITUDE = (0.5, 4.0)
DRIVING_SPEED = (10.0, 120.0)

DARK_LUX_MAX = 10.0
INDOOR_LUX_MAX = 500.0
OUTDOOR_LUX_MIN = 1000.0
BRIGHT_LUX_MIN = 5000.0

BATTERY_CRITICAL = 15.0
BATTERY_LOW = 30.0
BATTERY_NORMAL = 50.0
BATTERY_HIGH = 80.0

ACTIVITY_CONFIDENCE: Dict[ActivityLabel, float] = {
    ActivityLabel.STATIONARY: 0.9,
    ActivityLabel.WALKING: 0.8,
    ActivityLabel.RUNNING: 0.85,
    ActivityLabel.DRIVING: 0.75,
    ActivityLabel.UNKNOWN: 0.0,
}

ENVIRONMENT_CONFIDENCE: Dict[EnvironmentLabel, float] = {
    EnvironmentLabel.INDOOR: 0.7,
    EnvironmentLabel.OUTDOOR: 0.8,
    EnvironmentLabel.DARK: 0.9,
    EnvironmentLabel.BRIGHT: 0.85,
    EnvironmentLabel.UNKNOWN: 0.0,
}


def _in_range(value: float, bounds) -> bool:
    low, high = bounds
    return low <= value < high


def _is_finite(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


def classify_activity(magnitude: float, speed: Optional[float] = None) -> ActivityLabel:
    """
    Label the current activity from accelerometer magnitude, optionally
    corroborated by location speed. Driving takes precedence when the
    speed is given and both ranges match.
    """
    if not _is_finite(magnitude):
        return ActivityLabel.UNKNOWN
    if _is_finite(speed) and _in_range(speed, DRIVING_SPEED) and _in_range(magnitude, DRIVING_MAGNITUDE):
        return ActivityLabel.DRIVING
    if _in_range(magnitude, STATIONARY_MAGNITUDE):
        return ActivityLabel.STATIONARY
    if _in_range(magnitude, WALKING_MAGNITUDE):
        return ActivityLabel.WALKING
    if _in_range(magnitude, RUNNING_MAGNITUDE):
        return ActivityLabel.RUNNING
    return ActivityLabel.UNKNOWN


def classify_activity_window(
    accelerometer: Sequence[AccelerometerReading],
    locations: Sequence[LocationReading] = (),
) -> ActivityLabel:
    """Classify a window using its mean magnitude and the latest known speed."""
    if not accelerometer:
        return ActivityLabel.UNKNOWN
    mean_magnitude = sum(r.magnitude for r in accelerometer) / len(accelerometer)
    speed = None
    for reading in reversed(locations):
        if reading.speed is not None:
            speed = reading.speed
            break
    return classify_activity(mean_magnitude, speed)


def classify_environment(lux: float) -> EnvironmentLabel:
    """
    Label the environment from ambient light.

    The buckets overlap, so they are checked in a fixed order: dark, bright,
    outdoor, indoor. Lux in [500, 1000) matches no bucket.
    """
    if not _is_finite(lux) or lux < 0:
        return EnvironmentLabel.UNKNOWN
    if lux < DARK_LUX_MAX:
        return EnvironmentLabel.DARK
    if lux >= BRIGHT_LUX_MIN:
        return EnvironmentLabel.BRIGHT
    if lux >= OUTDOOR_LUX_MIN:
        return EnvironmentLabel.OUTDOOR
    if lux < INDOOR_LUX_MAX:
        return EnvironmentLabel.INDOOR
    return EnvironmentLabel.UNKNOWN


def classify_environment_window(light: Sequence[LightReading]) -> EnvironmentLabel:
    if not light:
        return EnvironmentLabel.UNKNOWN
    return classify_environment(sum(r.lux for r in light) / len(light))


def classify_battery(level: float) -> BatteryLevelLabel:
    if not _is_finite(level):
        return BatteryLevelLabel.UNKNOWN
    if level < BATTERY_CRITICAL:
        return BatteryLevelLabel.CRITICAL
    if level < BATTERY_LOW:
        return BatteryLevelLabel.LOW
    if level < BATTERY_NORMAL:
        return BatteryLevelLabel.NORMAL
    if level < BATTERY_HIGH:
        return BatteryLevelLabel.GOOD
    return BatteryLevelLabel.HIGH


def battery_health_score(readings: Sequence[BatteryReading]) -> int:
    """
    Score 0-100 from the first ten readings: the mean level, with a penalty
    for charging most of the time and a bonus for rarely charging.
    """
    if not readings:
        return 0
    recent = list(readings[:10])
    avg_level = sum(r.level for r in recent) / len(recent)
    charging_ratio = sum(1 for r in recent if r.is_charging) / len(recent)

    score = round(avg_level)
    if charging_ratio > 0.7:
        score -= 10
    if charging_ratio < 0.1:
        score += 10
    return max(0, min(100, score))


def sensor_statistics(readings: Mapping[SensorKind, Iterable[SensorReading]]) -> Dict[str, dict]:
    """Count and time span of the readings held for each kind."""
    stats: Dict[str, dict] = {}
    for kind, items in readings.items():
        ordered: List[SensorReading] = list(items)
        if not ordered:
            continue
        earliest = ordered[0].timestamp
        latest = ordered[-1].timestamp
        stats[kind.value] = {
            "count": len(ordered),
            "earliest": earliest,
            "latest": latest,
            "duration_minutes": int((latest - earliest) // 60),
        }
    return stats
