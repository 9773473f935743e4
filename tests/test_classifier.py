"""Tests for the threshold classifiers and battery/statistics helpers."""
import math

import pytest

from sensorhub.core.models.sensor_data import (
    AccelerometerReading,
    BatteryReading,
    BatteryState,
    LightReading,
    LocationReading,
)
from sensorhub.core.models.sensor_enum import SensorKind
from sensorhub.core.processing.classifier import (
    ActivityLabel,
    BatteryLevelLabel,
    EnvironmentLabel,
    battery_health_score,
    classify_activity,
    classify_activity_window,
    classify_battery,
    classify_environment,
    classify_environment_window,
    sensor_statistics,
)


def location(speed=None, timestamp=0.0) -> LocationReading:
    return LocationReading(latitude=0.0, longitude=0.0, altitude=0.0, accuracy=1.0,
                           speed=speed, timestamp=timestamp)


class TestActivity:

    @pytest.mark.parametrize("magnitude, label", [
        (1.0, ActivityLabel.STATIONARY),
        (5.0, ActivityLabel.WALKING),
        (15.0, ActivityLabel.RUNNING),
        (0.0, ActivityLabel.STATIONARY),
        (2.0, ActivityLabel.WALKING),
        (8.0, ActivityLabel.RUNNING),
        (25.0, ActivityLabel.UNKNOWN),
    ])
    def test_magnitude_buckets(self, magnitude, label) -> None:
        assert classify_activity(magnitude) == label

    def test_speed_corroboration_gives_driving(self) -> None:
        assert classify_activity(2.0, speed=50.0) == ActivityLabel.DRIVING

    def test_speed_outside_driving_range(self) -> None:
        assert classify_activity(2.0, speed=5.0) == ActivityLabel.WALKING
        assert classify_activity(2.0, speed=120.0) == ActivityLabel.WALKING

    def test_driving_needs_low_magnitude(self) -> None:
        assert classify_activity(5.0, speed=50.0) == ActivityLabel.WALKING

    def test_non_finite_magnitude(self) -> None:
        assert classify_activity(math.nan) == ActivityLabel.UNKNOWN

    def test_window_uses_mean_and_latest_speed(self) -> None:
        accel = [AccelerometerReading(x=0.0, y=0.0, z=1.0), AccelerometerReading(x=0.0, y=0.0, z=3.0)]
        locations = [location(speed=60.0, timestamp=1.0), location(speed=None, timestamp=2.0)]
        assert classify_activity_window(accel) == ActivityLabel.WALKING
        assert classify_activity_window(accel, locations) == ActivityLabel.DRIVING

    def test_empty_window(self) -> None:
        assert classify_activity_window([]) == ActivityLabel.UNKNOWN


class TestEnvironment:

    @pytest.mark.parametrize("lux, label", [
        (5.0, EnvironmentLabel.DARK),
        (300.0, EnvironmentLabel.INDOOR),
        (2000.0, EnvironmentLabel.OUTDOOR),
        (8000.0, EnvironmentLabel.BRIGHT),
        (5000.0, EnvironmentLabel.BRIGHT),
        (10.0, EnvironmentLabel.INDOOR),
        (1000.0, EnvironmentLabel.OUTDOOR),
    ])
    def test_lux_buckets(self, lux, label) -> None:
        assert classify_environment(lux) == label

    @pytest.mark.parametrize("lux", [500.0, 750.0, 999.9])
    def test_gap_between_indoor_and_outdoor(self, lux) -> None:
        assert classify_environment(lux) == EnvironmentLabel.UNKNOWN

    def test_window_mean(self) -> None:
        light = [LightReading(lux=100.0), LightReading(lux=300.0)]
        assert classify_environment_window(light) == EnvironmentLabel.INDOOR
        assert classify_environment_window([]) == EnvironmentLabel.UNKNOWN


class TestBattery:

    @pytest.mark.parametrize("level, label", [
        (5, BatteryLevelLabel.CRITICAL),
        (15, BatteryLevelLabel.LOW),
        (45, BatteryLevelLabel.NORMAL),
        (50, BatteryLevelLabel.GOOD),
        (80, BatteryLevelLabel.HIGH),
        (100, BatteryLevelLabel.HIGH),
    ])
    def test_levels(self, level, label) -> None:
        assert classify_battery(level) == label

    def test_health_score_bonus_when_rarely_charging(self) -> None:
        readings = [BatteryReading(level=70, state=BatteryState.DISCHARGING) for _ in range(5)]
        assert battery_health_score(readings) == 80

    def test_health_score_penalty_when_mostly_charging(self) -> None:
        readings = [BatteryReading(level=70, state=BatteryState.CHARGING) for _ in range(5)]
        assert battery_health_score(readings) == 60

    def test_health_score_is_clamped(self) -> None:
        readings = [BatteryReading(level=100, state=BatteryState.FULL)]
        assert battery_health_score(readings) == 100
        assert battery_health_score([]) == 0


class TestStatistics:

    def test_counts_and_span(self) -> None:
        light = [LightReading(lux=1.0, timestamp=0.0), LightReading(lux=2.0, timestamp=150.0)]
        stats = sensor_statistics({SensorKind.LIGHT: light, SensorKind.BATTERY: []})
        assert stats == {
            "light": {"count": 2, "earliest": 0.0, "latest": 150.0, "duration_minutes": 2},
        }
