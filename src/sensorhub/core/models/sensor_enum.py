"""Sensor kind enumeration for type-safe sensor references."""
from enum import Enum


class SensorKind(Enum):
    """Enumeration of all available sensor kinds."""
    ACCELEROMETER = "accelerometer"
    GYROSCOPE = "gyroscope"
    MAGNETOMETER = "magnetometer"
    LOCATION = "location"
    BATTERY = "battery"
    LIGHT = "light"
    PROXIMITY = "proximity"
