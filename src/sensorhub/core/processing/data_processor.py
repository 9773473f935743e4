import logging
import math
from typing import Dict, List

from sensorhub.core.event_hub import EventHub, reading_topic
from sensorhub.core.models.circular_buffer import ChartWindow, SensorHistory
from sensorhub.core.models.sensor_data import (
    AccelerometerReading,
    BatteryReading,
    GyroscopeReading,
    LightReading,
    LocationReading,
    MagnetometerReading,
    ProximityReading,
    SensorReading,
)
from sensorhub.core.models.sensor_enum import SensorKind

logger = logging.getLogger(__name__)


def chart_value(reading: SensorReading) -> float:
    """Scalar plotted for a reading on its kind's chart."""
    if isinstance(reading, AccelerometerReading):
        return reading.magnitude
    if isinstance(reading, GyroscopeReading):
        return reading.rotation_rate
    if isinstance(reading, MagnetometerReading):
        return reading.field_strength
    if isinstance(reading, LocationReading):
        return reading.speed if reading.speed is not None else 0.0
    if isinstance(reading, BatteryReading):
        return float(reading.level)
    if isinstance(reading, LightReading):
        return reading.lux
    if isinstance(reading, ProximityReading):
        return reading.distance if reading.distance is not None else 0.0
    raise TypeError(f"Unsupported reading type {type(reading).__name__}")


class HistoryRecorder:
    """
    Listens on every reading channel and keeps the history and chart
    buffers up to date. Buffers outlive stop/start cycles of acquisition.
    """

    def __init__(self, event_hub: EventHub, history: SensorHistory = None, chart: ChartWindow = None):
        self.event_hub = event_hub
        self.history = history if history is not None else SensorHistory()
        self.chart = chart if chart is not None else ChartWindow()
        self.nan_counts: Dict[SensorKind, int] = {kind: 0 for kind in SensorKind}
        self._attached = False

    def attach(self):
        if self._attached:
            return
        for kind in SensorKind:
            self.event_hub.subscribe(reading_topic(kind), self._on_reading)
        self._attached = True

    def detach(self):
        for kind in SensorKind:
            self.event_hub.unsubscribe(reading_topic(kind), self._on_reading)
        self._attached = False

    def _on_reading(self, topic: str, reading: SensorReading):
        kind = reading.kind
        self.history.append(kind, reading)

        value = chart_value(reading)
        if math.isnan(value):
            self.nan_counts[kind] += 1
            if self.nan_counts[kind] > 2:
                logger.warning(f"[HistoryRecorder] Sensor {kind.value} has sent {self.nan_counts[kind]} consecutive NaN values.")
            return
        self.nan_counts[kind] = 0
        self.chart.append(kind, (reading.timestamp, value))

    def append(self, reading: SensorReading):
        """Record a reading directly, bypassing the channels."""
        self._on_reading(reading_topic(reading.kind), reading)

    def get_history(self, kind: SensorKind) -> List[SensorReading]:
        return self.history.get_data(kind)

    def get_recent(self, kind: SensorKind, count: int) -> List[SensorReading]:
        return self.history.get_recent(kind, count)

    def get_chart(self, kind: SensorKind):
        return self.chart.get_data(kind)

    def all_readings(self) -> List[SensorReading]:
        """Every buffered reading across kinds, oldest first."""
        readings = [r for kind in SensorKind for r in self.history.get_data(kind)]
        readings.sort(key=lambda r: r.timestamp)
        return readings

    def clear(self, kind: SensorKind):
        self.history.clear(kind)
        self.chart.clear(kind)

    def clear_all(self):
        self.history.clear_all()
        self.chart.clear_all()
