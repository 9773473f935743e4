import asyncio
import logging
from typing import Callable, Dict, Optional

from sensorhub.core.config_loader import ConfigLoader
from sensorhub.core.event_hub import EventHub, reading_topic
from sensorhub.core.models.sensor_data import SensorReading
from sensorhub.core.models.sensor_enum import SensorKind
from sensorhub.core.permissions import (
    Permission,
    PermissionStatus,
    is_kind_permitted,
    request_permissions,
)
from sensorhub.core.services.emulator import SensorEmulator
from sensorhub.core.services.serial_handler import serial_reader

logger = logging.getLogger(__name__)


class SensorManager:
    """
    Owns one subscription per sensor kind and republishes every reading on
    the kind's channel. Uses serial devices in hardware mode and the
    synthetic generator in emulation mode.
    """

    def __init__(
        self,
        event_hub: EventHub,
        config: ConfigLoader,
        emulation: bool = True,
        reader_factory: Callable = serial_reader,
    ):
        self.event_hub = event_hub
        self.config = config
        self.emulation_mode = emulation
        self._reader_factory = reader_factory
        self._monitoring = False
        self._emulator: Optional[SensorEmulator] = None
        self._sensor_tasks: Dict[SensorKind, asyncio.Task] = {}
        self.permissions: Dict[Permission, PermissionStatus] = {}

    @property
    def is_monitoring(self) -> bool:
        return self._monitoring

    def start_monitoring(self):
        """Start acquisition on every available sensor. No-op if already running."""
        if self._monitoring:
            return
        self._monitoring = True

        if self.emulation_mode:
            if self._emulator is None:
                self._emulator = SensorEmulator(self.publish, seed=self.config.get_seed())
            self._emulator.start()
            logger.info("SensorManager started (Emulation: True)")
            return

        ports: Dict[SensorKind, str] = {}
        for kind in self.config.get_enabled_sensors():
            port = self.config.get_sensor_port(kind)
            if port is None:
                logger.warning(f"Sensor {kind.value} has no assigned port, skipping...")
                continue
            ports[kind] = port

        self.permissions = request_permissions(ports)

        loop = asyncio.get_running_loop()
        for kind, port in ports.items():
            if not is_kind_permitted(kind, self.permissions):
                logger.warning(f"Sensor {kind.value} skipped: permission denied")
                continue
            baud = self.config.get_sensor_baud(kind)
            self._sensor_tasks[kind] = loop.create_task(
                self._reader_factory(kind, port, baud, self.publish)
            )
        logger.info(f"SensorManager started (Emulation: False, sensors: {len(self._sensor_tasks)})")

    def stop_monitoring(self):
        """Cancel all sources. Channels and buffers stay as they are."""
        if not self._monitoring:
            return
        if self._emulator:
            self._emulator.stop()
        for task in self._sensor_tasks.values():
            if not task.done():
                task.cancel()
        self._sensor_tasks.clear()
        self._monitoring = False
        logger.info("SensorManager stopped")

    def set_mode(self, emulation: bool):
        """Set the operation mode (emulation or hardware), restarting if running."""
        if emulation == self.emulation_mode:
            return
        if self._monitoring:
            self.stop_monitoring()
            self.emulation_mode = emulation
            self.start_monitoring()
        else:
            self.emulation_mode = emulation

    def is_sensor_active(self, kind: SensorKind) -> bool:
        if not self._monitoring:
            return False
        if self.emulation_mode:
            return self._emulator is not None and self._emulator.running
        task = self._sensor_tasks.get(kind)
        return task is not None and not task.done()

    def get_status(self) -> Dict[SensorKind, bool]:
        """Whether each of the sensor kinds currently has an active subscription."""
        return {kind: self.is_sensor_active(kind) for kind in SensorKind}

    def has_denied_permissions(self) -> bool:
        return any(status == PermissionStatus.DENIED for status in self.permissions.values())

    def publish(self, reading: SensorReading):
        self.event_hub.send_all_on_topic(reading_topic(reading.kind), reading)
