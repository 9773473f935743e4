"""
Synthetic sensor generator used when no native sensor access is available.

A single 100 ms tick drives every sensor kind; slow-changing kinds publish
every N ticks. Waveforms are low-frequency sinusoids plus uniform jitter,
seeded so the same seed reproduces the same sequence.
"""
import asyncio
import logging
import math
import random
from typing import Callable, Optional

from sensorhub.core.models.sensor_data import (
    AccelerometerReading,
    BatteryReading,
    BatteryState,
    GyroscopeReading,
    LightReading,
    LocationReading,
    MagnetometerReading,
    ProximityReading,
    SensorReading,
)

logger = logging.getLogger(__name__)

TICK_INTERVAL = 0.1  # seconds

LOCATION_EVERY = 50   # 5 s
BATTERY_EVERY = 100   # 10 s
LIGHT_EVERY = 20      # 2 s
PROXIMITY_EVERY = 25  # 2.5 s

ACCEL_BASE = 1.0
GYRO_BASE = 0.1
MAGNETO_BASE = 25.0
START_LATITUDE = 37.7749
START_LONGITUDE = -122.4194
START_BATTERY_LEVEL = 75
START_LIGHT_LUX = 300.0
MAX_LIGHT_LUX = 10000.0


class SensorEmulator:
    """Fabricates plausible readings for every sensor kind."""

    def __init__(self, publish: Callable[[SensorReading], None], seed: Optional[int] = None):
        self._publish = publish
        self._random = random.Random(seed)
        self._task: Optional[asyncio.Task] = None
        self.tick_count = 0

        self._latitude = START_LATITUDE
        self._longitude = START_LONGITUDE
        self._battery_level = START_BATTERY_LEVEL
        self._light_lux = START_LIGHT_LUX
        self._proximity_near = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        if self.running:
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._loop())
        logger.info("Sensor emulator started")

    def stop(self):
        if self._task:
            self._task.cancel()
            self._task = None
            logger.info("Sensor emulator stopped")

    async def _loop(self):
        while True:
            self.tick()
            await asyncio.sleep(TICK_INTERVAL)

    def _jitter(self, amplitude: float) -> float:
        return (self._random.random() - 0.5) * amplitude

    def tick(self):
        """Advance one tick and publish the readings due on it."""
        self.tick_count += 1
        t = self.tick_count * TICK_INTERVAL

        # Accelerometer: gentle sway on x/y, gravity on z
        self._publish(AccelerometerReading(
            x=ACCEL_BASE + math.sin(t * 2) * 0.5 + self._jitter(0.2),
            y=ACCEL_BASE * 0.8 + math.cos(t * 1.5) * 0.3 + self._jitter(0.2),
            z=9.8 + self._jitter(0.5),
        ))

        self._publish(GyroscopeReading(
            x=GYRO_BASE * math.sin(t * 0.8) + self._jitter(0.02),
            y=GYRO_BASE * math.cos(t * 0.6) + self._jitter(0.02),
            z=GYRO_BASE * math.sin(t * 1.2) + self._jitter(0.02),
        ))

        # Magnetometer: compass field with interference
        self._publish(MagnetometerReading(
            x=MAGNETO_BASE + math.sin(t * 0.3) * 2 + self._jitter(1.0),
            y=MAGNETO_BASE * 0.9 + math.cos(t * 0.4) * 1.5 + self._jitter(1.0),
            z=MAGNETO_BASE * 1.1 + math.sin(t * 0.2) + self._jitter(1.0),
        ))

        if self.tick_count % LOCATION_EVERY == 0:
            # Slight GPS drift
            self._latitude += self._jitter(0.00001)
            self._longitude += self._jitter(0.00001)
            self._publish(LocationReading(
                latitude=self._latitude,
                longitude=self._longitude,
                altitude=50 + self._jitter(10),
                accuracy=3 + self._random.random() * 2,
                speed=0.5 + self._random.random() * 2,
            ))

        if self.tick_count % BATTERY_EVERY == 0:
            if self._random.random() < 0.1:
                self._battery_level = max(0, self._battery_level - 1)
            self._publish(BatteryReading(level=self._battery_level, state=BatteryState.DISCHARGING))

        if self.tick_count % LIGHT_EVERY == 0:
            self._light_lux = max(0.0, min(MAX_LIGHT_LUX, self._light_lux + self._jitter(50)))
            self._publish(LightReading(lux=self._light_lux))

        if self.tick_count % PROXIMITY_EVERY == 0:
            if self._random.random() < 0.3:
                self._proximity_near = not self._proximity_near
            if self._proximity_near:
                self._publish(ProximityReading(is_near=True))
            else:
                self._publish(ProximityReading(is_near=False, distance=5.0 + self._random.random() * 10))
