"""
Line-oriented serial sources for hardware mode.

Each sensor kind is read from its own serial device, one reading per line.
"""
import asyncio
import logging
import math
from typing import Callable, List, Optional

import serial

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
from sensorhub.core.models.sensor_enum import SensorKind

logger = logging.getLogger(__name__)


def _floats(line: str, minimum: int) -> List[float]:
    parts = line.split()
    if len(parts) < minimum:
        raise ValueError(f"expected at least {minimum} fields, got {len(parts)}")
    values = [float(p) for p in parts]
    if not all(math.isfinite(v) for v in values):
        raise ValueError(f"non-finite value in {line!r}")
    return values


def parse_line(kind: SensorKind, line: str) -> SensorReading:
    """
    Parse one device line into a reading. Raises ValueError on malformed input.

    accelerometer/gyroscope/magnetometer: "x y z"
    location: "lat lon alt accuracy [speed]"
    battery: "level state"
    light: "lux"
    proximity: "distance" (0 means near)
    """
    if kind == SensorKind.ACCELEROMETER:
        x, y, z = _floats(line, 3)[:3]
        return AccelerometerReading(x=x, y=y, z=z)
    if kind == SensorKind.GYROSCOPE:
        x, y, z = _floats(line, 3)[:3]
        return GyroscopeReading(x=x, y=y, z=z)
    if kind == SensorKind.MAGNETOMETER:
        x, y, z = _floats(line, 3)[:3]
        return MagnetometerReading(x=x, y=y, z=z)
    if kind == SensorKind.LOCATION:
        values = _floats(line, 4)
        speed = values[4] if len(values) > 4 else None
        return LocationReading(
            latitude=values[0],
            longitude=values[1],
            altitude=values[2],
            accuracy=values[3],
            speed=speed,
        )
    if kind == SensorKind.BATTERY:
        parts = line.split()
        if not parts:
            raise ValueError("empty battery line")
        state = BatteryState.parse(parts[1]) if len(parts) > 1 else BatteryState.UNKNOWN
        return BatteryReading(level=int(float(parts[0])), state=state)
    if kind == SensorKind.LIGHT:
        return LightReading(lux=_floats(line, 1)[0])
    if kind == SensorKind.PROXIMITY:
        distance = _floats(line, 1)[0]
        if distance <= 0:
            return ProximityReading(is_near=True)
        return ProximityReading(is_near=False, distance=distance)
    raise ValueError(f"Unsupported sensor kind {kind}")


async def serial_reader(
    kind: SensorKind,
    port: str,
    baudrate: int,
    on_reading: Callable[[SensorReading], None],
    serial_factory: Callable[..., serial.Serial] = serial.Serial,
):
    """
    Read lines from `port` until cancelled or the device fails.

    Malformed lines are skipped. A device error ends the task: the kind
    stays silent until monitoring is restarted.
    """
    ser: Optional[serial.Serial] = None
    try:
        ser = serial_factory(port, baudrate, timeout=0.1)
        logger.info(f"[Serial] {kind.value} connected on {port} @ {baudrate} baud")
        while True:
            if ser.in_waiting > 0:
                raw = ser.readline()
                try:
                    line = raw.decode('utf-8').strip()
                except UnicodeDecodeError:
                    logger.warning(f"Error decoding serial data from {kind.value} ({port})")
                    continue
                if line:
                    try:
                        reading = parse_line(kind, line)
                    except ValueError as e:
                        logger.warning(f"Error parsing {kind.value} line: {line!r} -> {e}")
                        continue
                    on_reading(reading)
                    # Yield to the loop between lines
                    await asyncio.sleep(0)
                    continue
            await asyncio.sleep(0.01)
    except (serial.SerialException, OSError) as e:
        logger.warning(f"[Serial] {kind.value} unavailable on {port}: {e}")
    finally:
        if ser is not None:
            try:
                ser.close()
            except (serial.SerialException, OSError) as e:
                logger.debug(f"Error closing {port}: {e}")
