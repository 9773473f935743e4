"""
CircularBuffer for bounded most-recent-N storage with O(1) access and insertion.
One buffer per sensor kind backs both the analysis history and the chart window.
"""
from typing import Dict, Generic, List, Optional, Tuple, TypeVar

from sensorhub.core.models.sensor_data import SensorReading
from sensorhub.core.models.sensor_enum import SensorKind

T = TypeVar("T")

HISTORY_CAPACITY = 100
CHART_CAPACITY = 50


class CircularBuffer(Generic[T]):
    """
    Efficient circular buffer for storing the last `capacity` items.
    - O(1) insertion at the end
    - O(1) random access
    - Fixed capacity, overwrites oldest when full
    """

    __slots__ = ('capacity', 'buffer', 'write_index', 'count')

    def __init__(self, capacity: int):
        """
        Initialize circular buffer.

        Args:
            capacity: Maximum number of items to store (>= 1)
        """
        if capacity < 1:
            raise ValueError(f"Capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self.buffer: List[Optional[T]] = [None] * capacity
        self.write_index = 0  # Next position to write
        self.count = 0  # Number of valid entries (0 to capacity)

    def append(self, item: T) -> None:
        """Add an item to the buffer, evicting the oldest when full. O(1)."""
        self.buffer[self.write_index] = item
        self.write_index = (self.write_index + 1) % self.capacity
        if self.count < self.capacity:
            self.count += 1

    def get(self, index: int) -> T:
        """
        Get item at logical index (0 = oldest, count-1 = newest).
        O(1) access.
        """
        if index < 0 or index >= self.count:
            raise IndexError(f"Index {index} out of range [0, {self.count})")
        physical_index = (self.write_index - self.count + index) % self.capacity
        return self.buffer[physical_index]

    def get_all(self) -> List[T]:
        """Get all valid entries oldest-first."""
        return self.get_range(0, self.count)

    def get_range(self, start_index: int, end_index: int) -> List[T]:
        """Get entries from start_index to end_index (exclusive)."""
        if start_index < 0 or end_index > self.count or start_index > end_index:
            raise IndexError(f"Invalid range [{start_index}, {end_index}) for buffer of size {self.count}")
        first = self.write_index - self.count
        return [self.buffer[(first + i) % self.capacity] for i in range(start_index, end_index)]

    def get_recent(self, count: int) -> List[T]:
        """Get the newest `count` entries, oldest-first."""
        if count <= 0:
            return []
        return self.get_range(max(0, self.count - count), self.count)

    def latest(self) -> Optional[T]:
        if self.count == 0:
            return None
        return self.get(self.count - 1)

    def is_full(self) -> bool:
        """Check if buffer is at capacity."""
        return self.count == self.capacity

    def size(self) -> int:
        """Get number of valid entries."""
        return self.count

    def clear(self) -> None:
        """Clear all entries."""
        self.buffer = [None] * self.capacity
        self.write_index = 0
        self.count = 0


class SensorBufferStorage(Generic[T]):
    """
    One CircularBuffer per sensor kind, all with the same capacity.
    """

    def __init__(self, capacity: int):
        self.capacity = capacity
        self.buffers: Dict[SensorKind, CircularBuffer[T]] = {
            kind: CircularBuffer(capacity) for kind in SensorKind
        }

    def append(self, kind: SensorKind, item: T) -> None:
        self.buffers[kind].append(item)

    def get_data(self, kind: SensorKind) -> List[T]:
        """Get all entries for a sensor kind, oldest-first."""
        return self.buffers[kind].get_all()

    def get_recent(self, kind: SensorKind, count: int) -> List[T]:
        return self.buffers[kind].get_recent(count)

    def latest(self, kind: SensorKind) -> Optional[T]:
        return self.buffers[kind].latest()

    def clear(self, kind: SensorKind) -> None:
        """Clear data for a specific sensor kind."""
        self.buffers[kind].clear()

    def clear_all(self) -> None:
        """Clear all sensor data."""
        for buffer in self.buffers.values():
            buffer.clear()

    def get_buffer_stats(self, kind: SensorKind) -> dict:
        """Get statistics about a sensor kind's buffer."""
        buffer = self.buffers[kind]
        return {
            "capacity": buffer.capacity,
            "current_count": buffer.count,
            "is_full": buffer.is_full(),
            "utilization": buffer.count / buffer.capacity,
        }


class SensorHistory(SensorBufferStorage[SensorReading]):
    """Last readings per sensor kind, used for classification, digests and export."""

    def __init__(self, capacity: int = HISTORY_CAPACITY):
        super().__init__(capacity)


class ChartWindow(SensorBufferStorage[Tuple[float, float]]):
    """Last (timestamp, value) samples per sensor kind, used for charts."""

    def __init__(self, capacity: int = CHART_CAPACITY):
        super().__init__(capacity)
