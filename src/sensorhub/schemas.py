from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from sensorhub.core.models.sensor_data import SensorReading


class AppHealthOK(BaseModel):
    status: str
    app: str


class Point(BaseModel):
    time: float
    value: float


class PointsList(BaseModel):
    list: List[Point]


class Reading(BaseModel):
    """A sensor reading; kind-specific fields are carried as extra keys."""
    model_config = ConfigDict(extra="allow")

    id: str
    timestamp: float
    sensor_type: str

    @classmethod
    def from_reading(cls, reading: SensorReading) -> "Reading":
        return cls(**reading.to_dict())


class ReadingsList(BaseModel):
    list: List[Reading]


class SensorStatusResponse(BaseModel):
    monitoring: bool
    emulation: bool
    sensors: Dict[str, bool]
    permissions: Dict[str, str]
    message: Optional[str] = None


class ClassificationResponse(BaseModel):
    label: str
    confidence: float
    samples: int


class BatteryAnalysisResponse(BaseModel):
    label: str
    level: Optional[int] = None
    is_charging: Optional[bool] = None
    health_score: int
    samples: int


class StatisticsResponse(BaseModel):
    sensors: Dict[str, Dict[str, Any]]


class ConnectionResponse(BaseModel):
    connected: bool
