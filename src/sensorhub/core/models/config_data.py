from dataclasses import dataclass, field
from typing import Dict

from sensorhub.core.models.sensor_enum import SensorKind


@dataclass
class configSensorData:
    id: SensorKind
    description : str = "No description"
    displayName : str = "Unnamed Sensor"
    serialId : str = ""
    baud : int = 9600
    enabled: bool = True


@dataclass
class configInsightData:
    base_url : str = "https://integrate.api.nvidia.com"
    model : str = "meta/llama-3.1-8b-instruct"
    prediction_model : str = "meta/llama-3.1-70b-instruct"
    max_tokens : int = 1024
    temperature : float = 0.7
    timeout : float = 60.0


@dataclass
class configData:
    sensors : Dict[SensorKind, configSensorData]
    insights : configInsightData = field(default_factory=configInsightData)
    emulation : bool = True
    seed : int = 42
