from fastapi import APIRouter, Depends

from sensorhub.core.models.sensor_enum import SensorKind
from sensorhub.core.processing.classifier import (
    ACTIVITY_CONFIDENCE,
    ENVIRONMENT_CONFIDENCE,
    BatteryLevelLabel,
    battery_health_score,
    classify_activity_window,
    classify_battery,
    classify_environment_window,
    sensor_statistics,
)
from sensorhub.core.service_manager import ServiceManager
from sensorhub.routers.dependencies import get_services
from sensorhub.schemas import BatteryAnalysisResponse, ClassificationResponse, StatisticsResponse

router = APIRouter(prefix="/analysis", tags=["analysis"])


@router.get("/activity", response_model=ClassificationResponse)
async def get_activity(services: ServiceManager = Depends(get_services)) -> ClassificationResponse:
    """Activity label from the buffered accelerometer window, corroborated by location speed."""
    accelerometer = services.recorder.get_history(SensorKind.ACCELEROMETER)
    locations = services.recorder.get_history(SensorKind.LOCATION)
    label = classify_activity_window(accelerometer, locations)
    return ClassificationResponse(
        label=label.value,
        confidence=ACTIVITY_CONFIDENCE[label],
        samples=len(accelerometer),
    )


@router.get("/environment", response_model=ClassificationResponse)
async def get_environment(services: ServiceManager = Depends(get_services)) -> ClassificationResponse:
    """Environment label from the buffered light window."""
    light = services.recorder.get_history(SensorKind.LIGHT)
    label = classify_environment_window(light)
    return ClassificationResponse(
        label=label.value,
        confidence=ENVIRONMENT_CONFIDENCE[label],
        samples=len(light),
    )


@router.get("/battery", response_model=BatteryAnalysisResponse)
async def get_battery(services: ServiceManager = Depends(get_services)) -> BatteryAnalysisResponse:
    battery = services.recorder.get_history(SensorKind.BATTERY)
    if not battery:
        return BatteryAnalysisResponse(label=BatteryLevelLabel.UNKNOWN.value, health_score=0, samples=0)
    latest = battery[-1]
    return BatteryAnalysisResponse(
        label=classify_battery(latest.level).value,
        level=latest.level,
        is_charging=latest.is_charging,
        health_score=battery_health_score(battery),
        samples=len(battery),
    )


@router.get("/statistics", response_model=StatisticsResponse)
async def get_statistics(services: ServiceManager = Depends(get_services)) -> StatisticsResponse:
    """Reading count and time span per sensor kind currently buffered."""
    readings = {kind: services.recorder.get_history(kind) for kind in SensorKind}
    return StatisticsResponse(sensors=sensor_statistics(readings))
