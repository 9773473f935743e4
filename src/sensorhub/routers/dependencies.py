from fastapi import HTTPException, Request

from sensorhub.core.models.sensor_enum import SensorKind
from sensorhub.core.service_manager import ServiceManager

VALID_SENSOR_VALUES = ", ".join([k.value for k in SensorKind])


def get_services(request: Request) -> ServiceManager:
    """The ServiceManager built by the application lifespan."""
    return request.app.state.services


def parse_sensor_kind(sensor: str) -> SensorKind:
    try:
        return SensorKind(sensor.lower())
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid sensor: {sensor}. Valid values are: {VALID_SENSOR_VALUES}"
        )


INVALID_SENSOR_RESPONSE = {
    "description": "Invalid sensor provided.",
    "content": {
        "application/json": {
            "example": {"detail": f"Invalid sensor: INVALID. Valid values are: {VALID_SENSOR_VALUES}"}
        }
    }
}
