from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from sensorhub.core.models.sensor_enum import SensorKind
from sensorhub.core.permissions import PERMISSION_DENIED_MESSAGE
from sensorhub.core.processing.exporter import MEDIA_TYPES, ExportFormat, export_readings
from sensorhub.core.service_manager import ServiceManager
from sensorhub.routers.dependencies import INVALID_SENSOR_RESPONSE, get_services, parse_sensor_kind
from sensorhub.schemas import Point, PointsList, Reading, ReadingsList, SensorStatusResponse

router = APIRouter(prefix="/sensors", tags=["sensors"])


@router.get("/status", response_model=SensorStatusResponse)
async def get_status(services: ServiceManager = Depends(get_services)) -> SensorStatusResponse:
    """
    Whether monitoring is running and, for each sensor kind, whether its
    subscription is active. Denied permissions come with a retryable message.
    """
    manager = services.sensor_manager
    status = manager.get_status()
    message = PERMISSION_DENIED_MESSAGE if manager.has_denied_permissions() else None
    return SensorStatusResponse(
        monitoring=manager.is_monitoring,
        emulation=manager.emulation_mode,
        sensors={kind.value: active for kind, active in status.items()},
        permissions={p.value: s.value for p, s in manager.permissions.items()},
        message=message,
    )


@router.put("/start", status_code=204)
async def start_monitoring(services: ServiceManager = Depends(get_services)) -> None:
    """Start monitoring all sensors. Does nothing if already running."""
    services.sensor_manager.start_monitoring()


@router.put("/stop", status_code=204)
async def stop_monitoring(services: ServiceManager = Depends(get_services)) -> None:
    """Stop monitoring. Buffered history is kept."""
    services.sensor_manager.stop_monitoring()


@router.delete("/history", status_code=204)
async def clear_all_history(services: ServiceManager = Depends(get_services)) -> None:
    """Empty the history and chart buffers of every sensor kind."""
    services.recorder.clear_all()


@router.get("/{sensor}/latest", response_model=Reading, responses={
    400: INVALID_SENSOR_RESPONSE,
    404: {
        "description": "No reading received yet for this sensor.",
        "content": {
            "application/json": {
                "example": {"detail": "No reading available for light"}
            }
        }
    },
})
async def get_latest_reading(sensor: str, services: ServiceManager = Depends(get_services)) -> Reading:
    """Most recent reading of a sensor kind."""
    kind = parse_sensor_kind(sensor)
    reading = services.recorder.history.latest(kind)
    if reading is None:
        raise HTTPException(status_code=404, detail=f"No reading available for {kind.value}")
    return Reading.from_reading(reading)


@router.get("/{sensor}/history", response_model=ReadingsList, responses={400: INVALID_SENSOR_RESPONSE})
async def get_reading_history(
    sensor: str,
    count: int | None = Query(default=None, ge=1),
    services: ServiceManager = Depends(get_services),
) -> ReadingsList:
    """Buffered readings of a sensor kind, oldest first. `count` keeps only the newest ones."""
    kind = parse_sensor_kind(sensor)
    if count is None:
        readings = services.recorder.get_history(kind)
    else:
        readings = services.recorder.get_recent(kind, count)
    return ReadingsList(list=[Reading.from_reading(r) for r in readings])


@router.get("/{sensor}/chart", response_model=PointsList, responses={400: INVALID_SENSOR_RESPONSE})
async def get_chart(sensor: str, services: ServiceManager = Depends(get_services)) -> PointsList:
    """Chart samples of a sensor kind as (time, value) points, oldest first."""
    kind = parse_sensor_kind(sensor)
    points = [Point(time=t, value=v) for t, v in services.recorder.get_chart(kind)]
    return PointsList(list=points)


@router.delete("/{sensor}/history", status_code=204, responses={400: INVALID_SENSOR_RESPONSE})
async def clear_history(sensor: str, services: ServiceManager = Depends(get_services)) -> None:
    """Empty the history and chart buffers of one sensor kind."""
    kind = parse_sensor_kind(sensor)
    services.recorder.clear(kind)


@router.get("/{sensor}/export", responses={
    400: INVALID_SENSOR_RESPONSE,
    200: {"content": {"text/csv": {}, "application/json": {}}},
})
async def export_history(
    sensor: str,
    format: ExportFormat = ExportFormat.CSV,
    services: ServiceManager = Depends(get_services),
) -> Response:
    """Download the buffered readings of a sensor kind as CSV or JSON."""
    kind: SensorKind = parse_sensor_kind(sensor)
    body = export_readings(services.recorder.get_history(kind), format)
    return Response(
        content=body,
        media_type=MEDIA_TYPES[format],
        headers={"Content-Disposition": f"attachment; filename={kind.value}.{format.value}"},
    )
