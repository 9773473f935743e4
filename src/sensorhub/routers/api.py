from fastapi import APIRouter

from sensorhub.routers import analysis, insights, sensor

router = APIRouter()

# include sub-routers
router.include_router(sensor.router)
router.include_router(analysis.router)
router.include_router(insights.router)
