from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional
import logging

from fastapi import FastAPI
from pydantic import Field
from pydantic_settings import BaseSettings

from sensorhub.routers.api import router as api_router
from sensorhub.schemas import AppHealthOK
from sensorhub.core.service_manager import ServiceManager

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    app_name: str = "SensorHub API"
    debug: bool = False
    log_level: str = "INFO"
    # Overrides the "emulation" flag of the config file when set (env EMULATION_MODE)
    emulation_mode: Optional[bool] = None
    config_path: Optional[Path] = Field(default=None, validation_alias="SENSORHUB_CONFIG")
    # Never stored in the config file (env INSIGHT_API_KEY)
    insight_api_key: Optional[str] = None


settings = Settings()


def build_services(app_settings: Settings) -> ServiceManager:
    return ServiceManager(
        config_path=app_settings.config_path,
        emulation=app_settings.emulation_mode,
        insight_api_key=app_settings.insight_api_key,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the services (unless provided) and run them for the app's lifetime."""
    services: ServiceManager = getattr(app.state, "services", None) or build_services(settings)
    app.state.services = services
    emulation = services.sensor_manager.emulation_mode
    try:
        logger.info("Starting background services in %s mode", "emulation" if emulation else "hardware")
        await services.start_services()
    except (OSError, RuntimeError) as e:
        if emulation:
            raise
        logger.error("Failed to start services: %s, falling back to emulation mode", e)
        services.sensor_manager.stop_monitoring()
        services.sensor_manager.set_mode(True)
        await services.start_services()

    try:
        yield
    finally:
        logger.info("Stopping background services")
        await services.stop_services()


def create_app(services: Optional[ServiceManager] = None) -> FastAPI:
    application = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)
    if services is not None:
        application.state.services = services

    @application.get("/", tags=["meta"])
    async def read_root() -> dict[str, str]:
        return {"message": settings.app_name}

    @application.get("/health", tags=["meta"], response_model=AppHealthOK)
    async def healthcheck() -> AppHealthOK:
        return AppHealthOK(status="ok", app=settings.app_name)

    # mount API router under /api
    application.include_router(api_router, prefix="/api")
    return application


logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
app = create_app()
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
