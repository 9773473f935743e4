# External libs
import asyncio
import logging
from pathlib import Path
from typing import Optional

import httpx

# Internal libs
from sensorhub.core.config_loader import ConfigLoader
from sensorhub.core.event_hub import EventHub
from sensorhub.core.processing.data_processor import HistoryRecorder
from sensorhub.core.services.insight_client import InsightClient
from sensorhub.core.services.insight_manager import InsightManager
from sensorhub.core.services.sensor_manager import SensorManager

logger = logging.getLogger(__name__)


class ServiceManager:
    """
    Composition root: builds and owns every service instance for one
    application. Nothing is shared through module globals.
    """

    def __init__(
        self,
        config_path: Optional[Path] = None,
        emulation: Optional[bool] = None,
        insight_api_key: Optional[str] = None,
        insight_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = ConfigLoader(config_path)
        if emulation is None:
            emulation = self.config.get_emulation_mode()

        self.event_hub = EventHub()
        self.recorder = HistoryRecorder(self.event_hub)
        self.sensor_manager = SensorManager(self.event_hub, self.config, emulation=emulation)
        self.insight_client = InsightClient(
            self.config.get_insight_config(),
            api_key=insight_api_key,
            transport=insight_transport,
        )
        self.insights = InsightManager(self.insight_client)
        self.running = False

    async def start_services(self):
        """Bind the hub to the running loop, attach the buffers and start acquisition."""
        logger.info("Starting background services...")
        self.event_hub.init(asyncio.get_running_loop())
        self.insight_client.ensure_open()
        self.recorder.attach()
        self.sensor_manager.start_monitoring()
        self.running = True
        logger.info("Background services started.")

    async def stop_services(self):
        """Stop acquisition and release the HTTP client."""
        self.running = False
        self.sensor_manager.stop_monitoring()
        self.recorder.detach()
        self.event_hub.unsubscribe_all()
        await self.insight_client.aclose()
        self.event_hub.init(None)
        logger.info("Background services stopped.")
