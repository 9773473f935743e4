import json
import logging
from pathlib import Path
from typing import Dict, Optional

from sensorhub.core.models.sensor_enum import SensorKind
from sensorhub.core.models.config_data import configData, configInsightData, configSensorData

logger = logging.getLogger(__name__)

DEFAULT_BAUD = 9600


class ConfigLoader:
    """Loads and manages sensor configuration from a JSON file."""

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = Path(config_path) if config_path else self.get_default_config_path()
        self._config = self._get_default_config()
        self.load_config()

    @staticmethod
    def get_default_config_path() -> Path:
        """Get the path to the bundled sensors_config.json file."""
        # <root>/src/sensorhub/core/config_loader.py -> <root>/config/sensors_config.json
        return Path(__file__).parent.parent.parent.parent / "config" / "sensors_config.json"

    def load_config(self):
        """Load configuration from JSON file."""
        # Start from defaults so _config is always complete
        self._config = self._get_default_config()

        if not self.config_path.exists():
            logger.error(f"Configuration file not found: {self.config_path}")
            return

        try:
            with open(self.config_path, 'r') as f:
                json_data = json.load(f)

            for sensor_key, sensor_cfg in json_data.get("sensors", {}).items():
                try:
                    kind = SensorKind[sensor_key.upper()]
                except KeyError:
                    logger.warning(f"Unknown sensor '{sensor_key}' in configuration, skipping")
                    continue
                self._config.sensors[kind] = configSensorData(
                    kind,
                    description=sensor_cfg.get("description", ""),
                    displayName=sensor_cfg.get("display_name", ""),
                    serialId=sensor_cfg.get("serial_id", ""),
                    baud=sensor_cfg.get("baud", DEFAULT_BAUD),
                    enabled=sensor_cfg.get("enabled", True),
                )

            insights_cfg = json_data.get("insights", {})
            defaults = configInsightData()
            self._config.insights = configInsightData(
                base_url=insights_cfg.get("base_url", defaults.base_url),
                model=insights_cfg.get("model", defaults.model),
                prediction_model=insights_cfg.get("prediction_model", defaults.prediction_model),
                max_tokens=insights_cfg.get("max_tokens", defaults.max_tokens),
                temperature=insights_cfg.get("temperature", defaults.temperature),
                timeout=insights_cfg.get("timeout", defaults.timeout),
            )

            self._config.emulation = json_data.get("emulation", True)
            self._config.seed = json_data.get("seed", self._config.seed)
            logger.info(f"Configuration loaded from {self.config_path}")

        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse configuration file: {e}")
            self._config = self._get_default_config()

        except (OSError, TypeError, AttributeError) as e:
            logger.error(f"Unexpected error loading configuration: {e}")
            self._config = self._get_default_config()

    @staticmethod
    def _get_default_config() -> configData:
        """Return default configuration: every sensor enabled, no serial ports, emulation on."""
        return configData(
            emulation=True,
            sensors={kind: configSensorData(kind, displayName=kind.value.capitalize()) for kind in SensorKind},
        )

    def get_emulation_mode(self) -> bool:
        """Get the emulation mode setting."""
        return self._config.emulation

    def get_seed(self) -> int:
        return self._config.seed

    def get_sensor_config(self, kind: SensorKind) -> configSensorData:
        """Get configuration for a specific sensor kind."""
        return self._config.sensors[kind]

    def get_sensor_port(self, kind: SensorKind) -> Optional[str]:
        """Serial device path for a sensor kind, or None when unassigned."""
        serial_id = self.get_sensor_config(kind).serialId
        return serial_id or None

    def get_sensor_baud(self, kind: SensorKind) -> int:
        return self.get_sensor_config(kind).baud

    def get_enabled_sensors(self) -> Dict[SensorKind, configSensorData]:
        return {kind: cfg for kind, cfg in self._config.sensors.items() if cfg.enabled is True}

    def get_insight_config(self) -> configInsightData:
        return self._config.insights
