"""Pytest configuration and fixtures for test suite."""

import json
from pathlib import Path
from typing import Dict

import httpx
import pytest
from fastapi.testclient import TestClient

from sensorhub.core.config_loader import ConfigLoader
from sensorhub.core.service_manager import ServiceManager
from sensorhub.main import create_app

INSIGHT_BASE_URL = "https://insights.test"


def write_config(path: Path, sensors: Dict[str, dict] = None, emulation: bool = True, seed: int = 7) -> Path:
    """Write a sensors_config.json usable by ConfigLoader."""
    path.write_text(json.dumps({
        "emulation": emulation,
        "seed": seed,
        "sensors": sensors or {},
        "insights": {
            "base_url": INSIGHT_BASE_URL,
            "model": "test-model",
            "prediction_model": "test-prediction-model",
            "max_tokens": 256,
            "temperature": 0.2,
            "timeout": 5.0,
        },
    }))
    return path


def chat_reply(content: str) -> httpx.Response:
    """A chat-completion response carrying `content` as the assistant message."""
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


class FakeInsightService:
    """Programmable stand-in for the chat-completion endpoint."""

    def __init__(self):
        self.content = json.dumps({
            "activity": "Walking",
            "environment": "Indoor",
            "deviceHealth": "Excellent",
            "patterns": "Regular movement",
            "recommendations": ["Take a break"],
            "confidence": 0.9,
        })
        self.status_code = 200
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"error": "unavailable"})
        return chat_reply(self.content)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    return write_config(tmp_path / "sensors_config.json")


@pytest.fixture
def config(config_file: Path) -> ConfigLoader:
    return ConfigLoader(config_file)


@pytest.fixture
def insight_service() -> FakeInsightService:
    return FakeInsightService()


@pytest.fixture
def services(config_file: Path, insight_service: FakeInsightService) -> ServiceManager:
    return ServiceManager(
        config_path=config_file,
        emulation=True,
        insight_api_key="test-key",
        insight_transport=insight_service.transport(),
    )


@pytest.fixture
def client(services: ServiceManager):
    """Client of an app running its own services in emulation mode."""
    with TestClient(create_app(services)) as test_client:
        yield test_client


@pytest.fixture
def idle_client(client: TestClient, services: ServiceManager) -> TestClient:
    """Client whose acquisition is stopped and buffers emptied, for deterministic data."""
    assert client.put("/api/sensors/stop").status_code == 204
    assert client.delete("/api/sensors/history").status_code == 204
    return client
