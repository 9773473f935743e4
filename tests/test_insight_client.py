"""Tests for the insight client and the insight state holder."""
import asyncio
import json

import httpx
import pytest

from sensorhub.core.models.config_data import configInsightData
from sensorhub.core.models.sensor_data import AccelerometerReading, BatteryReading, LightReading
from sensorhub.core.services.insight_client import InsightClient, build_digest, extract_json_object
from sensorhub.core.services.insight_manager import MAX_RECENT_INSIGHTS, AnalysisInProgress, InsightManager

from conftest import FakeInsightService, chat_reply

CONFIG = configInsightData(base_url="https://insights.test", model="small", prediction_model="large")


def sample_readings():
    return [
        AccelerometerReading(x=0.0, y=0.0, z=1.0, timestamp=100.0),
        LightReading(lux=300.0, timestamp=101.0),
        BatteryReading(level=60, timestamp=102.0),
    ]


def run(coro):
    return asyncio.run(coro)


async def call(client: InsightClient, method: str, readings):
    try:
        return await getattr(client, method)(readings)
    finally:
        await client.aclose()


class TestHelpers:

    def test_extract_json_from_prose(self) -> None:
        content = 'Sure! Here it is:\n```json\n{"activity": "Walking", "confidence": 0.8}\n```\nEnjoy.'
        assert extract_json_object(content) == {"activity": "Walking", "confidence": 0.8}

    def test_extract_json_none(self) -> None:
        assert extract_json_object("no braces here") is None
        assert extract_json_object("{broken") is None
        assert extract_json_object("{not: json}") is None

    def test_digest_groups_by_kind(self) -> None:
        digest = build_digest(sample_readings())
        assert "Total data points: 3" in digest
        assert "ACCELEROMETER (1 readings):" in digest
        assert "Average lux: 300.0" in digest
        assert "Average level: 60.0%" in digest

    def test_digest_empty(self) -> None:
        assert build_digest([]) == "No sensor data available."


class TestInsightClient:

    def test_analyze_parses_json_reply(self) -> None:
        service = FakeInsightService()
        client = InsightClient(CONFIG, api_key="secret", transport=service.transport())

        insight = run(call(client, "analyze_sensor_data", sample_readings()))

        assert insight.is_error is False
        assert insight.activity == "Walking"
        assert insight.device_health == "Excellent"
        assert insight.recommendations == ["Take a break"]
        assert insight.confidence == 0.9

        request = service.requests[0]
        assert request.url == "https://insights.test/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer secret"
        payload = json.loads(request.content)
        assert payload["model"] == "small"
        assert payload["messages"][0]["role"] == "system"
        assert "SENSOR DATA ANALYSIS" in payload["messages"][1]["content"]

    def test_prose_reply_falls_back_to_text(self) -> None:
        service = FakeInsightService()
        service.content = "The user seems to be sitting at a desk most of the time."
        client = InsightClient(CONFIG, transport=service.transport())

        insight = run(call(client, "analyze_sensor_data", sample_readings()))
        assert insight.is_error is False
        assert insight.activity == "Mixed Activity"
        assert insight.patterns == service.content
        assert insight.confidence == 0.7

    def test_http_error_gives_error_result(self) -> None:
        service = FakeInsightService()
        service.status_code = 503
        client = InsightClient(CONFIG, transport=service.transport())

        prediction = run(call(client, "predict_sensor_patterns", sample_readings()))
        assert prediction.is_error is True
        assert prediction.error_message.startswith("Failed to predict patterns")

    def test_unreachable_service(self) -> None:
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = InsightClient(CONFIG, transport=httpx.MockTransport(handler))
        summary = run(call(client, "generate_activity_summary", sample_readings()))
        assert summary.is_error is True
        assert summary.score == 0

    def test_unexpected_response_shape(self) -> None:
        client = InsightClient(CONFIG, transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})))
        insight = run(call(client, "analyze_sensor_data", sample_readings()))
        assert insight.is_error is True
        assert "unexpected response" in insight.error_message

    def test_null_content_gives_error_result(self) -> None:
        reply = {"choices": [{"message": {"role": "assistant", "content": None}}]}
        client = InsightClient(CONFIG, transport=httpx.MockTransport(lambda request: httpx.Response(200, json=reply)))

        insight = run(call(client, "analyze_sensor_data", [LightReading(lux=1.0)]))
        assert insight.is_error is True
        assert "unexpected response" in insight.error_message

    def test_no_readings_skips_request(self) -> None:
        service = FakeInsightService()
        client = InsightClient(CONFIG, transport=service.transport())
        insight = run(call(client, "analyze_sensor_data", []))
        assert insight.is_error is True
        assert service.requests == []

    def test_prediction_uses_prediction_model(self) -> None:
        service = FakeInsightService()
        service.content = json.dumps({"nextActivity": "Running", "confidence": "0.4"})
        client = InsightClient(CONFIG, transport=service.transport())

        prediction = run(call(client, "predict_sensor_patterns", sample_readings()))
        assert prediction.next_activity == "Running"
        assert prediction.battery_prediction == "Stable"
        assert prediction.confidence == 0.4
        payload = json.loads(service.requests[0].content)
        assert payload["model"] == "large"
        assert payload["max_tokens"] == 800

    def test_summary_from_json(self) -> None:
        service = FakeInsightService()
        service.content = json.dumps({"activities": {"Walking": 60, "Sitting": "40"}, "score": 82})
        client = InsightClient(CONFIG, transport=service.transport())

        summary = run(call(client, "generate_activity_summary", sample_readings()))
        assert summary.activities == {"Walking": 60, "Sitting": 40}
        assert summary.score == 82
        assert summary.environment == "Indoor"

    def test_connection(self) -> None:
        ok = InsightClient(CONFIG, transport=httpx.MockTransport(lambda request: chat_reply("Yes")))
        down = InsightClient(CONFIG, transport=httpx.MockTransport(lambda request: httpx.Response(401)))

        async def scenario():
            try:
                return await ok.test_connection(), await down.test_connection()
            finally:
                await ok.aclose()
                await down.aclose()

        assert run(scenario()) == (True, False)

    def test_reopens_after_close(self) -> None:
        service = FakeInsightService()
        client = InsightClient(CONFIG, transport=service.transport())

        async def scenario():
            await client.aclose()
            client.ensure_open()
            return await call(client, "analyze_sensor_data", sample_readings())

        assert run(scenario()).is_error is False


class TestInsightManager:

    def test_recent_insights_newest_first_and_bounded(self) -> None:
        service = FakeInsightService()
        manager = InsightManager(InsightClient(CONFIG, transport=service.transport()))

        async def scenario():
            for i in range(MAX_RECENT_INSIGHTS + 2):
                service.content = json.dumps({"activity": f"activity-{i}"})
                await manager.analyze(sample_readings())
            await manager.client.aclose()

        run(scenario())
        assert len(manager.recent_insights) == MAX_RECENT_INSIGHTS
        assert manager.recent_insights[0].activity == f"activity-{MAX_RECENT_INSIGHTS + 1}"
        assert manager.current_insight is manager.recent_insights[0]
        assert manager.is_analyzing is False

    def test_error_is_recorded(self) -> None:
        manager = InsightManager(InsightClient(CONFIG, transport=FakeInsightService().transport()))
        insight = run(manager.analyze([]))
        assert insight.is_error
        assert manager.error == insight.error_message

    def test_concurrent_analysis_rejected(self) -> None:
        async def scenario():
            gate = asyncio.Event()

            async def slow_handler(request):
                await gate.wait()
                return chat_reply("{}")

            manager = InsightManager(InsightClient(CONFIG, transport=httpx.MockTransport(slow_handler)))
            first = asyncio.ensure_future(manager.analyze(sample_readings()))
            await asyncio.sleep(0)
            assert manager.is_analyzing is True
            with pytest.raises(AnalysisInProgress):
                await manager.analyze(sample_readings())
            gate.set()
            await first
            assert manager.is_analyzing is False
            await manager.client.aclose()

        run(scenario())

    def test_clear(self) -> None:
        manager = InsightManager(InsightClient(CONFIG, transport=FakeInsightService().transport()))
        run(manager.analyze([]))
        manager.clear()
        assert manager.current_insight is None
        assert manager.recent_insights == []
        assert manager.error is None
