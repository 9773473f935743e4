"""
Client for the remote chat-completion service that turns sensor digests into
free-text insights.

Nothing here raises to the caller: transport, HTTP and shape errors come
back as the result type's error form, and replies without usable JSON fall
back to a templated result.
"""
import datetime
import json
import logging
import re
from collections import OrderedDict
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

import httpx

from sensorhub.core.models.config_data import configInsightData
from sensorhub.core.models.insight_data import AIInsight, ActivitySummary, Prediction
from sensorhub.core.models.sensor_data import (
    AccelerometerReading,
    BatteryReading,
    GyroscopeReading,
    LightReading,
    LocationReading,
    MagnetometerReading,
    ProximityReading,
    SensorReading,
)

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_PATH = "/v1/chat/completions"
JSON_OBJECT_PATTERN = re.compile(r"\{.*\}", re.DOTALL)

ANALYSIS_PROMPT = """You are SensorHub AI, an expert in analyzing mobile device sensor data to provide insights about user behavior, device health, and environmental patterns.

Analyze the provided sensor data and provide:
1. Activity classification (walking, running, sitting, driving, etc.)
2. Environmental insights (lighting, movement patterns)
3. Device health analysis
4. Behavioral patterns
5. Actionable recommendations

Response format should be JSON with keys: activity, environment, deviceHealth, patterns, recommendations, confidence."""

PREDICTION_PROMPT = """You are a predictive analytics AI specialized in mobile sensor data patterns.

Based on historical sensor data, predict:
1. Likely next activities
2. Battery usage patterns
3. Movement predictions
4. Environmental changes
5. Optimal device usage recommendations

Response should be JSON with keys: nextActivity, batteryPrediction, movementForecast, environmentalChanges, recommendations, confidence."""

SUMMARY_PROMPT = """You are a health and activity coach AI. Create a comprehensive daily activity summary based on sensor data.

Provide:
1. Activity breakdown (time spent in different activities)
2. Movement quality assessment
3. Environmental exposure summary
4. Health insights
5. Personalized recommendations for improvement

Response should be encouraging and actionable. Format as JSON with keys: activities, movement, environment, health, recommendations, score."""

R = TypeVar("R")


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _format_time(timestamp: float) -> str:
    return datetime.datetime.fromtimestamp(timestamp).isoformat(timespec="seconds")


def build_digest(readings: Sequence[SensorReading]) -> str:
    """Plain-text summary of a set of readings, grouped by sensor kind."""
    if not readings:
        return "No sensor data available."

    ordered = sorted(readings, key=lambda r: r.timestamp)
    grouped: Dict[str, List[SensorReading]] = OrderedDict()
    for reading in ordered:
        grouped.setdefault(reading.kind.value, []).append(reading)

    lines = [
        "SENSOR DATA ANALYSIS:",
        f"Time range: {_format_time(ordered[0].timestamp)} to {_format_time(ordered[-1].timestamp)}",
        f"Total data points: {len(ordered)}",
        "",
    ]
    for kind, items in grouped.items():
        lines.append(f"{kind.upper()} ({len(items)} readings):")
        sample = items[0]
        if isinstance(sample, AccelerometerReading):
            magnitudes = [r.magnitude for r in items]
            lines.append(f"  - Average magnitude: {_mean(magnitudes):.2f}")
            lines.append(f"  - Max magnitude: {max(magnitudes):.2f}")
        elif isinstance(sample, GyroscopeReading):
            lines.append(f"  - Average rotation rate: {_mean([r.rotation_rate for r in items]):.3f}")
        elif isinstance(sample, MagnetometerReading):
            lines.append(f"  - Average field strength: {_mean([r.field_strength for r in items]):.2f}")
        elif isinstance(sample, LocationReading):
            lines.append(f"  - Average accuracy: {_mean([r.accuracy for r in items]):.1f}m")
            speeds = [r.speed for r in items if r.speed is not None]
            if speeds:
                lines.append(f"  - Average speed: {_mean(speeds):.2f}")
        elif isinstance(sample, BatteryReading):
            lines.append(f"  - Average level: {_mean([r.level for r in items]):.1f}%")
            lines.append(f"  - Charging events: {sum(1 for r in items if r.is_charging)}")
        elif isinstance(sample, LightReading):
            lines.append(f"  - Average lux: {_mean([r.lux for r in items]):.1f}")
            lines.append(f"  - Latest condition: {items[-1].condition.value}")
        elif isinstance(sample, ProximityReading):
            lines.append(f"  - Near events: {sum(1 for r in items if r.is_near)}")
        lines.append("")

    return "\n".join(lines)


def extract_json_object(content: str) -> Optional[Dict[str, Any]]:
    """Parse the outermost {...} span of a reply, or None if there is none or it is not a JSON object."""
    match = JSON_OBJECT_PATTERN.search(content)
    if match is None:
        return None
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


class InsightClient:
    """Posts digests of sensor readings to a chat-completion endpoint."""

    def __init__(
        self,
        config: configInsightData,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self._api_key = api_key
        self._transport = transport
        self._client = self._build_client()

    def _build_client(self) -> httpx.AsyncClient:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return httpx.AsyncClient(
            base_url=self.config.base_url,
            headers=headers,
            timeout=self.config.timeout,
            transport=self._transport,
        )

    def ensure_open(self):
        """Recreate the HTTP client after `aclose()`, e.g. when services restart."""
        if self._client.is_closed:
            self._client = self._build_client()

    async def aclose(self):
        await self._client.aclose()

    async def _chat(self, model: str, system_prompt: Optional[str], user_content: str,
                    max_tokens: int, temperature: Optional[float] = None) -> str:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_content})
        payload: Dict[str, Any] = {
            "model": model,
            "messages": messages,
            "max_tokens": max_tokens,
        }
        if temperature is not None:
            payload["temperature"] = temperature

        logger.debug(f"Posting chat completion to {self.config.base_url} (model {model})")
        response = await self._client.post(CHAT_COMPLETIONS_PATH, json=payload)
        response.raise_for_status()
        content = response.json()["choices"][0]["message"]["content"]
        if not isinstance(content, str):
            raise ValueError(f"message content is {type(content).__name__}, not text")
        return content

    async def _request(self, readings: Sequence[SensorReading], what: str, model: str,
                       system_prompt: str, user_content: Callable[[], str], max_tokens: int,
                       temperature: float, from_json: Callable[[Dict[str, Any]], R],
                       from_text: Callable[[str], R], error: Callable[[str], R]) -> R:
        if not readings:
            return error(f"No sensor data to {what}")
        try:
            content = await self._chat(model, system_prompt, user_content(), max_tokens, temperature)
        except httpx.HTTPError as e:
            logger.error(f"Insight request failed ({what}): {e}")
            return error(f"Failed to {what}: {e}")
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"Unexpected insight response shape ({what}): {e}")
            return error(f"Failed to {what}: unexpected response")

        data = extract_json_object(content)
        if data is None:
            logger.warning(f"Failed to parse JSON response ({what}), using text analysis")
            return from_text(content)
        return from_json(data)

    async def analyze_sensor_data(self, readings: Sequence[SensorReading]) -> AIInsight:
        return await self._request(
            readings, "analyze sensor data", self.config.model, ANALYSIS_PROMPT,
            lambda: f"Analyze this sensor data and provide comprehensive insights:\n\n{build_digest(readings)}",
            self.config.max_tokens, self.config.temperature,
            AIInsight.from_json, AIInsight.from_text, AIInsight.error,
        )

    async def predict_sensor_patterns(self, readings: Sequence[SensorReading]) -> Prediction:
        def context() -> str:
            ordered = sorted(readings, key=lambda r: r.timestamp)
            return (
                "Based on this historical sensor data, predict future patterns:\n\n"
                f"Historical patterns from {len(ordered)} data points over time period: "
                f"{_format_time(ordered[0].timestamp)} to {_format_time(ordered[-1].timestamp)}\n\n"
                f"{build_digest(ordered)}"
            )

        return await self._request(
            readings, "predict patterns", self.config.prediction_model, PREDICTION_PROMPT,
            context, 800, 0.5,
            Prediction.from_json, Prediction.from_text, Prediction.error,
        )

    async def generate_activity_summary(self, readings: Sequence[SensorReading]) -> ActivitySummary:
        def context() -> str:
            kinds = {r.kind for r in readings}
            return (
                "Create a daily activity summary for this data:\n\n"
                f"Daily sensor data summary with {len(readings)} total readings "
                f"across {len(kinds)} different sensors\n\n{build_digest(readings)}"
            )

        return await self._request(
            readings, "generate summary", self.config.model, SUMMARY_PROMPT,
            context, 1200, 0.8,
            ActivitySummary.from_json, ActivitySummary.from_text, ActivitySummary.error,
        )

    async def test_connection(self) -> bool:
        try:
            await self._chat(self.config.model, None, "Hello, are you working?", 50)
        except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"Insight API connection test failed: {e}")
            return False
        return True
