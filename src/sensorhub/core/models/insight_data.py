"""
Result models for the remote insight service.

Each result has three ways of being built: from the JSON object found in the
model's reply, from prose when no JSON could be extracted, and an error form.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _as_text(value: Any, default: str) -> str:
    if value is None:
        return default
    return str(value)


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v) for v in value]
    return [str(value)]


def _as_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass
class AIInsight:
    activity: str
    environment: str
    device_health: str
    patterns: str
    recommendations: List[str] = field(default_factory=list)
    confidence: float = 0.0
    is_error: bool = False
    error_message: Optional[str] = None

    @classmethod
    def error(cls, message: str) -> "AIInsight":
        return cls(
            activity="Unknown",
            environment="Unknown",
            device_health="Unknown",
            patterns="Unknown",
            recommendations=[],
            confidence=0.0,
            is_error=True,
            error_message=message,
        )

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "AIInsight":
        return cls(
            activity=_as_text(data.get("activity"), "Unknown"),
            environment=_as_text(data.get("environment"), "Unknown"),
            device_health=_as_text(data.get("deviceHealth"), "Good"),
            patterns=_as_text(data.get("patterns"), "No patterns detected"),
            recommendations=_as_list(data.get("recommendations")),
            confidence=_as_float(data.get("confidence"), 0.5),
        )

    @classmethod
    def from_text(cls, content: str) -> "AIInsight":
        patterns = content[:200] + "..." if len(content) > 200 else content
        return cls(
            activity="Mixed Activity",
            environment="Variable",
            device_health="Good",
            patterns=patterns,
            recommendations=["Check detailed analysis", "Monitor patterns"],
            confidence=0.7,
        )


@dataclass
class Prediction:
    next_activity: str
    battery_prediction: str
    movement_forecast: str
    environmental_changes: str
    recommendations: List[str] = field(default_factory=list)
    confidence: float = 0.0
    is_error: bool = False
    error_message: Optional[str] = None

    @classmethod
    def error(cls, message: str) -> "Prediction":
        return cls(
            next_activity="Unknown",
            battery_prediction="Unknown",
            movement_forecast="Unknown",
            environmental_changes="Unknown",
            recommendations=[],
            confidence=0.0,
            is_error=True,
            error_message=message,
        )

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Prediction":
        return cls(
            next_activity=_as_text(data.get("nextActivity"), "Unknown"),
            battery_prediction=_as_text(data.get("batteryPrediction"), "Stable"),
            movement_forecast=_as_text(data.get("movementForecast"), "Similar patterns"),
            environmental_changes=_as_text(data.get("environmentalChanges"), "No changes"),
            recommendations=_as_list(data.get("recommendations")),
            confidence=_as_float(data.get("confidence"), 0.5),
        )

    @classmethod
    def from_text(cls, content: str) -> "Prediction":
        return cls(
            next_activity="Predicted Activity",
            battery_prediction="Normal usage",
            movement_forecast="Continued patterns",
            environmental_changes="Stable environment",
            recommendations=["Monitor trends"],
            confidence=0.6,
        )


@dataclass
class ActivitySummary:
    activities: Dict[str, int]
    movement: str
    environment: str
    health: str
    recommendations: List[str] = field(default_factory=list)
    score: int = 0
    is_error: bool = False
    error_message: Optional[str] = None

    @classmethod
    def error(cls, message: str) -> "ActivitySummary":
        return cls(
            activities={},
            movement="Unknown",
            environment="Unknown",
            health="Unknown",
            recommendations=[],
            score=0,
            is_error=True,
            error_message=message,
        )

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "ActivitySummary":
        raw_activities = data.get("activities")
        activities: Dict[str, int] = {}
        if isinstance(raw_activities, dict):
            activities = {str(k): _as_int(v, 0) for k, v in raw_activities.items()}
        return cls(
            activities=activities,
            movement=_as_text(data.get("movement"), "Moderate"),
            environment=_as_text(data.get("environment"), "Indoor"),
            health=_as_text(data.get("health"), "Good"),
            recommendations=_as_list(data.get("recommendations")),
            score=_as_int(data.get("score"), 75),
        )

    @classmethod
    def from_text(cls, content: str) -> "ActivitySummary":
        return cls(
            activities={"Mixed": 100},
            movement="Varied",
            environment="Mixed",
            health="Good",
            recommendations=["Stay active"],
            score=75,
        )
