import logging
from typing import List, Optional, Sequence

from sensorhub.core.models.insight_data import AIInsight, ActivitySummary, Prediction
from sensorhub.core.models.sensor_data import SensorReading
from sensorhub.core.services.insight_client import InsightClient

logger = logging.getLogger(__name__)

MAX_RECENT_INSIGHTS = 10


class AnalysisInProgress(RuntimeError):
    """Raised when an analysis is requested while another one is in flight."""


class InsightManager:
    """
    Holds the insight state shown to clients and allows one analysis at a time.
    """

    def __init__(self, client: InsightClient):
        self.client = client
        self.current_insight: Optional[AIInsight] = None
        self.recent_insights: List[AIInsight] = []
        self.last_prediction: Optional[Prediction] = None
        self.last_summary: Optional[ActivitySummary] = None
        self.is_analyzing = False
        self.error: Optional[str] = None

    async def analyze(self, readings: Sequence[SensorReading]) -> AIInsight:
        if self.is_analyzing:
            raise AnalysisInProgress("An analysis is already in progress")

        self.is_analyzing = True
        self.error = None
        try:
            insight = await self.client.analyze_sensor_data(readings)
        finally:
            self.is_analyzing = False

        if insight.is_error:
            self.error = insight.error_message
        self.current_insight = insight
        self.recent_insights = [insight] + self.recent_insights[:MAX_RECENT_INSIGHTS - 1]
        return insight

    async def predict(self, readings: Sequence[SensorReading]) -> Prediction:
        self.last_prediction = await self.client.predict_sensor_patterns(readings)
        return self.last_prediction

    async def summarize(self, readings: Sequence[SensorReading]) -> ActivitySummary:
        self.last_summary = await self.client.generate_activity_summary(readings)
        logger.info(f"Activity summary generated: {self.last_summary.score}/100")
        return self.last_summary

    def clear(self):
        self.current_insight = None
        self.recent_insights = []
        self.last_prediction = None
        self.last_summary = None
        self.error = None
