from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from sensorhub.core.models.insight_data import AIInsight, ActivitySummary, Prediction
from sensorhub.core.service_manager import ServiceManager
from sensorhub.core.services.insight_manager import AnalysisInProgress
from sensorhub.routers.dependencies import get_services
from sensorhub.schemas import ConnectionResponse

router = APIRouter(prefix="/insights", tags=["insights"])


class InsightsState(BaseModel):
    current_insight: Optional[AIInsight] = None
    recent_insights: List[AIInsight] = []
    last_prediction: Optional[Prediction] = None
    last_summary: Optional[ActivitySummary] = None
    is_analyzing: bool = False
    error: Optional[str] = None


def _state(services: ServiceManager) -> InsightsState:
    insights = services.insights
    return InsightsState(
        current_insight=insights.current_insight,
        recent_insights=insights.recent_insights,
        last_prediction=insights.last_prediction,
        last_summary=insights.last_summary,
        is_analyzing=insights.is_analyzing,
        error=insights.error,
    )


@router.get("", response_model=InsightsState)
async def get_insights(services: ServiceManager = Depends(get_services)) -> InsightsState:
    """Current insight, the most recent ones (newest first) and the analysis state."""
    return _state(services)


@router.post("/analyze", response_model=AIInsight, responses={
    409: {
        "description": "An analysis is already running.",
        "content": {
            "application/json": {
                "example": {"detail": "An analysis is already in progress"}
            }
        }
    }
})
async def analyze(services: ServiceManager = Depends(get_services)) -> AIInsight:
    """
    Send a digest of the buffered readings to the insight service.
    Failures come back as an insight with `is_error` set, not as an HTTP error.
    """
    try:
        return await services.insights.analyze(services.recorder.all_readings())
    except AnalysisInProgress as exc:
        raise HTTPException(status_code=409, detail=str(exc))


@router.post("/predict", response_model=Prediction)
async def predict(services: ServiceManager = Depends(get_services)) -> Prediction:
    return await services.insights.predict(services.recorder.all_readings())


@router.post("/summary", response_model=ActivitySummary)
async def summarize(services: ServiceManager = Depends(get_services)) -> ActivitySummary:
    return await services.insights.summarize(services.recorder.all_readings())


@router.delete("", status_code=204)
async def clear_insights(services: ServiceManager = Depends(get_services)) -> None:
    services.insights.clear()


@router.get("/connection", response_model=ConnectionResponse)
async def test_connection(services: ServiceManager = Depends(get_services)) -> ConnectionResponse:
    """Check that the insight service answers."""
    return ConnectionResponse(connected=await services.insight_client.test_connection())
