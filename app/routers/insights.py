import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from app.dependencies import CostTrackerDep, InsightsDep
from app.schemas.insights import InsightsRequest, InsightsResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/hotels/ai-insights", response_model=InsightsResponse)
async def ai_insights(request: InsightsRequest, service: InsightsDep) -> InsightsResponse:
    return await service.run(request)


@router.get("/costs/today")
async def todays_costs(tracker: CostTrackerDep) -> dict:
    return tracker.daily_report()


@router.get("/health")
async def health() -> dict:
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "Hotel AI Insights",
    }
