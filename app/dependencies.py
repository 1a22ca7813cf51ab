from typing import Annotated

from fastapi import Depends, Request

from app.services.cost_tracker import SearchCostTracker
from app.services.insights import InsightsService


def get_insights_service(request: Request) -> InsightsService:
    return request.app.state.insights_service


def get_cost_tracker(request: Request) -> SearchCostTracker:
    return request.app.state.cost_tracker


InsightsDep = Annotated[InsightsService, Depends(get_insights_service)]
CostTrackerDep = Annotated[SearchCostTracker, Depends(get_cost_tracker)]
