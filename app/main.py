import logging
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from app.config import Settings
from app.exceptions.custom import InsightsPipelineError, InvalidInsightsRequest
from app.exceptions.handlers import (
    insights_pipeline_error_handler,
    invalid_insights_request_handler,
)
from app.routers.insights import router as insights_router
from app.services.claude import ClaudeService
from app.services.content_generator import ContentGenerator
from app.services.cost_tracker import SearchCostTracker
from app.services.detail_fetcher import DetailFetcher
from app.services.insights import InsightsService
from app.services.liteapi import LiteApiService


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    async with httpx.AsyncClient(timeout=30.0) as client:
        liteapi = LiteApiService(
            client,
            settings.liteapi_key,
            concurrency=settings.detail_concurrency,
            timeout=settings.detail_timeout,
            rate_limit_backoff=settings.rate_limit_backoff,
        )
        claude = ClaudeService(api_key=settings.anthropic_api_key)
        cost_tracker = SearchCostTracker()

        app.state.cost_tracker = cost_tracker
        app.state.insights_service = InsightsService(
            ContentGenerator(claude, cost_tracker=cost_tracker),
            DetailFetcher(liteapi),
            batch_timeout=settings.batch_timeout,
            content_stagger_ms=settings.content_stagger_ms,
            detail_stagger_ms=settings.detail_stagger_ms,
            detail_immediate_count=settings.detail_immediate_count,
            cost_tracker=cost_tracker,
        )

        yield


app = FastAPI(title="Hotel AI Insights", lifespan=lifespan)

app.add_exception_handler(InvalidInsightsRequest, invalid_insights_request_handler)
app.add_exception_handler(InsightsPipelineError, insights_pipeline_error_handler)

app.include_router(insights_router)
