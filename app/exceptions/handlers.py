import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from .custom import InsightsPipelineError, InvalidInsightsRequest

logger = logging.getLogger(__name__)


async def invalid_insights_request_handler(
    _request: Request, exc: InvalidInsightsRequest
) -> JSONResponse:
    logger.warning("Rejected insights request: %s", exc.message)
    return JSONResponse(
        status_code=400,
        content={"error": exc.error, "message": exc.message},
    )


async def insights_pipeline_error_handler(
    _request: Request, exc: InsightsPipelineError
) -> JSONResponse:
    logger.error("AI insights generation failed: %s", exc.message)
    return JSONResponse(
        status_code=500,
        content={
            "error": "AI insights generation failed",
            "message": exc.message,
            "performance": exc.performance,
        },
    )
