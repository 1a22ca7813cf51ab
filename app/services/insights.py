import asyncio
import logging
import uuid
from datetime import datetime, timezone

from pydantic import ValidationError

from app.exceptions.custom import InsightsPipelineError, InvalidInsightsRequest
from app.mappers.dispatch_scheduler import (
    CONTENT_STAGGER_MS,
    DETAIL_IMMEDIATE_COUNT,
    DETAIL_STAGGER_MS,
    content_delay_ms,
    detail_delay_ms,
)
from app.schemas.insights import (
    AIModels,
    ContentResult,
    DetailResult,
    HotelSummary,
    InsightsRequest,
    InsightsResponse,
    PerformanceReport,
    SafetyResult,
)
from app.services.aggregator import aggregate
from app.services.content_generator import ContentGenerator
from app.services.cost_tracker import SearchCostTracker
from app.services.deadline import Deadline
from app.services.detail_fetcher import DetailFetcher
from app.services.instrumentation import PerformanceLogger

logger = logging.getLogger(__name__)

DEFAULT_BATCH_TIMEOUT = 45.0  # seconds


def validate_hotels(raw_hotels) -> list[HotelSummary]:
    """Parse the request's hotel entries, dropping invalid and duplicate ones."""
    if not raw_hotels or not isinstance(raw_hotels, list):
        raise InvalidInsightsRequest(
            "Hotels array is required",
            "Please provide an array of hotels with their summarized information",
        )

    hotels: list[HotelSummary] = []
    seen: set[str] = set()
    for raw in raw_hotels:
        try:
            hotel = HotelSummary.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Dropping invalid hotel entry: %s", exc.errors(include_url=False))
            continue
        if hotel.hotel_id in seen:
            logger.warning("Dropping duplicate hotel %s", hotel.hotel_id)
            continue
        seen.add(hotel.hotel_id)
        hotels.append(hotel)

    if not hotels:
        raise InvalidInsightsRequest(
            "No valid hotels found",
            "Hotels must include hotelId, name, and summarizedInfo",
        )
    return hotels


class InsightsService:
    def __init__(
        self,
        content_generator: ContentGenerator,
        detail_fetcher: DetailFetcher,
        batch_timeout: float = DEFAULT_BATCH_TIMEOUT,
        content_stagger_ms: int = CONTENT_STAGGER_MS,
        detail_stagger_ms: int = DETAIL_STAGGER_MS,
        detail_immediate_count: int = DETAIL_IMMEDIATE_COUNT,
        cost_tracker: SearchCostTracker | None = None,
    ):
        self._content = content_generator
        self._details = detail_fetcher
        self._batch_timeout = batch_timeout
        self._content_stagger_ms = content_stagger_ms
        self._detail_stagger_ms = detail_stagger_ms
        self._detail_immediate_count = detail_immediate_count
        self._cost_tracker = cost_tracker

    async def run(self, request: InsightsRequest) -> InsightsResponse:
        perf = PerformanceLogger()
        try:
            return await self._run(request, perf)
        except InvalidInsightsRequest:
            raise
        except Exception as exc:
            logger.exception("Error in AI insights generation")
            performance = self._performance(perf).model_dump(mode="json", by_alias=True)
            raise InsightsPipelineError(str(exc), performance=performance) from exc
        finally:
            self._close_search(request)

    async def _run(self, request: InsightsRequest, perf: PerformanceLogger) -> InsightsResponse:
        perf.start_step("ValidateInput")
        hotels = validate_hotels(request.hotels)
        perf.end_step("ValidateInput", {"validHotels": len(hotels)})

        insights_id = str(uuid.uuid4())
        deadline = Deadline.after(self._batch_timeout)
        logger.info("AI insights %s starting for %d hotels", insights_id, len(hotels))
        self._open_search(request, hotels)

        perf.start_step("ParallelProcessing", {"hotelCount": len(hotels)})
        content_results, detail_results = await asyncio.gather(
            self._generate_all_content(hotels, request, deadline, perf),
            self._fetch_all_details(hotels, deadline, perf),
        )
        perf.end_step("ParallelProcessing", {
            "aiContentGenerated": len(content_results),
            "hotelDetailsInsightsGenerated": len(detail_results),
        })

        perf.start_step("CombineResults", {"hotelCount": len(hotels)})
        recommendations = aggregate(
            content_results, detail_results, hotel_order=[h.hotel_id for h in hotels]
        )
        perf.end_step("CombineResults", {"finalRecommendations": len(recommendations)})

        response = InsightsResponse(
            insights_id=insights_id,
            processed_hotels=len(hotels),
            recommendations=recommendations,
            ai_models=AIModels(content=self._content.model),
            generated_at=datetime.now(timezone.utc),
            performance=self._performance(perf),
        )
        logger.info(
            "AI insights %s complete in %.0fms", insights_id, response.performance.total_time_ms
        )
        return response

    def _open_search(self, request: InsightsRequest, hotels: list[HotelSummary]) -> None:
        if not request.search_id or self._cost_tracker is None:
            return
        if self._cost_tracker.get_search(request.search_id) is None:
            self._cost_tracker.start_search(
                request.search_id,
                user_query=request.user_query or "",
                destination=hotels[0].summarized_info.city,
                hotel_count=len(hotels),
            )

    def _close_search(self, request: InsightsRequest) -> None:
        # Failed batches are recorded too, with whatever usage they accrued
        if not request.search_id or self._cost_tracker is None:
            return
        if self._cost_tracker.get_search(request.search_id) is not None:
            self._cost_tracker.finish_search(request.search_id)

    async def _generate_all_content(
        self,
        hotels: list[HotelSummary],
        request: InsightsRequest,
        deadline: Deadline,
        perf: PerformanceLogger,
    ) -> list[tuple[ContentResult, SafetyResult]]:
        async def _one(index: int, hotel: HotelSummary) -> tuple[ContentResult, SafetyResult]:
            delay = content_delay_ms(index, self._content_stagger_ms)
            if delay > 0:
                await asyncio.sleep(min(delay / 1000, deadline.remaining()))
            return await self._content.process(
                hotel,
                user_query=request.user_query,
                nights=request.nights,
                search_id=request.search_id,
                deadline=deadline,
                perf=perf,
            )

        return list(await asyncio.gather(*(_one(i, h) for i, h in enumerate(hotels))))

    async def _fetch_all_details(
        self,
        hotels: list[HotelSummary],
        deadline: Deadline,
        perf: PerformanceLogger,
    ) -> list[DetailResult]:
        batch_size = len(hotels)
        tasks = [
            self._details.process(
                hotel,
                delay_ms=detail_delay_ms(
                    batch_size, i, self._detail_immediate_count, self._detail_stagger_ms
                ),
                deadline=deadline,
                perf=perf,
            )
            for i, hotel in enumerate(hotels)
        ]
        return list(await asyncio.gather(*tasks))

    @staticmethod
    def _performance(perf: PerformanceLogger) -> PerformanceReport:
        return PerformanceReport(**perf.report())
