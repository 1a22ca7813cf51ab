import asyncio
import logging

from app.mappers.guest_insights import build_guest_insights
from app.mappers.hotel_images import select_gallery_images, select_room_images, select_third_image
from app.mappers.hotel_info import consolidate_hotel_info
from app.schemas.insights import DetailResult, HotelSummary
from app.schemas.liteapi import HotelDetail
from app.services.deadline import Deadline
from app.services.instrumentation import PerformanceLogger
from app.services.liteapi import LiteApiService

logger = logging.getLogger(__name__)

FALLBACK_GUEST_INSIGHTS = (
    "Guests appreciate the comfortable accommodations and convenient location. "
    "Some mention the check-in process could be faster."
)
FALLBACK_HOTEL_INFO = "Detailed hotel information not available"


def fallback_detail_result(hotel_id: str) -> DetailResult:
    return DetailResult(
        hotel_id=hotel_id,
        guest_insights=FALLBACK_GUEST_INSIGHTS,
        all_hotel_info=FALLBACK_HOTEL_INFO,
        source="fallback",
    )


def build_detail_result(hotel_id: str, detail: HotelDetail) -> DetailResult:
    first_room_image, second_room_image = select_room_images(detail)
    return DetailResult(
        hotel_id=hotel_id,
        guest_insights=build_guest_insights(detail),
        sentiment_data=detail.sentiment_analysis,
        first_room_image=first_room_image,
        second_room_image=second_room_image,
        third_image_hd=select_third_image(detail),
        photo_gallery_images=select_gallery_images(detail),
        all_hotel_info=consolidate_hotel_info(detail),
    )


class DetailFetcher:
    def __init__(self, liteapi: LiteApiService):
        self._liteapi = liteapi

    async def process(
        self,
        hotel: HotelSummary,
        delay_ms: int = 0,
        deadline: Deadline | None = None,
        perf: PerformanceLogger | None = None,
    ) -> DetailResult:
        """Fetch and normalize one hotel's details. Never raises."""
        step = f"DetailFetch:{hotel.hotel_id}"
        if perf:
            perf.start_step(step, {"hotel": hotel.name, "delay_ms": delay_ms})

        try:
            if deadline:
                result = await deadline.run(self._fetch(hotel, delay_ms))
            else:
                result = await self._fetch(hotel, delay_ms)
        except TimeoutError as exc:
            logger.warning("Batch deadline reached before details for %s were ready", hotel.name)
            if perf:
                perf.fail_step(step, exc)
            return fallback_detail_result(hotel.hotel_id)
        except Exception as exc:
            logger.exception("Hotel details and insights failed for %s", hotel.name)
            if perf:
                perf.fail_step(step, exc)
            return fallback_detail_result(hotel.hotel_id)

        if perf:
            perf.end_step(step, {"source": result.source})
        return result

    async def _fetch(self, hotel: HotelSummary, delay_ms: int) -> DetailResult:
        if delay_ms > 0:
            logger.info("Hotel %s details fetch delayed by %dms", hotel.name, delay_ms)
            await asyncio.sleep(delay_ms / 1000)

        detail = await self._liteapi.fetch_hotel_details(hotel.hotel_id)
        if detail is None:
            logger.info("No hotel details for %s, using fallback", hotel.name)
            return fallback_detail_result(hotel.hotel_id)

        result = build_detail_result(hotel.hotel_id, detail)
        logger.info("Completed hotel details and insights for %s", hotel.name)
        return result
