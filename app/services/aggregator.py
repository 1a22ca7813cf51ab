import logging
from collections.abc import Iterable

from app.schemas.insights import AggregatedRecommendation, ContentResult, DetailResult, SafetyResult

logger = logging.getLogger(__name__)

MISSING_GUEST_INSIGHTS = "Loading insights..."
MISSING_HOTEL_INFO = "Detailed information not available"


def _missing_detail(hotel_id: str) -> DetailResult:
    return DetailResult(
        hotel_id=hotel_id,
        guest_insights=MISSING_GUEST_INSIGHTS,
        all_hotel_info=MISSING_HOTEL_INFO,
        source="fallback",
    )


def merge_recommendation(
    content: ContentResult,
    detail: DetailResult,
    safety: SafetyResult,
) -> AggregatedRecommendation:
    return AggregatedRecommendation(
        hotel_id=content.hotel_id,
        hotel_name=content.name,
        ai_match_percent=content.ai_match_percent,
        why_it_matches=content.why_it_matches,
        fun_facts=content.fun_facts,
        nearby_attractions=content.nearby_attractions,
        location_highlight=content.location_highlight,
        top_amenities=content.top_amenities,
        safety_rating=safety.safety_rating,
        safety_justification=safety.safety_justification,
        guest_insights=detail.guest_insights,
        sentiment_data=detail.sentiment_data,
        first_room_image=detail.first_room_image,
        second_room_image=detail.second_room_image,
        third_image_hd=detail.third_image_hd,
        photo_gallery_images=detail.photo_gallery_images,
        all_hotel_info=detail.all_hotel_info,
    )


def aggregate(
    content_results: Iterable[tuple[ContentResult, SafetyResult]],
    detail_results: Iterable[DetailResult],
    hotel_order: list[str] | None = None,
) -> list[AggregatedRecommendation]:
    """Merge the content and detail streams into one recommendation per hotel.

    Each content entry carries the safety result generated alongside it, so
    the pair must describe the same hotel. The content stream decides which
    hotels appear; the detail stream only enriches them. Output follows
    ``hotel_order`` when given, otherwise the order of the content stream.
    """
    details = {d.hotel_id: d for d in detail_results}
    entries = list(content_results)

    for content, safety in entries:
        if safety.hotel_id != content.hotel_id:
            raise ValueError(
                f"Safety result for hotel {safety.hotel_id} paired with content for {content.hotel_id}"
            )

    if hotel_order is not None:
        position = {hotel_id: i for i, hotel_id in enumerate(hotel_order)}
        entries.sort(key=lambda e: position.get(e[0].hotel_id, len(position)))

    recommendations: list[AggregatedRecommendation] = []
    for content, safety in entries:
        detail = details.get(content.hotel_id)
        if detail is None:
            logger.warning("No detail result for hotel %s, using placeholder", content.hotel_id)
            detail = _missing_detail(content.hotel_id)

        recommendations.append(merge_recommendation(content, detail, safety))

    return recommendations
