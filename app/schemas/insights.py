from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.schemas.liteapi import SentimentAnalysis


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _to_number(value: Any) -> float | None:
    """Parse a loosely-typed numeric field; None when it is not a finite number."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value.strip().rstrip("%") if isinstance(value, str) else value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


class SummarizedInfo(CamelModel):
    """Summary block of a hotel entry.

    Only the entry's id, name and the presence of this block decide whether
    a hotel is kept, so every field here accepts loosely-typed input.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: str | None = None
    description: str = ""
    amenities: list[str] = []
    star_rating: float | None = None
    review_count: int | None = None
    price_per_night: str | None = None
    location: str = ""
    city: str = ""
    country: str = ""
    latitude: float | None = None
    longitude: float | None = None

    @field_validator("description", "location", "city", "country", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return ""

    @field_validator("name", "price_per_night", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> str | None:
        if isinstance(value, (str, int, float)) and not isinstance(value, bool):
            return str(value)
        return None

    @field_validator("amenities", mode="before")
    @classmethod
    def _amenity_entries(cls, value: Any) -> list[str]:
        # Text amenities are split later by parse_amenities
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if isinstance(value, list):
            return [entry for entry in value if isinstance(entry, str)]
        return []

    @field_validator("star_rating", "latitude", "longitude", mode="before")
    @classmethod
    def _unparseable_to_none(cls, value: Any) -> float | None:
        return _to_number(value)

    @field_validator("review_count", mode="before")
    @classmethod
    def _whole_review_count(cls, value: Any) -> int | None:
        number = _to_number(value)
        return None if number is None else int(number)


class HotelSummary(CamelModel):
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    hotel_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    ai_match_percent: float = 0
    summarized_info: SummarizedInfo

    @field_validator("ai_match_percent", mode="before")
    @classmethod
    def _match_percent(cls, value: Any) -> float:
        number = _to_number(value)
        return 0 if number is None else number


class InsightsRequest(CamelModel):
    # Entries are validated one by one so invalid hotels can be dropped
    hotels: Any = None
    user_query: str | None = None
    nights: int | None = None
    search_id: str | None = None


class ContentResult(BaseModel):
    hotel_id: str
    name: str
    ai_match_percent: float = 0
    why_it_matches: str
    fun_facts: list[str]
    nearby_attractions: list[str]
    location_highlight: str
    top_amenities: list[str]
    source: Literal["generated", "fallback"] = "generated"


class SafetyResult(BaseModel):
    hotel_id: str
    safety_rating: int
    safety_justification: str
    source: Literal["generated", "rule_based"] = "generated"


class DetailResult(BaseModel):
    hotel_id: str
    guest_insights: str
    sentiment_data: SentimentAnalysis | None = None
    first_room_image: str | None = None
    second_room_image: str | None = None
    third_image_hd: str | None = None
    photo_gallery_images: list[str] = []
    all_hotel_info: str
    source: Literal["fetched", "fallback"] = "fetched"


class AggregatedRecommendation(CamelModel):
    hotel_id: str
    hotel_name: str
    ai_match_percent: float
    why_it_matches: str
    fun_facts: list[str]
    nearby_attractions: list[str]
    location_highlight: str
    top_amenities: list[str]
    safety_rating: int
    safety_justification: str
    guest_insights: str
    sentiment_data: SentimentAnalysis | None = None
    first_room_image: str | None = None
    second_room_image: str | None = None
    third_image_hd: str | None = None
    photo_gallery_images: list[str] = []
    all_hotel_info: str


class StepBreakdown(CamelModel):
    step: str
    duration: float | None = None
    status: str
    percentage: float = 0
    details: dict[str, Any] = {}


class PerformanceReport(CamelModel):
    total_time_ms: float
    step_breakdown: list[StepBreakdown]
    bottlenecks: list[StepBreakdown]


class AIModels(CamelModel):
    content: str
    insights: str = "direct_processing"


class InsightsResponse(CamelModel):
    insights_id: str
    processed_hotels: int
    recommendations: list[AggregatedRecommendation]
    ai_models: AIModels
    generated_at: datetime
    performance: PerformanceReport
