import asyncio
import logging

from pydantic import ValidationError

from app.exceptions.custom import GenerationError
from app.mappers.amenities import match_hotel_amenities, select_amenities, TOP_AMENITY_COUNT
from app.mappers.attractions import default_attractions, extract_search_intent, normalize_attraction
from app.mappers.safety import MAX_SAFETY_RATING, MIN_SAFETY_RATING, rule_based_safety
from app.schemas.generation import GeneratedContent, GeneratedSafety
from app.schemas.insights import ContentResult, HotelSummary, SafetyResult
from app.services.claude import ClaudeService, GenerationResult
from app.services.cost_tracker import SearchCostTracker
from app.services.deadline import Deadline
from app.services.instrumentation import PerformanceLogger

logger = logging.getLogger(__name__)

CONTENT_TEMPERATURE = 0.7
CONTENT_MAX_TOKENS = 400
SAFETY_TEMPERATURE = 0.3
SAFETY_MAX_TOKENS = 150

DEFAULT_WHY_IT_MATCHES = "Great choice for your stay"
DEFAULT_FUN_FACTS = ["Modern amenities", "Excellent service"]
DEFAULT_LOCATION_HIGHLIGHT = "Convenient location"

FALLBACK_WHY_IT_MATCHES = "Excellent choice with great amenities and location"
FALLBACK_FUN_FACTS = ["Modern facilities", "Excellent guest reviews"]
FALLBACK_LOCATION_HIGHLIGHT = "Prime location"

_CONTENT_SYSTEM_PROMPT = (
    "You are a travel content expert who matches hotels and nearby attractions "
    "to traveler interests. Generate engaging, accurate hotel descriptions. "
    "Keep nearbyAttractions descriptions to 5-8 words and relate them to the "
    "user's search when possible. Reply ONLY with valid JSON."
)

_SAFETY_SYSTEM_PROMPT = (
    "You are a travel safety analyst. Rate how safe a hotel's surroundings are "
    "for tourists on a 1-10 scale. Reply ONLY with valid JSON."
)


def _hotel_block(hotel: HotelSummary, nights: int | None) -> str:
    info = hotel.summarized_info
    lines = [
        f"HOTEL: {info.name or hotel.name}",
        f"FULL ADDRESS: {info.location}",
        f"COORDINATES: {info.latitude}, {info.longitude}",
        f"LOCATION: {info.city}, {info.country}",
        f"FULL DESCRIPTION: {info.description}",
        f"AMENITIES: {', '.join(info.amenities)}",
        f"PRICE: {info.price_per_night}",
        f"RATING: {info.star_rating} stars",
    ]
    if nights:
        lines.append(f"STAY: {nights} nights")
    return "\n".join(lines)


def build_content_prompt(hotel: HotelSummary, user_query: str | None, nights: int | None) -> str:
    block = _hotel_block(hotel, nights)
    json_shape = (
        "Return JSON:\n"
        "{\n"
        '  "whyItMatches": "about 20 words",\n'
        '  "funFacts": ["fact1", "fact2"],\n'
        '  "nearbyAttractions": ["Attraction Name - brief description - X min by walk/metro/bus/taxi"],\n'
        '  "locationHighlight": "key location advantage",\n'
        f'  "topAmenities": ["{TOP_AMENITY_COUNT} names copied exactly from AMENITIES"]\n'
        "}"
    )
    if user_query and user_query.strip():
        return (
            f'USER SEARCH REQUEST: "{user_query}"\n{block}\n'
            f"MATCH PERCENTAGE: {hotel.ai_match_percent:g}%\n\n"
            "TASK: Explain why this hotel matches the user's request and list real "
            "nearby attractions relevant to it, using the coordinates and address. "
            "Only mention what the description supports; if the request is not "
            'covered, start whyItMatches with "While".\n\n'
            f"{json_shape}"
        )
    return (
        f"{block}\n\n"
        "TASK: Generate engaging content for this hotel recommendation and list "
        "real nearby attractions for general travelers, using the coordinates and "
        "address. Start whyItMatches with the hotel name.\n\n"
        f"{json_shape}"
    )


def build_safety_prompt(hotel: HotelSummary) -> str:
    info = hotel.summarized_info
    return (
        f"HOTEL: {info.name or hotel.name}\n"
        f"ADDRESS: {info.location}\n"
        f"LOCATION: {info.city}, {info.country}\n"
        f"COORDINATES: {info.latitude}, {info.longitude}\n\n"
        'Return JSON: {"safetyRating": <integer 1-10>, '
        '"safetyJustification": "one sentence, max 20 words"}'
    )


def fallback_content(hotel: HotelSummary, user_query: str | None) -> ContentResult:
    info = hotel.summarized_info
    if user_query and user_query.strip():
        why = f"Perfect match for your {extract_search_intent(user_query)} requirements"
    else:
        why = FALLBACK_WHY_IT_MATCHES
    return ContentResult(
        hotel_id=hotel.hotel_id,
        name=hotel.name,
        ai_match_percent=hotel.ai_match_percent,
        why_it_matches=why,
        fun_facts=list(FALLBACK_FUN_FACTS),
        nearby_attractions=default_attractions(user_query, info.city),
        location_highlight=FALLBACK_LOCATION_HIGHLIGHT,
        top_amenities=select_amenities(info.amenities, user_query),
        source="fallback",
    )


def fallback_safety(hotel: HotelSummary) -> SafetyResult:
    info = hotel.summarized_info
    rating, justification = rule_based_safety(info.city, info.country)
    return SafetyResult(
        hotel_id=hotel.hotel_id,
        safety_rating=rating,
        safety_justification=justification,
        source="rule_based",
    )


def _coerce_rating(payload: dict) -> dict:
    """Round numeric or numeric-string ratings so 7.6 or "8" still validate."""
    value = payload.get("safetyRating")
    if isinstance(value, str):
        try:
            value = float(value.strip().split("/")[0])
        except ValueError:
            return payload
    if isinstance(value, float):
        return {**payload, "safetyRating": int(round(value))}
    return payload


class ContentGenerator:
    def __init__(self, claude: ClaudeService, cost_tracker: SearchCostTracker | None = None):
        self._claude = claude
        self._cost_tracker = cost_tracker

    @property
    def model(self) -> str:
        return self._claude.model

    async def process(
        self,
        hotel: HotelSummary,
        user_query: str | None = None,
        nights: int | None = None,
        search_id: str | None = None,
        deadline: Deadline | None = None,
        perf: PerformanceLogger | None = None,
    ) -> tuple[ContentResult, SafetyResult]:
        """Generate match content and a safety rating concurrently. Never raises."""
        step = f"ContentGeneration:{hotel.hotel_id}"
        if perf:
            perf.start_step(step, {"hotel": hotel.name})

        work = asyncio.gather(
            self.generate_content(hotel, user_query, nights, search_id),
            self.generate_safety(hotel, search_id),
        )
        try:
            if deadline:
                content, safety = await deadline.run(work)
            else:
                content, safety = await work
        except TimeoutError as exc:
            logger.warning("Batch deadline reached before content for %s was ready", hotel.name)
            if perf:
                perf.fail_step(step, exc)
            return fallback_content(hotel, user_query), fallback_safety(hotel)
        except Exception as exc:
            logger.exception("AI content generation failed for %s", hotel.name)
            if perf:
                perf.fail_step(step, exc)
            return fallback_content(hotel, user_query), fallback_safety(hotel)

        if perf:
            perf.end_step(step, {"content": content.source, "safety": safety.source})
        return content, safety

    async def generate_content(
        self,
        hotel: HotelSummary,
        user_query: str | None = None,
        nights: int | None = None,
        search_id: str | None = None,
    ) -> ContentResult:
        prompt = build_content_prompt(hotel, user_query, nights)
        try:
            result = await self._claude.generate_json(
                _CONTENT_SYSTEM_PROMPT,
                prompt,
                temperature=CONTENT_TEMPERATURE,
                max_tokens=CONTENT_MAX_TOKENS,
            )
            self._track_usage(search_id, result)
            generated = self._validate(GeneratedContent, result.payload)
        except GenerationError as exc:
            logger.warning("Content generation failed for %s (%s): %s", hotel.name, exc.reason, exc.message)
            return fallback_content(hotel, user_query)

        info = hotel.summarized_info
        if generated.nearbyAttractions:
            attractions = [normalize_attraction(a, user_query) for a in generated.nearbyAttractions]
        else:
            attractions = default_attractions(user_query, info.city)

        top_amenities = match_hotel_amenities(generated.topAmenities, info.amenities)
        if len(top_amenities) < TOP_AMENITY_COUNT:
            fill = select_amenities(info.amenities, user_query, count=TOP_AMENITY_COUNT + len(top_amenities))
            top_amenities += [a for a in fill if a not in top_amenities]
        top_amenities = top_amenities[:TOP_AMENITY_COUNT]

        logger.info("Generated content for %s", hotel.name)
        return ContentResult(
            hotel_id=hotel.hotel_id,
            name=hotel.name,
            ai_match_percent=hotel.ai_match_percent,
            why_it_matches=generated.whyItMatches or DEFAULT_WHY_IT_MATCHES,
            fun_facts=generated.funFacts or list(DEFAULT_FUN_FACTS),
            nearby_attractions=attractions,
            location_highlight=generated.locationHighlight or DEFAULT_LOCATION_HIGHLIGHT,
            top_amenities=top_amenities,
        )

    async def generate_safety(self, hotel: HotelSummary, search_id: str | None = None) -> SafetyResult:
        try:
            result = await self._claude.generate_json(
                _SAFETY_SYSTEM_PROMPT,
                build_safety_prompt(hotel),
                temperature=SAFETY_TEMPERATURE,
                max_tokens=SAFETY_MAX_TOKENS,
            )
            self._track_usage(search_id, result)
            generated = self._validate(GeneratedSafety, _coerce_rating(result.payload))
        except GenerationError as exc:
            logger.warning("Safety rating failed for %s (%s): %s", hotel.name, exc.reason, exc.message)
            return fallback_safety(hotel)

        justification = generated.safetyJustification
        if not justification:
            justification = fallback_safety(hotel).safety_justification
        return SafetyResult(
            hotel_id=hotel.hotel_id,
            safety_rating=max(MIN_SAFETY_RATING, min(MAX_SAFETY_RATING, generated.safetyRating)),
            safety_justification=justification,
        )

    @staticmethod
    def _validate(schema, payload: dict):
        try:
            return schema.model_validate(payload)
        except ValidationError as exc:
            raise GenerationError(str(exc), reason="invalid_schema") from exc

    def _track_usage(self, search_id: str | None, result: GenerationResult) -> None:
        if not search_id or self._cost_tracker is None:
            return
        try:
            self._cost_tracker.add_usage(
                search_id, "aiInsights", result.input_tokens, result.output_tokens
            )
        except Exception:
            logger.exception("Failed to record token usage for search %s", search_id)
