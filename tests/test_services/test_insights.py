import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.exceptions.custom import GenerationError, InsightsPipelineError, InvalidInsightsRequest
from app.mappers.amenities import parse_amenities, select_amenities
from app.schemas.insights import InsightsRequest
from app.schemas.liteapi import HotelDetail
from app.services.claude import GenerationResult
from app.services.content_generator import SAFETY_MAX_TOKENS, ContentGenerator
from app.services.cost_tracker import SearchCostTracker
from app.services.detail_fetcher import FALLBACK_GUEST_INSIGHTS, DetailFetcher
from app.services.insights import InsightsService, validate_hotels
from tests.factories import make_detail_payload, make_hotel_payload

CONTENT = {
    "whyItMatches": "Great base for exploring.",
    "funFacts": ["Fact one", "Fact two"],
    "nearbyAttractions": ["Old Town - historic streets - 10 min walk"],
    "locationHighlight": "Central",
    "topAmenities": ["Pool"],
}
SAFETY = {"safetyRating": 9, "safetyJustification": "Quiet and well patrolled."}


def _claude(content_error=None):
    async def fake(system_prompt, user_prompt, temperature=0.7, max_tokens=400):
        if max_tokens == SAFETY_MAX_TOKENS:
            return GenerationResult(payload=SAFETY, input_tokens=50, output_tokens=10)
        if content_error:
            raise content_error
        return GenerationResult(payload=CONTENT, input_tokens=400, output_tokens=150)

    claude = MagicMock()
    claude.model = "claude-test"
    claude.generate_json = AsyncMock(side_effect=fake)
    return claude


def _liteapi(details=None, side_effect=None):
    liteapi = MagicMock()
    if side_effect is not None:
        liteapi.fetch_hotel_details = AsyncMock(side_effect=side_effect)
    else:
        async def fetch(hotel_id):
            return (details or {}).get(hotel_id)

        liteapi.fetch_hotel_details = AsyncMock(side_effect=fetch)
    return liteapi


def _service(claude=None, liteapi=None, cost_tracker=None, **kwargs):
    kwargs.setdefault("content_stagger_ms", 0)
    kwargs.setdefault("detail_stagger_ms", 0)
    return InsightsService(
        ContentGenerator(claude or _claude(), cost_tracker=cost_tracker),
        DetailFetcher(liteapi or _liteapi()),
        cost_tracker=cost_tracker,
        **kwargs,
    )


def _detail(hotel_id):
    return HotelDetail(**make_detail_payload(hotel_id)["data"])


class TestValidateHotels:
    @pytest.mark.parametrize("raw", [None, [], "lp1", {"hotelId": "lp1"}])
    def test_missing_or_not_a_list(self, raw):
        with pytest.raises(InvalidInsightsRequest) as exc_info:
            validate_hotels(raw)
        assert exc_info.value.error == "Hotels array is required"

    def test_all_entries_invalid(self):
        raw = [{"hotelId": "lp1"}, {"name": "No id", "summarizedInfo": {}}, 42]
        with pytest.raises(InvalidInsightsRequest) as exc_info:
            validate_hotels(raw)
        assert exc_info.value.error == "No valid hotels found"

    def test_invalid_and_duplicate_entries_dropped(self):
        raw = [
            make_hotel_payload("a"),
            {"hotelId": "", "name": "Blank", "summarizedInfo": {}},
            make_hotel_payload("b"),
            make_hotel_payload("a", name="Second copy"),
        ]
        hotels = validate_hotels(raw)
        assert [h.hotel_id for h in hotels] == ["a", "b"]
        assert hotels[0].name == "Hotel Lumiere"

    @pytest.mark.parametrize(
        ("field", "value", "attr", "expected"),
        [
            ("amenities", "Free Wi-Fi, Pool, Gym", "amenities", ["Free Wi-Fi, Pool, Gym"]),
            ("amenities", None, "amenities", []),
            ("amenities", ["Pool", 3, None], "amenities", ["Pool"]),
            ("pricePerNight", 150, "price_per_night", "150"),
            ("city", None, "city", ""),
            ("description", None, "description", ""),
            ("country", {"code": "FR"}, "country", ""),
            ("starRating", "4.5 stars", "star_rating", None),
            ("reviewCount", "812", "review_count", 812),
            ("latitude", "48.86", "latitude", 48.86),
        ],
    )
    def test_loose_summary_fields_keep_the_hotel(self, field, value, attr, expected):
        payload = make_hotel_payload()
        payload["summarizedInfo"][field] = value

        hotels = validate_hotels([payload])

        assert len(hotels) == 1
        assert getattr(hotels[0].summarized_info, attr) == expected

    def test_text_amenities_are_split_for_selection(self):
        payload = make_hotel_payload(amenities="Free Wi-Fi, Pool, Gym")

        info = validate_hotels([payload])[0].summarized_info

        assert parse_amenities(info.amenities) == ["Free Wi-Fi", "Pool", "Gym"]
        assert select_amenities(info.amenities) == ["Free Wi-Fi", "Pool", "Gym"]

    def test_match_percent_text_is_parsed(self):
        payload = make_hotel_payload()
        payload["aiMatchPercent"] = "88%"
        assert validate_hotels([payload])[0].ai_match_percent == 88

    def test_missing_summary_block_drops_entry(self):
        payload = make_hotel_payload("b")
        del payload["summarizedInfo"]
        no_summary = {**make_hotel_payload("c"), "summarizedInfo": None}

        hotels = validate_hotels([make_hotel_payload("a"), payload, no_summary])
        assert [h.hotel_id for h in hotels] == ["a"]

    def test_numeric_hotel_id_is_accepted(self):
        payload = make_hotel_payload()
        payload["hotelId"] = 12345
        assert validate_hotels([payload])[0].hotel_id == "12345"


async def test_end_to_end_batch():
    ids = ["a", "b", "c", "d"]
    service = _service(liteapi=_liteapi({i: _detail(i) for i in ids}))
    request = InsightsRequest(
        hotels=[make_hotel_payload(i, name=f"Hotel {i}") for i in ids],
        user_query="pool and museums",
    )

    response = await service.run(request)

    assert response.processed_hotels == 4
    assert [r.hotel_id for r in response.recommendations] == ids
    for rec in response.recommendations:
        assert rec.hotel_name == f"Hotel {rec.hotel_id}"
        assert rec.safety_rating == 9
        assert rec.first_room_image == f"https://img.test/{rec.hotel_id}/r1_hd.jpg"
        assert rec.guest_insights.startswith("Cleanliness: 8.5/10")
    assert response.ai_models.content == "claude-test"
    assert response.ai_models.insights == "direct_processing"

    steps = [s.step for s in response.performance.step_breakdown]
    assert steps[0] == "ValidateInput"
    assert "ParallelProcessing" in steps
    assert steps[-1] == "CombineResults"
    assert sum(s.startswith("DetailFetch:") for s in steps) == 4
    assert sum(s.startswith("ContentGeneration:") for s in steps) == 4
    assert len(response.performance.bottlenecks) == 3


async def test_single_hotel_with_failed_detail_fetch():
    service = _service(liteapi=_liteapi(side_effect=RuntimeError("connection reset")))
    request = InsightsRequest(hotels=[make_hotel_payload("lp1")])

    response = await service.run(request)

    assert response.processed_hotels == 1
    rec = response.recommendations[0]
    assert rec.guest_insights == FALLBACK_GUEST_INSIGHTS
    assert rec.why_it_matches == "Great base for exploring."
    assert 1 <= rec.safety_rating <= 10
    assert rec.photo_gallery_images == []


async def test_generation_failure_still_returns_every_hotel():
    service = _service(
        claude=_claude(content_error=GenerationError("overloaded")),
        liteapi=_liteapi({"a": _detail("a")}),
    )
    request = InsightsRequest(hotels=[make_hotel_payload("a"), make_hotel_payload("b")])

    response = await service.run(request)

    assert [r.hotel_id for r in response.recommendations] == ["a", "b"]
    assert response.recommendations[0].why_it_matches == (
        "Excellent choice with great amenities and location"
    )
    assert response.recommendations[1].guest_insights == FALLBACK_GUEST_INSIGHTS


async def test_detail_fetches_follow_schedule():
    sleeps = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    service = _service(detail_stagger_ms=1000)
    request = InsightsRequest(hotels=[make_hotel_payload(f"h{i}") for i in range(5)])

    with patch("app.services.detail_fetcher.asyncio.sleep", fake_sleep):
        await service.run(request)

    assert sorted(sleeps) == [1.0]


async def test_batch_deadline_bounds_slow_upstreams():
    async def slow_fetch(hotel_id):
        await asyncio.sleep(5)

    service = _service(liteapi=_liteapi(side_effect=slow_fetch), batch_timeout=0.1)
    request = InsightsRequest(hotels=[make_hotel_payload("a"), make_hotel_payload("b")])

    response = await asyncio.wait_for(service.run(request), timeout=2)

    assert all(r.guest_insights == FALLBACK_GUEST_INSIGHTS for r in response.recommendations)


async def test_invalid_request_is_not_wrapped():
    with pytest.raises(InvalidInsightsRequest):
        await _service().run(InsightsRequest(hotels=[]))


async def test_unexpected_failure_becomes_pipeline_error():
    service = _service()
    request = InsightsRequest(hotels=[make_hotel_payload("a")])

    with patch("app.services.insights.aggregate", side_effect=RuntimeError("merge broke")):
        with pytest.raises(InsightsPipelineError) as exc_info:
            await service.run(request)

    assert exc_info.value.message == "merge broke"
    steps = [s["step"] for s in exc_info.value.performance["stepBreakdown"]]
    assert "ParallelProcessing" in steps
    assert "totalTimeMs" in exc_info.value.performance


async def test_search_costs_are_recorded():
    tracker = SearchCostTracker()
    service = _service(cost_tracker=tracker)
    request = InsightsRequest(
        hotels=[make_hotel_payload("a"), make_hotel_payload("b")],
        search_id="search-1",
        user_query="museums",
    )

    await service.run(request)

    report = tracker.daily_report()
    assert report["total_searches"] == 1
    record = report["searches"][0]
    assert record["search_id"] == "search-1"
    assert record["destination"] == "Paris"
    assert record["hotel_count"] == 2
    assert record["total_tokens"] == 2 * (550 + 60)


async def test_failed_batch_still_closes_search():
    tracker = SearchCostTracker()
    service = _service(cost_tracker=tracker)
    request = InsightsRequest(hotels=[make_hotel_payload("a")], search_id="search-2")

    with patch("app.services.insights.aggregate", side_effect=RuntimeError("merge broke")):
        with pytest.raises(InsightsPipelineError):
            await service.run(request)

    assert tracker.get_search("search-2") is None
    report = tracker.daily_report()
    assert report["total_searches"] == 1
    assert report["searches"][0]["search_id"] == "search-2"
    assert report["searches"][0]["total_tokens"] == 550 + 60


async def test_rejected_request_leaves_no_search_record():
    tracker = SearchCostTracker()
    service = _service(cost_tracker=tracker)

    with pytest.raises(InvalidInsightsRequest):
        await service.run(InsightsRequest(hotels=[], search_id="search-3"))

    assert tracker.daily_report()["total_searches"] == 0
