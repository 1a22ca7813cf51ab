from app.mappers.amenities import (
    DEFAULT_AMENITIES,
    detect_intents,
    match_hotel_amenities,
    parse_amenities,
    select_amenities,
)


def test_parse_amenities_splits_comma_text():
    assert parse_amenities(["Free Wi-Fi, Pool, Gym"]) == ["Free Wi-Fi", "Pool", "Gym"]


def test_parse_amenities_dedupes_and_skips_blanks():
    assert parse_amenities(["Pool", "pool", " , Spa", ""]) == ["Pool", "Spa"]


def test_parse_amenities_accepts_plain_string():
    assert parse_amenities("Bar, Parking") == ["Bar", "Parking"]


def test_parse_amenities_empty():
    assert parse_amenities(None) == []
    assert parse_amenities([]) == []


def test_no_query_uses_priority_order():
    supplied = ["Free Wi-Fi, Pool, Gym"]
    result = select_amenities(supplied)
    assert result == ["Free Wi-Fi", "Pool", "Gym"]
    assert set(result) <= set(parse_amenities(supplied))


def test_no_query_priority_beats_position():
    amenities = ["Laundry", "Elevator", "Parking", "Spa", "24-hour front desk", "WiFi"]
    assert select_amenities(amenities) == ["WiFi", "Spa", "Parking"]


def test_no_query_falls_back_to_position():
    amenities = ["Laundry", "Elevator", "Garden", "Luggage storage"]
    assert select_amenities(amenities) == ["Laundry", "Elevator", "Garden"]


def test_priority_then_position_fill():
    amenities = ["Laundry", "Elevator", "Restaurant"]
    assert select_amenities(amenities) == ["Restaurant", "Laundry", "Elevator"]


def test_too_few_amenities_fills_with_defaults():
    assert select_amenities(["Pool"]) == ["Pool", "Wi-Fi", "Air Conditioning"]


def test_no_amenities_returns_default_triplet():
    assert select_amenities([]) == list(DEFAULT_AMENITIES)


def test_default_fill_skips_equivalent_names():
    result = select_amenities(["WiFi"])
    assert result == ["WiFi", "Air Conditioning", "Private Bathroom"]


def test_business_query_prefers_business_amenities():
    amenities = ["Pool", "Spa", "Business Center", "Meeting Rooms", "Free WiFi", "Bar"]
    result = select_amenities(amenities, "hotel for a business conference")
    assert result[:2] == ["Business Center", "Meeting Rooms"]
    assert len(result) == 3
    assert set(result) <= set(amenities)


def test_romantic_query_prefers_spa_and_balcony():
    amenities = ["Parking", "Free WiFi", "Private Balcony", "Spa", "Laundry"]
    result = select_amenities(amenities, "romantic honeymoon getaway")
    assert set(result[:2]) == {"Private Balcony", "Spa"}
    assert set(result) <= set(amenities)


def test_family_query():
    amenities = ["Bar", "Kids Club", "Outdoor Pool", "Casino"]
    result = select_amenities(amenities, "family trip with kids")
    assert result[:2] == ["Kids Club", "Outdoor Pool"]


def test_query_word_direct_match():
    amenities = ["Parking", "Rooftop Terrace", "Laundry"]
    result = select_amenities(amenities, "somewhere with a rooftop")
    assert result[0] == "Rooftop Terrace"


def test_query_without_matches_uses_priority_order():
    amenities = ["Laundry", "Pool", "Free WiFi"]
    assert select_amenities(amenities, "cheap and quiet") == ["Free WiFi", "Pool", "Laundry"]


def test_detect_intents():
    assert detect_intents("Business trip, need a gym") == ["business", "wellness"]
    assert detect_intents(None) == []
    assert detect_intents("somewhere nice") == []


def test_match_hotel_amenities_keeps_hotel_spelling():
    amenities = ["Free Wi-Fi", "Outdoor Pool", "Gym"]
    assert match_hotel_amenities(["free wifi", "outdoor pool"], amenities) == ["Free Wi-Fi", "Outdoor Pool"]


def test_match_hotel_amenities_drops_invented_names():
    amenities = ["Free Wi-Fi", "Gym"]
    assert match_hotel_amenities(["Helipad", "Gym", 42], amenities) == ["Gym"]


def test_match_hotel_amenities_empty():
    assert match_hotel_amenities(None, ["Gym"]) == []
