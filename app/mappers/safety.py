"""Rule-based safety ratings used when the generated rating is unavailable."""

MIN_SAFETY_RATING = 1
MAX_SAFETY_RATING = 10
DEFAULT_SAFETY_JUSTIFICATION = "Generally safe area with standard precautions recommended"

HIGH_SAFETY_PLACES = frozenset({
    # countries
    "japan", "singapore", "switzerland", "iceland", "norway", "denmark",
    "finland", "sweden", "new zealand", "austria", "luxembourg", "monaco",
    # cities
    "tokyo", "kyoto", "osaka", "zurich", "geneva", "copenhagen", "reykjavik",
    "oslo", "helsinki", "stockholm", "vienna", "wellington",
})

MAJOR_TOURIST_CITIES = frozenset({
    "paris", "london", "rome", "barcelona", "madrid", "amsterdam", "berlin",
    "lisbon", "prague", "new york", "new york city", "san francisco", "los angeles",
    "chicago", "miami", "las vegas", "dubai", "sydney", "melbourne", "toronto",
    "vancouver", "hong kong", "seoul", "bangkok", "istanbul",
})

UNITED_STATES = frozenset({"united states", "united states of america", "usa", "us"})

WESTERN_EUROPE = frozenset({
    "france", "germany", "spain", "italy", "united kingdom", "uk", "england",
    "scotland", "netherlands", "belgium", "portugal", "ireland",
})

RULE_BASED_JUSTIFICATIONS = {
    8: "Very safe destination with low crime rates",
    7: "Safe area popular with tourists; standard precautions recommended",
    6: "Generally safe area; stay aware of your surroundings, especially at night",
}


def _norm(value: str | None) -> str:
    return (value or "").strip().lower()


def rule_based_safety_rating(city: str | None, country: str | None) -> int:
    city_n, country_n = _norm(city), _norm(country)

    if city_n in HIGH_SAFETY_PLACES or country_n in HIGH_SAFETY_PLACES:
        return 8
    if city_n in MAJOR_TOURIST_CITIES:
        return 7
    if country_n in UNITED_STATES:
        return 6
    if country_n in WESTERN_EUROPE:
        return 7
    return 6


def rule_based_safety(city: str | None, country: str | None) -> tuple[int, str]:
    rating = rule_based_safety_rating(city, country)
    return rating, RULE_BASED_JUSTIFICATIONS.get(rating, DEFAULT_SAFETY_JUSTIFICATION)
