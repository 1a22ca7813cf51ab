from app.schemas.generation import GeneratedAttraction

# (query words, intent label, attraction description, default attractions)
_SEARCH_INTENTS: tuple[tuple[tuple[str, ...], str, str, tuple[str, str]], ...] = (
    (
        ("business", "work", "meeting"),
        "business travel",
        "convenient for business travelers",
        (
            "{city} Business District - corporate offices and meeting venues - 10 min metro",
            "Convention Center - conference facilities and business services - 12 min taxi",
        ),
    ),
    (
        ("romantic", "honeymoon", "couple"),
        "romantic getaway",
        "perfect romantic setting",
        (
            "{city} Scenic Overlook - romantic city views for couples - 15 min walk",
            "Fine Dining District - upscale restaurants and wine bars - 8 min taxi",
        ),
    ),
    (
        ("family", "kids", "children"),
        "family vacation",
        "great for families with children",
        (
            "{city} Family Park - playgrounds and family activities - 10 min walk",
            "Children's Entertainment Center - kid-friendly attractions and games - 20 min metro",
        ),
    ),
    (
        ("culture", "history", "museum"),
        "cultural experience",
        "rich cultural experience",
        (
            "{city} Museum District - art galleries and cultural exhibits - 12 min bus",
            "Historic Old Town - traditional architecture and local heritage - 15 min walk",
        ),
    ),
    (
        ("shopping", "shop"),
        "shopping trip",
        "excellent shopping destination",
        (
            "{city} Shopping Center - major retail stores and boutiques - 5 min walk",
            "Local Markets - traditional crafts and local specialties - 18 min metro",
        ),
    ),
    (
        ("nightlife", "party", "bar"),
        "nightlife experience",
        "vibrant nightlife scene",
        (
            "{city} Entertainment District - bars clubs and live music - 10 min taxi",
            "Nightlife Quarter - vibrant evening scene and cocktail lounges - 15 min walk",
        ),
    ),
    (
        ("beach", "nature", "outdoor"),
        "nature experience",
        "beautiful natural attraction",
        (
            "{city} Waterfront - scenic walks and natural views - 10 min walk",
            "Nature Reserve - trails and outdoor activities - 20 min taxi",
        ),
    ),
)

_NO_QUERY_ATTRACTIONS = (
    "{city} Center - main city attractions and shopping - 8 min walk",
    "Local Landmarks - historic sites and cultural spots - 15 min walk",
)
_GENERIC_ATTRACTIONS = (
    "{city} Center - main city attractions and shopping - 8 min walk",
    "Popular Landmarks - must-see local attractions - 15 min walk",
)


def _match_intent(user_query: str | None):
    if not user_query:
        return None
    query = user_query.lower()
    for intent in _SEARCH_INTENTS:
        if any(word in query for word in intent[0]):
            return intent
    return None


def extract_search_intent(user_query: str | None) -> str:
    intent = _match_intent(user_query)
    return intent[1] if intent else "travel"


def search_relevant_description(user_query: str | None) -> str:
    intent = _match_intent(user_query)
    return intent[2] if intent else "popular local attraction"


def default_attractions(user_query: str | None, city: str | None) -> list[str]:
    base_city = city or "City"
    if not user_query or not user_query.strip():
        templates = _NO_QUERY_ATTRACTIONS
    else:
        intent = _match_intent(user_query)
        templates = intent[3] if intent else _GENERIC_ATTRACTIONS
    return [t.format(city=base_city) for t in templates]


def normalize_attraction(attraction: str | GeneratedAttraction, user_query: str | None) -> str:
    """Coerce an attraction into "Name - description - travel time"."""
    if isinstance(attraction, GeneratedAttraction):
        return (
            f"{attraction.name or 'Local attraction'} - "
            f"{attraction.description or 'worth visiting during stay'} - "
            f"{attraction.travelTime or '15 min walk'}"
        )

    parts = attraction.split(" - ")
    if len(parts) >= 3:
        return attraction
    if len(parts) == 2:
        return f"{attraction} - 8 min walk"
    return f"{attraction} - {search_relevant_description(user_query)} - 12 min walk"
