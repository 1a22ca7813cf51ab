from app.schemas.liteapi import HotelDetail

TARGET_CATEGORIES = ("Cleanliness", "Service", "Location", "Room Quality")

# Source category -> target category; None drops the category
CATEGORY_MAPPING: dict[str, str | None] = {
    "Amenities": "Room Quality",
    "Overall Experience": None,
}

DEFAULT_CATEGORY_RATING = 6.0


def _format_rating(value: float) -> str:
    return f"{value:g}"


def extract_category_ratings(detail: HotelDetail | None) -> dict[str, float]:
    """Return the rating for each target category, defaulting missing ones."""
    ratings: dict[str, float] = {}
    sentiment = detail.sentiment_analysis if detail else None

    if sentiment:
        for category in sentiment.categories:
            if category.name in CATEGORY_MAPPING:
                target = CATEGORY_MAPPING[category.name]
            else:
                target = category.name
            if target not in TARGET_CATEGORIES or not category.rating:
                continue
            # Later entries override earlier ones for the same target
            ratings[target] = category.rating

    return {name: ratings.get(name, DEFAULT_CATEGORY_RATING) for name in TARGET_CATEGORIES}


def build_guest_insights(detail: HotelDetail | None) -> str:
    """Four-line category summary, e.g. ``Cleanliness: 8.5/10``."""
    ratings = extract_category_ratings(detail)
    return "\n".join(f"{name}: {_format_rating(rating)}/10" for name, rating in ratings.items())
