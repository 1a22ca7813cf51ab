import logging
import re

from app.schemas.liteapi import HotelDetail

logger = logging.getLogger(__name__)

_HTML_TAG_RE = re.compile(r"<[^>]*>")


def _clean_html(text: str) -> str:
    return _HTML_TAG_RE.sub("", text).replace("&nbsp;", " ").strip()


def _bullets(items: list[str]) -> str:
    return "".join(f"• {item}\n" for item in items)


def _fmt(value) -> str:
    if value is None:
        return "N/A"
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def consolidate_hotel_info(detail: HotelDetail) -> str:
    """Flatten a hotel detail record into a plain-text context blob.

    Sections are emitted only when the record has data for them, except
    BASIC INFORMATION which is always present.
    """
    sections: list[str] = []

    if detail.hotelDescription:
        sections.append("HOTEL DESCRIPTION:\n" + _clean_html(detail.hotelDescription) + "\n\n")

    if detail.hotelImportantInformation:
        sections.append(
            "IMPORTANT INFORMATION:\n" + detail.hotelImportantInformation.strip() + "\n\n"
        )

    if detail.hotelFacilities:
        sections.append("HOTEL FACILITIES & AMENITIES:\n" + _bullets(detail.hotelFacilities) + "\n")

    facility_names = [f.name for f in detail.facilities if f.name]
    if facility_names:
        sections.append("ADDITIONAL FACILITIES:\n" + _bullets(facility_names) + "\n")

    policies = [p for p in detail.policies if p.name or p.description]
    if policies:
        text = "HOTEL POLICIES:\n"
        for policy in policies:
            text += f"{(policy.name or 'Policy').upper()}:\n"
            text += (policy.description or "").strip() + "\n\n"
        sections.append(text)

    sentiment = detail.sentiment_analysis
    if sentiment:
        text = "GUEST SENTIMENT ANALYSIS:\n"
        if sentiment.pros:
            text += "What Guests Love:\n" + _bullets(sentiment.pros) + "\n"
        if sentiment.cons:
            text += "Areas for Improvement:\n" + _bullets(sentiment.cons) + "\n"
        if sentiment.categories:
            text += "Category Ratings:\n"
            for category in sentiment.categories:
                text += f"• {category.name}: {_fmt(category.rating)}/10 - {category.description or ''}\n"
            text += "\n"
        sections.append(text)

    basic = "BASIC INFORMATION:\n"
    basic += f"Name: {_fmt(detail.name)}\n"
    basic += f"Address: {_fmt(detail.address)}\n"
    basic += f"City: {_fmt(detail.city)}\n"
    basic += f"Country: {_fmt(detail.country)}\n"
    basic += f"Star Rating: {_fmt(detail.starRating)} stars\n"
    basic += f"Guest Rating: {_fmt(detail.rating)}/10 ({_fmt(detail.reviewCount)} reviews)\n"
    if detail.checkinCheckoutTimes:
        basic += f"Check-in: {_fmt(detail.checkinCheckoutTimes.checkin)}\n"
        basic += f"Check-out: {_fmt(detail.checkinCheckoutTimes.checkout)}\n"
    sections.append(basic)

    info = "".join(sections).strip()
    logger.debug(
        "Consolidated %d sections for hotel %s (%d chars)", len(sections), detail.id, len(info)
    )
    return info
