"""Schemas for the JSON payloads returned by the generation capability.

Every field is optional so a partially-filled payload still validates;
callers substitute their own defaults for the fields that are missing.
"""

from pydantic import BaseModel, ConfigDict, Field


class GeneratedAttraction(BaseModel):
    name: str | None = None
    description: str | None = None
    travelTime: str | None = None


class GeneratedContent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    whyItMatches: str | None = None
    funFacts: list[str] | None = None
    nearbyAttractions: list[str | GeneratedAttraction] | None = None
    locationHighlight: str | None = None
    topAmenities: list[str] | None = None


class GeneratedSafety(BaseModel):
    model_config = ConfigDict(extra="ignore")

    safetyRating: int = Field(ge=1, le=10)
    safetyJustification: str | None = None
