from beanie import Document, Indexed
from pydantic import BaseModel, Field
from datetime import datetime, timezone


class Attraction(BaseModel):
    name: str | None = None
    image: str | None = None
    description: str | None = None


class IncludedExcluded(BaseModel):
    type: str | None = None  # "included" | "excluded"
    description: str | None = None


class ItineraryItem(BaseModel):
    title: str | None = None
    time: str | None = None
    description: str | None = None


class TourPackage(Document):
    """A bookable tour."""
    name: str
    image: str
    original_price: float
    discount_price: float
    message_description: str = ""
    duration: str
    location: str
    contact: str = ""
    description: str
    top_attractions: list[Attraction] = Field(default_factory=list)
    included_excluded: list[IncludedExcluded] = Field(default_factory=list)
    itinerary: list[ItineraryItem] = Field(default_factory=list)
    country: Indexed(str)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "packages"
