"""
Request / response schemas for the five entity kinds.

POST /{kind}        → <Kind>In → <Kind>SaveResponse
PUT  /{kind}/{id}   → <Kind>In → <Kind>SaveResponse (full replace)
GET  /{kind}        → <Kind>ListResponse
GET  /{kind}/{id}   → <Kind>Out

Field constraints that belong to the domain (rating range, required names)
are enforced by the repositories, not here, so every entry point rejects the
same records with the same ENTITY_VALIDATION_FAILED error.
"""
from __future__ import annotations

from datetime import date as date_type, datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from memoria.schemas.common import SaveSummary


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


# ---------------------------------------------------------------------------
# Mood
# ---------------------------------------------------------------------------

class MoodIn(BaseModel):
    rating: int = Field(description="1 (worst) to 5 (best).", examples=[4])
    emotion: str = Field(examples=["calm"])
    entry_time: datetime = Field(default_factory=_now, description="Defaults to now (UTC).")
    notes: str = ""
    location: Optional[str] = Field(
        default=None,
        description="Place name; resolved to a place (found or created) and linked.",
        examples=["Home"],
    )
    social_context: Optional[str] = Field(
        default=None,
        description='"With <name>" links the named person (anonymous company is ignored).',
        examples=["With Anna"],
    )
    weather: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    activities: dict[str, str] = Field(
        default_factory=dict,
        description="One activity per category, e.g. {\"exercise\": \"running\"}.",
    )
    weather_data: Optional[Any] = None
    location_data: Optional[Any] = None
    people: list[str] = Field(
        default_factory=list,
        description="Person ids or names to link. Not stored on the mood itself.",
    )


class MoodOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    entry_time: datetime
    rating: int
    emotion: str
    notes: str = ""
    location: Optional[str] = None
    social_context: Optional[str] = None
    weather: Optional[str] = None
    tags: list[str] = []
    activities: dict[str, str] = {}
    weather_data: Optional[Any] = None
    location_data: Optional[Any] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MoodSaveResponse(SaveSummary):
    entity: MoodOut


class MoodListResponse(BaseModel):
    total: int
    items: list[MoodOut]


# ---------------------------------------------------------------------------
# Place
# ---------------------------------------------------------------------------

class PlaceIn(BaseModel):
    name: str = Field(examples=["Corner Cafe"])
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    notes: Optional[str] = None
    mood_ids: list[str] = Field(default_factory=list, description="Moods to link to this place.")


class PlaceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    notes: Optional[str] = None
    merged_into: Optional[str] = Field(
        default=None, description="Survivor id when this place was merged away."
    )
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PlaceSaveResponse(SaveSummary):
    entity: PlaceOut


class PlaceListResponse(BaseModel):
    total: int
    items: list[PlaceOut]


class PlaceMoodsResponse(BaseModel):
    place_id: str
    mood_ids: list[str]


# ---------------------------------------------------------------------------
# Person
# ---------------------------------------------------------------------------

class PersonIn(BaseModel):
    name: str = Field(examples=["Anna"])
    context: Optional[str] = Field(default=None, description="How you know them.")
    status: Optional[str] = None
    birth_date: Optional[date_type] = None
    is_deceased: bool = False
    deceased_date: Optional[date_type] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    socials: Optional[str] = None
    hobbies: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)


class PersonOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    context: Optional[str] = None
    status: Optional[str] = None
    birth_date: Optional[date_type] = None
    is_deceased: bool = False
    deceased_date: Optional[date_type] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    socials: Optional[str] = None
    hobbies: list[str] = []
    interests: list[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PersonSaveResponse(SaveSummary):
    entity: PersonOut


class PersonListResponse(BaseModel):
    total: int
    items: list[PersonOut]


# ---------------------------------------------------------------------------
# Food
# ---------------------------------------------------------------------------

class FoodIn(BaseModel):
    name: str = Field(examples=["Ramen"])
    date: datetime = Field(default_factory=_now, description="Defaults to now (UTC).")
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0
    meal_type: Optional[str] = Field(default=None, examples=["dinner"])
    notes: Optional[str] = None
    image_uri: Optional[str] = None
    people: list[str] = Field(default_factory=list, description="Person ids or names to link.")
    place: Optional[str] = Field(default=None, description="Place name to resolve and link.")
    mood_rating: Optional[int] = Field(
        default=None, description="With mood_emotion, records a linked mood entry."
    )
    mood_emotion: Optional[str] = None
    food_rating: Optional[int] = None
    is_restaurant: bool = False
    restaurant_name: Optional[str] = None


class FoodOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    date: datetime
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0
    meal_type: Optional[str] = None
    notes: Optional[str] = None
    image_uri: Optional[str] = None
    people: list[str] = []
    place: Optional[str] = None
    mood_rating: Optional[int] = None
    mood_emotion: Optional[str] = None
    food_rating: Optional[int] = None
    is_restaurant: bool = False
    restaurant_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FoodSaveResponse(SaveSummary):
    entity: FoodOut


class FoodListResponse(BaseModel):
    total: int
    items: list[FoodOut]


# ---------------------------------------------------------------------------
# Memory
# ---------------------------------------------------------------------------

class MemoryIn(BaseModel):
    title: str = Field(examples=["First day at the lake"])
    date: datetime = Field(default_factory=_now)
    description: Optional[str] = None
    location: Optional[str] = None
    people: list[str] = Field(default_factory=list)
    photos: list[str] = Field(default_factory=list, description="Photo URIs.")


class MemoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    date: datetime
    description: Optional[str] = None
    location: Optional[str] = None
    people: list[str] = []
    photos: list[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MemorySaveResponse(SaveSummary):
    entity: MemoryOut


class MemoryListResponse(BaseModel):
    total: int
    items: list[MemoryOut]
