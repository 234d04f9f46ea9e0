"""
Plain records exchanged with the repositories.

Lightweight DTOs so the core stays schema-agnostic: the HTTP layer converts
pydantic payloads into these, repositories convert them to and from rows.
Every record carries its `kind`, which makes EntityRecord a closed union over
the five entity kinds.
"""
from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, ClassVar, Optional, Union

from memoria.models.kinds import EntityKind

MERGE_MARKER = "[MERGED into {survivor_id}]"
_MERGE_MARKER_RE = re.compile(r"^\[MERGED into ([^\]]+)\]")


def normalize_name(name: Optional[str]) -> str:
    """Identity key for name-based matching: trimmed and case-folded."""
    return (name or "").strip().casefold()


@dataclass
class MoodRecord:
    kind: ClassVar[EntityKind] = EntityKind.mood

    rating: Optional[int] = None
    emotion: Optional[str] = None
    entry_time: Optional[datetime] = None
    id: Optional[str] = None
    notes: str = ""
    location: Optional[str] = None
    social_context: Optional[str] = None
    weather: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    activities: dict[str, str] = field(default_factory=dict)
    weather_data: Optional[Any] = None
    location_data: Optional[Any] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class PlaceRecord:
    kind: ClassVar[EntityKind] = EntityKind.place

    name: str = ""
    id: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def merged_into(self) -> Optional[str]:
        match = _MERGE_MARKER_RE.match(self.notes or "")
        return match.group(1) if match else None

    @property
    def is_tombstoned(self) -> bool:
        return self.merged_into is not None


@dataclass
class PersonRecord:
    kind: ClassVar[EntityKind] = EntityKind.person

    name: str = ""
    id: Optional[str] = None
    context: Optional[str] = None
    status: Optional[str] = None
    birth_date: Optional[date] = None
    is_deceased: bool = False
    deceased_date: Optional[date] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    socials: Optional[str] = None
    hobbies: list[str] = field(default_factory=list)
    interests: list[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class FoodRecord:
    kind: ClassVar[EntityKind] = EntityKind.food

    name: str = ""
    date: Optional[datetime] = None
    id: Optional[str] = None
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0
    meal_type: Optional[str] = None
    notes: Optional[str] = None
    image_uri: Optional[str] = None
    people: list[str] = field(default_factory=list)
    place: Optional[str] = None
    mood_rating: Optional[int] = None
    mood_emotion: Optional[str] = None
    food_rating: Optional[int] = None
    is_restaurant: bool = False
    restaurant_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class MemoryRecord:
    kind: ClassVar[EntityKind] = EntityKind.memory

    title: str = ""
    date: Optional[datetime] = None
    id: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    people: list[str] = field(default_factory=list)
    photos: list[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


EntityRecord = Union[MoodRecord, PlaceRecord, PersonRecord, FoodRecord, MemoryRecord]


def record_data(record: EntityRecord) -> dict[str, Any]:
    """Plain dict of a record's fields, tagged with its kind."""
    data = asdict(record)
    data["kind"] = record.kind.value
    if isinstance(record, PlaceRecord):
        data["merged_into"] = record.merged_into
    return data
