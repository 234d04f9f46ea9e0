"""
Food entries.

`people` is a JSON-encoded list of person references stored as Text.
`place` and the embedded mood pair are soft references resolved on save.
"""
from datetime import datetime
from sqlalchemy import Boolean, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from memoria.db.base import FoodBase
from memoria.db.types import UTCDateTime


class FoodEntry(FoodBase):
    __tablename__ = "food_entries"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    calories: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    protein: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    carbs: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    fat: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    meal_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    date: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_uri: Mapped[str | None] = mapped_column(String(512), nullable=True)
    people: Mapped[str | None] = mapped_column(Text, nullable=True)
    place: Mapped[str | None] = mapped_column(String(256), nullable=True)
    mood_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    mood_emotion: Mapped[str | None] = mapped_column(String(64), nullable=True)
    food_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_restaurant: Mapped[bool | None] = mapped_column(Boolean, nullable=True, default=False)
    restaurant_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
