from __future__ import annotations

from memoria.db.base import Store
from memoria.models.food import FoodEntry
from memoria.models.kinds import EntityKind
from memoria.repositories.base import EntityRepository, _jdump, _jload
from memoria.repositories.records import FoodRecord


class FoodRepository(EntityRepository[FoodRecord]):
    """Food entries; the people list is stored JSON-encoded in one column."""

    kind = EntityKind.food
    store = Store.food
    model = FoodEntry
    sort_field = "date"

    def validate(self, record: FoodRecord) -> None:
        if not record.name or not record.name.strip():
            raise self._invalid("Missing name")
        if record.date is None:
            raise self._invalid("Missing date")

    def _apply(self, row: FoodEntry, record: FoodRecord) -> None:
        row.name = record.name.strip()
        row.calories = record.calories or 0
        row.protein = record.protein or 0
        row.carbs = record.carbs or 0
        row.fat = record.fat or 0
        row.meal_type = record.meal_type
        row.date = record.date
        row.notes = record.notes
        row.image_uri = record.image_uri
        row.people = _jdump(record.people)
        row.place = record.place or None
        row.mood_rating = record.mood_rating
        row.mood_emotion = record.mood_emotion or None
        row.food_rating = record.food_rating
        row.is_restaurant = bool(record.is_restaurant)
        row.restaurant_name = record.restaurant_name

    def _to_record(self, row: FoodEntry) -> FoodRecord:
        return FoodRecord(
            id=row.id,
            name=row.name,
            calories=row.calories or 0,
            protein=row.protein or 0,
            carbs=row.carbs or 0,
            fat=row.fat or 0,
            meal_type=row.meal_type,
            date=row.date,
            notes=row.notes,
            image_uri=row.image_uri,
            people=_jload(row.people),
            place=row.place,
            mood_rating=row.mood_rating,
            mood_emotion=row.mood_emotion,
            food_rating=row.food_rating,
            is_restaurant=bool(row.is_restaurant),
            restaurant_name=row.restaurant_name,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
