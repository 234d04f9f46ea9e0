"""
Storage statistics: row counts per store.
"""
from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from memoria.core.errors import StorageFailureError
from memoria.db.base import StorageContext, Store
from memoria.models import EntityRelationship, FoodEntry, Memory, Mood, Person, Place

_COUNTED = {
    Store.moods: Mood,
    Store.places: Place,
    Store.people: Person,
    Store.food: FoodEntry,
    Store.memories: Memory,
    Store.relationships: EntityRelationship,
}


def storage_stats(storage: StorageContext) -> dict[str, int]:
    counts: dict[str, int] = {}
    for store, model in _COUNTED.items():
        try:
            counts[store.value] = storage.count_rows(store, model)
        except SQLAlchemyError as exc:
            raise StorageFailureError(store.value, "count", exc) from exc
    return counts
