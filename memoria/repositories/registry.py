"""
Variant → repository lookup table.

The table is built from an explicit mapping over EntityKind; construction
fails if a kind has no repository, so every dispatch site can rely on it.
"""
from __future__ import annotations

from typing import Optional, Union

from memoria.core.errors import UnknownEntityKindError
from memoria.db.base import StorageContext
from memoria.models.kinds import EntityKind
from memoria.repositories.base import EntityRepository
from memoria.repositories.food import FoodRepository
from memoria.repositories.memories import MemoryRepository
from memoria.repositories.moods import MoodRepository
from memoria.repositories.people import PersonRepository
from memoria.repositories.places import PlaceRepository
from memoria.repositories.records import EntityRecord


def parse_kind(kind: Union[EntityKind, str]) -> EntityKind:
    try:
        return EntityKind(kind)
    except ValueError as exc:
        raise UnknownEntityKindError(str(kind)) from exc


class RepositoryRegistry:
    def __init__(self, storage: StorageContext):
        self.moods = MoodRepository(storage)
        self.places = PlaceRepository(storage)
        self.people = PersonRepository(storage)
        self.food = FoodRepository(storage)
        self.memories = MemoryRepository(storage)

        self._by_kind: dict[EntityKind, EntityRepository] = {
            EntityKind.mood: self.moods,
            EntityKind.place: self.places,
            EntityKind.person: self.people,
            EntityKind.food: self.food,
            EntityKind.memory: self.memories,
        }
        missing = set(EntityKind) - set(self._by_kind)
        if missing:
            raise RuntimeError(f"No repository registered for: {sorted(k.value for k in missing)}")

    def for_kind(self, kind: Union[EntityKind, str]) -> EntityRepository:
        return self._by_kind[parse_kind(kind)]

    def resolve(self, kind: str, entity_id: str) -> Optional[EntityRecord]:
        """Hydrate one entity by kind tag and id; None for unknown kinds or ids."""
        try:
            repository = self.for_kind(kind)
        except UnknownEntityKindError:
            return None
        return repository.get_by_id(entity_id)

    def __iter__(self):
        return iter(self._by_kind.items())
