"""
Reference resolver: save an entity, then turn its soft references into
repository rows plus bidirectional graph edges.

Rules
-----
- The primary entity is written first and commits on its own. Validation and
  storage failures of that write propagate to the caller.
- Each soft reference is then resolved independently: normalize the name,
  scan existing rows for a case-insensitive exact match, reuse it or create a
  minimal row, and link forward + inverse.
- A failure while resolving or linking one reference is logged and recorded
  in SaveResult.errors; it never undoes or fails the primary save.

Public API
----------
save_mood(record, people)        -> SaveResult
save_food(record)                -> SaveResult
save_memory(record)              -> SaveResult
save_place(record, mood_ids)     -> SaveResult
save_person(record)              -> SaveResult
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from memoria.core.errors import MemoriaException
from memoria.models.kinds import EntityKind, RelationshipKind
from memoria.repositories.base import EntityRepository, utcnow
from memoria.repositories.records import (
    FoodRecord,
    MemoryRecord,
    MoodRecord,
    PersonRecord,
    PlaceRecord,
    normalize_name,
)
from memoria.repositories.registry import RepositoryRegistry
from memoria.services.graph import GraphStore, LinkResult

logger = logging.getLogger(__name__)

FOOD_MOOD_TAG = "food-related"

_SOCIAL_WITH_RE = re.compile(r"^\s*with\s+(.+?)\s*$", re.IGNORECASE)
_ANONYMOUS_COMPANY = {"strangers", "crowd"}


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------

@dataclass
class SaveResult:
    """The saved entity plus what happened to each of its soft references."""
    kind: EntityKind
    entity_id: str
    created: bool
    links: list[LinkResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def social_context_person(social_context: Optional[str]) -> Optional[str]:
    """
    Person name named by a "With <X>" social context, or None.
    Anonymous company ("With strangers", "With a crowd") names nobody.
    """
    if not social_context:
        return None
    match = _SOCIAL_WITH_RE.match(social_context)
    if not match:
        return None
    name = match.group(1)
    words = {w.casefold() for w in name.split()}
    if words & _ANONYMOUS_COMPANY:
        return None
    return name


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class ReferenceResolver:
    def __init__(self, repos: RepositoryRegistry, graph: GraphStore):
        self.repos = repos
        self.graph = graph

    # --- primary write -----------------------------------------------------

    def _save_primary(self, repository: EntityRepository, record) -> tuple[str, bool]:
        """Update when the record names an existing row, create otherwise."""
        if record.id and repository.exists(record.id):
            repository.update(record)
            return record.id, False
        return repository.create(record), True

    def _attempt(self, result: SaveResult, label: str, fn: Callable[[], Optional[LinkResult]]) -> None:
        try:
            link = fn()
        except MemoriaException as exc:
            logger.warning(
                "Could not link %s %s (%s): %s", result.kind.value, result.entity_id, label, exc.message
            )
            result.errors.append(f"{label}: {exc.message}")
            return
        if link is not None:
            result.links.append(link)

    # --- find-or-create ----------------------------------------------------

    def find_or_create_place(self, name: str) -> str:
        existing = self.repos.places.find_by_name(name)
        if existing is not None:
            return existing.id
        place_id = self.repos.places.create(PlaceRecord(name=name.strip()))
        logger.info("Created place %s for reference %r", place_id, name)
        return place_id

    def find_or_create_person(self, name: str, context: Optional[str] = None) -> str:
        existing = self.repos.people.find_by_name(name)
        if existing is not None:
            return existing.id
        person_id = self.repos.people.create(PersonRecord(name=name.strip(), context=context))
        logger.info("Created person %s for reference %r", person_id, name)
        return person_id

    def resolve_person(self, reference: str) -> str:
        """A person reference is an existing person id, or else a name."""
        if self.repos.people.exists(reference):
            return reference
        return self.find_or_create_person(reference)

    def _people_refs(self, refs: Iterable[str]) -> list[str]:
        seen: dict[str, str] = {}
        for ref in refs or []:
            if ref and ref.strip():
                seen.setdefault(normalize_name(ref), ref.strip())
        return list(seen.values())

    # --- per-kind saves ----------------------------------------------------

    def save_mood(self, record: MoodRecord, people: Iterable[str] = ()) -> SaveResult:
        mood_id, created = self._save_primary(self.repos.moods, record)
        result = SaveResult(kind=EntityKind.mood, entity_id=mood_id, created=created)

        if record.location and record.location.strip():
            def _place() -> LinkResult:
                place_id = self.find_or_create_place(record.location)
                self.repos.places.add_place_mood(place_id, mood_id)
                return self.graph.link(
                    EntityKind.mood, mood_id, EntityKind.place, place_id,
                    RelationshipKind.AT_PLACE, RelationshipKind.HAS_MOOD,
                )
            self._attempt(result, f"place {record.location!r}", _place)

        for ref in self._people_refs(people):
            def _person(ref: str = ref) -> LinkResult:
                person_id = self.resolve_person(ref)
                return self.graph.link(
                    EntityKind.mood, mood_id, EntityKind.person, person_id,
                    RelationshipKind.WITH_PERSON, RelationshipKind.EXPERIENCED_WITH,
                )
            self._attempt(result, f"person {ref!r}", _person)

        companion = social_context_person(record.social_context)
        if companion:
            def _companion() -> LinkResult:
                person_id = self.find_or_create_person(companion, context="Generated from mood entry")
                return self.graph.link(
                    EntityKind.mood, mood_id, EntityKind.person, person_id,
                    RelationshipKind.WITH_PERSON, RelationshipKind.ASSOCIATED_WITH_MOOD,
                )
            self._attempt(result, f"social context {record.social_context!r}", _companion)

        return result

    def _linked_food_mood(self, food_id: str) -> Optional[MoodRecord]:
        for edge in self.graph.edges_touching(EntityKind.food, food_id):
            if (
                edge.relationship_type == RelationshipKind.HAS_MOOD
                and edge.source_type == EntityKind.food.value
                and edge.source_id == food_id
                and edge.target_type == EntityKind.mood.value
            ):
                mood = self.repos.moods.get_by_id(edge.target_id)
                if mood is not None:
                    return mood
        return None

    def save_food(self, record: FoodRecord) -> SaveResult:
        food_id, created = self._save_primary(self.repos.food, record)
        result = SaveResult(kind=EntityKind.food, entity_id=food_id, created=created)

        if record.mood_rating is not None and record.mood_emotion:
            def _mood() -> LinkResult:
                mood = None if created else self._linked_food_mood(food_id)
                if mood is not None:
                    mood.rating = record.mood_rating
                    mood.emotion = record.mood_emotion
                    self.repos.moods.update(mood)
                    mood_id = mood.id
                else:
                    mood_id = self.repos.moods.create(MoodRecord(
                        entry_time=record.date or utcnow(),
                        rating=record.mood_rating,
                        emotion=record.mood_emotion,
                        notes=f"Added while tracking food: {record.name}",
                        tags=[FOOD_MOOD_TAG],
                    ))
                return self.graph.link(
                    EntityKind.food, food_id, EntityKind.mood, mood_id,
                    RelationshipKind.HAS_MOOD, RelationshipKind.ASSOCIATED_WITH_FOOD,
                )
            self._attempt(result, "embedded mood", _mood)

        if record.place and record.place.strip():
            def _place() -> LinkResult:
                place_id = self.find_or_create_place(record.place)
                return self.graph.link(
                    EntityKind.food, food_id, EntityKind.place, place_id,
                    RelationshipKind.AT_PLACE, RelationshipKind.HAS_FOOD,
                )
            self._attempt(result, f"place {record.place!r}", _place)

        for ref in self._people_refs(record.people):
            def _person(ref: str = ref) -> LinkResult:
                person_id = self.resolve_person(ref)
                return self.graph.link(
                    EntityKind.food, food_id, EntityKind.person, person_id,
                    RelationshipKind.WITH_PERSON, RelationshipKind.ATE_FOOD,
                )
            self._attempt(result, f"person {ref!r}", _person)

        return result

    def save_memory(self, record: MemoryRecord) -> SaveResult:
        memory_id, created = self._save_primary(self.repos.memories, record)
        result = SaveResult(kind=EntityKind.memory, entity_id=memory_id, created=created)

        if record.location and record.location.strip():
            def _place() -> LinkResult:
                place_id = self.find_or_create_place(record.location)
                return self.graph.link(
                    EntityKind.memory, memory_id, EntityKind.place, place_id,
                    RelationshipKind.AT_PLACE, RelationshipKind.HAS_MEMORY,
                )
            self._attempt(result, f"place {record.location!r}", _place)

        for ref in self._people_refs(record.people):
            def _person(ref: str = ref) -> LinkResult:
                person_id = self.resolve_person(ref)
                return self.graph.link(
                    EntityKind.memory, memory_id, EntityKind.person, person_id,
                    RelationshipKind.WITH_PERSON, RelationshipKind.IN_MEMORY,
                )
            self._attempt(result, f"person {ref!r}", _person)

        return result

    def save_place(self, record: PlaceRecord, mood_ids: Iterable[str] = ()) -> SaveResult:
        """
        Save a place. A new place whose normalized name matches an existing
        one is not inserted: the existing place is reused and linked instead.
        """
        places = self.repos.places
        if record.id and places.exists(record.id):
            places.update(record)
            place_id, created = record.id, False
        else:
            places.validate(record)
            existing = places.find_by_name(record.name)
            if existing is not None:
                logger.info("Place already exists with name %r; using %s", record.name, existing.id)
                place_id, created = existing.id, False
            else:
                place_id, created = places.create(record), True

        result = SaveResult(kind=EntityKind.place, entity_id=place_id, created=created)
        for mood_id in dict.fromkeys(m for m in mood_ids or [] if m):
            def _mood(mood_id: str = mood_id) -> LinkResult:
                places.add_place_mood(place_id, mood_id)
                return self.graph.link(
                    EntityKind.place, place_id, EntityKind.mood, mood_id,
                    RelationshipKind.HAS_MOOD, RelationshipKind.AT_PLACE,
                )
            self._attempt(result, f"mood {mood_id}", _mood)
        return result

    def save_person(self, record: PersonRecord) -> SaveResult:
        person_id, created = self._save_primary(self.repos.people, record)
        return SaveResult(kind=EntityKind.person, entity_id=person_id, created=created)
