"""
Mood repository.

Tags, activities and weather/location metadata are stored in child tables and
reconstructed on every read. Children are inserted one by one, each in its
own savepoint: a failing tag or activity is logged and skipped while the mood
itself is still saved.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from memoria.db.base import Store
from memoria.models.kinds import EntityKind
from memoria.models.mood import Mood, MoodActivity, MoodMetadata, MoodTag
from memoria.repositories.base import EntityRepository, new_id, utcnow
from memoria.repositories.records import MoodRecord

logger = logging.getLogger(__name__)

RATING_MIN = 1
RATING_MAX = 5

_WEATHER = "weather"
_LOCATION = "location"


def _unique_tags(tags: list[str]) -> list[str]:
    cleaned = [t.strip() for t in tags or [] if t and t.strip()]
    return list(dict.fromkeys(cleaned))


class MoodRepository(EntityRepository[MoodRecord]):
    kind = EntityKind.mood
    store = Store.moods
    model = Mood
    sort_field = "entry_time"

    def validate(self, record: MoodRecord) -> None:
        if record.entry_time is None:
            raise self._invalid("Missing entry_time")
        if record.rating is None:
            raise self._invalid("Missing rating")
        if isinstance(record.rating, bool) or not isinstance(record.rating, int):
            raise self._invalid("rating must be an integer")
        if not RATING_MIN <= record.rating <= RATING_MAX:
            raise self._invalid(f"rating must be between {RATING_MIN} and {RATING_MAX}")
        if not record.emotion or not record.emotion.strip():
            raise self._invalid("Missing emotion")

    def _apply(self, row: Mood, record: MoodRecord) -> None:
        row.entry_time = record.entry_time
        row.rating = record.rating
        row.emotion = record.emotion.strip()
        row.notes = record.notes or ""
        row.location = record.location or None
        row.social_context = record.social_context or None
        row.weather = record.weather or None

    def _write_children(self, db: Session, entity_id: str, record: MoodRecord) -> None:
        for tag in _unique_tags(record.tags):
            self._insert_child(
                db, MoodTag(id=new_id(), mood_id=entity_id, tag_name=tag), f"tag {tag!r}"
            )

        for activity_type, activity_name in (record.activities or {}).items():
            if not activity_type or not activity_name:
                continue
            self._insert_child(
                db,
                MoodActivity(
                    id=new_id(),
                    mood_id=entity_id,
                    activity_type=activity_type,
                    activity_name=activity_name,
                ),
                f"activity {activity_type}={activity_name!r}",
            )

        for metadata_type, payload in ((_WEATHER, record.weather_data), (_LOCATION, record.location_data)):
            if payload is None:
                continue
            try:
                encoded = json.dumps(payload, ensure_ascii=False)
            except (TypeError, ValueError) as exc:
                logger.warning("Skipping %s metadata for mood %s: %s", metadata_type, entity_id, exc)
                continue
            self._insert_child(
                db,
                MoodMetadata(
                    id=new_id(),
                    mood_id=entity_id,
                    metadata_type=metadata_type,
                    metadata_value=encoded,
                    created_at=utcnow(),
                ),
                f"{metadata_type} metadata",
            )

    def _clear_children(self, db: Session, entity_id: str) -> None:
        self._clear(db, MoodTag, "mood_id", entity_id)
        self._clear(db, MoodActivity, "mood_id", entity_id)
        self._clear(db, MoodMetadata, "mood_id", entity_id)

    def _to_record(self, row: Mood) -> MoodRecord:
        weather_data: Optional[Any] = None
        location_data: Optional[Any] = None
        for item in row.extras:
            try:
                value = json.loads(item.metadata_value)
            except (TypeError, ValueError) as exc:
                logger.error("Error parsing %s metadata of mood %s: %s", item.metadata_type, row.id, exc)
                continue
            if item.metadata_type == _WEATHER:
                weather_data = value
            elif item.metadata_type == _LOCATION:
                location_data = value

        return MoodRecord(
            id=row.id,
            entry_time=row.entry_time,
            rating=row.rating,
            emotion=row.emotion,
            notes=row.notes or "",
            location=row.location,
            social_context=row.social_context,
            weather=row.weather,
            tags=[t.tag_name for t in row.tags],
            activities={a.activity_type: a.activity_name for a in row.activities},
            weather_data=weather_data,
            location_data=location_data,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
