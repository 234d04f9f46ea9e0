"""
Place repository.

Places own a `place_moods` link table (removed with the place). A merged
duplicate is tombstoned through its notes, never deleted; `find_by_name` and
`list_active` ignore tombstones.
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import and_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from memoria.db.base import Store
from memoria.models.kinds import EntityKind
from memoria.models.place import Place, PlaceMood
from memoria.repositories.base import NamedEntityRepository, new_id
from memoria.repositories.records import MERGE_MARKER, PlaceRecord, normalize_name

logger = logging.getLogger(__name__)

# Roughly 0.01 degree per km; good enough for "places around here".
_APPROX_DEGREES_PER_KM = 0.01


class PlaceRepository(NamedEntityRepository[PlaceRecord]):
    kind = EntityKind.place
    store = Store.places
    model = Place
    sort_field = "created_at"
    id_prefix = "pl"

    def validate(self, record: PlaceRecord) -> None:
        if not record.name or not record.name.strip():
            raise self._invalid("Missing name")
        if (record.latitude is None) != (record.longitude is None):
            raise self._invalid("latitude and longitude must be given together")

    def _apply(self, row: Place, record: PlaceRecord) -> None:
        row.name = record.name.strip()
        row.address = record.address or None
        row.latitude = record.latitude
        row.longitude = record.longitude
        row.notes = record.notes or None

    def _to_record(self, row: Place) -> PlaceRecord:
        return PlaceRecord(
            id=row.id,
            name=row.name,
            address=row.address,
            latitude=row.latitude,
            longitude=row.longitude,
            notes=row.notes,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    # --- name identity -----------------------------------------------------

    def _matches_name(self, record: PlaceRecord, key: str) -> bool:
        return not record.is_tombstoned and normalize_name(record.name) == key

    def list_active(self) -> list[PlaceRecord]:
        """Non-tombstoned places in insertion order."""
        return [p for p in self.list_in_insertion_order() if not p.is_tombstoned]

    def tombstone(self, place_id: str, survivor_id: str) -> Optional[PlaceRecord]:
        """Mark `place_id` as merged into `survivor_id` by prefixing its notes."""
        place = self.get_by_id(place_id)
        if place is None:
            return None
        marker = MERGE_MARKER.format(survivor_id=survivor_id)
        place.notes = f"{marker} {place.notes or ''}".rstrip()
        self.update(place)
        return place

    # --- place ↔ mood links ------------------------------------------------

    def add_place_mood(self, place_id: str, mood_id: str) -> bool:
        """
        Link a mood to a place. Idempotent; failures are logged and reported
        as False, never raised.
        """
        def _add(db: Session) -> bool:
            existing = db.scalar(
                select(PlaceMood.id).where(
                    PlaceMood.place_id == place_id, PlaceMood.mood_id == mood_id
                )
            )
            if existing is not None:
                return False
            db.add(PlaceMood(id=new_id(), place_id=place_id, mood_id=mood_id))
            db.commit()
            return True

        try:
            with self.storage.session(self.store) as db:
                added = _add(db)
        except SQLAlchemyError as exc:
            logger.warning("Could not link place %s to mood %s: %s", place_id, mood_id, exc)
            return False
        if added:
            logger.debug("Linked place %s to mood %s", place_id, mood_id)
        return added

    def get_place_moods(self, place_id: str) -> list[str]:
        """Mood ids linked to a place; empty for an unlinked or unknown place."""
        return self._run(
            "get_place_moods",
            lambda db: list(
                db.scalars(select(PlaceMood.mood_id).where(PlaceMood.place_id == place_id)).all()
            ),
        )

    def move_place_moods(self, from_place_id: str, to_place_id: str) -> int:
        """Re-home every mood link of one place onto another. Returns links moved."""
        moved = 0
        for mood_id in self.get_place_moods(from_place_id):
            if self.add_place_mood(to_place_id, mood_id):
                moved += 1

        def _drop_old(db: Session) -> None:
            self._clear(db, PlaceMood, "place_id", from_place_id)
            db.commit()

        self._run("move_place_moods", _drop_old)
        return moved

    # --- proximity ---------------------------------------------------------

    def nearby(self, latitude: float, longitude: float, radius_km: float = 5.0) -> list[PlaceRecord]:
        """Places inside a bounding box around the point, nearest first."""
        radius = radius_km * _APPROX_DEGREES_PER_KM
        distance_sq = (Place.latitude - latitude) * (Place.latitude - latitude) + (
            Place.longitude - longitude
        ) * (Place.longitude - longitude)

        def _nearby(db: Session) -> list[PlaceRecord]:
            q = (
                select(Place)
                .where(
                    and_(
                        Place.latitude.is_not(None),
                        Place.longitude.is_not(None),
                        Place.latitude.between(latitude - radius, latitude + radius),
                        Place.longitude.between(longitude - radius, longitude + radius),
                    )
                )
                .order_by(distance_sq.asc())
            )
            return [self._to_record(row) for row in db.scalars(q).all()]

        return self._run("nearby", _nearby)
