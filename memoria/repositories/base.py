"""
Repository contract shared by the five entity stores.

create(record) -> id     validate, assign id, stamp timestamps, write row + children
update(record) -> None   full-row replace; the caller resupplies every field
delete(id)     -> bool   removes the row and its cascade-owned children only
list(...)      -> list   limit / offset / one sort axis, asc or desc
get_by_id(id)  -> record | None

Each operation runs in its own session and commits on its own. Any
SQLAlchemyError is re-raised as StorageFailureError. A missing id on the read
path is a None result, never an exception.
"""
from __future__ import annotations

import enum
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, ClassVar, Generic, Optional, TypeVar

from sqlalchemy import delete as sa_delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from memoria.core.errors import EntityNotFoundError, EntityValidationError, StorageFailureError
from memoria.db.base import StorageContext, Store
from memoria.models.kinds import EntityKind
from memoria.repositories.records import normalize_name

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")


# ---------------------------------------------------------------------------
# Tiny utilities
# ---------------------------------------------------------------------------

def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def new_id(prefix: str = "") -> str:
    token = uuid.uuid4().hex
    return f"{prefix}_{token}" if prefix else token


def _jdump(items: Optional[list[str]]) -> str:
    return json.dumps(list(items or []), ensure_ascii=False)


def _jload(text: Optional[str]) -> list[str]:
    if not text:
        return []
    try:
        result = json.loads(text)
        return result if isinstance(result, list) else []
    except (ValueError, TypeError):
        return []


class SortDirection(str, enum.Enum):
    asc = "asc"
    desc = "desc"


# ---------------------------------------------------------------------------
# Base repository
# ---------------------------------------------------------------------------

class EntityRepository(Generic[RecordT]):
    kind: ClassVar[EntityKind]
    store: ClassVar[Store]
    model: ClassVar[type]
    sort_field: ClassVar[str]
    id_prefix: ClassVar[str] = ""

    def __init__(self, storage: StorageContext):
        self.storage = storage

    # --- hooks -------------------------------------------------------------

    def validate(self, record: RecordT) -> None:
        """Raise EntityValidationError if the record cannot be written."""

    def _apply(self, row: Any, record: RecordT) -> None:
        raise NotImplementedError

    def _to_record(self, row: Any) -> RecordT:
        raise NotImplementedError

    def _write_children(self, db: Session, entity_id: str, record: RecordT) -> None:
        """Insert multi-valued children. Default: the kind has none."""

    def _clear_children(self, db: Session, entity_id: str) -> None:
        """Remove multi-valued children before a full replace."""

    # --- helpers -----------------------------------------------------------

    def _invalid(self, reason: str) -> EntityValidationError:
        return EntityValidationError(self.kind.value, reason)

    def _run(self, operation: str, fn: Callable[[Session], Any]) -> Any:
        try:
            with self.storage.session(self.store) as db:
                return fn(db)
        except SQLAlchemyError as exc:
            logger.error("%s %s failed: %s", self.kind.value, operation, exc)
            raise StorageFailureError(self.store.value, operation, exc) from exc

    def _insert_child(self, db: Session, child: Any, label: str) -> bool:
        """
        Insert one child row inside its own savepoint.
        A failure is logged and rolled back; the parent write stands.
        """
        try:
            with db.begin_nested():
                db.add(child)
            return True
        except SQLAlchemyError as exc:
            logger.warning("Skipping %s for %s: %s", label, self.kind.value, exc)
            return False

    def _clear(self, db: Session, child_model: type, fk_column: str, entity_id: str) -> None:
        db.execute(sa_delete(child_model).where(getattr(child_model, fk_column) == entity_id))

    # --- contract ----------------------------------------------------------

    def create(self, record: RecordT) -> str:
        self.validate(record)
        entity_id = getattr(record, "id", None) or new_id(self.id_prefix)
        now = utcnow()

        def _create(db: Session) -> str:
            row = self.model(id=entity_id, created_at=now, updated_at=now)
            self._apply(row, record)
            db.add(row)
            db.flush()
            self._write_children(db, entity_id, record)
            db.commit()
            return entity_id

        created = self._run("create", _create)
        logger.debug("Created %s %s", self.kind.value, created)
        return created

    def update(self, record: RecordT) -> None:
        entity_id = getattr(record, "id", None)
        if not entity_id:
            raise self._invalid("Missing id")
        self.validate(record)

        def _update(db: Session) -> bool:
            row = db.get(self.model, entity_id)
            if row is None:
                return False
            self._apply(row, record)
            row.updated_at = utcnow()
            self._clear_children(db, entity_id)
            db.flush()
            self._write_children(db, entity_id, record)
            db.commit()
            return True

        if not self._run("update", _update):
            raise EntityNotFoundError(self.kind.value, entity_id)

    def delete(self, entity_id: str) -> bool:
        def _delete(db: Session) -> bool:
            row = db.get(self.model, entity_id)
            if row is None:
                return False
            db.delete(row)
            db.commit()
            return True

        return self._run("delete", _delete)

    def get_by_id(self, entity_id: str) -> Optional[RecordT]:
        def _get(db: Session) -> Optional[RecordT]:
            row = db.get(self.model, entity_id)
            return self._to_record(row) if row is not None else None

        return self._run("get_by_id", _get)

    def exists(self, entity_id: str) -> bool:
        return self.get_by_id(entity_id) is not None

    def list(
        self,
        limit: Optional[int] = None,
        offset: int = 0,
        direction: SortDirection = SortDirection.desc,
    ) -> list[RecordT]:
        """Rows ordered by the kind's primary date/time field. limit=None returns all."""
        column = getattr(self.model, self.sort_field)
        ordering = column.asc() if SortDirection(direction) == SortDirection.asc else column.desc()

        def _list(db: Session) -> list[RecordT]:
            q = select(self.model).order_by(ordering, self.model.created_at.asc()).offset(offset)
            if limit is not None:
                q = q.limit(limit)
            return [self._to_record(row) for row in db.scalars(q).all()]

        return self._run("list", _list)

    def list_in_insertion_order(self) -> list[RecordT]:
        def _list(db: Session) -> list[RecordT]:
            q = select(self.model).order_by(self.model.created_at.asc())
            return [self._to_record(row) for row in db.scalars(q).all()]

        return self._run("list", _list)

    def count(self) -> int:
        return self._run("count", lambda db: db.scalar(select(func.count()).select_from(self.model)) or 0)


class NamedEntityRepository(EntityRepository[RecordT]):
    """Repositories whose identity for matching purposes is a free-text name."""

    def _matches_name(self, record: RecordT, key: str) -> bool:
        return normalize_name(getattr(record, "name", None)) == key

    def find_by_name(self, name: str) -> Optional[RecordT]:
        """
        Case-insensitive exact match on the trimmed name. Linear scan over all
        rows in insertion order: no fuzzy matching.
        """
        key = normalize_name(name)
        if not key:
            return None
        for record in self.list_in_insertion_order():
            if self._matches_name(record, key):
                return record
        return None
