from __future__ import annotations

from memoria.db.base import Store
from memoria.models.kinds import EntityKind
from memoria.models.memory import Memory
from memoria.repositories.base import EntityRepository, _jdump, _jload
from memoria.repositories.records import MemoryRecord


class MemoryRepository(EntityRepository[MemoryRecord]):
    kind = EntityKind.memory
    store = Store.memories
    model = Memory
    sort_field = "date"

    def validate(self, record: MemoryRecord) -> None:
        if not record.title or not record.title.strip():
            raise self._invalid("Missing title")
        if record.date is None:
            raise self._invalid("Missing date")

    def _apply(self, row: Memory, record: MemoryRecord) -> None:
        row.title = record.title.strip()
        row.description = record.description
        row.date = record.date
        row.location = record.location or None
        row.people = _jdump(record.people)
        row.photos = _jdump(record.photos)

    def _to_record(self, row: Memory) -> MemoryRecord:
        return MemoryRecord(
            id=row.id,
            title=row.title,
            description=row.description,
            date=row.date,
            location=row.location,
            people=_jload(row.people),
            photos=_jload(row.photos),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
