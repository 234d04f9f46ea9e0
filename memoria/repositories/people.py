from __future__ import annotations

from sqlalchemy.orm import Session

from memoria.db.base import Store
from memoria.models.kinds import EntityKind
from memoria.models.person import Person, PersonTag
from memoria.repositories.base import NamedEntityRepository, new_id
from memoria.repositories.records import PersonRecord

HOBBY = "hobby"
INTEREST = "interest"


class PersonRepository(NamedEntityRepository[PersonRecord]):
    """People, with hobbies and interests kept in the person_tags child table."""

    kind = EntityKind.person
    store = Store.people
    model = Person
    sort_field = "created_at"

    def validate(self, record: PersonRecord) -> None:
        if not record.name or not record.name.strip():
            raise self._invalid("Missing name")

    def _apply(self, row: Person, record: PersonRecord) -> None:
        row.name = record.name.strip()
        row.context = record.context
        row.status = record.status
        row.birth_date = record.birth_date
        row.is_deceased = bool(record.is_deceased)
        row.deceased_date = record.deceased_date if record.is_deceased else None
        row.phone_number = record.phone_number
        row.email = record.email
        row.socials = record.socials

    def _write_children(self, db: Session, entity_id: str, record: PersonRecord) -> None:
        for tag_type, values in ((HOBBY, record.hobbies), (INTEREST, record.interests)):
            for value in dict.fromkeys(v.strip() for v in values or [] if v and v.strip()):
                self._insert_child(
                    db,
                    PersonTag(id=new_id(), person_id=entity_id, tag_type=tag_type, value=value),
                    f"{tag_type} {value!r}",
                )

    def _clear_children(self, db: Session, entity_id: str) -> None:
        self._clear(db, PersonTag, "person_id", entity_id)

    def _to_record(self, row: Person) -> PersonRecord:
        return PersonRecord(
            id=row.id,
            name=row.name,
            context=row.context,
            status=row.status,
            birth_date=row.birth_date,
            is_deceased=bool(row.is_deceased),
            deceased_date=row.deceased_date,
            phone_number=row.phone_number,
            email=row.email,
            socials=row.socials,
            hobbies=[t.value for t in row.tags if t.tag_type == HOBBY],
            interests=[t.value for t in row.tags if t.tag_type == INTEREST],
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
