"""
EntityRelationship: a directed, typed edge between two entities in any store.

Edges are created in pairs (forward + inverse kind) so traversal from either
endpoint finds the link. Identity is the 5-tuple
(source_type, source_id, target_type, target_id, relationship_type);
created_at is not part of it.

No foreign keys: endpoints live in independently-managed databases, and
readers skip edges whose other side no longer resolves.
"""
from datetime import datetime
from sqlalchemy import Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from memoria.db.base import RelationshipsBase
from memoria.db.types import UTCDateTime


class EntityRelationship(RelationshipsBase):
    __tablename__ = "entity_relationships"
    __table_args__ = (
        UniqueConstraint(
            "source_type", "source_id", "target_type", "target_id", "relationship_type",
            name="uq_entity_relationship",
        ),
        Index("idx_source", "source_type", "source_id"),
        Index("idx_target", "target_type", "target_id"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    source_type: Mapped[str] = mapped_column(String(16), nullable=False)
    source_id: Mapped[str] = mapped_column(String(64), nullable=False)
    target_type: Mapped[str] = mapped_column(String(16), nullable=False)
    target_id: Mapped[str] = mapped_column(String(64), nullable=False)
    relationship_type: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
