"""
Relationship graph store.

A single table of directed, typed edges between any two entities. Consumed
only by the reference resolver, the history expander and the duplicate
merger; nothing else creates edges.

Public API
----------
GraphStore.create_edge(source_type, source_id, target_type, target_id, kind) -> bool
GraphStore.link(a_type, a_id, b_type, b_id, forward, inverse)                -> LinkResult
GraphStore.edges_touching(entity_type, entity_id)                           -> list[Edge]
GraphStore.repoint(edge, entity_type, old_id, replacement_id)               -> bool
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Union

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from memoria.core.errors import StorageFailureError
from memoria.db.base import StorageContext, Store
from memoria.models.kinds import EntityKind
from memoria.models.relationship import EntityRelationship
from memoria.repositories.base import new_id, utcnow

logger = logging.getLogger(__name__)

OUTGOING = "outgoing"
INCOMING = "incoming"


def _ev(v) -> str:
    """Return bare string value from a str-enum or plain str."""
    return v.value if hasattr(v, "value") else str(v)


@dataclass(frozen=True)
class Edge:
    id: str
    source_type: str
    source_id: str
    target_type: str
    target_id: str
    relationship_type: str
    created_at: datetime

    def other_side(self, entity_type: str, entity_id: str) -> tuple[str, str, str]:
        """
        (type, id, direction) of the endpoint opposite to the given entity.
        direction is "outgoing" when the given entity is the source.
        """
        if self.source_type == entity_type and self.source_id == entity_id:
            return self.target_type, self.target_id, OUTGOING
        return self.source_type, self.source_id, INCOMING


@dataclass
class LinkResult:
    """Outcome of one bidirectional link: which of the two edges were new."""
    source_type: str
    source_id: str
    target_type: str
    target_id: str
    forward: str
    inverse: str
    forward_created: bool
    inverse_created: bool


def _to_edge(row: EntityRelationship) -> Edge:
    return Edge(
        id=row.id,
        source_type=row.source_type,
        source_id=row.source_id,
        target_type=row.target_type,
        target_id=row.target_id,
        relationship_type=row.relationship_type,
        created_at=row.created_at,
    )


def _same_tuple(
    source_type: str, source_id: str, target_type: str, target_id: str, kind: str
):
    return (
        (EntityRelationship.source_type == source_type)
        & (EntityRelationship.source_id == source_id)
        & (EntityRelationship.target_type == target_type)
        & (EntityRelationship.target_id == target_id)
        & (EntityRelationship.relationship_type == kind)
    )


class GraphStore:
    def __init__(self, storage: StorageContext):
        self.storage = storage

    def _run(self, operation: str, fn: Callable[[Session], object]):
        try:
            with self.storage.session(Store.relationships) as db:
                return fn(db)
        except SQLAlchemyError as exc:
            logger.error("Relationship %s failed: %s", operation, exc)
            raise StorageFailureError(Store.relationships.value, operation, exc) from exc

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_edge(
        self,
        source_type: Union[EntityKind, str],
        source_id: str,
        target_type: Union[EntityKind, str],
        target_id: str,
        relationship_type: str,
    ) -> bool:
        """
        Insert one directed edge. An edge with the identical 5-tuple already
        present makes this a silent no-op. Returns True when a row was added.
        """
        key = (_ev(source_type), source_id, _ev(target_type), target_id, relationship_type)

        def _create(db: Session) -> bool:
            existing = db.scalar(select(EntityRelationship.id).where(_same_tuple(*key)))
            if existing is not None:
                return False
            db.add(EntityRelationship(
                id=new_id(),
                source_type=key[0],
                source_id=key[1],
                target_type=key[2],
                target_id=key[3],
                relationship_type=key[4],
                created_at=utcnow(),
            ))
            try:
                db.commit()
            except IntegrityError:
                # Lost a race against an identical insert; same outcome.
                db.rollback()
                return False
            return True

        created = self._run("create_edge", _create)
        if created:
            logger.debug("Created relationship: %s:%s -> %s:%s (%s)", *key)
        else:
            logger.debug("Relationship already exists: %s:%s -> %s:%s (%s)", *key)
        return created

    def link(
        self,
        a_type: Union[EntityKind, str],
        a_id: str,
        b_type: Union[EntityKind, str],
        b_id: str,
        forward: str,
        inverse: str,
    ) -> LinkResult:
        """Create the forward edge a→b and its inverse b→a."""
        forward_created = self.create_edge(a_type, a_id, b_type, b_id, forward)
        inverse_created = self.create_edge(b_type, b_id, a_type, a_id, inverse)
        return LinkResult(
            source_type=_ev(a_type),
            source_id=a_id,
            target_type=_ev(b_type),
            target_id=b_id,
            forward=forward,
            inverse=inverse,
            forward_created=forward_created,
            inverse_created=inverse_created,
        )

    def repoint(
        self,
        edge: Edge,
        entity_type: Union[EntityKind, str],
        old_id: str,
        replacement_id: str,
    ) -> bool:
        """
        Rewrite whichever endpoint of `edge` is (entity_type, old_id) to replacement_id.
        If the rewritten edge would duplicate an existing 5-tuple, the redundant
        edge is deleted instead. Returns True when the edge was rewritten.
        """
        kind = _ev(entity_type)
        if edge.source_type == kind and edge.source_id == old_id:
            endpoint, key = "source_id", (edge.source_type, replacement_id, edge.target_type, edge.target_id)
        elif edge.target_type == kind and edge.target_id == old_id:
            endpoint, key = "target_id", (edge.source_type, edge.source_id, edge.target_type, replacement_id)
        else:
            return False

        def _repoint(db: Session) -> bool:
            row = db.get(EntityRelationship, edge.id)
            if row is None:
                return False
            clash = db.scalar(
                select(EntityRelationship.id).where(
                    _same_tuple(*key, edge.relationship_type),
                    EntityRelationship.id != edge.id,
                )
            )
            if clash is not None:
                db.delete(row)
                db.commit()
                return False
            setattr(row, endpoint, replacement_id)
            db.commit()
            return True

        return self._run("repoint", _repoint)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def edges_touching(self, entity_type: Union[EntityKind, str], entity_id: str) -> list[Edge]:
        """
        Every edge where (entity_type, entity_id) is the source OR the target,
        oldest first. Served by the idx_source / idx_target indexes.
        """
        kind = _ev(entity_type)

        def _touching(db: Session) -> list[Edge]:
            q = (
                select(EntityRelationship)
                .where(
                    or_(
                        (EntityRelationship.source_type == kind)
                        & (EntityRelationship.source_id == entity_id),
                        (EntityRelationship.target_type == kind)
                        & (EntityRelationship.target_id == entity_id),
                    )
                )
                .order_by(EntityRelationship.created_at.asc())
            )
            return [_to_edge(row) for row in db.scalars(q).all()]

        return self._run("edges_touching", _touching)

    def find_edge(
        self,
        source_type: Union[EntityKind, str],
        source_id: str,
        target_type: Union[EntityKind, str],
        target_id: str,
        relationship_type: str,
    ) -> Optional[Edge]:
        key = (_ev(source_type), source_id, _ev(target_type), target_id, relationship_type)

        def _find(db: Session) -> Optional[Edge]:
            row = db.scalars(select(EntityRelationship).where(_same_tuple(*key))).first()
            return _to_edge(row) if row is not None else None

        return self._run("find_edge", _find)

    def count(self) -> int:
        return self._run(
            "count", lambda db: db.scalar(select(func.count()).select_from(EntityRelationship)) or 0
        )
