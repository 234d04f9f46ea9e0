"""
History expander: the read-time join from one entity, across the edge table,
into its neighbours' own repositories.

Every edge touching the entity contributes one item; since links are stored
as forward + inverse pairs, a neighbour linked once usually appears twice
(once per direction). Edges whose other side no longer resolves are dropped.

Public API
----------
history_for(kind, entity_id)                 -> list[HistoryItem], newest first
group_by_type(items)                         -> dict[str, list[HistoryItem]]
related_of_kind(kind, entity_id, other_kind) -> list[EntityRecord], one per entity
entity_details(kind, entity_id)              -> EntityDetails | None, history grouped by kind
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

from memoria.core.errors import StorageFailureError
from memoria.models.kinds import EntityKind
from memoria.repositories.records import EntityRecord
from memoria.repositories.registry import RepositoryRegistry, parse_kind
from memoria.services.graph import GraphStore

logger = logging.getLogger(__name__)


@dataclass
class HistoryItem:
    relationship: str
    direction: str
    entity_type: str
    entity_id: str
    entity_data: EntityRecord
    created_at: datetime


@dataclass
class EntityDetails:
    kind: EntityKind
    entity: EntityRecord
    related: dict[str, list[HistoryItem]] = field(default_factory=dict)


def group_by_type(items: list[HistoryItem]) -> dict[str, list[HistoryItem]]:
    grouped: dict[str, list[HistoryItem]] = {}
    for item in items:
        grouped.setdefault(item.entity_type, []).append(item)
    return grouped


def _unique_entities(items: list[HistoryItem]) -> list[HistoryItem]:
    seen: set[tuple[str, str]] = set()
    unique = []
    for item in items:
        key = (item.entity_type, item.entity_id)
        if key not in seen:
            seen.add(key)
            unique.append(item)
    return unique


class HistoryExpander:
    def __init__(self, repos: RepositoryRegistry, graph: GraphStore):
        self.repos = repos
        self.graph = graph

    def _hydrate(self, entity_type: str, entity_id: str) -> Optional[EntityRecord]:
        try:
            return self.repos.resolve(entity_type, entity_id)
        except StorageFailureError as exc:
            logger.warning("Could not load %s %s for history: %s", entity_type, entity_id, exc.message)
            return None

    def history_for(self, kind: Union[EntityKind, str], entity_id: str) -> list[HistoryItem]:
        kind = parse_kind(kind)
        cache: dict[tuple[str, str], Optional[EntityRecord]] = {}
        items: list[HistoryItem] = []

        for edge in self.graph.edges_touching(kind, entity_id):
            other_type, other_id, direction = edge.other_side(kind.value, entity_id)
            key = (other_type, other_id)
            if key not in cache:
                cache[key] = self._hydrate(other_type, other_id)
            record = cache[key]
            if record is None:
                logger.debug(
                    "Skipping dangling %s edge %s: %s %s does not resolve",
                    edge.relationship_type, edge.id, other_type, other_id,
                )
                continue
            items.append(HistoryItem(
                relationship=edge.relationship_type,
                direction=direction,
                entity_type=other_type,
                entity_id=other_id,
                entity_data=record,
                created_at=edge.created_at,
            ))

        # Stable: edges created in the same instant keep their stored order.
        items.sort(key=lambda item: item.created_at, reverse=True)
        return items

    def related_of_kind(
        self,
        kind: Union[EntityKind, str],
        entity_id: str,
        other_kind: Union[EntityKind, str],
    ) -> list[EntityRecord]:
        """Neighbours of one kind, most recently linked first, each listed once."""
        wanted = parse_kind(other_kind).value
        items = [i for i in self.history_for(kind, entity_id) if i.entity_type == wanted]
        return [i.entity_data for i in _unique_entities(items)]

    def entity_details(self, kind: Union[EntityKind, str], entity_id: str) -> Optional[EntityDetails]:
        """The entity itself plus its full history grouped by kind; None if absent."""
        kind = parse_kind(kind)
        entity = self.repos.for_kind(kind).get_by_id(entity_id)
        if entity is None:
            return None
        related = group_by_type(self.history_for(kind, entity_id))
        return EntityDetails(kind=kind, entity=entity, related=related)
