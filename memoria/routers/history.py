"""
Relationship read-side router, shared by every entity kind.

GET /{collection}/{id}/history               — Every linked entity, newest link first
GET /{collection}/{id}/details               — The entity plus its neighbours grouped by kind
GET /{collection}/{id}/related/{other_kind}  — Neighbours of one kind, each listed once

`collection` is the route name (moods, places, people, food, memories) or
the bare kind (mood, place, person, food, memory).
"""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from memoria.core.errors import EntityNotFoundError
from memoria.models.kinds import EntityKind
from memoria.repositories.records import record_data
from memoria.repositories.registry import parse_kind
from memoria.schemas.graph import EntityDetailsResponse, HistoryItemOut, HistoryResponse
from memoria.services.context import Services, get_services
from memoria.services.history import HistoryItem, group_by_type

router = APIRouter(tags=["history"])

_COLLECTIONS = {
    "moods": EntityKind.mood,
    "places": EntityKind.place,
    "people": EntityKind.person,
    "food": EntityKind.food,
    "memories": EntityKind.memory,
}


def _kind(collection: str) -> EntityKind:
    return _COLLECTIONS.get(collection) or parse_kind(collection)


def _item_out(item: HistoryItem) -> HistoryItemOut:
    return HistoryItemOut(
        relationship=item.relationship,
        direction=item.direction,
        entity_type=item.entity_type,
        entity_id=item.entity_id,
        entity_data=record_data(item.entity_data),
        created_at=item.created_at,
    )


@router.get(
    "/{collection}/{entity_id}/history",
    response_model=HistoryResponse,
    summary="Relationship history of one entity",
    responses={404: {"description": "Entity not found."}, 422: {"description": "Unknown kind."}},
)
def get_history(
    collection: str,
    entity_id: str,
    group: bool = Query(default=False, description="Also return the items grouped by entity type."),
    services: Services = Depends(get_services),
):
    """
    One item per edge touching the entity. A neighbour linked through a
    forward + inverse pair therefore appears once per direction. Edges whose
    other side no longer exists are left out.
    """
    kind = _kind(collection)
    if not services.repos.for_kind(kind).exists(entity_id):
        raise EntityNotFoundError(kind.value, entity_id)

    items = services.history.history_for(kind, entity_id)
    grouped = None
    if group:
        grouped = {
            entity_type: [_item_out(i) for i in members]
            for entity_type, members in group_by_type(items).items()
        }
    return HistoryResponse(
        kind=kind.value,
        entity_id=entity_id,
        total=len(items),
        items=[_item_out(i) for i in items],
        grouped=grouped,
    )


@router.get(
    "/{collection}/{entity_id}/details",
    response_model=EntityDetailsResponse,
    summary="Entity with everything linked to it",
)
def get_details(collection: str, entity_id: str, services: Services = Depends(get_services)):
    kind = _kind(collection)
    details = services.history.entity_details(kind, entity_id)
    if details is None:
        raise EntityNotFoundError(kind.value, entity_id)
    return EntityDetailsResponse(
        kind=details.kind.value,
        entity=record_data(details.entity),
        related={
            entity_type: [_item_out(i) for i in members]
            for entity_type, members in details.related.items()
        },
    )


@router.get(
    "/{collection}/{entity_id}/related/{other_kind}",
    response_model=list[dict[str, Any]],
    summary="Linked entities of one kind",
)
def get_related(
    collection: str,
    entity_id: str,
    other_kind: str,
    services: Services = Depends(get_services),
):
    """E.g. `/moods/{id}/related/food` or `/food/{id}/related/mood`."""
    kind = _kind(collection)
    if not services.repos.for_kind(kind).exists(entity_id):
        raise EntityNotFoundError(kind.value, entity_id)
    records = services.history.related_of_kind(kind, entity_id, _kind(other_kind))
    return [record_data(r) for r in records]
