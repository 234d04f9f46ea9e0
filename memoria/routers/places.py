"""
Place router.

POST   /places             — Save a place (reuses an existing place with the same name)
GET    /places             — List places (paginated, by creation time)
GET    /places/nearby      — Places around a coordinate, nearest first
GET    /places/{id}        — Single place (tombstoned places included)
GET    /places/{id}/moods  — Mood ids linked to a place
PUT    /places/{id}        — Full replace
DELETE /places/{id}        — Delete a place and its mood links
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from memoria.core.errors import EntityNotFoundError
from memoria.repositories.records import PlaceRecord
from memoria.routers.common import Page, save_summary
from memoria.schemas.common import ErrorResponse
from memoria.schemas.entities import (
    PlaceIn,
    PlaceListResponse,
    PlaceMoodsResponse,
    PlaceOut,
    PlaceSaveResponse,
)
from memoria.services.context import Services, get_services

router = APIRouter(
    prefix="/places",
    tags=["places"],
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)


def _saved(services: Services, payload: PlaceIn, place_id: Optional[str] = None) -> PlaceSaveResponse:
    record = PlaceRecord(id=place_id, **payload.model_dump(exclude={"mood_ids"}))
    result = services.resolver.save_place(record, mood_ids=payload.mood_ids)
    entity = services.repos.places.get_by_id(result.entity_id)
    return PlaceSaveResponse(entity=PlaceOut.model_validate(entity), **save_summary(result))


@router.post(
    "",
    response_model=PlaceSaveResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save a place",
)
def create_place(payload: PlaceIn, response: Response, services: Services = Depends(get_services)):
    """
    A place whose trimmed, case-insensitive name matches an existing place is
    not inserted again: the existing place is returned with `created=false`
    (status 200) and the given moods are linked to it.
    """
    saved = _saved(services, payload)
    if not saved.created:
        response.status_code = status.HTTP_200_OK
    return saved


@router.get("", response_model=PlaceListResponse, summary="List places")
def list_places(page: Page = Depends(), services: Services = Depends(get_services)):
    items = services.repos.places.list(limit=page.limit, offset=page.offset, direction=page.direction)
    return PlaceListResponse(
        total=services.repos.places.count(),
        items=[PlaceOut.model_validate(p) for p in items],
    )


@router.get("/nearby", response_model=list[PlaceOut], summary="Places near a coordinate")
def nearby_places(
    latitude: float = Query(ge=-90, le=90),
    longitude: float = Query(ge=-180, le=180),
    radius_km: float = Query(default=5.0, gt=0, le=500),
    services: Services = Depends(get_services),
):
    """Bounding-box lookup (about 0.01 degree per km), nearest first."""
    places = services.repos.places.nearby(latitude, longitude, radius_km)
    return [PlaceOut.model_validate(p) for p in places]


@router.get("/{place_id}", response_model=PlaceOut, summary="Retrieve a place by id")
def get_place(place_id: str, services: Services = Depends(get_services)):
    place = services.repos.places.get_by_id(place_id)
    if place is None:
        raise EntityNotFoundError("place", place_id)
    return PlaceOut.model_validate(place)


@router.get("/{place_id}/moods", response_model=PlaceMoodsResponse, summary="Moods linked to a place")
def get_place_moods(place_id: str, services: Services = Depends(get_services)):
    if not services.repos.places.exists(place_id):
        raise EntityNotFoundError("place", place_id)
    return PlaceMoodsResponse(place_id=place_id, mood_ids=services.repos.places.get_place_moods(place_id))


@router.put("/{place_id}", response_model=PlaceSaveResponse, summary="Replace a place")
def update_place(place_id: str, payload: PlaceIn, services: Services = Depends(get_services)):
    if not services.repos.places.exists(place_id):
        raise EntityNotFoundError("place", place_id)
    return _saved(services, payload, place_id)


@router.delete("/{place_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a place")
def delete_place(place_id: str, services: Services = Depends(get_services)):
    if not services.repos.places.delete(place_id):
        raise EntityNotFoundError("place", place_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
