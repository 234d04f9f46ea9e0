"""
Mood router.

POST   /moods        — Save a mood and link its place / people references
GET    /moods        — List moods (paginated, by entry time)
GET    /moods/{id}   — Single mood
PUT    /moods/{id}   — Full replace, references re-resolved
DELETE /moods/{id}   — Delete a mood and its tags / activities / metadata
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Response, status

from memoria.core.errors import EntityNotFoundError
from memoria.repositories.records import MoodRecord
from memoria.routers.common import Page, save_summary
from memoria.schemas.common import ErrorResponse
from memoria.schemas.entities import MoodIn, MoodListResponse, MoodOut, MoodSaveResponse
from memoria.services.context import Services, get_services

router = APIRouter(
    prefix="/moods",
    tags=["moods"],
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)


def _to_record(payload: MoodIn, mood_id: Optional[str] = None) -> MoodRecord:
    return MoodRecord(id=mood_id, **payload.model_dump(exclude={"people"}))


def _saved(services: Services, payload: MoodIn, mood_id: Optional[str] = None) -> MoodSaveResponse:
    result = services.resolver.save_mood(_to_record(payload, mood_id), people=payload.people)
    entity = services.repos.moods.get_by_id(result.entity_id)
    return MoodSaveResponse(entity=MoodOut.model_validate(entity), **save_summary(result))


@router.post(
    "",
    response_model=MoodSaveResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save a mood entry",
    responses={422: {"description": "Invalid mood (rating outside 1-5, missing emotion)."}},
)
def create_mood(payload: MoodIn, services: Services = Depends(get_services)):
    """
    Store the mood, then resolve its references:
    - **location** → found-or-created place, linked both ways and added to the place's moods.
    - **people** → each person id or name, linked both ways.
    - **social_context** of the form "With <name>" → that person, linked both ways.

    A reference that cannot be linked is reported in `errors`; the mood is saved anyway.
    """
    return _saved(services, payload)


@router.get("", response_model=MoodListResponse, summary="List moods, newest first by default")
def list_moods(page: Page = Depends(), services: Services = Depends(get_services)):
    items = services.repos.moods.list(limit=page.limit, offset=page.offset, direction=page.direction)
    return MoodListResponse(
        total=services.repos.moods.count(),
        items=[MoodOut.model_validate(m) for m in items],
    )


@router.get("/{mood_id}", response_model=MoodOut, summary="Retrieve a mood by id")
def get_mood(mood_id: str, services: Services = Depends(get_services)):
    mood = services.repos.moods.get_by_id(mood_id)
    if mood is None:
        raise EntityNotFoundError("mood", mood_id)
    return MoodOut.model_validate(mood)


@router.put("/{mood_id}", response_model=MoodSaveResponse, summary="Replace a mood")
def update_mood(mood_id: str, payload: MoodIn, services: Services = Depends(get_services)):
    """Full-row replace: fields left out of the payload are reset to their defaults."""
    if not services.repos.moods.exists(mood_id):
        raise EntityNotFoundError("mood", mood_id)
    return _saved(services, payload, mood_id)


@router.delete("/{mood_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a mood")
def delete_mood(mood_id: str, services: Services = Depends(get_services)):
    """Removes the mood and its own child rows. Relationship edges are left in place."""
    if not services.repos.moods.delete(mood_id):
        raise EntityNotFoundError("mood", mood_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
