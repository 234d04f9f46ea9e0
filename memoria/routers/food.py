"""
Food router.

POST   /food        — Save a food entry, its embedded mood and its references
GET    /food        — List food entries (paginated, by date)
GET    /food/{id}   — Single food entry
PUT    /food/{id}   — Full replace; an embedded mood updates the linked mood
DELETE /food/{id}   — Delete a food entry
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from memoria.core.errors import EntityNotFoundError
from memoria.repositories.records import FoodRecord
from memoria.routers.common import Page, save_summary
from memoria.schemas.common import ErrorResponse
from memoria.schemas.entities import FoodIn, FoodListResponse, FoodOut, FoodSaveResponse
from memoria.services.context import Services, get_services

router = APIRouter(
    prefix="/food",
    tags=["food"],
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)


def _saved(services: Services, record: FoodRecord) -> FoodSaveResponse:
    result = services.resolver.save_food(record)
    entity = services.repos.food.get_by_id(result.entity_id)
    return FoodSaveResponse(entity=FoodOut.model_validate(entity), **save_summary(result))


@router.post(
    "",
    response_model=FoodSaveResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save a food entry",
)
def create_food(payload: FoodIn, services: Services = Depends(get_services)):
    """
    Store the entry, then:
    - **mood_rating** + **mood_emotion** → a mood tagged `food-related`, linked both ways.
    - **place** → found-or-created place, linked both ways.
    - **people** → each person id or name, linked both ways.
    """
    return _saved(services, FoodRecord(**payload.model_dump()))


@router.get("", response_model=FoodListResponse, summary="List food entries")
def list_food(page: Page = Depends(), services: Services = Depends(get_services)):
    items = services.repos.food.list(limit=page.limit, offset=page.offset, direction=page.direction)
    return FoodListResponse(
        total=services.repos.food.count(),
        items=[FoodOut.model_validate(f) for f in items],
    )


@router.get("/{food_id}", response_model=FoodOut, summary="Retrieve a food entry by id")
def get_food(food_id: str, services: Services = Depends(get_services)):
    food = services.repos.food.get_by_id(food_id)
    if food is None:
        raise EntityNotFoundError("food", food_id)
    return FoodOut.model_validate(food)


@router.put("/{food_id}", response_model=FoodSaveResponse, summary="Replace a food entry")
def update_food(food_id: str, payload: FoodIn, services: Services = Depends(get_services)):
    if not services.repos.food.exists(food_id):
        raise EntityNotFoundError("food", food_id)
    return _saved(services, FoodRecord(id=food_id, **payload.model_dump()))


@router.delete("/{food_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a food entry")
def delete_food(food_id: str, services: Services = Depends(get_services)):
    if not services.repos.food.delete(food_id):
        raise EntityNotFoundError("food", food_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
