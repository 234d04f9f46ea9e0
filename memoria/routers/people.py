"""
People router.

POST   /people        — Save a person
GET    /people        — List people (paginated, by creation time)
GET    /people/{id}   — Single person
PUT    /people/{id}   — Full replace
DELETE /people/{id}   — Delete a person and their hobbies / interests
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from memoria.core.errors import EntityNotFoundError
from memoria.repositories.records import PersonRecord
from memoria.routers.common import Page, save_summary
from memoria.schemas.common import ErrorResponse
from memoria.schemas.entities import PersonIn, PersonListResponse, PersonOut, PersonSaveResponse
from memoria.services.context import Services, get_services

router = APIRouter(
    prefix="/people",
    tags=["people"],
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)


def _saved(services: Services, record: PersonRecord) -> PersonSaveResponse:
    result = services.resolver.save_person(record)
    entity = services.repos.people.get_by_id(result.entity_id)
    return PersonSaveResponse(entity=PersonOut.model_validate(entity), **save_summary(result))


@router.post("", response_model=PersonSaveResponse, status_code=status.HTTP_201_CREATED, summary="Save a person")
def create_person(payload: PersonIn, services: Services = Depends(get_services)):
    return _saved(services, PersonRecord(**payload.model_dump()))


@router.get("", response_model=PersonListResponse, summary="List people")
def list_people(page: Page = Depends(), services: Services = Depends(get_services)):
    items = services.repos.people.list(limit=page.limit, offset=page.offset, direction=page.direction)
    return PersonListResponse(
        total=services.repos.people.count(),
        items=[PersonOut.model_validate(p) for p in items],
    )


@router.get("/{person_id}", response_model=PersonOut, summary="Retrieve a person by id")
def get_person(person_id: str, services: Services = Depends(get_services)):
    person = services.repos.people.get_by_id(person_id)
    if person is None:
        raise EntityNotFoundError("person", person_id)
    return PersonOut.model_validate(person)


@router.put("/{person_id}", response_model=PersonSaveResponse, summary="Replace a person")
def update_person(person_id: str, payload: PersonIn, services: Services = Depends(get_services)):
    if not services.repos.people.exists(person_id):
        raise EntityNotFoundError("person", person_id)
    return _saved(services, PersonRecord(id=person_id, **payload.model_dump()))


@router.delete("/{person_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a person")
def delete_person(person_id: str, services: Services = Depends(get_services)):
    if not services.repos.people.delete(person_id):
        raise EntityNotFoundError("person", person_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
