"""
Memory router.

POST   /memories        — Save a memory and link its location / people
GET    /memories        — List memories (paginated, by date)
GET    /memories/{id}   — Single memory
PUT    /memories/{id}   — Full replace
DELETE /memories/{id}   — Delete a memory
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from memoria.core.errors import EntityNotFoundError
from memoria.repositories.records import MemoryRecord
from memoria.routers.common import Page, save_summary
from memoria.schemas.common import ErrorResponse
from memoria.schemas.entities import MemoryIn, MemoryListResponse, MemoryOut, MemorySaveResponse
from memoria.services.context import Services, get_services

router = APIRouter(
    prefix="/memories",
    tags=["memories"],
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)


def _saved(services: Services, record: MemoryRecord) -> MemorySaveResponse:
    result = services.resolver.save_memory(record)
    entity = services.repos.memories.get_by_id(result.entity_id)
    return MemorySaveResponse(entity=MemoryOut.model_validate(entity), **save_summary(result))


@router.post("", response_model=MemorySaveResponse, status_code=status.HTTP_201_CREATED, summary="Save a memory")
def create_memory(payload: MemoryIn, services: Services = Depends(get_services)):
    return _saved(services, MemoryRecord(**payload.model_dump()))


@router.get("", response_model=MemoryListResponse, summary="List memories")
def list_memories(page: Page = Depends(), services: Services = Depends(get_services)):
    items = services.repos.memories.list(limit=page.limit, offset=page.offset, direction=page.direction)
    return MemoryListResponse(
        total=services.repos.memories.count(),
        items=[MemoryOut.model_validate(m) for m in items],
    )


@router.get("/{memory_id}", response_model=MemoryOut, summary="Retrieve a memory by id")
def get_memory(memory_id: str, services: Services = Depends(get_services)):
    memory = services.repos.memories.get_by_id(memory_id)
    if memory is None:
        raise EntityNotFoundError("memory", memory_id)
    return MemoryOut.model_validate(memory)


@router.put("/{memory_id}", response_model=MemorySaveResponse, summary="Replace a memory")
def update_memory(memory_id: str, payload: MemoryIn, services: Services = Depends(get_services)):
    if not services.repos.memories.exists(memory_id):
        raise EntityNotFoundError("memory", memory_id)
    return _saved(services, MemoryRecord(id=memory_id, **payload.model_dump()))


@router.delete("/{memory_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a memory")
def delete_memory(memory_id: str, services: Services = Depends(get_services)):
    if not services.repos.memories.delete(memory_id):
        raise EntityNotFoundError("memory", memory_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
