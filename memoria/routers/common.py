"""
Helpers shared by the entity routers.
"""
from __future__ import annotations

from typing import Any

from fastapi import Query

from memoria.core.config import settings
from memoria.repositories.base import SortDirection
from memoria.schemas.common import LinkOut
from memoria.services.resolver import SaveResult


class Page:
    """Listing query parameters: limit / offset / sort direction."""

    def __init__(
        self,
        limit: int = Query(
            default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Page size."
        ),
        offset: int = Query(default=0, ge=0, description="Skip N items."),
        direction: SortDirection = Query(
            default=SortDirection.desc, description="Sort by the primary date field, asc or desc."
        ),
    ):
        self.limit = limit
        self.offset = offset
        self.direction = direction


def save_summary(result: SaveResult) -> dict[str, Any]:
    return {
        "kind": result.kind.value,
        "entity_id": result.entity_id,
        "created": result.created,
        "links": [LinkOut.model_validate(link) for link in result.links],
        "errors": list(result.errors),
    }
