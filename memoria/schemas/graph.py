"""
Relationship read-side and maintenance schemas.

GET  /{kind}/{id}/history        → HistoryResponse
GET  /{kind}/{id}/details        → EntityDetailsResponse
POST /maintenance/merge-places   → MergeReportResponse
GET  /maintenance/stats          → StatsResponse
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class HistoryItemOut(BaseModel):
    relationship: str = Field(description="Edge kind as stored, e.g. at_place.", examples=["at_place"])
    direction: str = Field(description='"outgoing" when the queried entity is the edge source.')
    entity_type: str
    entity_id: str
    entity_data: dict[str, Any]
    created_at: datetime


class HistoryResponse(BaseModel):
    kind: str
    entity_id: str
    total: int
    items: list[HistoryItemOut] = []
    grouped: Optional[dict[str, list[HistoryItemOut]]] = Field(
        default=None, description="Present when requested with group=true."
    )


class EntityDetailsResponse(BaseModel):
    kind: str
    entity: dict[str, Any]
    related: dict[str, list[HistoryItemOut]] = Field(
        default_factory=dict,
        description="History items keyed by entity type, one per edge (both directions), newest first.",
    )


class MergeGroupOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    survivor_id: str
    merged_ids: list[str]
    failed_ids: list[str] = Field(default_factory=list, description="Duplicates left active after a failed merge.")
    edges_repointed: int


class MergeReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    merged: int = Field(description="Number of duplicate places tombstoned by this run.")
    groups: list[MergeGroupOut] = []


class StatsResponse(BaseModel):
    counts: dict[str, int]
    total: int
