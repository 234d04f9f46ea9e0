"""
Maintenance router.

POST /maintenance/merge-places  — Merge places that share a normalized name
GET  /maintenance/stats         — Row counts per store
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from memoria.schemas.graph import MergeReportResponse, StatsResponse
from memoria.services.context import Services, get_services
from memoria.services.stats import storage_stats

router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@router.post(
    "/merge-places",
    response_model=MergeReportResponse,
    summary="Merge duplicate places",
)
def merge_places(services: Services = Depends(get_services)):
    """
    Groups non-merged places by trimmed, case-insensitive name. In each group
    the oldest place survives; every relationship of the others is moved onto
    it and the others are marked `[MERGED into <id>]` in their notes.

    Safe to re-run: a second run finds nothing to merge.
    """
    report = services.merger.merge_duplicate_places()
    return MergeReportResponse.model_validate(report)


@router.get("/stats", response_model=StatsResponse, summary="Row counts per store")
def stats(services: Services = Depends(get_services)):
    counts = storage_stats(services.storage)
    return StatsResponse(counts=counts, total=sum(counts.values()))
