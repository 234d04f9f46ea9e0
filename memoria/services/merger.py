"""
Duplicate place merger.

One run walks Scan -> Group -> MergeEach:

Scan       every non-tombstoned place, in insertion order
Group      bucket by normalized name; buckets with more than one member
MergeEach  the first member survives; for each other member, repoint every
           edge touching it onto the survivor, move its place_moods links,
           then tombstone it via the notes merge marker

Nothing here is wrapped in one transaction. Each edge rewrite and each
tombstone commits on its own, so an interrupted run leaves a mix of repointed
and untouched edges, all of which still resolve. A failed edge rewrite is
logged and the loop moves on; a duplicate whose move or tombstone fails stays
active and is listed in its group's failed_ids. Re-running finishes the job.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from memoria.core.errors import MemoriaException
from memoria.models.kinds import EntityKind
from memoria.repositories.records import PlaceRecord, normalize_name
from memoria.repositories.registry import RepositoryRegistry
from memoria.services.graph import GraphStore

logger = logging.getLogger(__name__)


@dataclass
class MergeGroup:
    name: str
    survivor_id: str
    merged_ids: list[str] = field(default_factory=list)
    failed_ids: list[str] = field(default_factory=list)
    edges_repointed: int = 0


@dataclass
class MergeReport:
    merged: int = 0
    groups: list[MergeGroup] = field(default_factory=list)


def group_duplicates(places: list[PlaceRecord]) -> list[list[PlaceRecord]]:
    """Buckets of places sharing a normalized name, first-seen order kept."""
    buckets: dict[str, list[PlaceRecord]] = {}
    for place in places:
        key = normalize_name(place.name)
        if key:
            buckets.setdefault(key, []).append(place)
    return [members for members in buckets.values() if len(members) > 1]


class PlaceMerger:
    def __init__(self, repos: RepositoryRegistry, graph: GraphStore):
        self.repos = repos
        self.graph = graph

    def _repoint_edges(self, duplicate: PlaceRecord, survivor: PlaceRecord) -> int:
        repointed = 0
        for edge in self.graph.edges_touching(EntityKind.place, duplicate.id):
            try:
                if self.graph.repoint(edge, EntityKind.place, duplicate.id, survivor.id):
                    repointed += 1
            except MemoriaException as exc:
                logger.warning(
                    "Could not repoint edge %s from place %s to %s: %s",
                    edge.id, duplicate.id, survivor.id, exc.message,
                )
        return repointed

    def _merge_one(self, duplicate: PlaceRecord, survivor: PlaceRecord, group: MergeGroup) -> bool:
        """Merge one duplicate into the survivor; False if it was left untombstoned."""
        try:
            group.edges_repointed += self._repoint_edges(duplicate, survivor)
            self.repos.places.move_place_moods(duplicate.id, survivor.id)
            self.repos.places.tombstone(duplicate.id, survivor.id)
        except MemoriaException as exc:
            logger.warning("Could not merge place %s into %s: %s", duplicate.id, survivor.id, exc.message)
            group.failed_ids.append(duplicate.id)
            return False
        return True

    def merge_duplicate_places(self) -> MergeReport:
        report = MergeReport()
        for members in group_duplicates(self.repos.places.list_active()):
            survivor, duplicates = members[0], members[1:]
            group = MergeGroup(name=survivor.name, survivor_id=survivor.id)
            for duplicate in duplicates:
                if not self._merge_one(duplicate, survivor, group):
                    continue
                group.merged_ids.append(duplicate.id)
                report.merged += 1
                logger.info(
                    "Merged place %s (%r) into %s (%r)",
                    duplicate.id, duplicate.name, survivor.id, survivor.name,
                )
            report.groups.append(group)

        logger.info("Place merge finished: %d duplicates in %d groups", report.merged, len(report.groups))
        return report
