"""
Service bundle wired from one StorageContext.

Routers take `Services` through the `get_services` dependency; tests swap
the underlying StorageContext by overriding `get_storage`.
"""
from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends

from memoria.db.base import StorageContext, get_storage
from memoria.repositories.registry import RepositoryRegistry
from memoria.services.graph import GraphStore
from memoria.services.history import HistoryExpander
from memoria.services.merger import PlaceMerger
from memoria.services.resolver import ReferenceResolver


@dataclass
class Services:
    storage: StorageContext
    repos: RepositoryRegistry
    graph: GraphStore
    resolver: ReferenceResolver
    history: HistoryExpander
    merger: PlaceMerger

    @classmethod
    def build(cls, storage: StorageContext) -> "Services":
        repos = RepositoryRegistry(storage)
        graph = GraphStore(storage)
        return cls(
            storage=storage,
            repos=repos,
            graph=graph,
            resolver=ReferenceResolver(repos, graph),
            history=HistoryExpander(repos, graph),
            merger=PlaceMerger(repos, graph),
        )


def get_services(storage: StorageContext = Depends(get_storage)) -> Services:
    return Services.build(storage)
