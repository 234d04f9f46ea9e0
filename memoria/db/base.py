"""
Storage handles.

Every entity kind lives in its own independently-schemaed database, plus one
database for the relationship graph: six handles in total. A StorageContext
owns them; each handle is opened lazily on first use, has its schema created
exactly once, and is cached for the lifetime of the context.

Each store has its own DeclarativeBase (and therefore its own MetaData), so a
store's create_all never touches another store's tables.
"""
from __future__ import annotations

import enum
import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import Engine, MetaData, create_engine, event, func, select
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from memoria.core.config import Settings

logger = logging.getLogger(__name__)


class Store(str, enum.Enum):
    moods = "moods"
    places = "places"
    people = "people"
    food = "food"
    memories = "memories"
    relationships = "relationships"


class MoodsBase(DeclarativeBase):
    pass


class PlacesBase(DeclarativeBase):
    pass


class PeopleBase(DeclarativeBase):
    pass


class FoodBase(DeclarativeBase):
    pass


class MemoriesBase(DeclarativeBase):
    pass


class RelationshipsBase(DeclarativeBase):
    pass


_BASES: dict[Store, type[DeclarativeBase]] = {
    Store.moods: MoodsBase,
    Store.places: PlacesBase,
    Store.people: PeopleBase,
    Store.food: FoodBase,
    Store.memories: MemoriesBase,
    Store.relationships: RelationshipsBase,
}


def metadata_for(store: Store) -> MetaData:
    return _BASES[store].metadata


def _install_sqlite_hooks(engine: Engine) -> None:
    """
    Take transaction control away from pysqlite so SAVEPOINTs behave, and
    turn on foreign keys so cascade-owned child rows go with their parent.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


class StorageContext:
    """
    Process-wide owner of the six storage handles.

    Construct once at startup and pass it to repositories and services.
    `engine()` is idempotent: the second call for a store returns the cached
    handle, it never re-creates it.
    """

    def __init__(self, config: Settings):
        self._config = config
        self._engines: dict[Store, Engine] = {}
        self._sessionmakers: dict[Store, sessionmaker[Session]] = {}
        self._lock = threading.Lock()

    @property
    def config(self) -> Settings:
        return self._config

    def engine(self, store: Store) -> Engine:
        cached = self._engines.get(store)
        if cached is not None:
            return cached
        with self._lock:
            if store not in self._engines:
                engine = self._open(store)
                self._sessionmakers[store] = sessionmaker(
                    bind=engine,
                    autoflush=False,
                    expire_on_commit=False,
                )
                # Published last: a cached engine always has its sessionmaker.
                self._engines[store] = engine
            return self._engines[store]

    def _open(self, store: Store) -> Engine:
        url = make_url(self._config.database_url(store.value))
        kwargs: dict = {"echo": self._config.SQL_ECHO}
        if url.get_backend_name() == "sqlite":
            kwargs["connect_args"] = {"check_same_thread": False}
            if not url.database or url.database == ":memory:":
                kwargs["poolclass"] = StaticPool
            else:
                Path(url.database).parent.mkdir(parents=True, exist_ok=True)

        logger.info("Opening %s store at %s", store.value, url.render_as_string(hide_password=True))
        engine = create_engine(url, **kwargs)
        if url.get_backend_name() == "sqlite":
            _install_sqlite_hooks(engine)

        # Imported here: the models import this module for their bases.
        import memoria.models  # noqa: F401
        from memoria.db.migrations import apply_additive_migrations

        metadata_for(store).create_all(engine, checkfirst=True)
        apply_additive_migrations(engine, store)
        logger.info("%s store initialized", store.value)
        return engine

    @contextmanager
    def session(self, store: Store) -> Iterator[Session]:
        self.engine(store)
        db = self._sessionmakers[store]()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def init_all(self) -> None:
        for store in Store:
            self.engine(store)

    def is_open(self, store: Store) -> bool:
        return store in self._engines

    def count_rows(self, store: Store, model) -> int:
        with self.session(store) as db:
            return db.scalar(select(func.count()).select_from(model)) or 0

    def dispose(self) -> None:
        with self._lock:
            for engine in self._engines.values():
                engine.dispose()
            self._engines.clear()
            self._sessionmakers.clear()


def get_storage(request: Request) -> StorageContext:
    """FastAPI dependency: the StorageContext created at application startup."""
    storage: Optional[StorageContext] = getattr(request.app.state, "storage", None)
    if storage is None:
        raise RuntimeError("StorageContext not initialized; application startup did not run.")
    return storage
