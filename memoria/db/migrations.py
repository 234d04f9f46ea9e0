"""
Best-effort additive column migrations.

Tables are created with create-if-absent semantics, so a fresh database
already has every column. Older databases may predate some of them; each
step below adds one column through alembic's Operations API. A step that
fails because the column already exists is discarded, any other failure is
logged, and the next step runs regardless.
"""
from __future__ import annotations

import logging

import sqlalchemy as sa
from alembic.runtime.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import Engine
from sqlalchemy.exc import OperationalError, ProgrammingError

from memoria.db.base import Store

logger = logging.getLogger(__name__)


# (table, column name, column type) in application order.
ADDITIVE_COLUMNS: dict[Store, list[tuple[str, str, sa.types.TypeEngine]]] = {
    Store.food: [
        ("food_entries", "people", sa.Text()),
        ("food_entries", "place", sa.String(256)),
        ("food_entries", "mood_rating", sa.Integer()),
        ("food_entries", "mood_emotion", sa.String(64)),
        ("food_entries", "food_rating", sa.Integer()),
        ("food_entries", "is_restaurant", sa.Boolean()),
        ("food_entries", "restaurant_name", sa.String(256)),
    ],
    Store.people: [
        ("people", "deceased_date", sa.Date()),
    ],
}


def _is_duplicate_column(exc: Exception) -> bool:
    message = str(exc).lower()
    return "duplicate column" in message or "already exists" in message


def apply_additive_migrations(engine: Engine, store: Store) -> int:
    """Run every additive step for `store`. Returns the number of columns added."""
    added = 0
    for table, name, type_ in ADDITIVE_COLUMNS.get(store, []):
        try:
            with engine.begin() as conn:
                ops = Operations(MigrationContext.configure(conn))
                ops.add_column(table, sa.Column(name, type_, nullable=True))
            added += 1
            logger.info("Migration completed: %s.%s added", table, name)
        except (OperationalError, ProgrammingError) as exc:
            if _is_duplicate_column(exc):
                logger.debug("Migration note: %s.%s already exists", table, name)
            else:
                logger.warning("Migration step %s.%s failed: %s", table, name, exc)
    return added
