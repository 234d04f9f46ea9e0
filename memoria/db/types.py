"""
Column types shared by the stores.

SQLite has no timezone-aware timestamp: DateTime(timezone=True) drops the
offset and keeps the wall-clock time. UTCDateTime stores every value as UTC
and hands it back with tzinfo=UTC, so ordering by a timestamp column is
correct across offsets. Naive values are taken to be UTC already.
"""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, TypeDecorator


class UTCDateTime(TypeDecorator):
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
