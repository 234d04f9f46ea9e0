"""
Mood entries and their cascade-owned children.

Tags, activities and metadata are multi-valued children of a mood row;
deleting the mood deletes them (FK ON DELETE CASCADE).
"""
from datetime import datetime
from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from memoria.db.base import MoodsBase
from memoria.db.types import UTCDateTime


class Mood(MoodsBase):
    __tablename__ = "mood_entries"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    entry_time: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    emotion: Mapped[str] = mapped_column(String(64), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str | None] = mapped_column(String(256), nullable=True)
    social_context: Mapped[str | None] = mapped_column(String(128), nullable=True)
    weather: Mapped[str | None] = mapped_column(String(128), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    tags: Mapped[list["MoodTag"]] = relationship(
        cascade="all", passive_deletes=True, lazy="selectin",
    )
    activities: Mapped[list["MoodActivity"]] = relationship(
        cascade="all", passive_deletes=True, lazy="selectin",
    )
    extras: Mapped[list["MoodMetadata"]] = relationship(
        cascade="all", passive_deletes=True, lazy="selectin",
    )


class MoodTag(MoodsBase):
    __tablename__ = "mood_tags"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    mood_id: Mapped[str] = mapped_column(
        ForeignKey("mood_entries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tag_name: Mapped[str] = mapped_column(String(128), nullable=False)


class MoodActivity(MoodsBase):
    """At most one activity per category per mood."""

    __tablename__ = "mood_activities"
    __table_args__ = (
        UniqueConstraint("mood_id", "activity_type", name="uq_mood_activity_type"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    mood_id: Mapped[str] = mapped_column(
        ForeignKey("mood_entries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    activity_type: Mapped[str] = mapped_column(String(64), nullable=False)
    activity_name: Mapped[str] = mapped_column(String(128), nullable=False)


class MoodMetadata(MoodsBase):
    """
    Opaque weather / location payloads.

    metadata_type:  "weather" | "location"
    metadata_value: JSON-encoded payload stored as Text.
    """

    __tablename__ = "mood_entry_metadata"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    mood_id: Mapped[str] = mapped_column(
        ForeignKey("mood_entries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    metadata_type: Mapped[str] = mapped_column(String(32), nullable=False)
    metadata_value: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
