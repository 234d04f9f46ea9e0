from datetime import datetime
from sqlalchemy import Float, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from memoria.db.base import PlacesBase
from memoria.db.types import UTCDateTime


class Place(PlacesBase):
    """
    A named location. Merged duplicates are never deleted: their notes carry
    a "[MERGED into <id>]" marker so old references still resolve.
    """

    __tablename__ = "places"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    address: Mapped[str | None] = mapped_column(String(512), nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    mood_links: Mapped[list["PlaceMood"]] = relationship(
        cascade="all", passive_deletes=True, lazy="selectin",
    )


class PlaceMood(PlacesBase):
    """Place → mood link. mood_id points into the moods store, so no FK."""

    __tablename__ = "place_moods"
    __table_args__ = (
        UniqueConstraint("place_id", "mood_id", name="uq_place_mood"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    place_id: Mapped[str] = mapped_column(
        ForeignKey("places.id", ondelete="CASCADE"), nullable=False, index=True
    )
    mood_id: Mapped[str] = mapped_column(String(64), nullable=False)
