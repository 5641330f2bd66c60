"""SQLAlchemy ORM models backing the media library."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .database import Base


class User(Base):
    """A library user allowed to browse views and trigger scans."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(120))
    is_administrator: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )


class MediaItem(Base):
    """Any node of the library hierarchy.

    ``kind`` is one of ``collection``, ``series``, ``season`` or ``episode``.
    Coverage columns hold 0 (none), 1 (partial) or 2 (full) and stay ``NULL``
    until a scan assigns them.
    """

    __tablename__ = "media_items"
    __table_args__ = (Index("ix_media_items_parent_kind", "parent_id", "kind"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    parent_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("media_items.id", ondelete="CASCADE"), nullable=True
    )
    kind: Mapped[str] = mapped_column(String(16))
    name: Mapped[str] = mapped_column(String(255))
    collection_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    is_hidden: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    sort_index: Mapped[int] = mapped_column(Integer, default=0)
    dubbed_status: Mapped[int | None] = mapped_column(Integer, nullable=True)
    subbed_status: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    streams: Mapped[list["MediaStream"]] = relationship(
        back_populates="item", cascade="all, delete-orphan"
    )


class MediaStream(Base):
    """An audio, subtitle or video stream attached to an episode."""

    __tablename__ = "media_streams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    item_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("media_items.id", ondelete="CASCADE"), index=True
    )
    stream_type: Mapped[str] = mapped_column(String(16))
    language: Mapped[str | None] = mapped_column(String(32), nullable=True)

    item: Mapped[MediaItem] = relationship(back_populates="streams")
