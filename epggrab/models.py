"""
SQLAlchemy ORM Models for the program guide

This module defines tunable channels, XMLTV guide channels, episodes and
broadcasts.
"""
from datetime import datetime, timezone
from sqlalchemy import JSON, Integer, String, Text, DateTime, Index, UniqueConstraint, ForeignKey
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models"""
    pass


class TunableChannel(Base):
    """A real channel that broadcasts are scheduled on"""
    __tablename__ = "channels"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(timezone.utc))

    def __repr__(self) -> str:
        return f"<TunableChannel(id={self.id}, name={self.name})>"


class GuideChannel(Base):
    """Channel as identified by an XMLTV document"""
    __tablename__ = "guide_channels"

    xmltv_id: Mapped[str] = mapped_column(String, primary_key=True)
    display_name: Mapped[str | None] = mapped_column(String, nullable=True)
    icon_url: Mapped[str | None] = mapped_column(String, nullable=True)
    channel_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("channels.id", ondelete="SET NULL"),
        nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(timezone.utc))

    channel: Mapped[TunableChannel | None] = relationship()

    def __repr__(self) -> str:
        return f"<GuideChannel(xmltv_id={self.xmltv_id}, display_name={self.display_name})>"


class Episode(Base):
    """Programme content, keyed by a digest of its description or title"""
    __tablename__ = "episodes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uri: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    title: Mapped[str | None] = mapped_column(String, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    genres: Mapped[list[str]] = mapped_column(JSON, default=list)
    season_number: Mapped[int] = mapped_column(Integer, default=0)
    season_count: Mapped[int] = mapped_column(Integer, default=0)
    episode_number: Mapped[int] = mapped_column(Integer, default=0)
    episode_count: Mapped[int] = mapped_column(Integer, default=0)
    part_number: Mapped[int] = mapped_column(Integer, default=0)
    part_count: Mapped[int] = mapped_column(Integer, default=0)
    onscreen: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(timezone.utc))

    def __repr__(self) -> str:
        return f"<Episode(id={self.id}, title={self.title}, uri={self.uri})>"


class Broadcast(Base):
    """A scheduled airing of an episode on a tunable channel"""
    __tablename__ = "broadcasts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    channel_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("channels.id", ondelete="CASCADE"),
        nullable=False
    )
    start: Mapped[int] = mapped_column(Integer, nullable=False)
    stop: Mapped[int] = mapped_column(Integer, nullable=False)
    episode_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("episodes.id", ondelete="SET NULL"),
        nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(timezone.utc))

    channel: Mapped[TunableChannel] = relationship()
    episode: Mapped[Episode | None] = relationship()

    # Constraints
    __table_args__ = (
        UniqueConstraint("channel_id", "start", "stop", name="uq_broadcast_channel_interval"),
        Index("idx_broadcasts_channel_start", "channel_id", "start"),
    )

    def __repr__(self) -> str:
        return f"<Broadcast(id={self.id}, channel={self.channel_id}, start={self.start}, stop={self.stop})>"
