"""SQLAlchemy models for locally saved games."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base


def utc_now() -> datetime:
    """Return current UTC time (timezone-aware)."""
    return datetime.now(timezone.utc)


Base = declarative_base()


class SavedGame(Base):
    """A named save slot holding a serialized undo/redo history."""

    __tablename__ = "saved_games"

    slot = Column(String, primary_key=True)  # e.g. "default", "daily"
    game = Column(String, nullable=False)  # freecell|klondike
    history_json = Column(Text, nullable=False)
    moves = Column(Integer, default=0)
    won = Column(Boolean, default=False)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    __table_args__ = (Index("idx_saved_games_updated", "updated_at"),)
