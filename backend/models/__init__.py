"""SQLAlchemy ORM models for the EchoLearn session store."""

from backend.models.base import Base
from backend.models.flashcard_set import FlashcardSet
from backend.models.session_stats import SessionStatsRecord

__all__ = ["Base", "FlashcardSet", "SessionStatsRecord"]
