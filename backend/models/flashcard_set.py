"""Persisted card set, one row per session key."""

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from backend.models.base import Base, TimestampMixin


class FlashcardSet(Base, TimestampMixin):
    """The ordered card list with its scheduling state, stored as JSON."""

    __tablename__ = "flashcard_sets"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    cards: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    spaced_repetition: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
