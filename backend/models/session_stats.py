from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from backend.models.base import Base, TimestampMixin


class SessionStatsRecord(Base, TimestampMixin):
    """Aggregate correct/incorrect counters for a session key."""

    __tablename__ = "session_stats"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    correct: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    incorrect: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
