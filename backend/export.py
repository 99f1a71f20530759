"""Backup document codec.

An export is a single JSON document::

    {
      "cards": [...],
      "stats": {"correct": 1, "incorrect": 0, "total": 1},
      "spacedRepetitionMeta": {...},
      "exportTimestamp": "2024-05-01T12:00:00"
    }

``exportTimestamp`` is informational and ignored on import.
"""

import json
import logging
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from backend.config import utcnow
from backend.errors import ExportFormatError
from backend.srs.cards import Card, SessionStats, clamp_difficulty

logger = logging.getLogger(__name__)


class CardDocument(BaseModel):
    id: str
    question: str = Field(min_length=1)
    answer: str = Field(min_length=1)
    difficulty: float = 2.0
    correctCount: int = Field(default=0, ge=0)
    incorrectCount: int = Field(default=0, ge=0)
    lastReviewed: datetime | None = None
    nextReview: datetime

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        # Browser exports used numeric ids
        return str(value) if isinstance(value, int) else value

    @field_validator("difficulty")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return clamp_difficulty(value)


class StatsDocument(BaseModel):
    correct: int = Field(default=0, ge=0)
    incorrect: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_total(self) -> "StatsDocument":
        if self.total != self.correct + self.incorrect:
            raise ValueError("total must equal correct + incorrect")
        return self


class ExportDocument(BaseModel):
    cards: list[CardDocument]
    stats: StatsDocument = Field(default_factory=StatsDocument)
    spacedRepetitionMeta: dict[str, Any] = Field(default_factory=dict)
    exportTimestamp: datetime | None = None


def export_document(
    cards: list[Card],
    stats: SessionStats,
    meta: dict[str, Any] | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Snapshot a session as a plain JSON-ready dict."""
    now = now or utcnow()
    return {
        "cards": [card.to_record() for card in cards],
        "stats": stats.to_record(),
        "spacedRepetitionMeta": dict(meta or {}),
        "exportTimestamp": now.isoformat(),
    }


def dumps_document(document: dict[str, Any]) -> str:
    return json.dumps(document, indent=2, ensure_ascii=False)


def export_filename(now: datetime | None = None) -> str:
    now = now or utcnow()
    return f"echolearn-backup-{now.date().isoformat()}.json"


def import_document(document: dict[str, Any] | str) -> tuple[list[Card], SessionStats, dict[str, Any]]:
    """Restore cards, stats and metadata from an export.

    Args:
        document: The parsed document, or its JSON text.

    Returns:
        Tuple of (cards, stats, spaced repetition metadata).

    Raises:
        ExportFormatError: If the document is not valid JSON or fails validation.
    """
    try:
        if isinstance(document, str):
            parsed = ExportDocument.model_validate_json(document)
        else:
            parsed = ExportDocument.model_validate(document)
    except ValidationError as e:
        logger.error("Rejected backup document: %d validation errors", e.error_count())
        raise ExportFormatError(str(e)) from e

    cards = [
        Card(
            id=entry.id,
            question=entry.question,
            answer=entry.answer,
            difficulty=entry.difficulty,
            correct_count=entry.correctCount,
            incorrect_count=entry.incorrectCount,
            last_reviewed=_naive(entry.lastReviewed),
            next_review=_naive(entry.nextReview),
        )
        for entry in parsed.cards
    ]
    stats = SessionStats(
        correct=parsed.stats.correct,
        incorrect=parsed.stats.incorrect,
        total=parsed.stats.total,
    )
    logger.info("Imported %d cards", len(cards))
    return cards, stats, parsed.spacedRepetitionMeta


def _naive(value: datetime | None) -> datetime | None:
    """Convert aware datetimes to naive UTC; naive ones pass through."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)
