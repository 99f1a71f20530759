"""Card and stats value types plus their JSON record form.

Records use the camelCase keys of the browser store so that backups written
by either side stay interchangeable.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from backend.config import utcnow

DEFAULT_DIFFICULTY = 2.0
MIN_DIFFICULTY = 1.0
MAX_DIFFICULTY = 3.0


def clamp_difficulty(value: float) -> float:
    """Clamp a difficulty into [1, 3]."""
    return max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, float(value)))


@dataclass
class Card:
    """One question/answer study item with its scheduling state."""

    id: str
    question: str
    answer: str
    difficulty: float = DEFAULT_DIFFICULTY
    correct_count: int = 0
    incorrect_count: int = 0
    last_reviewed: datetime | None = None
    next_review: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if not self.question or not self.answer:
            raise ValueError(f"Card {self.id} needs a question and an answer")
        if self.correct_count < 0 or self.incorrect_count < 0:
            raise ValueError(f"Card {self.id} has negative review counts")
        self.difficulty = clamp_difficulty(self.difficulty)

    def is_due(self, now: datetime) -> bool:
        return self.next_review <= now

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "question": self.question,
            "answer": self.answer,
            "difficulty": self.difficulty,
            "correctCount": self.correct_count,
            "incorrectCount": self.incorrect_count,
            "lastReviewed": self.last_reviewed.isoformat() if self.last_reviewed else None,
            "nextReview": self.next_review.isoformat(),
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Card:
        """Build a card from its stored form.

        Records saved before a difficulty existed get the neutral default.
        """
        last_reviewed = record.get("lastReviewed")
        next_review = record.get("nextReview")
        difficulty = record.get("difficulty")
        return cls(
            id=str(record["id"]),
            question=record["question"],
            answer=record["answer"],
            difficulty=DEFAULT_DIFFICULTY if difficulty is None else difficulty,
            correct_count=int(record.get("correctCount", 0)),
            incorrect_count=int(record.get("incorrectCount", 0)),
            last_reviewed=datetime.fromisoformat(last_reviewed) if last_reviewed else None,
            next_review=datetime.fromisoformat(next_review) if next_review else utcnow(),
        )


@dataclass(frozen=True)
class SessionStats:
    """Aggregate answer counters. ``total`` always equals correct + incorrect."""

    correct: int = 0
    incorrect: int = 0
    total: int = 0

    def __post_init__(self) -> None:
        if self.correct < 0 or self.incorrect < 0:
            raise ValueError("Stats counters must be non-negative")
        if self.total != self.correct + self.incorrect:
            raise ValueError(
                f"Stats total {self.total} != correct {self.correct} + incorrect {self.incorrect}"
            )

    def record(self, correct: bool) -> SessionStats:
        """Return new stats with one more answer counted."""
        return SessionStats(
            correct=self.correct + 1 if correct else self.correct,
            incorrect=self.incorrect if correct else self.incorrect + 1,
            total=self.total + 1,
        )

    @property
    def accuracy(self) -> float | None:
        return self.correct / self.total if self.total else None

    def to_record(self) -> dict[str, int]:
        return {"correct": self.correct, "incorrect": self.incorrect, "total": self.total}


def new_card_set(pairs: Iterable[Mapping[str, str]], now: datetime | None = None) -> list[Card]:
    """Turn generated question/answer pairs into immediately-due cards.

    Ids are the creation time in epoch milliseconds plus the position, so a
    regenerated batch never reuses the ids of the one it replaces.
    """
    now = now or utcnow()
    stamp = int(now.timestamp() * 1000)
    return [
        Card(
            id=f"{stamp}-{index}",
            question=pair["question"].strip(),
            answer=pair["answer"].strip(),
            next_review=now,
        )
        for index, pair in enumerate(pairs)
    ]


def due_cards(cards: Iterable[Card], now: datetime | None = None) -> list[Card]:
    """Return the cards due at ``now``, most overdue first."""
    now = now or utcnow()
    return sorted((c for c in cards if c.is_due(now)), key=lambda c: c.next_review)
