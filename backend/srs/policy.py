"""Difficulty and interval policy applied after every answer.

A bounded-difficulty, interval-table scheme:

- Difficulty (D): a value in [1, 3]; lower means better mastered.
  A correct answer lowers it by 0.1, a wrong one raises it by 0.3, so
  missed items climb back into heavy rotation three times faster than
  known items leave it.
- Base interval: looked up from ``floor(D)`` in ``INTERVAL_TABLE``, using the
  difficulty the card had when it was answered rather than the stepped
  value. A card at 2.0 answered correctly for the first time therefore gets
  3 * 2 = 6 days, where an after-step lookup (floor(1.9) = 1) would give 2.
- Final interval: a correct answer multiplies the base interval by
  ``correct_count + 1``; a wrong answer always schedules the card for
  tomorrow.
"""

import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from backend.srs.cards import MAX_DIFFICULTY, MIN_DIFFICULTY, Card, clamp_difficulty

CORRECT_DIFFICULTY_STEP = 0.1
INCORRECT_DIFFICULTY_STEP = 0.3

# floor(difficulty) -> base interval in days
INTERVAL_TABLE = {1: 1, 2: 3, 3: 7}
DEFAULT_INTERVAL_DAYS = 1
RETRY_INTERVAL_DAYS = 1


@dataclass
class OutcomeResult:
    """The card after an answer, with the interval that was applied."""

    card: Card
    interval_days: int


def next_difficulty(difficulty: float, correct: bool) -> float:
    """Move difficulty one step and keep it inside [1, 3]."""
    if correct:
        new_d = max(MIN_DIFFICULTY, difficulty - CORRECT_DIFFICULTY_STEP)
    else:
        new_d = min(MAX_DIFFICULTY, difficulty + INCORRECT_DIFFICULTY_STEP)
    # Float steps drift (2.0 - 0.1 == 1.9000000000000001)
    return clamp_difficulty(round(new_d, 10))


def base_interval(difficulty: float) -> int:
    """Look up the base interval in days for a difficulty.

    Unknown or non-finite difficulties fall back to one day.
    """
    if not math.isfinite(difficulty):
        return DEFAULT_INTERVAL_DAYS
    return INTERVAL_TABLE.get(math.floor(difficulty), DEFAULT_INTERVAL_DAYS)


def interval_days(difficulty: float, correct: bool, correct_count: int) -> int:
    """Return the days until the next review.

    Args:
        difficulty: The difficulty the card had when it was answered.
        correct: Whether the answer was correct.
        correct_count: Correct answers including this one.
    """
    if not correct:
        return RETRY_INTERVAL_DAYS
    return base_interval(difficulty) * (correct_count + 1)


def apply_outcome(card: Card, correct: bool, now: datetime) -> OutcomeResult:
    """Apply one answer to a card and compute its next review.

    Pure: the input card is left untouched and nothing is persisted.
    """
    correct_count = card.correct_count + 1 if correct else card.correct_count
    incorrect_count = card.incorrect_count if correct else card.incorrect_count + 1
    difficulty = next_difficulty(card.difficulty, correct)
    days = interval_days(card.difficulty, correct, correct_count)

    updated = replace(
        card,
        difficulty=difficulty,
        correct_count=correct_count,
        incorrect_count=incorrect_count,
        last_reviewed=now,
        next_review=now + timedelta(days=days),
    )
    return OutcomeResult(card=updated, interval_days=days)
