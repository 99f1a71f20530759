"""Session state value object and its pure transitions.

Each transition takes a ``SessionState`` and returns a new one; nothing here
touches storage, speech or timers. ``StudySession`` layers those effects on
top.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any

from backend.errors import InvalidTransitionError
from backend.srs.cards import Card, SessionStats
from backend.srs.policy import OutcomeResult, apply_outcome


class View(str, Enum):
    INPUT = "input"
    STUDY = "study"
    SETTINGS = "settings"


@dataclass(frozen=True)
class SessionState:
    """Everything the study screen needs to know at one moment."""

    view: View = View.INPUT
    cards: tuple[Card, ...] = ()
    current_index: int = 0
    answer_revealed: bool = False
    stats: SessionStats = field(default_factory=SessionStats)
    spaced_repetition: dict[str, Any] = field(default_factory=dict)

    @property
    def has_cards(self) -> bool:
        return bool(self.cards)

    @property
    def current_card(self) -> Card | None:
        if not self.cards:
            return None
        return self.cards[self.current_index]

    @property
    def is_last(self) -> bool:
        return self.current_index >= len(self.cards) - 1

    @property
    def position(self) -> int:
        """1-based position of the current card, 0 when there are no cards."""
        return self.current_index + 1 if self.cards else 0

    @property
    def progress_percent(self) -> float:
        if not self.cards:
            return 0.0
        return round(self.position / len(self.cards) * 100, 1)


def _clamp_index(index: int, cards: tuple[Card, ...]) -> int:
    if not cards:
        return 0
    return max(0, min(len(cards) - 1, index))


def restore(
    cards: Iterable[Card],
    stats: SessionStats,
    spaced_repetition: dict[str, Any] | None = None,
    view: View = View.INPUT,
) -> SessionState:
    """Build a state from persisted or imported data, positioned on the first card."""
    return SessionState(
        view=view,
        cards=tuple(cards),
        stats=stats,
        spaced_repetition=dict(spaced_repetition or {}),
    )


def generate(state: SessionState, cards: Iterable[Card]) -> SessionState:
    """Replace the card set and start studying it from the top."""
    return replace(
        state,
        view=View.STUDY,
        cards=tuple(cards),
        current_index=0,
        answer_revealed=False,
        spaced_repetition={},
    )


def reveal(state: SessionState) -> SessionState:
    if not state.cards or state.answer_revealed:
        return state
    return replace(state, answer_revealed=True)


def hide_answer(state: SessionState) -> SessionState:
    if not state.answer_revealed:
        return state
    return replace(state, answer_revealed=False)


def advance(state: SessionState) -> tuple[SessionState, bool]:
    """Move to the next card.

    Returns:
        Tuple of (new state, completed). ``completed`` is True when the
        current card is already the last one; the index does not change.
    """
    if not state.cards:
        return state, False
    if state.is_last:
        return state, True
    return replace(state, current_index=state.current_index + 1, answer_revealed=False), False


def go_back(state: SessionState) -> SessionState:
    if not state.cards or state.current_index == 0:
        return state
    return replace(state, current_index=state.current_index - 1, answer_revealed=False)


def mark(state: SessionState, correct: bool, now: datetime) -> tuple[SessionState, OutcomeResult]:
    """Score the current card and count the answer in the stats.

    Raises:
        InvalidTransitionError: If there is no card or its answer is hidden.
    """
    card = state.current_card
    if card is None:
        raise InvalidTransitionError("No card to mark")
    if not state.answer_revealed:
        raise InvalidTransitionError("Reveal the answer before marking it")

    result = apply_outcome(card, correct, now)
    cards = list(state.cards)
    cards[state.current_index] = result.card
    new_state = replace(state, cards=tuple(cards), stats=state.stats.record(correct))
    return new_state, result


def switch_view(state: SessionState, view: View) -> SessionState:
    return replace(state, view=View(view), current_index=_clamp_index(state.current_index, state.cards))


def clear(state: SessionState) -> SessionState:
    """Drop every card and zero the stats, keeping the current view."""
    return SessionState(view=state.view)
