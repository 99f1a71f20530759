"""Tests for the scheduling policy and card model."""

from datetime import datetime, timedelta

import pytest

from backend.srs.cards import Card, SessionStats, due_cards, new_card_set
from backend.srs.policy import apply_outcome, base_interval, interval_days, next_difficulty

NOW = datetime(2024, 5, 1, 12, 0, 0)


def _card(difficulty: float = 2.0, **kwargs) -> Card:
    return Card(id="c1", question="A?", answer="1", difficulty=difficulty, next_review=NOW, **kwargs)


class TestApplyOutcome:
    def test_correct_scenario(self) -> None:
        result = apply_outcome(_card(2.0), correct=True, now=NOW)
        card = result.card
        assert card.correct_count == 1
        assert card.incorrect_count == 0
        assert card.difficulty == pytest.approx(1.9)
        assert result.interval_days == 6
        assert card.next_review == NOW + timedelta(days=6)
        assert card.last_reviewed == NOW

    def test_incorrect_scenario(self) -> None:
        result = apply_outcome(_card(2.0), correct=False, now=NOW)
        card = result.card
        assert card.incorrect_count == 1
        assert card.correct_count == 0
        assert card.difficulty == pytest.approx(2.3)
        assert card.next_review == NOW + timedelta(days=1)

    def test_input_card_untouched(self) -> None:
        card = _card(2.0)
        apply_outcome(card, correct=True, now=NOW)
        assert card.difficulty == 2.0
        assert card.correct_count == 0
        assert card.last_reviewed is None

    @pytest.mark.parametrize("correct", [True, False])
    def test_exactly_one_counter_moves(self, correct: bool) -> None:
        card = _card(2.5, correct_count=3, incorrect_count=2)
        updated = apply_outcome(card, correct=correct, now=NOW).card
        deltas = (updated.correct_count - 3, updated.incorrect_count - 2)
        assert deltas == ((1, 0) if correct else (0, 1))

    @pytest.mark.parametrize("difficulty", [1.0, 1.4, 2.0, 2.7, 3.0])
    def test_incorrect_always_tomorrow(self, difficulty: float) -> None:
        card = _card(difficulty, correct_count=7)
        updated = apply_outcome(card, correct=False, now=NOW).card
        assert updated.next_review == NOW + timedelta(days=1)

    def test_repeated_correct_is_non_increasing_and_floored(self) -> None:
        card = _card(3.0)
        previous = card.difficulty
        for _ in range(30):
            card = apply_outcome(card, correct=True, now=NOW).card
            assert card.difficulty <= previous
            assert card.difficulty >= 1.0
            previous = card.difficulty
        assert card.difficulty == 1.0

    def test_repeated_incorrect_is_non_decreasing_and_capped(self) -> None:
        card = _card(1.0)
        previous = card.difficulty
        for _ in range(30):
            card = apply_outcome(card, correct=False, now=NOW).card
            assert card.difficulty >= previous
            assert card.difficulty <= 3.0
            previous = card.difficulty
        assert card.difficulty == 3.0

    def test_interval_grows_with_streak(self) -> None:
        card = _card(1.0)
        intervals = []
        for _ in range(3):
            result = apply_outcome(card, correct=True, now=NOW)
            intervals.append(result.interval_days)
            card = result.card
        assert intervals == [2, 3, 4]


class TestIntervals:
    def test_table(self) -> None:
        assert base_interval(1.0) == 1
        assert base_interval(2.0) == 3
        assert base_interval(3.0) == 7

    def test_fractional_difficulty_uses_floor(self) -> None:
        assert base_interval(1.9) == 1
        assert base_interval(2.99) == 3

    def test_out_of_range_defaults_to_one_day(self) -> None:
        assert base_interval(0.5) == 1
        assert base_interval(4.2) == 1
        assert base_interval(float("nan")) == 1

    def test_incorrect_ignores_streak(self) -> None:
        assert interval_days(3.0, correct=False, correct_count=10) == 1

    def test_difficulty_steps(self) -> None:
        assert next_difficulty(2.0, True) == pytest.approx(1.9)
        assert next_difficulty(2.0, False) == pytest.approx(2.3)
        assert next_difficulty(1.05, True) == 1.0
        assert next_difficulty(2.9, False) == 3.0


class TestCardModel:
    def test_new_card_set_defaults(self) -> None:
        cards = new_card_set(
            [{"question": " Q1 ", "answer": "A1"}, {"question": "Q2", "answer": "A2"}],
            now=NOW,
        )
        assert [c.question for c in cards] == ["Q1", "Q2"]
        assert len({c.id for c in cards}) == 2
        for card in cards:
            assert card.difficulty == 2.0
            assert card.correct_count == card.incorrect_count == 0
            assert card.last_reviewed is None
            assert card.next_review == NOW

    def test_difficulty_clamped_on_creation(self) -> None:
        assert _card(7.0).difficulty == 3.0
        assert _card(-1.0).difficulty == 1.0

    def test_rejects_empty_text(self) -> None:
        with pytest.raises(ValueError):
            Card(id="x", question="", answer="a")

    def test_record_without_difficulty_gets_default(self) -> None:
        card = Card.from_record({"id": 17, "question": "Q", "answer": "A", "nextReview": None})
        assert card.id == "17"
        assert card.difficulty == 2.0

    def test_record_round_trip(self) -> None:
        card = apply_outcome(_card(2.0), correct=True, now=NOW).card
        assert Card.from_record(card.to_record()) == card

    def test_due_cards(self) -> None:
        early = Card(id="a", question="Q", answer="A", next_review=NOW - timedelta(days=2))
        later = Card(id="b", question="Q", answer="A", next_review=NOW - timedelta(hours=1))
        future = Card(id="c", question="Q", answer="A", next_review=NOW + timedelta(days=1))
        assert due_cards([later, future, early], NOW) == [early, later]


class TestSessionStats:
    def test_record(self) -> None:
        stats = SessionStats().record(True).record(False)
        assert stats == SessionStats(correct=1, incorrect=1, total=2)
        assert stats.accuracy == 0.5

    def test_total_invariant(self) -> None:
        with pytest.raises(ValueError):
            SessionStats(correct=1, incorrect=1, total=3)

    def test_empty_accuracy(self) -> None:
        assert SessionStats().accuracy is None
