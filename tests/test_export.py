"""Tests for the backup document codec."""

import json
from datetime import datetime, timedelta

import pytest

from backend.errors import ExportFormatError
from backend.export import dumps_document, export_document, export_filename, import_document
from backend.srs.cards import Card, SessionStats

NOW = datetime(2024, 5, 1, 12, 0, 0)


def _cards() -> list[Card]:
    return [
        Card(id="1", question="Q1", answer="A1", next_review=NOW),
        Card(
            id="2",
            question="Q2",
            answer="A2",
            difficulty=2.3,
            incorrect_count=1,
            last_reviewed=NOW,
            next_review=NOW + timedelta(days=1),
        ),
    ]


class TestExport:
    def test_document_shape(self) -> None:
        doc = export_document(_cards(), SessionStats(0, 1, 1), {"a": 1}, now=NOW)
        assert set(doc) == {"cards", "stats", "spacedRepetitionMeta", "exportTimestamp"}
        assert doc["stats"] == {"correct": 0, "incorrect": 1, "total": 1}
        assert doc["cards"][1]["incorrectCount"] == 1
        assert doc["exportTimestamp"] == "2024-05-01T12:00:00"

    def test_round_trip(self) -> None:
        stats = SessionStats(correct=3, incorrect=1, total=4)
        text = dumps_document(export_document(_cards(), stats, {"a": 1}, now=NOW))
        cards, restored_stats, meta = import_document(json.loads(text))
        assert cards == _cards()
        assert restored_stats == stats
        assert meta == {"a": 1}

    def test_import_accepts_json_text(self) -> None:
        text = dumps_document(export_document(_cards(), SessionStats(), now=NOW))
        cards, _, _ = import_document(text)
        assert len(cards) == 2

    def test_export_timestamp_ignored(self) -> None:
        doc = export_document(_cards(), SessionStats(), now=NOW)
        doc["exportTimestamp"] = "2030-01-01T00:00:00"
        cards, _, _ = import_document(doc)
        assert cards == _cards()

    def test_filename_has_iso_date(self) -> None:
        assert export_filename(NOW) == "echolearn-backup-2024-05-01.json"

    def test_dumps_is_indented(self) -> None:
        text = dumps_document(export_document([], SessionStats(), now=NOW))
        assert '\n  "cards"' in text


class TestImportValidation:
    def test_rejects_bad_stats_total(self) -> None:
        doc = export_document(_cards(), SessionStats(), now=NOW)
        doc["stats"] = {"correct": 1, "incorrect": 1, "total": 5}
        with pytest.raises(ExportFormatError):
            import_document(doc)

    def test_rejects_missing_cards(self) -> None:
        with pytest.raises(ExportFormatError):
            import_document({"stats": {"correct": 0, "incorrect": 0, "total": 0}})

    def test_rejects_invalid_json(self) -> None:
        with pytest.raises(ExportFormatError):
            import_document("{not json")

    def test_rejects_empty_question(self) -> None:
        doc = export_document(_cards(), SessionStats(), now=NOW)
        doc["cards"][0]["question"] = ""
        with pytest.raises(ExportFormatError):
            import_document(doc)

    def test_clamps_difficulty(self) -> None:
        doc = export_document(_cards(), SessionStats(), now=NOW)
        doc["cards"][0]["difficulty"] = 9
        cards, _, _ = import_document(doc)
        assert cards[0].difficulty == 3.0

    def test_numeric_ids_and_missing_difficulty(self) -> None:
        doc = {
            "cards": [
                {
                    "id": 1714564800000,
                    "question": "Q",
                    "answer": "A",
                    "correctCount": 0,
                    "incorrectCount": 0,
                    "lastReviewed": None,
                    "nextReview": "2024-05-01T12:00:00",
                }
            ],
        }
        cards, stats, meta = import_document(doc)
        assert cards[0].id == "1714564800000"
        assert cards[0].difficulty == 2.0
        assert stats == SessionStats()
        assert meta == {}
