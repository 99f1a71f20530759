"""Tests for CLI commands (non-interactive paths)."""

import argparse
import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import pytest_asyncio

from backend.database import engine
from backend.llm_client import LLMClient
from echolearn.__main__ import (
    cmd_clear,
    cmd_export,
    cmd_generate,
    cmd_import,
    cmd_stats,
    open_session,
    read_text_argument,
)

DOCUMENT = {
    "cards": [
        {
            "id": "1",
            "question": "Capital of France?",
            "answer": "Paris",
            "difficulty": 2.0,
            "correctCount": 0,
            "incorrectCount": 0,
            "lastReviewed": None,
            "nextReview": "2024-05-01T12:00:00",
        }
    ],
    "stats": {"correct": 2, "incorrect": 1, "total": 3},
    "spacedRepetitionMeta": {},
    "exportTimestamp": "2024-05-01T12:00:00",
}


@pytest_asyncio.fixture(autouse=True)
async def _dispose_engine():
    yield
    await engine.dispose()


@pytest.mark.asyncio
async def test_read_text_argument(tmp_path: Path) -> None:
    notes = tmp_path / "notes.txt"
    notes.write_text("Mitochondria are the powerhouse of the cell.", encoding="utf-8")
    assert read_text_argument(f"@{notes}") == "Mitochondria are the powerhouse of the cell."
    assert read_text_argument("plain text") == "plain text"


@pytest.mark.asyncio
async def test_open_session_starts_on_input_view() -> None:
    session = await open_session()
    assert session.state.view.value == "input"
    assert session.preferences.voice_enabled is False


@pytest.mark.asyncio
async def test_import_export_clear(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    backup = tmp_path / "in.json"
    backup.write_text(json.dumps(DOCUMENT), encoding="utf-8")
    await cmd_import(argparse.Namespace(path=str(backup)))
    assert "Imported 1 cards" in capsys.readouterr().out

    await cmd_stats(argparse.Namespace())
    out = capsys.readouterr().out
    assert "Total answers:" in out
    assert " 3" in out

    exported = tmp_path / "out.json"
    await cmd_export(argparse.Namespace(path=str(exported)))
    document = json.loads(exported.read_text(encoding="utf-8"))
    assert document["cards"][0]["question"] == "Capital of France?"
    assert document["stats"] == DOCUMENT["stats"]

    await cmd_clear(argparse.Namespace(yes=False))
    assert "--yes" in capsys.readouterr().out
    assert (await open_session()).state.has_cards

    await cmd_clear(argparse.Namespace(yes=True))
    assert not (await open_session()).state.has_cards


@pytest.mark.asyncio
async def test_generate_reports_cost(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    llm = MagicMock(spec=LLMClient)
    llm.create_message.return_value = json.dumps(
        [{"question": "Capital of France?", "answer": "Paris"}]
    )
    llm.get_cost_estimate.return_value = {
        "input_tokens": 1200,
        "output_tokens": 300,
        "estimated_cost_usd": 0.0081,
    }
    monkeypatch.setattr("echolearn.__main__.get_llm_client", lambda: llm)

    await cmd_generate(argparse.Namespace(text="France is a country in Europe."))
    out = capsys.readouterr().out
    assert "1. Capital of France?" in out
    assert "LLM cost estimate: $0.0081" in out
    assert "Input tokens:  1,200" in out
    llm.get_cost_estimate.assert_called_once()
