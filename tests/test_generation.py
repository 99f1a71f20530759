"""Tests for flashcard generation at the LLM boundary."""

import json
from unittest.mock import MagicMock

import anthropic
import httpx
import pytest

from backend.config import settings
from backend.errors import (
    GenerationConfigError,
    GenerationRateLimitError,
    GenerationServiceError,
    ValidationError,
)
from backend.generation import clean_input, generate_flashcards, parse_flashcards
from backend.llm_client import LLMClient


def _llm(response: str | None = None, error: Exception | None = None) -> MagicMock:
    llm = MagicMock(spec=LLMClient)
    if error is not None:
        llm.create_message.side_effect = error
    else:
        llm.create_message.return_value = response
    return llm


def _status_error(cls: type, status: int) -> Exception:
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    response = httpx.Response(status, request=request)
    return cls("boom", response=response, body=None)


PAIRS = [{"question": f"Q{i}?", "answer": f"A{i}"} for i in range(10)]


class TestInput:
    def test_trims(self) -> None:
        assert clean_input("  some notes \n") == "some notes"

    @pytest.mark.parametrize("text", ["", "   ", "\n\t", None])
    def test_rejects_empty(self, text: str | None) -> None:
        with pytest.raises(ValidationError):
            clean_input(text)

    def test_empty_text_never_reaches_llm(self) -> None:
        llm = _llm("[]")
        with pytest.raises(ValidationError):
            generate_flashcards("   ", llm)
        llm.create_message.assert_not_called()


class TestGenerate:
    def test_returns_pairs(self) -> None:
        llm = _llm(json.dumps(PAIRS[:2]))
        pairs = generate_flashcards("Photosynthesis converts light.", llm)
        assert pairs == PAIRS[:2]
        prompt = llm.create_message.call_args.kwargs["prompt"]
        assert "Photosynthesis converts light." in prompt
        assert "up to 8 flashcards" in prompt

    def test_caps_at_max(self) -> None:
        pairs = generate_flashcards("text", _llm(json.dumps(PAIRS)))
        assert len(pairs) == 8
        assert pairs[0]["question"] == "Q0?"

    def test_rate_limit(self) -> None:
        llm = _llm(error=_status_error(anthropic.RateLimitError, 429))
        with pytest.raises(GenerationRateLimitError):
            generate_flashcards("text", llm)

    def test_bad_credentials(self) -> None:
        llm = _llm(error=_status_error(anthropic.AuthenticationError, 401))
        with pytest.raises(GenerationConfigError):
            generate_flashcards("text", llm)

    def test_missing_credentials(self) -> None:
        llm = _llm(error=TypeError("Could not resolve authentication method"))
        with pytest.raises(GenerationConfigError):
            generate_flashcards("text", llm)

    def test_server_error(self) -> None:
        llm = _llm(error=_status_error(anthropic.InternalServerError, 500))
        with pytest.raises(GenerationServiceError) as excinfo:
            generate_flashcards("text", llm)
        assert type(excinfo.value) is GenerationServiceError


class TestParse:
    def test_strips_code_fence(self) -> None:
        text = "```json\n" + json.dumps(PAIRS[:1]) + "\n```"
        assert parse_flashcards(text) == PAIRS[:1]

    def test_non_json(self) -> None:
        with pytest.raises(GenerationServiceError):
            parse_flashcards("Sure! Here are your flashcards.")

    def test_non_array(self) -> None:
        with pytest.raises(GenerationServiceError):
            parse_flashcards('{"question": "Q", "answer": "A"}')

    def test_skips_incomplete_entries(self) -> None:
        text = json.dumps(
            [
                {"question": "Q1", "answer": "A1"},
                {"question": "", "answer": "A2"},
                {"question": "Q3"},
                "not an object",
            ]
        )
        assert parse_flashcards(text) == [{"question": "Q1", "answer": "A1"}]

    def test_nothing_usable(self) -> None:
        with pytest.raises(GenerationServiceError):
            parse_flashcards("[]")


class TestCostEstimate:
    def test_prices_tokens(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "llm_input_price_per_million", 3.0)
        monkeypatch.setattr(settings, "llm_output_price_per_million", 15.0)
        llm = LLMClient.__new__(LLMClient)
        llm.total_input_tokens = 1_000_000
        llm.total_output_tokens = 200_000
        assert llm.get_cost_estimate() == {
            "input_tokens": 1_000_000,
            "output_tokens": 200_000,
            "estimated_cost_usd": 6.0,
        }
