"""Turns raw study text into question/answer pairs via the LLM."""

import json
import logging

import anthropic

from backend.config import settings
from backend.errors import (
    GenerationConfigError,
    GenerationRateLimitError,
    GenerationServiceError,
    ValidationError,
)
from backend.llm_client import LLMClient

logger = logging.getLogger(__name__)

FLASHCARD_PROMPT = """\
You are a smart study assistant. Turn the following text into flashcards in JSON format.
Each flashcard should have a "question" and "answer".
Use clear, concise language. Generate up to {max_cards} flashcards.

Text:
\"\"\"
{text}
\"\"\"

Return ONLY a JSON array like:
[
  {{"question": "What is...", "answer": "The..."}},
  {{"question": "Explain...", "answer": "..."}}
]
"""


def clean_input(text: str | None) -> str:
    """Trim input text, rejecting empty or whitespace-only input."""
    cleaned = (text or "").strip()
    if not cleaned:
        raise ValidationError()
    return cleaned


def generate_flashcards(
    text: str,
    llm: LLMClient,
    max_cards: int | None = None,
) -> list[dict[str, str]]:
    """Ask the LLM for flashcards covering ``text``.

    Args:
        text: Raw study material.
        llm: Client used for the generation call.
        max_cards: Upper bound on returned pairs (defaults to settings).

    Returns:
        Ordered list of ``{"question", "answer"}`` dicts, at most ``max_cards`` long.

    Raises:
        ValidationError: If ``text`` is empty after trimming.
        GenerationRateLimitError: If the provider is rate limiting us.
        GenerationConfigError: If credentials are missing or rejected.
        GenerationServiceError: For any other failure or an unusable payload.
    """
    cleaned = clean_input(text)
    max_cards = max_cards or settings.max_flashcards
    prompt = FLASHCARD_PROMPT.format(max_cards=max_cards, text=cleaned)

    try:
        response = llm.create_message(prompt=prompt, max_tokens=2048, temperature=0.3)
    except anthropic.RateLimitError as e:
        logger.error("Flashcard generator rate limited: %s", e)
        raise GenerationRateLimitError() from e
    except (anthropic.AuthenticationError, anthropic.PermissionDeniedError) as e:
        logger.error("Flashcard generator rejected credentials: %s", e)
        raise GenerationConfigError() from e
    except anthropic.APIError as e:
        logger.error("Flashcard generator failed: %s", e)
        raise GenerationServiceError() from e
    except TypeError as e:
        # The SDK raises TypeError when no API key could be resolved
        logger.error("Flashcard generator is not configured: %s", e)
        raise GenerationConfigError() from e

    pairs = parse_flashcards(response)[:max_cards]
    logger.info("Generated %d flashcards from %d chars", len(pairs), len(cleaned))
    return pairs


def parse_flashcards(response: str) -> list[dict[str, str]]:
    """Parse the LLM's JSON array into question/answer pairs.

    Entries without a non-empty question and answer are skipped.
    """
    text = response.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else text[3:]
        if text.endswith("```"):
            text = text[:-3]
        text = text.strip()

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error("Failed to parse flashcard response as JSON")
        logger.debug("Response was: %s", text[:500])
        raise GenerationServiceError("Invalid format: response is not JSON") from e

    if not isinstance(data, list):
        logger.error("Expected JSON array, got %s", type(data).__name__)
        raise GenerationServiceError("Invalid format: expected array of flashcards")

    pairs = []
    for entry in data:
        if not isinstance(entry, dict):
            logger.warning("Skipping non-object flashcard entry: %r", entry)
            continue
        question = str(entry.get("question") or "").strip()
        answer = str(entry.get("answer") or "").strip()
        if not question or not answer:
            logger.warning("Skipping flashcard missing question or answer: %s", entry)
            continue
        pairs.append({"question": question, "answer": answer})

    if not pairs:
        raise GenerationServiceError("No usable flashcards in response")
    return pairs
