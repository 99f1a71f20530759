"""API route that turns raw text into flashcards without touching the session."""

import asyncio
import logging

from fastapi import APIRouter, Depends

from backend.api.dependencies import get_llm
from backend.api.schemas import FlashcardPair, GenerateRequest, GenerateResponse
from backend.generation import clean_input, generate_flashcards
from backend.llm_client import LLMClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["generation"])


@router.post("/flashcard", response_model=GenerateResponse)
async def create_flashcards(
    request: GenerateRequest,
    llm: LLMClient = Depends(get_llm),
) -> GenerateResponse:
    """Generate question/answer pairs for the posted text."""
    text = clean_input(request.message)
    pairs = await asyncio.to_thread(generate_flashcards, text, llm)
    return GenerateResponse(flashcards=[FlashcardPair(**pair) for pair in pairs])
