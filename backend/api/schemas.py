"""Pydantic schemas for API request/response models."""

from datetime import datetime

from pydantic import BaseModel, Field

# --- Generation ---


class GenerateRequest(BaseModel):
    """Raw text to turn into flashcards."""

    message: str | None = None


class FlashcardPair(BaseModel):
    question: str
    answer: str


class GenerateResponse(BaseModel):
    status: str = "success"
    flashcards: list[FlashcardPair]


# --- Session ---


class CardResponse(BaseModel):
    """The current card; ``answer`` is only filled in once revealed."""

    id: str
    question: str
    answer: str | None = None
    difficulty: float
    correct_count: int
    incorrect_count: int
    last_reviewed: datetime | None
    next_review: datetime


class StatsResponse(BaseModel):
    correct: int
    incorrect: int
    total: int


class PreferencesModel(BaseModel):
    voice_enabled: bool
    speech_rate: float
    auto_advance: bool


class PreferencesUpdate(BaseModel):
    voice_enabled: bool | None = None
    speech_rate: float | None = Field(default=None, ge=0.5, le=2.0)
    auto_advance: bool | None = None


class SessionStateResponse(BaseModel):
    """Snapshot of the study session."""

    view: str
    current_card_index: int
    answer_revealed: bool
    is_speaking: bool
    is_listening: bool
    position: int
    total_cards: int
    progress_percent: float
    card: CardResponse | None
    stats: StatsResponse
    preferences: PreferencesModel


class NextResponse(BaseModel):
    session_complete: bool
    state: SessionStateResponse


class MarkRequest(BaseModel):
    correct: bool


class MarkResponse(BaseModel):
    """Scheduling result after marking the current card."""

    card_id: str
    difficulty: float
    interval_days: int
    next_review: datetime
    state: SessionStateResponse


class CommandRequest(BaseModel):
    command: str


class CommandResponse(BaseModel):
    action: str | None
    state: SessionStateResponse


class ViewRequest(BaseModel):
    view: str


class ClearRequest(BaseModel):
    confirm: bool = False


# --- Stats ---


class LearnerStatsResponse(BaseModel):
    """Aggregate answers plus card counts for the current set."""

    correct: int
    incorrect: int
    total: int
    accuracy: float | None
    total_cards: int
    cards_due: int
    cards_mastered: int  # difficulty at the floor of 1.0
