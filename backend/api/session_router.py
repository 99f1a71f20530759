"""API routes for the study session."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from backend.api.dependencies import get_llm, get_study_session
from backend.api.schemas import (
    ClearRequest,
    CommandRequest,
    CommandResponse,
    GenerateRequest,
    MarkRequest,
    MarkResponse,
    NextResponse,
    PreferencesModel,
    PreferencesUpdate,
    SessionStateResponse,
    ViewRequest,
)
from backend.api.serializers import session_state
from backend.generation import clean_input
from backend.llm_client import LLMClient
from backend.srs.session import StudySession
from backend.srs.state import View

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/session", tags=["session"])


@router.get("", response_model=SessionStateResponse)
async def get_state(session: StudySession = Depends(get_study_session)) -> SessionStateResponse:
    """Return the current session snapshot."""
    return session_state(session)


@router.post("/generate", response_model=SessionStateResponse)
async def generate(
    request: GenerateRequest,
    session: StudySession = Depends(get_study_session),
    llm: LLMClient = Depends(get_llm),
) -> SessionStateResponse:
    """Generate a new card set from text and start studying it."""
    text = clean_input(request.message)
    await session.generate_from_text(text, llm)
    return session_state(session)


@router.post("/reveal", response_model=SessionStateResponse)
async def reveal(session: StudySession = Depends(get_study_session)) -> SessionStateResponse:
    await session.reveal()
    return session_state(session)


@router.post("/repeat", response_model=SessionStateResponse)
async def repeat(session: StudySession = Depends(get_study_session)) -> SessionStateResponse:
    await session.repeat()
    return session_state(session)


@router.post("/next", response_model=NextResponse)
async def next_card(session: StudySession = Depends(get_study_session)) -> NextResponse:
    completed = await session.next()
    return NextResponse(session_complete=completed, state=session_state(session))


@router.post("/previous", response_model=SessionStateResponse)
async def previous_card(session: StudySession = Depends(get_study_session)) -> SessionStateResponse:
    await session.previous()
    return session_state(session)


@router.post("/resume", response_model=SessionStateResponse)
async def resume(session: StudySession = Depends(get_study_session)) -> SessionStateResponse:
    await session.resume()
    return session_state(session)


@router.post("/mark", response_model=MarkResponse)
async def mark(
    request: MarkRequest,
    session: StudySession = Depends(get_study_session),
) -> MarkResponse:
    """Mark the current card correct or incorrect."""
    result = await session.mark_outcome(request.correct)
    return MarkResponse(
        card_id=result.card.id,
        difficulty=result.card.difficulty,
        interval_days=result.interval_days,
        next_review=result.card.next_review,
        state=session_state(session),
    )


@router.post("/command", response_model=CommandResponse)
async def command(
    request: CommandRequest,
    session: StudySession = Depends(get_study_session),
) -> CommandResponse:
    """Dispatch a spoken or typed command."""
    action = await session.handle_command(request.command)
    return CommandResponse(
        action=action.value if action else None,
        state=session_state(session),
    )


@router.post("/view", response_model=SessionStateResponse)
async def set_view(
    request: ViewRequest,
    session: StudySession = Depends(get_study_session),
) -> SessionStateResponse:
    try:
        view = View(request.view)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown view: {request.view}") from None
    await session.set_view(view)
    return session_state(session)


@router.put("/preferences", response_model=PreferencesModel)
async def update_preferences(
    request: PreferencesUpdate,
    session: StudySession = Depends(get_study_session),
) -> PreferencesModel:
    prefs = session.update_preferences(
        voice_enabled=request.voice_enabled,
        speech_rate=request.speech_rate,
        auto_advance=request.auto_advance,
    )
    return PreferencesModel(
        voice_enabled=prefs.voice_enabled,
        speech_rate=prefs.speech_rate,
        auto_advance=prefs.auto_advance,
    )


@router.post("/clear", response_model=SessionStateResponse)
async def clear(
    request: ClearRequest,
    session: StudySession = Depends(get_study_session),
) -> SessionStateResponse:
    """Delete all cards and stats. Requires explicit confirmation."""
    if not request.confirm:
        raise HTTPException(status_code=400, detail="Clearing all data requires confirm=true")
    await session.clear()
    return session_state(session)
