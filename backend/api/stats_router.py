"""API routes for statistics and backup export/import."""

import logging
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from backend.api.dependencies import get_study_session
from backend.api.schemas import LearnerStatsResponse, SessionStateResponse
from backend.api.serializers import session_state
from backend.export import export_filename
from backend.srs.cards import MIN_DIFFICULTY, due_cards
from backend.srs.session import StudySession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("", response_model=LearnerStatsResponse)
async def get_stats(session: StudySession = Depends(get_study_session)) -> LearnerStatsResponse:
    """Get aggregate answer counts and card counts."""
    state = session.state
    now = session.clock()
    stats = state.stats
    return LearnerStatsResponse(
        correct=stats.correct,
        incorrect=stats.incorrect,
        total=stats.total,
        accuracy=round(stats.accuracy, 3) if stats.accuracy is not None else None,
        total_cards=len(state.cards),
        cards_due=len(due_cards(state.cards, now)),
        cards_mastered=sum(1 for card in state.cards if card.difficulty <= MIN_DIFFICULTY),
    )


@router.get("/export")
async def export_data(session: StudySession = Depends(get_study_session)) -> JSONResponse:
    """Download the whole session as a backup document."""
    document = session.export()
    filename = export_filename(session.clock())
    return JSONResponse(
        content=document,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import", response_model=SessionStateResponse)
async def import_data(
    document: dict[str, Any],
    session: StudySession = Depends(get_study_session),
) -> SessionStateResponse:
    """Replace the session with a previously exported backup."""
    await session.import_snapshot(document)
    return session_state(session)
