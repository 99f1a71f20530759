"""Builds API response models from session objects."""

from backend.api.schemas import (
    CardResponse,
    PreferencesModel,
    SessionStateResponse,
    StatsResponse,
)
from backend.srs.session import StudySession


def session_state(session: StudySession) -> SessionStateResponse:
    state = session.state
    card = state.current_card
    card_response = None
    if card is not None:
        card_response = CardResponse(
            id=card.id,
            question=card.question,
            answer=card.answer if state.answer_revealed else None,
            difficulty=card.difficulty,
            correct_count=card.correct_count,
            incorrect_count=card.incorrect_count,
            last_reviewed=card.last_reviewed,
            next_review=card.next_review,
        )
    prefs = session.preferences
    return SessionStateResponse(
        view=state.view.value,
        current_card_index=state.current_index,
        answer_revealed=state.answer_revealed,
        is_speaking=session.is_speaking,
        is_listening=session.is_listening,
        position=state.position,
        total_cards=len(state.cards),
        progress_percent=state.progress_percent,
        card=card_response,
        stats=StatsResponse(**state.stats.to_record()),
        preferences=PreferencesModel(
            voice_enabled=prefs.voice_enabled,
            speech_rate=prefs.speech_rate,
            auto_advance=prefs.auto_advance,
        ),
    )
