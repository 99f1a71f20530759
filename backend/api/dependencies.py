"""Shared FastAPI dependencies."""

import asyncio
import logging

from backend.database import async_session
from backend.llm_client import LLMClient, get_llm_client
from backend.srs.session import StudySession
from backend.store import SessionStore

logger = logging.getLogger(__name__)

# Single-user design: one study session per server process
_study_session: StudySession | None = None
_study_session_lock = asyncio.Lock()


async def get_study_session() -> StudySession:
    """Return the shared StudySession, loading saved state on first use."""
    global _study_session
    async with _study_session_lock:
        if _study_session is None:
            session = StudySession(store=SessionStore(async_session))
            await session.load()
            _study_session = session
    return _study_session


def reset_study_session() -> None:
    """Forget the shared session so the next request reloads it from the store."""
    global _study_session, _study_session_lock
    _study_session = None
    _study_session_lock = asyncio.Lock()


def get_llm() -> LLMClient:
    return get_llm_client()
