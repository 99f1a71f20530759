"""FastAPI application entry point and configuration."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from backend.api.flashcard_router import router as flashcard_router
from backend.api.session_router import router as session_router
from backend.api.stats_router import router as stats_router
from backend.database import async_session, engine, ensure_db
from backend.errors import (
    EchoLearnError,
    ExportFormatError,
    GenerationRateLimitError,
    InvalidTransitionError,
    ValidationError,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialize database on startup and cleanup on shutdown."""
    await ensure_db()
    yield
    await engine.dispose()


app = FastAPI(
    title="EchoLearn",
    description="Voice-interactive flashcard study companion",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],
    allow_methods=["*"],
    allow_headers=["*"],
)

ERROR_STATUS = {
    ValidationError: 400,
    ExportFormatError: 400,
    InvalidTransitionError: 409,
    GenerationRateLimitError: 429,
}


@app.exception_handler(EchoLearnError)
async def echolearn_error_handler(request: Request, exc: EchoLearnError) -> JSONResponse:
    """Render domain errors as ``{"status": "error", "message": ...}``."""
    status_code = next(
        (code for error_type, code in ERROR_STATUS.items() if isinstance(exc, error_type)),
        500,
    )
    if status_code >= 500:
        logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc)
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "message": exc.user_message},
    )


app.include_router(flashcard_router)
app.include_router(session_router)
app.include_router(stats_router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Check database connectivity and return status."""
    async with async_session() as session:
        await session.execute(text("SELECT 1"))
    return {"status": "ok"}

