"""Durable session store.

Two independent collections, ``flashcards`` and ``stats``, each holding one
record per session key. Writes overwrite the previous record for the key;
the two collections are never written in one transaction.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.config import settings
from backend.errors import PersistenceError
from backend.models import FlashcardSet, SessionStatsRecord
from backend.srs.cards import Card, SessionStats

logger = logging.getLogger(__name__)

FLASHCARDS = "flashcards"
STATS = "stats"


class SessionStore:
    """Key-value access to the persisted card set and stats."""

    def __init__(
        self,
        sessionmaker: async_sessionmaker[AsyncSession],
        session_id: str | None = None,
    ) -> None:
        self.sessionmaker = sessionmaker
        self.session_id = session_id or settings.session_id

    async def save(self, collection: str, record: dict[str, Any]) -> None:
        """Overwrite the record stored under ``record["id"]``."""
        key = record["id"]
        try:
            async with self.sessionmaker() as db:
                if collection == FLASHCARDS:
                    row = FlashcardSet(
                        id=key,
                        cards=list(record.get("cards", [])),
                        spaced_repetition=dict(record.get("spacedRepetition", {})),
                    )
                elif collection == STATS:
                    row = SessionStatsRecord(
                        id=key,
                        correct=record.get("correct", 0),
                        incorrect=record.get("incorrect", 0),
                        total=record.get("total", 0),
                    )
                else:
                    raise ValueError(f"Unknown collection: {collection}")
                await db.merge(row)
                await db.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to save {collection}/{key}: {e}") from e
        logger.debug("Saved %s/%s", collection, key)

    async def load(self, collection: str, key: str) -> dict[str, Any] | None:
        """Return the record stored under ``key``, or None if there isn't one."""
        try:
            async with self.sessionmaker() as db:
                if collection == FLASHCARDS:
                    row = await db.get(FlashcardSet, key)
                    if row is None:
                        return None
                    return {"id": row.id, "cards": row.cards, "spacedRepetition": row.spaced_repetition}
                if collection == STATS:
                    row = await db.get(SessionStatsRecord, key)
                    if row is None:
                        return None
                    return {
                        "id": row.id,
                        "correct": row.correct,
                        "incorrect": row.incorrect,
                        "total": row.total,
                    }
                raise ValueError(f"Unknown collection: {collection}")
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load {collection}/{key}: {e}") from e

    async def save_cards(self, cards: list[Card], spaced_repetition: dict | None = None) -> None:
        await self.save(
            FLASHCARDS,
            {
                "id": self.session_id,
                "cards": [card.to_record() for card in cards],
                "spacedRepetition": spaced_repetition or {},
            },
        )

    async def load_cards(self) -> tuple[list[Card], dict] | None:
        record = await self.load(FLASHCARDS, self.session_id)
        if record is None:
            return None
        try:
            cards = [Card.from_record(entry) for entry in record["cards"]]
        except (KeyError, TypeError, ValueError) as e:
            raise PersistenceError(f"Stored card set is corrupt: {e}") from e
        return cards, record.get("spacedRepetition") or {}

    async def save_stats(self, stats: SessionStats) -> None:
        await self.save(STATS, {"id": self.session_id, **stats.to_record()})

    async def load_stats(self) -> SessionStats | None:
        record = await self.load(STATS, self.session_id)
        if record is None:
            return None
        try:
            return SessionStats(
                correct=record["correct"],
                incorrect=record["incorrect"],
                total=record["total"],
            )
        except ValueError as e:
            raise PersistenceError(f"Stored stats are corrupt: {e}") from e

    async def clear(self) -> None:
        """Delete both records for this session key."""
        try:
            async with self.sessionmaker() as db:
                await db.execute(delete(FlashcardSet).where(FlashcardSet.id == self.session_id))
                await db.execute(
                    delete(SessionStatsRecord).where(SessionStatsRecord.id == self.session_id)
                )
                await db.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to clear session {self.session_id}: {e}") from e
        logger.info("Cleared stored session %s", self.session_id)
