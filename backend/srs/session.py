"""Study session orchestrator.

Coordinates the pure state transitions with persistence, speech output and
deferred timers into a cohesive session flow.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from backend.llm_client import LLMClient

from backend.config import settings, utcnow
from backend.errors import InvalidTransitionError, PersistenceError
from backend.export import export_document, import_document
from backend.generation import generate_flashcards
from backend.srs import state as transitions
from backend.srs.cards import new_card_set
from backend.srs.dispatcher import CommandAction, resolve_command
from backend.srs.policy import OutcomeResult
from backend.srs.state import SessionState, View
from backend.store import SessionStore
from backend.voice.commands import CommandSource
from backend.voice.speech import NullSpeechSink, SpeechSink

logger = logging.getLogger(__name__)

MIN_SPEECH_RATE = 0.5
MAX_SPEECH_RATE = 2.0

GENERATED_MESSAGE = "Flashcards generated successfully! Let's start studying."
CORRECT_MESSAGE = "Correct!"
INCORRECT_MESSAGE = "Let's review this one again."
COMPLETE_MESSAGE = "Study session complete! Great job!"
CLEARED_MESSAGE = "All data cleared."


@dataclass
class Preferences:
    """User-adjustable voice and pacing options."""

    voice_enabled: bool = settings.voice_enabled
    speech_rate: float = settings.speech_rate
    auto_advance: bool = settings.auto_advance

    def __post_init__(self) -> None:
        self.speech_rate = max(MIN_SPEECH_RATE, min(MAX_SPEECH_RATE, self.speech_rate))


@dataclass
class Delays:
    """Timer delays in seconds."""

    auto_advance: float = settings.auto_advance_delay_seconds
    question: float = settings.question_delay_seconds


class StudySession:
    """Owns the session state for the single persisted study session.

    Every transition cancels any pending timer. At most one timer is pending
    at a time; arming a new one replaces the old one.
    """

    def __init__(
        self,
        store: SessionStore,
        speech: SpeechSink | None = None,
        preferences: Preferences | None = None,
        delays: Delays | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.speech = speech or NullSpeechSink()
        self.preferences = preferences or Preferences()
        self.delays = delays or Delays()
        self.clock = clock
        self.state = SessionState()
        self.is_speaking = False
        self.is_listening = False
        self._timer: asyncio.Task | None = None
        self._completion_listeners: list[Callable[[], None]] = []

        self.speech.on_started(self._on_speech_started)
        self.speech.on_ended(self._on_speech_ended)

    # --- Timers ---

    @property
    def pending_timer(self) -> asyncio.Task | None:
        return self._timer

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    def _arm(self, delay: float, action: Callable[[], Awaitable[Any]]) -> None:
        self._cancel_timer()

        async def fire() -> None:
            await asyncio.sleep(delay)
            self._timer = None
            await action()

        self._timer = asyncio.create_task(fire())

    # --- Speech ---

    def _on_speech_started(self) -> None:
        self.is_speaking = True

    def _on_speech_ended(self) -> None:
        self.is_speaking = False

    def speak(self, text: str) -> None:
        if not self.preferences.voice_enabled:
            return
        self.speech.speak(text, self.preferences.speech_rate)

    def speak_question(self) -> None:
        card = self.state.current_card
        if card is not None:
            self.speak(card.question)

    def speak_answer(self) -> None:
        card = self.state.current_card
        if card is not None:
            self.speak(card.answer)

    async def _speak_question_later(self) -> None:
        self.speak_question()

    def stop_speaking(self) -> None:
        self.speech.cancel()
        self.is_speaking = False

    def add_completion_listener(self, callback: Callable[[], None]) -> None:
        self._completion_listeners.append(callback)

    # --- Persistence ---

    async def _persist_cards(self) -> None:
        try:
            await self.store.save_cards(list(self.state.cards), self.state.spaced_repetition)
        except PersistenceError:
            logger.exception("Failed to persist card set; keeping in-memory state")

    async def _persist_stats(self) -> None:
        try:
            await self.store.save_stats(self.state.stats)
        except PersistenceError:
            logger.exception("Failed to persist stats; keeping in-memory state")

    async def load(self) -> SessionState:
        """Restore cards and stats saved by a previous run."""
        self._cancel_timer()
        cards, meta, stats = [], {}, self.state.stats
        try:
            saved = await self.store.load_cards()
            if saved is not None:
                cards, meta = saved
            saved_stats = await self.store.load_stats()
            if saved_stats is not None:
                stats = saved_stats
        except PersistenceError:
            logger.exception("Failed to load saved session; starting empty")
        self.state = transitions.restore(cards, stats, meta)
        logger.info("Loaded session: %d cards, %d answers", len(cards), stats.total)
        return self.state

    # --- Transitions ---

    async def generate(self, pairs: list[dict[str, str]]) -> SessionState:
        """Replace the card set with freshly generated, immediately-due cards."""
        self._cancel_timer()
        cards = new_card_set(pairs, self.clock())
        self.state = transitions.generate(self.state, cards)
        await self._persist_cards()
        logger.info("Started study set with %d cards", len(cards))
        self.speak(GENERATED_MESSAGE)
        return self.state

    async def generate_from_text(self, text: str, llm: LLMClient) -> SessionState:
        """Generate cards from raw text; generation errors propagate unchanged."""
        pairs = await asyncio.to_thread(generate_flashcards, text, llm)
        return await self.generate(pairs)

    async def reveal(self) -> SessionState:
        self._cancel_timer()
        was_revealed = self.state.answer_revealed
        self.state = transitions.reveal(self.state)
        if self.state.answer_revealed and not was_revealed:
            self.speak_answer()
        return self.state

    async def repeat(self) -> SessionState:
        """Hide the answer and read the question again."""
        self._cancel_timer()
        self.state = transitions.hide_answer(self.state)
        self.speak_question()
        return self.state

    async def next(self) -> bool:
        """Advance one card.

        Returns:
            True if the session was already on its last card. Listeners are
            notified once per such call and the index stays put.
        """
        self._cancel_timer()
        self.state, completed = transitions.advance(self.state)
        if completed:
            logger.info("Study session complete")
            self.speak(COMPLETE_MESSAGE)
            for callback in self._completion_listeners:
                callback()
        elif self.state.has_cards:
            self._arm(self.delays.question, self._speak_question_later)
        return completed

    async def previous(self) -> SessionState:
        self._cancel_timer()
        before = self.state.current_index
        self.state = transitions.go_back(self.state)
        if self.state.current_index != before:
            self._arm(self.delays.question, self._speak_question_later)
        return self.state

    async def mark_outcome(self, correct: bool) -> OutcomeResult:
        """Score the current card, persist, then arm auto-advance if enabled.

        Raises:
            InvalidTransitionError: If the answer has not been revealed.
        """
        # Raises before touching the pending timer
        marked, result = transitions.mark(self.state, correct, self.clock())
        self._cancel_timer()
        self.state = marked
        await self._persist_cards()
        await self._persist_stats()
        logger.debug(
            "Marked card %s %s: difficulty %.1f, next in %d days",
            result.card.id,
            "correct" if correct else "incorrect",
            result.card.difficulty,
            result.interval_days,
        )
        self.speak(CORRECT_MESSAGE if correct else INCORRECT_MESSAGE)
        if self.preferences.auto_advance:
            self._arm(self.delays.auto_advance, self.next)
        return result

    async def resume(self) -> SessionState:
        """Return to studying a previously loaded set."""
        self._cancel_timer()
        self.state = transitions.switch_view(self.state, View.STUDY)
        if self.state.has_cards:
            self._arm(self.delays.question, self._speak_question_later)
        return self.state

    async def set_view(self, view: View | str) -> SessionState:
        self._cancel_timer()
        self.state = transitions.switch_view(self.state, View(view))
        return self.state

    async def clear(self) -> SessionState:
        """Drop all cards and stats here and in the store."""
        self._cancel_timer()
        self.state = transitions.clear(self.state)
        try:
            await self.store.clear()
        except PersistenceError:
            logger.exception("Failed to clear stored session")
        self.speak(CLEARED_MESSAGE)
        return self.state

    def update_preferences(
        self,
        voice_enabled: bool | None = None,
        speech_rate: float | None = None,
        auto_advance: bool | None = None,
    ) -> Preferences:
        prefs = self.preferences
        self.preferences = Preferences(
            voice_enabled=prefs.voice_enabled if voice_enabled is None else voice_enabled,
            speech_rate=prefs.speech_rate if speech_rate is None else speech_rate,
            auto_advance=prefs.auto_advance if auto_advance is None else auto_advance,
        )
        if not self.preferences.voice_enabled:
            self.stop_speaking()
        return self.preferences

    # --- Export / import ---

    def export(self) -> dict[str, Any]:
        return export_document(
            list(self.state.cards),
            self.state.stats,
            self.state.spaced_repetition,
            self.clock(),
        )

    async def import_snapshot(self, document: dict[str, Any] | str) -> SessionState:
        """Replace the session with the contents of an export and persist it."""
        cards, stats, meta = import_document(document)
        self._cancel_timer()
        self.state = transitions.restore(cards, stats, meta, view=self.state.view)
        await self._persist_cards()
        await self._persist_stats()
        return self.state

    # --- Commands ---

    async def handle_command(self, command: str) -> CommandAction | None:
        """Run the action for one spoken or typed command.

        Unrecognized commands, and marks before the answer is revealed, are
        ignored.
        """
        action = resolve_command(command)
        if action is None:
            logger.debug("Ignoring unrecognized command: %r", command)
            return None

        logger.debug("Command %r -> %s", command, action.value)
        if action is CommandAction.NEXT:
            await self.next()
        elif action is CommandAction.REPEAT:
            await self.repeat()
        elif action is CommandAction.REVEAL:
            await self.reveal()
        elif action in (CommandAction.CORRECT, CommandAction.INCORRECT):
            try:
                await self.mark_outcome(action is CommandAction.CORRECT)
            except InvalidTransitionError as e:
                logger.info("Ignoring %s command: %s", action.value, e)
        elif action is CommandAction.PREVIOUS:
            await self.previous()
        elif action is CommandAction.STOP:
            self.stop_speaking()
        return action

    async def listen(
        self,
        source: CommandSource,
        on_action: Callable[[str, CommandAction | None], None] | None = None,
    ) -> int:
        """Dispatch commands from ``source`` until it stops.

        Args:
            source: Where commands come from.
            on_action: Called after each command with the action it resolved to.

        Returns:
            The number of commands received.
        """
        self.is_listening = True
        received = 0
        try:
            async for command in source:
                received += 1
                action = await self.handle_command(command)
                if on_action is not None:
                    on_action(command, action)
        finally:
            self.is_listening = False
        return received
