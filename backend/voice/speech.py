"""Outbound speech port.

A sink accepts text-to-speak requests and reports when an utterance starts
and ends. Only one utterance is active at a time: a new ``speak`` call
supersedes whatever is still playing.
"""

from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TextIO

logger = logging.getLogger(__name__)

LifecycleCallback = Callable[[], None]


class SpeechSink(ABC):
    """Port for a text-to-speech engine."""

    def __init__(self) -> None:
        self._on_started: list[LifecycleCallback] = []
        self._on_ended: list[LifecycleCallback] = []

    def on_started(self, callback: LifecycleCallback) -> None:
        self._on_started.append(callback)

    def on_ended(self, callback: LifecycleCallback) -> None:
        self._on_ended.append(callback)

    def _emit_started(self) -> None:
        for callback in self._on_started:
            callback()

    def _emit_ended(self) -> None:
        for callback in self._on_ended:
            callback()

    @abstractmethod
    def speak(self, text: str, rate: float = 1.0) -> None:
        """Request that ``text`` be spoken, cancelling any current utterance."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop the current utterance, if any."""


class NullSpeechSink(SpeechSink):
    """Discards speech requests; used where no audio output exists."""

    def speak(self, text: str, rate: float = 1.0) -> None:
        logger.debug("Dropping speech request (%.1fx): %s", rate, text)

    def cancel(self) -> None:
        pass


class ConsoleSpeechSink(SpeechSink):
    """Writes utterances to a text stream and reports them as finished at once."""

    def __init__(self, stream: TextIO | None = None) -> None:
        super().__init__()
        self.stream = stream or sys.stdout

    def speak(self, text: str, rate: float = 1.0) -> None:
        self._emit_started()
        print(f"  >> {text}", file=self.stream)
        self._emit_ended()

    def cancel(self) -> None:
        pass
