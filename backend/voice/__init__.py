"""Inbound command and outbound speech ports used by the study session."""

from backend.voice.commands import CommandSource, IterableCommandSource, StdinCommandSource
from backend.voice.speech import ConsoleSpeechSink, NullSpeechSink, SpeechSink

__all__ = [
    "CommandSource",
    "ConsoleSpeechSink",
    "IterableCommandSource",
    "NullSpeechSink",
    "SpeechSink",
    "StdinCommandSource",
]
