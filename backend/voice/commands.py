"""Inbound command port.

A command source yields lower-cased, trimmed command strings until it is
stopped or runs dry. It can be iterated again after a stop.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Iterable
from typing import TextIO

logger = logging.getLogger(__name__)


def normalize_command(raw: str) -> str:
    return raw.strip().lower()


class CommandSource(ABC):
    """Port for a stream of spoken or typed commands."""

    def __init__(self) -> None:
        self._stopped = False

    def stop(self) -> None:
        self._stopped = True

    def __aiter__(self) -> AsyncIterator[str]:
        self._stopped = False
        return self._commands()

    async def _commands(self) -> AsyncIterator[str]:
        while not self._stopped:
            raw = await self.read()
            if raw is None:
                return
            command = normalize_command(raw)
            if command:
                yield command

    @abstractmethod
    async def read(self) -> str | None:
        """Return the next raw command, or None when the source is exhausted."""


class IterableCommandSource(CommandSource):
    """Replays a fixed sequence of commands."""

    def __init__(self, commands: Iterable[str]) -> None:
        super().__init__()
        self._commands_list = list(commands)
        self._position = 0

    def __aiter__(self) -> AsyncIterator[str]:
        self._position = 0
        return super().__aiter__()

    async def read(self) -> str | None:
        if self._position >= len(self._commands_list):
            return None
        raw = self._commands_list[self._position]
        self._position += 1
        return raw


class StdinCommandSource(CommandSource):
    """Reads one command per line from a text stream without blocking the loop."""

    def __init__(self, stream: TextIO | None = None, prompt: str = "") -> None:
        super().__init__()
        self.stream = stream or sys.stdin
        self.prompt = prompt

    async def read(self) -> str | None:
        if self.prompt:
            print(self.prompt, end="", flush=True)
        line = await asyncio.to_thread(self.stream.readline)
        if not line:
            return None
        return line
