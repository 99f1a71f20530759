"""Maps free-text commands to session actions.

Rules are checked in order and the first rule with a keyword contained in
the command wins, so "go back, that was wrong" resolves to ``INCORRECT``
because the incorrect rule is listed before the previous rule. Matching is
plain substring containment: "incorrect" contains "correct" and therefore
resolves to ``CORRECT``; "wrong" is the keyword that reaches ``INCORRECT``.
"""

from enum import Enum


class CommandAction(str, Enum):
    NEXT = "next"
    REPEAT = "repeat"
    REVEAL = "reveal"
    CORRECT = "correct"
    INCORRECT = "incorrect"
    PREVIOUS = "previous"
    STOP = "stop"


COMMAND_RULES: tuple[tuple[tuple[str, ...], CommandAction], ...] = (
    (("next", "continue"), CommandAction.NEXT),
    (("repeat", "again"), CommandAction.REPEAT),
    (("show answer", "reveal"), CommandAction.REVEAL),
    (("correct", "right"), CommandAction.CORRECT),
    (("incorrect", "wrong"), CommandAction.INCORRECT),
    (("previous", "back"), CommandAction.PREVIOUS),
    (("stop", "pause"), CommandAction.STOP),
)


def resolve_command(command: str) -> CommandAction | None:
    """Return the action for a command, or None when nothing matches."""
    text = command.strip().lower()
    for keywords, action in COMMAND_RULES:
        if any(keyword in text for keyword in keywords):
            return action
    return None
