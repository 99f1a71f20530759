"""CLI interface for EchoLearn.

Usage:
    python -m echolearn generate "text"      Generate flashcards from text
    python -m echolearn generate @notes.txt  Generate flashcards from a file
    python -m echolearn study                Study with typed voice commands
    python -m echolearn stats                Show your statistics
    python -m echolearn due                  Show how many cards are due
    python -m echolearn export [path]        Write a JSON backup
    python -m echolearn import path          Restore a JSON backup
    python -m echolearn clear --yes          Delete all cards and stats
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from backend.config import settings, utcnow
from backend.database import async_session, ensure_db
from backend.errors import EchoLearnError
from backend.export import dumps_document, export_filename
from backend.llm_client import get_llm_client
from backend.srs.cards import due_cards
from backend.srs.dispatcher import CommandAction
from backend.srs.session import Preferences, StudySession
from backend.store import SessionStore
from backend.voice.commands import StdinCommandSource
from backend.voice.speech import ConsoleSpeechSink, NullSpeechSink

QUIT_COMMANDS = {"q", "quit", "exit"}

STUDY_HELP = """\
  Commands: next, previous, show answer, correct, wrong, repeat, stop
  Type 'q' to quit
"""


class InteractiveCommandSource(StdinCommandSource):
    """Stdin commands that end on a quit word."""

    async def read(self) -> str | None:
        line = await super().read()
        if line is None or line.strip().lower() in QUIT_COMMANDS:
            return None
        return line


async def open_session(voice: bool = False, auto_advance: bool | None = None) -> StudySession:
    """Create the tables if needed and load the saved session."""
    await ensure_db()
    prefs = Preferences(
        voice_enabled=voice,
        auto_advance=settings.auto_advance if auto_advance is None else auto_advance,
    )
    speech = ConsoleSpeechSink() if voice else NullSpeechSink()
    session = StudySession(store=SessionStore(async_session), speech=speech, preferences=prefs)
    await session.load()
    return session


def read_text_argument(value: str) -> str:
    """Return the text itself, or a file's contents for ``@path``."""
    if value.startswith("@"):
        return Path(value[1:]).read_text(encoding="utf-8")
    return value


def print_card(session: StudySession) -> None:
    state = session.state
    card = state.current_card
    if card is None:
        print("\n  No flashcards available. Generate some first!")
        return
    print(f"\n  [{state.position}/{len(state.cards)}] {card.question}")
    if state.answer_revealed:
        print(f"  Answer: {card.answer}")


async def cmd_generate(args: argparse.Namespace) -> None:
    """Generate a new card set, replacing the current one."""
    session = await open_session()
    text = read_text_argument(args.text)
    llm = get_llm_client()
    await session.generate_from_text(text, llm)
    print(f"\n  Generated {len(session.state.cards)} flashcards:\n")
    for i, card in enumerate(session.state.cards, 1):
        print(f"  {i}. {card.question}")
        print(f"     {card.answer}")
    print()

    cost = llm.get_cost_estimate()
    print(f"  LLM cost estimate: ${cost['estimated_cost_usd']:.4f}")
    print(f"    Input tokens:  {cost['input_tokens']:,}")
    print(f"    Output tokens: {cost['output_tokens']:,}\n")


async def cmd_study(args: argparse.Namespace) -> None:
    """Run an interactive study session driven by typed commands."""
    session = await open_session(voice=not args.quiet, auto_advance=args.auto_advance)
    if not session.state.has_cards:
        print("\n  No flashcards available. Generate some first!")
        return

    await session.resume()
    print("\n  Study Session")
    print(STUDY_HELP)

    source = InteractiveCommandSource(prompt="\n  > ")
    session.add_completion_listener(
        lambda: print("\n  That was the last card. Type 'q' to finish.")
    )
    print_card(session)

    def show(command: str, action: CommandAction | None) -> None:
        if action is None:
            print("  Unknown command.")
        else:
            print_card(session)

    await session.listen(source, on_action=show)

    stats = session.state.stats
    accuracy = stats.accuracy * 100 if stats.accuracy is not None else 0
    print("\n  Session ended.")
    print(f"  Answered: {stats.total}  Correct: {stats.correct}  Accuracy: {accuracy:.0f}%\n")


async def cmd_stats(args: argparse.Namespace) -> None:
    """Show aggregate statistics."""
    session = await open_session()
    state = session.state
    stats = state.stats
    due = len(due_cards(state.cards, utcnow()))

    print("\n  EchoLearn Statistics")
    print(f"  {'Cards:':<20} {len(state.cards)}")
    print(f"  {'Due now:':<20} {due}")
    print(f"  {'Correct:':<20} {stats.correct}")
    print(f"  {'Incorrect:':<20} {stats.incorrect}")
    print(f"  {'Total answers:':<20} {stats.total}")
    print()


async def cmd_due(args: argparse.Namespace) -> None:
    """Show how many cards are due."""
    session = await open_session()
    now = utcnow()
    due = due_cards(session.state.cards, now)
    print(f"  {len(due)} of {len(session.state.cards)} cards due")
    for card in due:
        print(f"    - {card.question}")


async def cmd_export(args: argparse.Namespace) -> None:
    """Write the session to a JSON backup file."""
    session = await open_session()
    path = Path(args.path) if args.path else Path(export_filename(utcnow()))
    path.write_text(dumps_document(session.export()), encoding="utf-8")
    print(f"  Exported {len(session.state.cards)} cards to {path}")


async def cmd_import(args: argparse.Namespace) -> None:
    """Replace the session with a JSON backup."""
    session = await open_session()
    await session.import_snapshot(Path(args.path).read_text(encoding="utf-8"))
    print(f"  Imported {len(session.state.cards)} cards from {args.path}")


async def cmd_clear(args: argparse.Namespace) -> None:
    """Delete all cards and stats."""
    if not args.yes:
        print("  Clear all data? This cannot be undone. Re-run with --yes to confirm.")
        return
    session = await open_session()
    await session.clear()
    print("  All data cleared.")


def main() -> None:
    """Entry point for the EchoLearn CLI application."""
    parser = argparse.ArgumentParser(
        prog="echolearn",
        description="EchoLearn voice-interactive flashcards",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # generate
    generate_parser = subparsers.add_parser("generate", help="Generate flashcards from text")
    generate_parser.add_argument("text", help="Text to study, or @path to read a file")

    # study
    study_parser = subparsers.add_parser("study", help="Start a study session")
    study_parser.add_argument("--quiet", action="store_true", help="Don't echo spoken prompts")
    study_parser.add_argument(
        "--auto-advance",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Move to the next card after marking an answer",
    )

    # stats
    subparsers.add_parser("stats", help="Show your statistics")

    # due
    subparsers.add_parser("due", help="Show cards due for review")

    # export
    export_parser = subparsers.add_parser("export", help="Write a JSON backup")
    export_parser.add_argument("path", nargs="?", help="Output file (default: dated filename)")

    # import
    import_parser = subparsers.add_parser("import", help="Restore a JSON backup")
    import_parser.add_argument("path", help="Backup file to read")

    # clear
    clear_parser = subparsers.add_parser("clear", help="Delete all cards and stats")
    clear_parser.add_argument("--yes", action="store_true", help="Confirm deletion")

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    if not args.command:
        parser.print_help()
        return

    cmd_map = {
        "generate": cmd_generate,
        "study": cmd_study,
        "stats": cmd_stats,
        "due": cmd_due,
        "export": cmd_export,
        "import": cmd_import,
        "clear": cmd_clear,
    }

    try:
        asyncio.run(cmd_map[args.command](args))
    except EchoLearnError as e:
        logging.getLogger(__name__).debug("Command failed", exc_info=True)
        print(f"  {e.user_message}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
