"""
Graded Reader: Vocabulary Review CLI.

A Rich terminal interface for daily flashcard review of learned
vocabulary, in both recall directions.

Commands:
- graded-reader add      - Add a learned word
- graded-reader import   - Import a learned-vocabulary JSON export
- graded-reader queue    - Preview today's review queue
- graded-reader study    - Review today's cards
- graded-reader words    - List words with their mastery levels
- graded-reader remove   - Remove a word
"""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from graded_reader.config import Settings, get_settings

from .reviewer import ReviewCard, ReviewController
from .session import SessionBuilder, SessionConfig, SessionState
from .srs import Direction, Judgment, get_mastery_level
from .state_store import StateStore
from .vocabulary import SUPPORTED_LANG_IDS, VocabularyFileError, load_vocabulary_file

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="graded-reader",
    help="Graded Reader: vocabulary review CLI",
    no_args_is_help=True,
)
console = Console()


# =============================================================================
# Styling
# =============================================================================

STYLES = {
    "got": "bold green",
    "almost": "bold yellow",
    "missed": "bold red",
    "dim": "dim",
    "direction": {
        "forward": "cyan",
        "reverse": "magenta",
    },
    "mastery": {
        "new": "dim",
        "learning": "yellow",
        "mastered": "green",
    },
}

JUDGMENT_KEYS = {
    "g": Judgment.GOT,
    "a": Judgment.ALMOST,
    "m": Judgment.MISSED,
}


def style_direction(direction: Direction) -> str:
    color = STYLES["direction"][direction.value]
    return f"[{color}]{direction.value}[/{color}]"


def style_mastery(level: str) -> str:
    color = STYLES["mastery"].get(level, "white")
    return f"[{color}]{level}[/{color}]"


# =============================================================================
# Helpers
# =============================================================================

def _resolve_lang(lang: Optional[str]) -> str:
    """Validate --lang, falling back to the configured default."""
    lang_id = lang or get_settings().default_lang_id
    if lang_id not in SUPPORTED_LANG_IDS:
        console.print(f"[red]Unknown language '{lang_id}'.[/red]")
        console.print(f"Supported: {', '.join(SUPPORTED_LANG_IDS)}")
        raise typer.Exit(1)
    return lang_id


def _open_store() -> StateStore:
    return StateStore(get_settings().db_path)


def _build_controller(
    store: StateStore,
    new_limit: Optional[int],
    new_only: bool,
) -> ReviewController:
    limit = get_settings().new_cards_per_day if new_limit is None else new_limit
    builder = SessionBuilder(SessionConfig(new_cards_per_day=limit, new_only=new_only))
    return ReviewController(store, builder)


# =============================================================================
# Display Helpers
# =============================================================================

def display_card_front(card: ReviewCard, position: int, total: int) -> None:
    """Display the prompt side of a card."""
    header = f"Card {position}/{total}  |  {style_direction(card.direction)}"

    content = f"[bold]{card.front}[/bold]"
    if card.direction is Direction.FORWARD and card.record.romanization:
        content += f"\n[dim]{card.record.romanization}[/dim]"

    console.print(Panel(
        content,
        title=header,
        title_align="left",
        border_style="cyan",
        padding=(1, 2),
    ))


def display_card_back(card: ReviewCard) -> None:
    """Display the answer side of a card."""
    content = f"[bold]{card.back}[/bold]"
    if card.direction is Direction.REVERSE and card.record.romanization:
        content += f"\n[dim]{card.record.romanization}[/dim]"

    console.print(Panel(content, border_style="white", padding=(1, 2)))


def _display_session_summary(session: SessionState) -> None:
    """Display end-of-session summary."""
    results = session.results
    console.print("\n")
    console.print(Panel(
        f"[bold]{'Session Complete!' if session.is_complete else 'Session Paused'}[/bold]\n\n"
        f"Cards reviewed: {session.index}/{session.total}\n"
        f"[{STYLES['got']}]Got: {results.get('got', 0)}[/{STYLES['got']}]  "
        f"[{STYLES['almost']}]Almost: {results.get('almost', 0)}[/{STYLES['almost']}]  "
        f"[{STYLES['missed']}]Missed: {results.get('missed', 0)}[/{STYLES['missed']}]",
        title="Summary",
        border_style="green",
    ))


# =============================================================================
# Commands
# =============================================================================

@app.command()
def add(
    target: str = typer.Argument(..., help="Word or phrase in the target language"),
    translation: str = typer.Option("", "--translation", "-t", help="Meaning"),
    romanization: str = typer.Option("", "--romanization", "-r", help="Pinyin, jyutping, ..."),
    lang: Optional[str] = typer.Option(None, "--lang", "-l", help="Language id (zh, yue, ko)"),
) -> None:
    """Add a learned word."""
    lang_id = _resolve_lang(lang)
    store = _open_store()
    try:
        added = store.add_words([{
            "target": target,
            "translation": translation,
            "romanization": romanization,
            "langId": lang_id,
        }])
    finally:
        store.close()

    if added:
        console.print(f"[green]Added {target}[/green]")
    else:
        console.print(f"[yellow]{target} is already in your vocabulary[/yellow]")


@app.command("import")
def import_words(
    path: Path = typer.Argument(..., help="JSON export of the learned-vocabulary map"),
    lang: Optional[str] = typer.Option(
        None,
        "--lang", "-l",
        help="Language for entries saved without one",
    ),
) -> None:
    """Import a learned-vocabulary JSON export (replaces matching words)."""
    lang_id = _resolve_lang(lang)
    try:
        records = load_vocabulary_file(path, default_lang_id=lang_id)
    except VocabularyFileError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    store = _open_store()
    try:
        count = store.import_vocabulary(records.values())
    finally:
        store.close()

    console.print(f"[green]Imported {count} words from {path.name}[/green]")


@app.command()
def queue(
    lang: Optional[str] = typer.Option(None, "--lang", "-l", help="Language id (zh, yue, ko)"),
    new_limit: Optional[int] = typer.Option(None, "--new", "-n", help="Maximum new cards per day"),
    new_only: bool = typer.Option(False, "--new-only", help="Only never-reviewed cards"),
    limit: int = typer.Option(20, "--limit", help="Number of cards to show"),
) -> None:
    """Preview today's review queue."""
    lang_id = _resolve_lang(lang)
    store = _open_store()
    try:
        session = _build_controller(store, new_limit, new_only).preview(lang_id)
    finally:
        store.close()

    if session.is_complete:
        console.print("\n[green]Nothing to review today![/green]")
        return

    console.print(f"\n[bold]Today ({session.date}, {lang_id}): {session.remaining} cards left[/bold]")
    console.print(f"  Due reviews: {session.due_count}")
    console.print(f"  New cards: {session.new_cards_used}\n")

    table = Table()
    table.add_column("#")
    table.add_column("Word")
    table.add_column("Direction")
    table.add_column("Status")

    end = min(session.total, session.index + limit)
    for i in range(session.index, end):
        status = "[yellow]due[/yellow]" if i < session.due_count else "[green]new[/green]"
        table.add_row(
            str(i + 1),
            session.card_keys[i],
            style_direction(session.card_directions[i]),
            status,
        )

    console.print(table)


@app.command()
def study(
    lang: Optional[str] = typer.Option(None, "--lang", "-l", help="Language id (zh, yue, ko)"),
    new_limit: Optional[int] = typer.Option(None, "--new", "-n", help="Maximum new cards per day"),
    new_only: bool = typer.Option(False, "--new-only", help="Only never-reviewed cards"),
) -> None:
    """
    Review today's cards.

    Each card shows its front; press Enter to reveal, then rate your recall
    (g = got it, a = almost, m = missed). Progress is saved after every card.
    """
    lang_id = _resolve_lang(lang)
    store = _open_store()
    try:
        controller = _build_controller(store, new_limit, new_only)
        session = controller.start(lang_id)

        if session.is_complete:
            console.print("\n[green]Nothing left to review today![/green]")
            console.print("All caught up. Check back tomorrow.")
            raise typer.Exit(0)

        console.print(f"\n[bold]Session: {session.remaining} cards left[/bold]")

        try:
            while (card := controller.current_card()) is not None:
                console.print()
                display_card_front(card, session.index + 1, session.total)
                Prompt.ask("[dim]Press Enter to reveal[/dim]", default="", show_default=False)
                display_card_back(card)

                choice = Prompt.ask(
                    "Got it (g) / Almost (a) / Missed (m)",
                    choices=list(JUDGMENT_KEYS),
                )
                controller.judge(JUDGMENT_KEYS[choice])

        except KeyboardInterrupt:
            console.print("\n\n[yellow]Session interrupted. Progress is saved.[/yellow]")

        _display_session_summary(session)
    finally:
        store.close()


@app.command()
def words(
    lang: Optional[str] = typer.Option(None, "--lang", "-l", help="Language id (zh, yue, ko)"),
) -> None:
    """List learned words with their mastery in each direction."""
    lang_id = _resolve_lang(lang)
    store = _open_store()
    try:
        vocabulary = store.get_vocabulary(lang_id)
    finally:
        store.close()

    if not vocabulary:
        console.print(f"\n[dim]No {lang_id} words yet.[/dim]")
        return

    table = Table(title=f"{len(vocabulary)} words ({lang_id})")
    table.add_column("Word")
    table.add_column("Translation")
    table.add_column("Forward")
    table.add_column("Reverse")

    for record in vocabulary.values():
        table.add_row(
            record.target,
            record.translation,
            style_mastery(get_mastery_level(record, Direction.FORWARD).value),
            style_mastery(get_mastery_level(record, Direction.REVERSE).value),
        )

    console.print(table)


@app.command()
def remove(
    target: str = typer.Argument(..., help="Word to remove"),
) -> None:
    """Remove a word and its review progress."""
    store = _open_store()
    try:
        removed = store.delete_word(target)
    finally:
        store.close()

    if not removed:
        console.print(f"[red]{target} is not in your vocabulary[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Removed {target}[/green]")


# =============================================================================
# Entry Point
# =============================================================================

def configure_logging(settings: Settings) -> None:
    """Route loguru output to stderr (and a file when configured)."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<level>{message}</level>",
    )
    if settings.log_file:
        logger.add(
            settings.log_file,
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
        )


def main() -> None:
    """CLI entry point."""
    configure_logging(get_settings())
    app()


if __name__ == "__main__":
    main()
