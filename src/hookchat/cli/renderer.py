"""Rich-based terminal output for the chat session."""

from __future__ import annotations

import shutil
import sys
from typing import TextIO

from rich.console import Console
from rich.markup import escape
from rich.text import Text

# ---------------------------------------------------------------------------
# Color palette
# ---------------------------------------------------------------------------

GOLD = "#C5A059"  # accents, prompts, spinner label
SLATE = "#94A3B8"  # labels, endpoint display
MUTED = "#8b8b8b"  # secondary text, language tags
CHROME = "#6b7280"  # rules and hints
GREEN = "#7FB77E"  # reply marker, welcome title
ERROR_RED = "#CD6B6B"  # inline errors
CODE_FG = "#E5C07B"  # fenced code

_SEP = " · "
RULE_CHAR = "─"

_stdout: TextIO = sys.stdout
console = Console(file=_stdout, highlight=False)


def use_stream(stream: TextIO, *, force_terminal: bool | None = None) -> None:
    """Send all session output (console text, spinner, replies) to ``stream``."""
    global console, _stdout
    _stdout = stream
    console = Console(file=stream, force_terminal=force_terminal, highlight=False)


def get_stream() -> TextIO:
    return _stdout


def is_terminal() -> bool:
    return console.is_terminal


def terminal_width(max_width: int = 100) -> int:
    size = shutil.get_terminal_size(fallback=(80, 24))
    return max(20, min(size.columns, max_width))


def render_welcome(url: str, version: str = "") -> None:
    console.print()
    title = f"hookchat v{version}" if version else "hookchat"
    console.print(f"[bold {GREEN}]{escape(title)}[/]")
    console.print(f"  [{SLATE}]{escape(url)}[/]")
    console.print(
        f"  [{MUTED}]/send[/] [{CHROME}]submit[/]{_SEP}[{MUTED}]/exit[/] [{CHROME}]quit[/]"
        f"{_SEP}[{MUTED}]Ctrl+C[/] [{CHROME}]discard input[/]"
    )
    console.print()


def render_model_menu(models: list[str]) -> None:
    console.print("[bold]Select a model:[/bold]")
    for i, name in enumerate(models, 1):
        console.print(f"  [{GOLD}]{i}[/]. {escape(name)}")


def render_model_selected(model: str) -> None:
    console.print(f"  [{MUTED}]Using model[/] [bold]{escape(model)}[/bold]\n")


def render_invalid_choice(choice: str, count: int) -> None:
    console.print(f"[{ERROR_RED}]Invalid choice {escape(choice)!r}; enter a number from 1 to {count}.[/]")


def render_reply(text: str) -> None:
    """Write an already formatted reply verbatim (ANSI styles intact).

    A reply that opens with a full-width rule starts on its own line so the
    marker does not push the rule past the terminal edge.
    """
    first_line = Text.from_ansi(text.split("\n", 1)[0]).plain
    opens_with_rule = first_line.startswith(RULE_CHAR)
    console.print(f"[{GREEN}]$[/]", end="\n" if opens_with_rule else " ")
    _stdout.write(text)
    if not text.endswith("\n"):
        _stdout.write("\n")
    _stdout.flush()


def render_error(message: str) -> None:
    console.print(f"[bold {ERROR_RED}]Error:[/] {escape(message)}")


def render_cancelled() -> None:
    console.print(f"  [{CHROME}]input discarded[/]")


def render_goodbye() -> None:
    console.print(f"\n[{GOLD}]Exiting...[/]")
