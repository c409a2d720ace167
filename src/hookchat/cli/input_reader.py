"""Multi-line turn input terminated by /send, with /exit to leave."""

from __future__ import annotations

import logging
import sys
from typing import Callable, TextIO

from ..models import TurnInput
from .renderer import GOLD, SLATE

logger = logging.getLogger(__name__)

SEND_COMMAND = "/send"
EXIT_COMMAND = "/exit"

FIRST_PROMPT = ">>> "
CONTINUATION_PROMPT = "... "

LineSource = Callable[[str], str]


class InputClosedError(Exception):
    """The input stream ended or failed; the session cannot continue."""


class PromptToolkitSource:
    """Interactive line source with history and line editing."""

    def __init__(self) -> None:
        from prompt_toolkit import PromptSession
        from prompt_toolkit.history import InMemoryHistory

        self._session: PromptSession[str] = PromptSession(history=InMemoryHistory())

    def __call__(self, prompt: str) -> str:
        from prompt_toolkit.formatted_text import HTML

        color = GOLD if prompt == FIRST_PROMPT else SLATE
        return self._session.prompt(HTML('<style fg="{}">{}</style>').format(color, prompt))


class StreamSource:
    """Line source for piped (non-TTY) input."""

    def __init__(self, stream: TextIO | None = None, echo: TextIO | None = None) -> None:
        self._stream = stream or sys.stdin
        self._echo = echo

    def __call__(self, prompt: str) -> str:
        if self._echo is not None:
            self._echo.write(prompt)
            self._echo.flush()
        line = self._stream.readline()
        if not line:
            raise EOFError("end of input")
        return line.rstrip("\r\n")


def default_line_source() -> LineSource:
    if sys.stdin.isatty():
        return PromptToolkitSource()
    return StreamSource()


class TurnReader:
    def __init__(
        self,
        read_line: LineSource | None = None,
        *,
        on_cancel: Callable[[], None] | None = None,
    ) -> None:
        self._read_line = read_line or default_line_source()
        self._on_cancel = on_cancel

    def _read(self, prompt: str) -> str:
        try:
            return self._read_line(prompt)
        except EOFError as e:
            raise InputClosedError("Input stream closed") from e
        except OSError as e:
            raise InputClosedError(f"Could not read input: {e}") from e

    def read_turn(self) -> TurnInput:
        """Read lines until /send or /exit.

        /exit wins at any point and drops whatever was typed so far. Ctrl+C
        drops the partial turn and starts over at the first prompt.
        """
        lines: list[str] = []
        while True:
            prompt = CONTINUATION_PROMPT if lines else FIRST_PROMPT
            try:
                raw = self._read(prompt)
            except KeyboardInterrupt:
                logger.debug("Discarded %d pending line(s)", len(lines))
                lines = []
                if self._on_cancel is not None:
                    self._on_cancel()
                continue

            line = raw.strip()
            if line == EXIT_COMMAND:
                return TurnInput(text="", is_exit=True)
            if line == SEND_COMMAND:
                return TurnInput(text="\n".join(lines), is_exit=False)
            lines.append(line)

    def read_choice(self, prompt: str) -> str:
        """Read one trimmed line (menu answers). Ctrl+C is fatal here."""
        try:
            return self._read(prompt).strip()
        except KeyboardInterrupt as e:
            raise InputClosedError("Input cancelled") from e
