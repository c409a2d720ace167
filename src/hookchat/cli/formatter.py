"""Reformat reply text, re-styling fenced code blocks.

Fence detection is a two-state machine driven line by line. A line holding
the ``` marker flips the state; each flip is drawn as a full-width rule in
place of the marker. Lines inside a fence get the code style, lines outside
pass through untouched.

``FenceFormatter`` accepts text in arbitrary chunks and only renders complete
lines, so a reply split anywhere (even through a marker) renders exactly like
the whole reply passed to ``format_reply``.
"""

from __future__ import annotations

from enum import Enum

from rich.style import Style

from .renderer import CHROME, CODE_FG, MUTED, RULE_CHAR

FENCE = "```"

_CODE_STYLE = Style.parse(CODE_FG)
_RULE_STYLE = Style.parse(CHROME)
_TAG_STYLE = Style.parse(f"italic {MUTED}")


class FenceState(Enum):
    OUTSIDE = "outside"
    INSIDE = "inside"


def _paint(text: str, style: Style, styled: bool) -> str:
    if not styled or not text:
        return text
    return style.render(text)


class FenceFormatter:
    def __init__(self, *, width: int = 80, styled: bool = True, close_unterminated: bool = False) -> None:
        self.width = max(1, width)
        self.styled = styled
        self.close_unterminated = close_unterminated
        self._state = FenceState.OUTSIDE
        self._buffer = ""

    @property
    def state(self) -> FenceState:
        return self._state

    def _rule(self) -> str:
        return _paint(RULE_CHAR * self.width, _RULE_STYLE, self.styled)

    def _render_line(self, line: str) -> str:
        if FENCE not in line:
            if self._state is FenceState.INSIDE:
                return _paint(line, _CODE_STYLE, self.styled)
            return line

        before, _, after = line.partition(FENCE)
        out: list[str] = []
        if self._state is FenceState.OUTSIDE:
            if before.strip():
                out.append(before.rstrip())
            out.append(self._rule())
            # Language tag: shown once as a label, never as code.
            tag = after.strip().strip("`").strip()
            if tag:
                out.append(_paint(tag, _TAG_STYLE, self.styled))
            self._state = FenceState.INSIDE
        else:
            if before.strip():
                out.append(_paint(before.rstrip(), _CODE_STYLE, self.styled))
            out.append(self._rule())
            self._state = FenceState.OUTSIDE
            # Prose after a closing marker is ordinary text.
            if after.strip():
                out.append(after.strip())
        return "\n".join(out)

    def feed(self, chunk: str) -> str:
        """Buffer ``chunk`` and return the rendering of every completed line."""
        if not chunk:
            return ""
        self._buffer += chunk
        if "\n" not in self._buffer:
            return ""
        *complete, self._buffer = self._buffer.split("\n")
        return "".join(self._render_line(line) + "\n" for line in complete)

    def finish(self) -> str:
        """Flush the trailing partial line and reset for the next reply.

        An unterminated fence is closed silently; a closing rule is drawn
        only when ``close_unterminated`` is set.
        """
        out = ""
        if self._buffer:
            out = self._render_line(self._buffer)
            self._buffer = ""
        if self._state is FenceState.INSIDE and self.close_unterminated:
            out = f"{out}\n{self._rule()}" if out else self._rule()
        self._state = FenceState.OUTSIDE
        return out


def format_reply(
    raw: str,
    *,
    width: int = 80,
    styled: bool = True,
    close_unterminated: bool = False,
) -> str:
    formatter = FenceFormatter(width=width, styled=styled, close_unterminated=close_unterminated)
    return formatter.feed(raw) + formatter.finish()
