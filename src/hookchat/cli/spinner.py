"""Background progress spinner shown while a webhook call is in flight.

A daemon thread redraws the current terminal line at a fixed interval until
``stop()`` sets the shared Event. ``stop()`` joins the thread before erasing
the line, so no stale frame can land on top of the output that follows.
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
from typing import Sequence, TextIO

from .renderer import CHROME, GOLD

logger = logging.getLogger(__name__)

DEFAULT_FRAMES: tuple[str, ...] = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")
DEFAULT_INTERVAL = 0.08

_CLEAR_LINE = "\r\033[2K"


def _hex_to_ansi(color: str) -> str:
    r, g, b = (int(color[i : i + 2], 16) for i in (1, 3, 5))
    return f"\033[38;2;{r};{g};{b}m"


class ProgressIndicator:
    def __init__(
        self,
        stream: TextIO,
        *,
        label: str = "Thinking...",
        interval: float = DEFAULT_INTERVAL,
        frames: Sequence[str] = DEFAULT_FRAMES,
        force: bool = False,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        if not frames:
            raise ValueError("frames must not be empty")
        self.stream = stream
        self.label = label
        self.interval = interval
        self.frames = tuple(frames)
        self._force = force
        self._stop_event = threading.Event()
        self._write_lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._started_at = 0.0
        self._frames_drawn = 0

    @property
    def running(self) -> bool:
        return self._thread is not None

    @property
    def frames_drawn(self) -> int:
        return self._frames_drawn

    def _should_draw(self) -> bool:
        if self._force:
            return True
        isatty = getattr(self.stream, "isatty", None)
        return bool(isatty and isatty())

    def _write(self, text: str) -> None:
        with self._write_lock:
            self.stream.write(text)
            self.stream.flush()

    def _render_frame(self, frame: str) -> str:
        elapsed = time.monotonic() - self._started_at
        gold = _hex_to_ansi(GOLD)
        timer_c = _hex_to_ansi(CHROME)
        rst = "\033[0m"
        timer = f" {timer_c}{elapsed:.0f}s{rst}" if elapsed >= 1.0 else ""
        return f"{_CLEAR_LINE}{gold}{frame} {self.label}{rst}{timer}"

    def _run(self, draw: bool) -> None:
        for frame in itertools.cycle(self.frames):
            if self._stop_event.is_set():
                return
            if draw:
                self._write(self._render_frame(frame))
                self._frames_drawn += 1
            if self._stop_event.wait(self.interval):
                return

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("spinner is already running")
        self._stop_event.clear()
        self._started_at = time.monotonic()
        self._frames_drawn = 0
        self._thread = threading.Thread(
            target=self._run,
            args=(self._should_draw(),),
            name="hookchat-spinner",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> float:
        """Stop the spinner, erase its line and return elapsed seconds.

        Blocks until the redraw thread has exited.
        """
        thread = self._thread
        if thread is None:
            return 0.0
        self._stop_event.set()
        thread.join()
        self._thread = None
        elapsed = time.monotonic() - self._started_at
        if self._frames_drawn:
            self._write(_CLEAR_LINE)
        logger.debug("Spinner stopped after %.2fs (%d frames)", elapsed, self._frames_drawn)
        return elapsed

    def __enter__(self) -> "ProgressIndicator":
        self.start()
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()
