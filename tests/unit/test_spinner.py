"""Tests for the background progress spinner."""

from __future__ import annotations

import io
import threading
import time

import pytest

from hookchat.cli.spinner import ProgressIndicator


class RecordingStream(io.StringIO):
    """StringIO that records every write with a timestamp."""

    def __init__(self) -> None:
        super().__init__()
        self.writes: list[tuple[float, str]] = []
        self._lock = threading.Lock()

    def write(self, s: str) -> int:
        with self._lock:
            self.writes.append((time.monotonic(), s))
        return super().write(s)

    def isatty(self) -> bool:
        return True


class TestLifecycle:
    def test_not_running_initially(self) -> None:
        spinner = ProgressIndicator(RecordingStream(), interval=0.01)
        assert spinner.running is False

    def test_start_and_stop(self) -> None:
        spinner = ProgressIndicator(RecordingStream(), interval=0.01)
        spinner.start()
        assert spinner.running is True
        elapsed = spinner.stop()
        assert spinner.running is False
        assert elapsed >= 0.0

    def test_double_start_rejected(self) -> None:
        spinner = ProgressIndicator(RecordingStream(), interval=0.01)
        spinner.start()
        try:
            with pytest.raises(RuntimeError):
                spinner.start()
        finally:
            spinner.stop()

    def test_stop_when_idle_is_noop(self) -> None:
        stream = RecordingStream()
        spinner = ProgressIndicator(stream, interval=0.01)
        assert spinner.stop() == 0.0
        assert stream.getvalue() == ""

    def test_restart_after_stop(self) -> None:
        spinner = ProgressIndicator(RecordingStream(), interval=0.01)
        for _ in range(3):
            spinner.start()
            spinner.stop()
        assert spinner.running is False

    def test_context_manager(self) -> None:
        stream = RecordingStream()
        with ProgressIndicator(stream, interval=0.01) as spinner:
            assert spinner.running
        assert not spinner.running

    def test_invalid_interval(self) -> None:
        with pytest.raises(ValueError):
            ProgressIndicator(RecordingStream(), interval=0)


class TestDrawing:
    def test_frames_overwrite_same_line(self) -> None:
        stream = RecordingStream()
        spinner = ProgressIndicator(stream, interval=0.01, label="Working")
        spinner.start()
        time.sleep(0.08)
        spinner.stop()
        output = stream.getvalue()
        assert "\n" not in output
        assert "Working" in output
        assert spinner.frames_drawn >= 2
        for _, text in stream.writes:
            assert text.startswith("\r")

    def test_frames_cycle(self) -> None:
        stream = RecordingStream()
        spinner = ProgressIndicator(stream, interval=0.005, frames=("A", "B"))
        spinner.start()
        time.sleep(0.06)
        spinner.stop()
        output = stream.getvalue()
        assert "A Thinking" in output
        assert "B Thinking" in output

    def test_line_erased_on_stop(self) -> None:
        stream = RecordingStream()
        spinner = ProgressIndicator(stream, interval=0.01)
        spinner.start()
        time.sleep(0.03)
        spinner.stop()
        assert stream.writes[-1][1] == "\r\x1b[2K"

    def test_non_tty_draws_nothing(self) -> None:
        stream = io.StringIO()
        spinner = ProgressIndicator(stream, interval=0.01)
        spinner.start()
        time.sleep(0.03)
        spinner.stop()
        assert stream.getvalue() == ""

    def test_force_draws_on_non_tty(self) -> None:
        stream = io.StringIO()
        spinner = ProgressIndicator(stream, interval=0.01, force=True)
        spinner.start()
        time.sleep(0.03)
        spinner.stop()
        assert "Thinking" in stream.getvalue()


class TestStopRace:
    @pytest.mark.parametrize("trial", range(50))
    def test_no_frame_after_stop_returns(self, trial: int) -> None:
        stream = RecordingStream()
        spinner = ProgressIndicator(stream, interval=0.001)
        spinner.start()
        spinner.stop()
        returned_at = time.monotonic()
        count = len(stream.writes)
        time.sleep(0.005)
        assert len(stream.writes) == count
        assert all(ts <= returned_at for ts, _ in stream.writes)

    def test_output_after_stop_not_overwritten(self) -> None:
        stream = RecordingStream()
        spinner = ProgressIndicator(stream, interval=0.001)
        for _ in range(20):
            spinner.start()
            time.sleep(0.002)
            spinner.stop()
            stream.write("REPLY\n")
        assert stream.writes[-1][1] == "REPLY\n"
        texts = [text for _, text in stream.writes]
        for i, text in enumerate(texts):
            if text == "REPLY\n" and i > 0:
                before = texts[i - 1]
                assert before == "\r\x1b[2K" or "Thinking" not in before
