"""Terminal progress indicator.

The spinner is a context manager around a background thread. Leaving the
`with` block, normally or by exception, signals the thread through an Event
and joins it, so no frame is drawn after the block exits.
"""

import sys
import threading
from typing import IO

FRAMES = "⠋⠙⠹⠸⠼⠴⠦⠧"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
RESET = "\x1b[0m"


class Spinner:
    """Draws `[frame] message` on one line until stopped.

    Does nothing when the stream is not a terminal, so redirected or
    captured output stays clean.
    """

    def __init__(
        self,
        message: str = "",
        stream: IO[str] | None = None,
        interval: float = 0.1,
        enabled: bool | None = None,
    ) -> None:
        self.message = message
        self.stream = stream if stream is not None else sys.stderr
        self.interval = interval
        self.enabled = enabled if enabled is not None else self._is_tty()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def _is_tty(self) -> bool:
        isatty = getattr(self.stream, "isatty", None)
        return bool(isatty and isatty())

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if not self.enabled or self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._spin, name="llmpal-spinner", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def __enter__(self) -> "Spinner":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def _spin(self) -> None:
        self._write(HIDE_CURSOR)
        index = 0
        try:
            while not self._stop.is_set():
                self._write(f"\r[{FRAMES[index]}] {self.message}\r{RESET}")
                index = (index + 1) % len(FRAMES)
                self._stop.wait(self.interval)
        finally:
            self._write("\r" + " " * (len(self.message) + 4) + f"\r{SHOW_CURSOR}")

    def _write(self, text: str) -> None:
        self.stream.write(text)
        self.stream.flush()


def spinner(message: str) -> Spinner:
    """Progress factory for RunOrchestrator."""
    return Spinner(message)
