"""Run observer protocol."""

from typing import Protocol


class RunObserver(Protocol):
    """Receives the user-facing output of a run.

    Status and warnings are diagnostics; the explanation is the model's answer
    and is delivered exactly once, before any file is written.
    """

    def on_status(self, message: str) -> None:
        """Handle a status line (banner, telemetry). Must not throw or block."""
        ...

    def on_warning(self, message: str) -> None:
        """Handle a non-fatal warning. Must not throw or block."""
        ...

    def on_explanation(self, text: str) -> None:
        """Handle the model's explanation. Must not throw or block."""
        ...


class NullRunObserver:
    """Observer that discards everything."""

    def on_status(self, message: str) -> None:
        pass

    def on_warning(self, message: str) -> None:
        pass

    def on_explanation(self, text: str) -> None:
        pass


class CollectingRunObserver:
    """Observer that keeps everything for later (JSON output, tests)."""

    def __init__(self) -> None:
        self.statuses: list[str] = []
        self.warnings: list[str] = []
        self.explanations: list[str] = []

    def on_status(self, message: str) -> None:
        self.statuses.append(message)

    def on_warning(self, message: str) -> None:
        self.warnings.append(message)

    def on_explanation(self, text: str) -> None:
        self.explanations.append(text)
