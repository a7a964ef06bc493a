"""Run observers for user-facing output."""

from llmpal.domain.events.console_observer import ConsoleRunObserver
from llmpal.domain.events.observer import (
    CollectingRunObserver,
    NullRunObserver,
    RunObserver,
)

__all__ = [
    "CollectingRunObserver",
    "ConsoleRunObserver",
    "NullRunObserver",
    "RunObserver",
]
