"""Progress reporting sinks.

The runner pushes ``(percentage, status_text)`` after every task; consumers
decide how often to render.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProgressUpdate:
    percentage: int
    status_text: str


class ProgressReporter(ABC):
    @abstractmethod
    def report(self, percentage: int, status_text: str) -> None:
        """Receive one progress update. Must not raise."""


class LoggingProgressReporter(ProgressReporter):
    def report(self, percentage: int, status_text: str) -> None:
        logger.info(status_text, extra={"percentage": percentage})


class RecordingProgressReporter(ProgressReporter):
    """Keeps every update in order; a UI can poll :attr:`latest`."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._updates: list[ProgressUpdate] = []

    def report(self, percentage: int, status_text: str) -> None:
        with self._lock:
            self._updates.append(ProgressUpdate(percentage, status_text))

    @property
    def updates(self) -> list[ProgressUpdate]:
        with self._lock:
            return list(self._updates)

    @property
    def percentages(self) -> list[int]:
        return [u.percentage for u in self.updates]

    @property
    def latest(self) -> ProgressUpdate | None:
        with self._lock:
            return self._updates[-1] if self._updates else None


class CallbackProgressReporter(ProgressReporter):
    def __init__(self, callback: Callable[[int, str], None]) -> None:
        self._callback = callback

    def report(self, percentage: int, status_text: str) -> None:
        self._callback(percentage, status_text)
