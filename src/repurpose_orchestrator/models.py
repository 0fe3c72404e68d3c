"""Data model for batch transformation runs.

Persisted-shaped records (content items) are pydantic models; runtime
records owned by the runner are small dataclasses.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, model_validator


class InvalidSelection(ValueError):
    """Raised when a batch cannot start from the given content/platform selection."""


class TaskStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    # Run was cancelled before this task reached a terminal status.
    CANCELLED = "cancelled"


TERMINAL_STATUSES: frozenset[TaskStatus] = frozenset({TaskStatus.SUCCEEDED, TaskStatus.FAILED})


class RunState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class ContentItem(BaseModel):
    """A unit of uploaded source material. Read-only to the orchestrator."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    body: str
    content_type: str
    word_count: int | None = None
    created_at: datetime = Field(default_factory=_utc_now)

    user_id: str = Field(default="")
    source_type: str = Field(default="text")

    @model_validator(mode="before")
    @classmethod
    def _derive_word_count(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("word_count") is None and "body" in data:
            return {**data, "word_count": len(str(data["body"]).split())}
        return data


@dataclass(frozen=True, slots=True)
class PlatformTarget:
    """A destination format. ``max_length`` is shown to users, never enforced."""

    id: str
    name: str
    description: str
    max_length: int


@dataclass(slots=True)
class TransformationTask:
    task_id: str
    content: ContentItem
    platform: PlatformTarget
    status: TaskStatus = TaskStatus.PENDING

    @property
    def content_id(self) -> str:
        return self.content.id

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


@dataclass(frozen=True, slots=True)
class TransformationResult:
    """Generated text for one succeeded task.

    ``persisted`` is False when the repository write failed; the text is still
    kept for export.
    """

    task_id: str
    content_id: str
    content_title: str
    platform: str
    generated_text: str
    created_at: datetime = field(default_factory=_utc_now)

    persisted: bool = False
    record_id: str | None = None
    persistence_error: str | None = None

    @property
    def status(self) -> str:
        return "draft" if self.persisted else "unsaved"


@dataclass(frozen=True, slots=True)
class TaskFailure:
    task_id: str
    content_id: str
    platform: str
    error_message: str


@dataclass(frozen=True, slots=True)
class Succeeded:
    result: TransformationResult


@dataclass(frozen=True, slots=True)
class Failed:
    failure: TaskFailure


TransformationOutcome: TypeAlias = Succeeded | Failed


@dataclass(frozen=True, slots=True)
class RunSummary:
    succeeded: int
    failed: int
    total: int
    unpersisted: int
    state: RunState

    @property
    def completed(self) -> int:
        return self.succeeded + self.failed


def progress_percentage(completed: int, total: int) -> int:
    """Completion as an integer percentage, rounded half up."""
    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)


@dataclass
class BatchRun:
    """Aggregate state of one batch run.

    Mutated only by the runner. Readers (export, UI) take snapshots through the
    ``*_snapshot`` helpers, which are safe to call while workers are active.
    """

    tasks: list[TransformationTask]
    results: list[TransformationResult] = field(default_factory=list)
    failures: list[TaskFailure] = field(default_factory=list)
    state: RunState = RunState.IDLE
    started_at: datetime | None = None
    finished_at: datetime | None = None

    def __post_init__(self) -> None:
        self.total_count = len(self.tasks)
        self.lock = threading.RLock()

    def record_outcome(self, outcome: TransformationOutcome) -> int:
        """Append an outcome and return the new completed count."""
        with self.lock:
            if isinstance(outcome, Succeeded):
                self.results.append(outcome.result)
            else:
                self.failures.append(outcome.failure)
            return self.completed_count

    @property
    def completed_count(self) -> int:
        """Derived from the recorded outcomes, so it always matches them."""
        return len(self.results) + len(self.failures)

    @property
    def percentage(self) -> int:
        with self.lock:
            return progress_percentage(self.completed_count, self.total_count)

    def results_snapshot(self) -> list[TransformationResult]:
        with self.lock:
            return list(self.results)

    def failures_snapshot(self) -> list[TaskFailure]:
        with self.lock:
            return list(self.failures)

    def summary(self) -> RunSummary:
        with self.lock:
            return RunSummary(
                succeeded=len(self.results),
                failed=len(self.failures),
                total=self.total_count,
                unpersisted=sum(1 for r in self.results if not r.persisted),
                state=self.state,
            )
