"""Batch runner: drives a task matrix to completion with partial-failure semantics."""

from __future__ import annotations

import dataclasses
import logging
import threading
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from repurpose_orchestrator.batch.executor import Executor, SequentialExecutor
from repurpose_orchestrator.batch.progress import LoggingProgressReporter, ProgressReporter
from repurpose_orchestrator.models import (
    BatchRun,
    Failed,
    InvalidSelection,
    RunState,
    Succeeded,
    TaskFailure,
    TaskStatus,
    TransformationOutcome,
    TransformationResult,
    TransformationTask,
    progress_percentage,
)
from repurpose_orchestrator.storage.result_store import RepositoryError, ResultRepository
from repurpose_orchestrator.transform.client import TransformationClient, TransformationError

logger = logging.getLogger(__name__)


class BatchRunner:
    """Execute batch runs end to end.

    Every task ends either succeeded or failed; a failing task never stops the
    ones after it. Succeeded results are saved to the repository one at a time
    as they are produced, and progress is reported after every task.

    A runner can be reused for any number of runs, one at a time.
    """

    def __init__(
        self,
        client: TransformationClient,
        repository: ResultRepository,
        reporter: ProgressReporter | None = None,
        executor: Executor | None = None,
        *,
        task_timeout_seconds: float | None = None,
        user_id: str = "",
    ) -> None:
        self.client = client
        self.repository = repository
        self.reporter = reporter or LoggingProgressReporter()
        self.executor = executor or SequentialExecutor()
        self.task_timeout_seconds = task_timeout_seconds
        self.user_id = user_id

        self._cancelled = threading.Event()
        self._run: BatchRun | None = None

    @property
    def current_run(self) -> BatchRun | None:
        """The run in progress, or the last finished one."""
        return self._run

    @property
    def cancel_requested(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Stop starting new tasks. In-flight results are discarded.

        A cancel issued before ``run`` starts applies to that run; the token is
        cleared once a run finishes.
        """
        logger.info("Batch cancellation requested")
        self._cancelled.set()

    def run(self, tasks: Sequence[TransformationTask]) -> BatchRun:
        """Run every task and return the finished :class:`BatchRun`.

        Raises:
            InvalidSelection: If ``tasks`` is empty.
            RuntimeError: If another run is still in progress on this runner.
        """
        if not tasks:
            raise InvalidSelection("Cannot start a batch with zero tasks")
        if self._run is not None and self._run.state == RunState.RUNNING:
            raise RuntimeError("A batch run is already in progress")

        run = BatchRun(tasks=list(tasks))
        self._run = run

        run.state = RunState.RUNNING
        run.started_at = datetime.now(tz=UTC)
        logger.info(
            "Batch run started",
            extra={"total": run.total_count, "workers": self.executor.max_workers},
        )
        self._report(0, f"Starting {run.total_count} transformations")

        cancelled = self._cancelled
        try:
            self.executor.execute(
                run.tasks, lambda task: self._process(run, task, cancelled), cancelled
            )
        finally:
            self._finish(run)
            self._cancelled = threading.Event()

        return run

    def _process(
        self, run: BatchRun, task: TransformationTask, cancelled: threading.Event
    ) -> None:
        if cancelled.is_set():
            return

        task.status = TaskStatus.RUNNING
        text: str | None = None
        error: str | None = None
        try:
            text = self._transform(task)
        except TransformationError as e:
            error = e.message
        except Exception as e:
            logger.warning(
                "Unexpected error from transformation client",
                extra={"task_id": task.task_id},
                exc_info=True,
            )
            error = f"{type(e).__name__}: {e}"

        # Checked under the run lock: a cancel issued from a progress report
        # is seen by every outcome recorded after it.
        with run.lock:
            if cancelled.is_set():
                task.status = TaskStatus.CANCELLED
                logger.info(
                    "Discarding result returned after cancellation",
                    extra={"task_id": task.task_id},
                )
                return

            if error is not None:
                outcome: TransformationOutcome = self._fail(task, error)
            else:
                outcome = self._succeed(task, text or "")
            self._complete(run, task, outcome)

    def _transform(self, task: TransformationTask) -> str:
        args = (task.content.body, task.platform, task.content.content_type)
        if self.task_timeout_seconds is None:
            return self.client.transform(*args)

        # Daemon thread: an abandoned call must not block interpreter exit.
        # Its late result is ignored.
        outcome: dict[str, Any] = {}

        def call() -> None:
            try:
                outcome["text"] = self.client.transform(*args)
            except Exception as e:
                outcome["error"] = e

        worker = threading.Thread(
            target=call, name=f"transform-{task.task_id}", daemon=True
        )
        worker.start()
        worker.join(self.task_timeout_seconds)
        if worker.is_alive():
            raise TransformationError(f"Timed out after {self.task_timeout_seconds:g}s")
        if "error" in outcome:
            raise outcome["error"]
        return outcome["text"]

    def _succeed(self, task: TransformationTask, text: str) -> Succeeded:
        task.status = TaskStatus.SUCCEEDED
        result = TransformationResult(
            task_id=task.task_id,
            content_id=task.content_id,
            content_title=task.content.title,
            platform=task.platform.id,
            generated_text=text,
        )

        try:
            record_id = self.repository.save(result, user_id=self.user_id)
        except Exception as e:
            reason = str(e) if isinstance(e, RepositoryError) else f"{type(e).__name__}: {e}"
            logger.warning(
                "Result generated but not saved",
                extra={"task_id": task.task_id, "platform": task.platform.id, "error": reason},
            )
            return Succeeded(dataclasses.replace(result, persistence_error=reason))

        return Succeeded(dataclasses.replace(result, persisted=True, record_id=record_id))

    def _fail(self, task: TransformationTask, message: str) -> Failed:
        task.status = TaskStatus.FAILED
        logger.warning(
            "Transformation failed",
            extra={"task_id": task.task_id, "platform": task.platform.id, "error": message},
        )
        return Failed(
            TaskFailure(
                task_id=task.task_id,
                content_id=task.content_id,
                platform=task.platform.id,
                error_message=message,
            )
        )

    def _complete(
        self, run: BatchRun, task: TransformationTask, outcome: TransformationOutcome
    ) -> None:
        # Counter and report move together so observers never see progress go backwards.
        with run.lock:
            completed = run.record_outcome(outcome)
            verdict = "succeeded" if isinstance(outcome, Succeeded) else "failed"
            self._report(
                progress_percentage(completed, run.total_count),
                f"{completed}/{run.total_count} {task.content.title} -> "
                f"{task.platform.name}: {verdict}",
            )

    def _finish(self, run: BatchRun) -> None:
        with run.lock:
            unfinished = [t for t in run.tasks if not t.is_terminal]
            for task in unfinished:
                task.status = TaskStatus.CANCELLED
            run.state = RunState.CANCELLED if unfinished else RunState.COMPLETED
            run.finished_at = datetime.now(tz=UTC)
            summary = run.summary()

            label = "Cancelled" if unfinished else "Completed"
            self._report(
                run.percentage,
                f"{label}: {summary.succeeded} succeeded, {summary.failed} failed "
                f"of {summary.total}",
            )

        logger.info(
            "Batch run finished",
            extra={
                "state": summary.state.value,
                "succeeded": summary.succeeded,
                "failed": summary.failed,
                "unpersisted": summary.unpersisted,
                "total": summary.total,
            },
        )

    def _report(self, percentage: int, status_text: str) -> None:
        try:
            self.reporter.report(percentage, status_text)
        except Exception:
            logger.warning("Progress reporter raised; continuing", exc_info=True)
