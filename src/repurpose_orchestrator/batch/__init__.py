"""Batch transformation orchestration."""

from repurpose_orchestrator.batch.executor import (
    Executor,
    PooledExecutor,
    SequentialExecutor,
    executor_for,
)
from repurpose_orchestrator.batch.export import (
    EXPORT_HEADER,
    export_filename,
    render_results_csv,
    write_results_csv,
)
from repurpose_orchestrator.batch.matrix import build_task_matrix
from repurpose_orchestrator.batch.progress import (
    CallbackProgressReporter,
    LoggingProgressReporter,
    ProgressReporter,
    ProgressUpdate,
    RecordingProgressReporter,
)
from repurpose_orchestrator.batch.runner import BatchRunner

__all__ = [
    "BatchRunner",
    "CallbackProgressReporter",
    "EXPORT_HEADER",
    "Executor",
    "LoggingProgressReporter",
    "PooledExecutor",
    "ProgressReporter",
    "ProgressUpdate",
    "RecordingProgressReporter",
    "SequentialExecutor",
    "build_task_matrix",
    "executor_for",
    "export_filename",
    "render_results_csv",
    "write_results_csv",
]
