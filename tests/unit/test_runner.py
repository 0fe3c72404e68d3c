"""Unit tests for the batch runner.

These cover the run-level guarantees: every task ends terminal, progress only
moves forward, one failure never stops the rest, and each success is saved once.
"""

from __future__ import annotations

import threading
from typing import Any
from unittest.mock import Mock

import pytest

from repurpose_orchestrator.batch.executor import PooledExecutor
from repurpose_orchestrator.batch.export import render_results_csv
from repurpose_orchestrator.batch.matrix import build_task_matrix
from repurpose_orchestrator.batch.progress import (
    CallbackProgressReporter,
    RecordingProgressReporter,
)
from repurpose_orchestrator.batch.runner import BatchRunner
from repurpose_orchestrator.llm.provider import LLMProvider
from repurpose_orchestrator.models import (
    BatchRun,
    Failed,
    InvalidSelection,
    RunState,
    Succeeded,
    TaskFailure,
    TaskStatus,
    TransformationResult,
)
from repurpose_orchestrator.storage.result_store import (
    InMemoryResultStore,
    RepositoryError,
    ResultRepository,
)
from repurpose_orchestrator.transform.client import TransformationClient


def _runner(provider: LLMProvider, repository: ResultRepository | None = None, **kwargs: Any):
    reporter = kwargs.pop("reporter", None) or RecordingProgressReporter()
    runner = BatchRunner(
        TransformationClient(provider),
        repository or InMemoryResultStore(),
        reporter,
        **kwargs,
    )
    return runner, reporter


def test_run_completes_all_tasks(scripted_provider, three_items) -> None:
    store = InMemoryResultStore()
    runner, reporter = _runner(scripted_provider, store, user_id="user-1")

    run = runner.run(build_task_matrix(three_items, ["twitter", "linkedin"]))

    assert run.state == RunState.COMPLETED
    assert run.completed_count == run.total_count == 6
    assert len(run.results) + len(run.failures) == 6
    assert all(t.status == TaskStatus.SUCCEEDED for t in run.tasks)
    assert all(r.persisted and r.status == "draft" for r in run.results)
    assert [r.user_id for r in store.records] == ["user-1"] * 6
    assert run.summary().unpersisted == 0


def test_progress_is_non_decreasing_and_ends_at_100(scripted_provider, three_items) -> None:
    runner, reporter = _runner(scripted_provider)

    runner.run(build_task_matrix(three_items, ["twitter", "linkedin"]))

    percentages = reporter.percentages
    assert percentages == [0, 17, 33, 50, 67, 83, 100, 100]
    assert percentages == sorted(percentages)
    assert reporter.latest is not None
    assert reporter.latest.status_text.startswith("Completed: 6 succeeded, 0 failed")


def test_single_failure_does_not_stop_remaining_tasks(scripted_provider, three_items) -> None:
    scripted_provider.fail_on = {2}
    runner, _ = _runner(scripted_provider)

    run = runner.run(build_task_matrix(three_items, ["twitter", "linkedin"]))

    summary = run.summary()
    assert (summary.succeeded, summary.failed, summary.total) == (5, 1, 6)
    assert run.state == RunState.COMPLETED
    assert scripted_provider.calls == 6

    [failure] = run.failures
    assert failure.task_id == "c1:linkedin"
    assert failure.platform == "linkedin"
    assert "simulated outage" in failure.error_message
    assert run.tasks[1].status == TaskStatus.FAILED

    csv_text = render_results_csv(run.results)
    assert len(csv_text.splitlines()) == 1 + 5


def test_save_is_called_once_per_succeeded_task(scripted_provider, three_items) -> None:
    scripted_provider.fail_on = {4}
    repository = Mock(spec=ResultRepository)
    repository.save.return_value = "record-id"
    runner, _ = _runner(scripted_provider, repository)

    run = runner.run(build_task_matrix(three_items, ["twitter", "linkedin"]))

    assert repository.save.call_count == len(run.results) == 5
    saved_task_ids = [c.args[0].task_id for c in repository.save.call_args_list]
    assert len(set(saved_task_ids)) == 5
    assert "c2:linkedin" not in saved_task_ids


def test_repository_failure_keeps_result_as_unpersisted(scripted_provider, three_items) -> None:
    repository = Mock(spec=ResultRepository)
    repository.save.side_effect = ["r1", RepositoryError("disk full"), "r3", "r4", "r5", "r6"]
    runner, reporter = _runner(scripted_provider, repository)

    run = runner.run(build_task_matrix(three_items, ["twitter", "linkedin"]))

    summary = run.summary()
    assert summary.succeeded == 6
    assert summary.failed == 0
    assert summary.unpersisted == 1
    assert reporter.percentages[-1] == 100

    unsaved = run.results[1]
    assert unsaved.persisted is False
    assert unsaved.persistence_error == "disk full"
    assert unsaved.status == "unsaved"
    assert run.results[0].record_id == "r1"


def test_cancel_after_three_tasks_stops_further_calls(scripted_provider, three_items) -> None:
    holder: dict[str, BatchRunner] = {}

    def on_progress(_pct: int, text: str) -> None:
        if text.startswith("3/6"):
            holder["runner"].cancel()

    runner, _ = _runner(scripted_provider, reporter=CallbackProgressReporter(on_progress))
    holder["runner"] = runner

    run = runner.run(build_task_matrix(three_items, ["twitter", "linkedin"]))

    assert run.completed_count == 3
    assert run.state == RunState.CANCELLED
    assert scripted_provider.calls == 3
    assert [t.status for t in run.tasks[3:]] == [TaskStatus.CANCELLED] * 3
    assert not runner.cancel_requested


def test_result_returned_after_cancel_is_discarded(three_items) -> None:
    holder: dict[str, BatchRunner] = {}
    provider = Mock(spec=LLMProvider)

    def generate(prompt: str, *args: Any, **kwargs: Any) -> str:
        if provider.generate.call_count == 2:
            holder["runner"].cancel()
        return "generated"

    provider.generate.side_effect = generate
    repository = Mock(spec=ResultRepository)
    repository.save.return_value = "id"
    runner, _ = _runner(provider, repository)
    holder["runner"] = runner

    run = runner.run(build_task_matrix(three_items, ["twitter", "linkedin"]))

    assert run.completed_count == 1
    assert repository.save.call_count == 1
    assert run.tasks[1].status == TaskStatus.CANCELLED
    assert run.state == RunState.CANCELLED
    assert provider.generate.call_count == 2


def test_task_timeout_is_recorded_as_failure(three_items) -> None:
    release = threading.Event()
    provider = Mock(spec=LLMProvider)

    def generate(prompt: str, *args: Any, **kwargs: Any) -> str:
        if provider.generate.call_count == 1:
            release.wait(5)
        return "generated"

    provider.generate.side_effect = generate
    runner, _ = _runner(provider, task_timeout_seconds=0.05)

    try:
        run = runner.run(build_task_matrix(three_items[:1], ["twitter", "linkedin"]))
    finally:
        release.set()

    summary = run.summary()
    assert (summary.succeeded, summary.failed) == (1, 1)
    assert "Timed out" in run.failures[0].error_message
    assert run.state == RunState.COMPLETED


def test_unexpected_client_error_becomes_task_failure(three_items) -> None:
    client = Mock(spec=TransformationClient)
    client.transform.side_effect = [KeyError("choices"), "ok"]
    runner = BatchRunner(client, InMemoryResultStore(), RecordingProgressReporter())

    run = runner.run(build_task_matrix(three_items[:1], ["twitter", "linkedin"]))

    assert len(run.results) == 1
    assert run.failures[0].error_message.startswith("KeyError")


def test_pooled_executor_preserves_terminal_invariants(scripted_provider, three_items) -> None:
    scripted_provider.fail_on = {2}
    runner, reporter = _runner(scripted_provider, executor=PooledExecutor(max_workers=3))

    run = runner.run(build_task_matrix(three_items, ["twitter", "linkedin"]))

    assert run.state == RunState.COMPLETED
    assert run.completed_count == 6
    assert (len(run.results), len(run.failures)) == (5, 1)
    assert all(t.is_terminal for t in run.tasks)
    assert reporter.percentages == sorted(reporter.percentages)
    assert reporter.percentages[-1] == 100


def test_partial_export_only_includes_finished_successes(scripted_provider, three_items) -> None:
    exports: list[str] = []
    holder: dict[str, BatchRunner] = {}

    def on_progress(_pct: int, text: str) -> None:
        if text.startswith("2/6"):
            current = holder["runner"].current_run
            assert current is not None
            exports.append(render_results_csv(current.results_snapshot()))

    runner, _ = _runner(scripted_provider, reporter=CallbackProgressReporter(on_progress))
    holder["runner"] = runner

    runner.run(build_task_matrix(three_items, ["twitter", "linkedin"]))

    [partial] = exports
    rows = partial.splitlines()[1:]
    assert len(rows) == 2
    assert rows[0].startswith("Post A,twitter,A for twitter,draft,")
    assert rows[1].startswith("Post A,linkedin,A for linkedin,draft,")


def test_empty_task_list_is_rejected(scripted_provider) -> None:
    runner, reporter = _runner(scripted_provider)

    with pytest.raises(InvalidSelection):
        runner.run([])

    assert reporter.updates == []
    assert runner.current_run is None


def test_runner_can_be_reused_for_another_run(scripted_provider, three_items) -> None:
    runner, _ = _runner(scripted_provider)

    first = runner.run(build_task_matrix(three_items[:1], ["twitter"]))
    second = runner.run(build_task_matrix(three_items, ["twitter"]))

    assert first.completed_count == 1
    assert second.completed_count == 3
    assert runner.current_run is second


def test_pooled_cancel_after_three_tasks_saves_only_recorded_results(
    scripted_provider, three_items
) -> None:
    holder: dict[str, BatchRunner] = {}

    def on_progress(_pct: int, text: str) -> None:
        if text.startswith("3/6"):
            holder["runner"].cancel()

    repository = Mock(spec=ResultRepository)
    repository.save.return_value = "id"
    runner, _ = _runner(
        scripted_provider,
        repository,
        reporter=CallbackProgressReporter(on_progress),
        executor=PooledExecutor(max_workers=3),
    )
    holder["runner"] = runner

    run = runner.run(build_task_matrix(three_items, ["twitter", "linkedin"]))

    assert run.state == RunState.CANCELLED
    assert run.completed_count == 3
    assert repository.save.call_count == len(run.results)
    assert not any(t.status in (TaskStatus.PENDING, TaskStatus.RUNNING) for t in run.tasks)


def test_cancel_before_run_applies_to_that_run(scripted_provider, three_items) -> None:
    runner, _ = _runner(scripted_provider)

    runner.cancel()
    run = runner.run(build_task_matrix(three_items, ["twitter"]))

    assert run.state == RunState.CANCELLED
    assert run.completed_count == 0
    assert scripted_provider.calls == 0
    assert [t.status for t in run.tasks] == [TaskStatus.CANCELLED] * 3

    again = runner.run(build_task_matrix(three_items, ["twitter"]))
    assert again.state == RunState.COMPLETED


def test_timed_out_call_runs_on_daemon_thread(three_items) -> None:
    release = threading.Event()
    started = threading.Event()
    provider = Mock(spec=LLMProvider)

    def generate(prompt: str, *args: Any, **kwargs: Any) -> str:
        started.set()
        release.wait(5)
        return "late"

    provider.generate.side_effect = generate
    runner, _ = _runner(provider, task_timeout_seconds=0.05)

    try:
        run = runner.run(build_task_matrix(three_items[:1], ["twitter"]))
        assert started.is_set()
        workers = [t for t in threading.enumerate() if t.name == "transform-c1:twitter"]
        assert workers
        assert all(t.daemon for t in workers)
    finally:
        release.set()

    assert run.failures[0].error_message == "Timed out after 0.05s"


def test_completed_count_tracks_recorded_outcomes(three_items) -> None:
    run = BatchRun(tasks=build_task_matrix(three_items[:1], ["twitter", "linkedin"]))

    run.record_outcome(
        Succeeded(
            TransformationResult(
                task_id="c1:twitter",
                content_id="c1",
                content_title="Post A",
                platform="twitter",
                generated_text="A for twitter",
            )
        )
    )
    run.record_outcome(
        Failed(
            TaskFailure(
                task_id="c1:linkedin", content_id="c1", platform="linkedin", error_message="boom"
            )
        )
    )

    assert run.completed_count == len(run.results) + len(run.failures) == 2
    assert run.percentage == 100
