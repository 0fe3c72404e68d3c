"""Application-facing entry point wiring configuration to the batch core."""

import logging

from repurpose_orchestrator.batch.executor import executor_for
from repurpose_orchestrator.batch.matrix import build_task_matrix
from repurpose_orchestrator.batch.progress import ProgressReporter
from repurpose_orchestrator.batch.runner import BatchRunner
from repurpose_orchestrator.catalog import resolve_platforms
from repurpose_orchestrator.core.config import RepurposeConfig
from repurpose_orchestrator.llm.factory import LLMFactory
from repurpose_orchestrator.llm.provider import LLMProvider
from repurpose_orchestrator.models import BatchRun
from repurpose_orchestrator.storage.content_store import ContentStore
from repurpose_orchestrator.storage.result_store import JsonResultStore, ResultRepository
from repurpose_orchestrator.transform.client import TransformationClient

logger = logging.getLogger(__name__)


class RepurposeOrchestrator:
    """Builds runners from configuration and runs bulk repurposing batches.

    The LLM provider and result repository can be injected; otherwise they
    are created from ``config``.
    """

    def __init__(
        self,
        config: RepurposeConfig | None = None,
        *,
        provider: LLMProvider | None = None,
        repository: ResultRepository | None = None,
    ) -> None:
        self.config = config or RepurposeConfig()

        self.llm: LLMProvider = provider or LLMFactory.create(self.config.llm)
        self.content = ContentStore(self.config.storage.content_file)
        self.results: ResultRepository = repository or JsonResultStore(
            self.config.storage.results_file
        )
        self.client = TransformationClient(self.llm, tone=self.config.runner.default_tone)

        self._runner: BatchRunner | None = None

    def create_runner(self, reporter: ProgressReporter | None = None) -> BatchRunner:
        runner_config = self.config.runner
        self._runner = BatchRunner(
            self.client,
            self.results,
            reporter,
            executor_for(runner_config.concurrency),
            task_timeout_seconds=runner_config.task_timeout_seconds,
            user_id=runner_config.user_id,
        )
        return self._runner

    def run_batch(
        self,
        content_ids: list[str],
        platform_ids: list[str],
        reporter: ProgressReporter | None = None,
    ) -> BatchRun:
        """Resolve the selection, then run the full content × platform matrix.

        Raises:
            InvalidSelection: If the selection is empty or names unknown ids.
        """
        # Runner first, so a cancel during resolution reaches this run.
        runner = self.create_runner(reporter)
        contents = self.content.resolve(content_ids)
        platforms = resolve_platforms(platform_ids)
        tasks = build_task_matrix(contents, platforms)

        logger.info(
            "Running bulk repurpose",
            extra={"contents": len(contents), "platforms": [p.id for p in platforms]},
        )
        return runner.run(tasks)

    @property
    def current_run(self) -> BatchRun | None:
        return self._runner.current_run if self._runner is not None else None

    def cancel(self) -> None:
        if self._runner is not None:
            self._runner.cancel()

    def close(self) -> None:
        self.llm.close()
