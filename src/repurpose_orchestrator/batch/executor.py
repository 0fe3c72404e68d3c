"""Execution strategies for a batch run.

An executor only decides *when* each task is handed to the runner's handler;
status changes, persistence and progress stay in the runner.
"""

from __future__ import annotations

import logging
import queue
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor

from repurpose_orchestrator.models import TransformationTask

logger = logging.getLogger(__name__)

TaskHandler = Callable[[TransformationTask], None]


class Executor(ABC):
    max_workers: int = 1

    @abstractmethod
    def execute(
        self,
        tasks: Sequence[TransformationTask],
        handler: TaskHandler,
        cancelled: threading.Event,
    ) -> None:
        """Hand every task to ``handler`` unless ``cancelled`` is set first.

        ``cancelled`` is checked before each task is started; tasks already
        handed to the handler are allowed to finish.
        """


class SequentialExecutor(Executor):
    """One task at a time, in matrix order."""

    def execute(
        self,
        tasks: Sequence[TransformationTask],
        handler: TaskHandler,
        cancelled: threading.Event,
    ) -> None:
        for task in tasks:
            if cancelled.is_set():
                logger.info("Cancellation requested; not starting remaining tasks")
                return
            handler(task)


class PooledExecutor(Executor):
    """``max_workers`` threads pulling from one shared queue.

    Tasks are dequeued in matrix order but may finish out of order.
    """

    def __init__(self, max_workers: int = 3) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self.max_workers = max_workers

    def execute(
        self,
        tasks: Sequence[TransformationTask],
        handler: TaskHandler,
        cancelled: threading.Event,
    ) -> None:
        pending: queue.Queue[TransformationTask] = queue.Queue()
        for task in tasks:
            pending.put(task)

        def worker() -> None:
            while not cancelled.is_set():
                try:
                    task = pending.get_nowait()
                except queue.Empty:
                    return
                handler(task)

        workers = min(self.max_workers, len(tasks)) or 1
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="repurpose") as pool:
            futures = [pool.submit(worker) for _ in range(workers)]
            try:
                for future in futures:
                    future.result()
            except BaseException:
                # Ctrl-C lands here; stop workers dequeuing before the pool joins them.
                cancelled.set()
                raise


def executor_for(concurrency: int) -> Executor:
    if concurrency <= 1:
        return SequentialExecutor()
    return PooledExecutor(max_workers=concurrency)
