"""Result repository adapters.

Each succeeded transformation is written as soon as it is produced. Writes are
not idempotent: the runner is responsible for calling ``save`` once per task.
"""

from __future__ import annotations

import json
import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import UTC
from pathlib import Path

from pydantic import BaseModel, Field

from repurpose_orchestrator.models import TransformationResult


class RepositoryError(RuntimeError):
    """Persisting a generated result failed."""


class ResultRecord(BaseModel):
    """Row shape of the repurposed-content table."""

    id: str
    user_id: str
    original_content_id: str
    platform: str
    content_text: str
    status: str = Field(default="draft")
    created_at: str

    @classmethod
    def from_result(cls, result: TransformationResult, *, user_id: str) -> ResultRecord:
        created = result.created_at
        if created.tzinfo is None:
            created = created.replace(tzinfo=UTC)
        return cls(
            id=uuid.uuid4().hex,
            user_id=user_id,
            original_content_id=result.content_id,
            platform=result.platform,
            content_text=result.generated_text,
            created_at=created.astimezone(UTC).isoformat(),
        )


class ResultRepository(ABC):
    @abstractmethod
    def save(self, result: TransformationResult, *, user_id: str = "") -> str:
        """Insert one result and return the generated record id.

        Raises:
            RepositoryError: If the record could not be written.
        """


class InMemoryResultStore(ResultRepository):
    """Keeps records in a list; used by tests and dry runs."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.records: list[ResultRecord] = []

    def save(self, result: TransformationResult, *, user_id: str = "") -> str:
        record = ResultRecord.from_result(result, user_id=user_id)
        with self._lock:
            self.records.append(record)
        return record.id


@dataclass
class JsonResultStore(ResultRepository):
    path: Path

    def __post_init__(self) -> None:
        self._lock = threading.Lock()

    def _load_unlocked(self) -> list[ResultRecord]:
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            # Never overwrite a file we could not parse.
            raise RepositoryError(f"Result file {self.path} is not valid JSON: {e}") from e
        if not isinstance(raw, list):
            raise RepositoryError(f"Result file {self.path} has unexpected shape")
        return [ResultRecord.model_validate(item) for item in raw]

    def _save_unlocked(self, records: list[ResultRecord]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [r.model_dump(mode="json") for r in records]
        self.path.write_text(
            json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )

    def list(self) -> list[ResultRecord]:
        with self._lock:
            return self._load_unlocked()

    def save(self, result: TransformationResult, *, user_id: str = "") -> str:
        record = ResultRecord.from_result(result, user_id=user_id)
        with self._lock:
            try:
                records = self._load_unlocked()
                records.append(record)
                self._save_unlocked(records)
            except OSError as e:
                raise RepositoryError(f"Failed to write {self.path}: {e}") from e
        return record.id
