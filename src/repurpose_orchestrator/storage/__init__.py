"""Content and result repositories."""

from repurpose_orchestrator.storage.content_store import ContentStore, ContentStoreError
from repurpose_orchestrator.storage.result_store import (
    InMemoryResultStore,
    JsonResultStore,
    RepositoryError,
    ResultRecord,
    ResultRepository,
)

__all__ = [
    "ContentStore",
    "ContentStoreError",
    "InMemoryResultStore",
    "JsonResultStore",
    "RepositoryError",
    "ResultRecord",
    "ResultRepository",
]
