"""JSON-file backed repository of source content items."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from repurpose_orchestrator.models import ContentItem, InvalidSelection

logger = logging.getLogger(__name__)


class ContentStoreError(RuntimeError):
    """Raised when the content file cannot be read back safely."""


class ContentStore:
    """Read side of the content repository, plus ``add`` for local imports."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def _load_strict(self) -> list[ContentItem]:
        if not self._path.exists():
            return []
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ContentStoreError(f"Content file {self._path} is not valid JSON: {e}") from e
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise ContentStoreError(f"Content file {self._path} has unexpected shape")
        return [ContentItem.model_validate(item) for item in raw]

    def load(self) -> list[ContentItem]:
        try:
            return self._load_strict()
        except ContentStoreError as e:
            logger.warning(
                "Content file unreadable; treating as empty",
                extra={"path": str(self._path), "error": str(e)},
            )
            return []

    def save(self, items: list[ContentItem]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = [item.model_dump(mode="json") for item in items]
        self._path.write_text(
            json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )

    def add(self, item: ContentItem) -> None:
        # Never overwrite a file we could not parse.
        items = self._load_strict()
        if any(existing.id == item.id for existing in items):
            raise ValueError(f"Content item already exists: {item.id!r}")
        items.append(item)
        self.save(items)

    def get(self, content_id: str) -> ContentItem | None:
        for item in self.load():
            if item.id == content_id:
                return item
        return None

    def resolve(self, content_ids: list[str]) -> list[ContentItem]:
        """Return items in the requested order; unknown ids are an error."""
        by_id = {item.id: item for item in self.load()}
        missing = [cid for cid in content_ids if cid not in by_id]
        if missing:
            raise InvalidSelection(f"Unknown content ids: {', '.join(missing)}")
        return [by_id[cid] for cid in content_ids]
