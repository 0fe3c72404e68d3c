"""Expansion of a content × platform selection into transformation tasks."""

from __future__ import annotations

from collections.abc import Sequence

from repurpose_orchestrator.catalog import get_platform
from repurpose_orchestrator.models import (
    ContentItem,
    InvalidSelection,
    PlatformTarget,
    TransformationTask,
)


def task_id_for(content_id: str, platform_id: str) -> str:
    return f"{content_id}:{platform_id}"


def build_task_matrix(
    contents: Sequence[ContentItem],
    platforms: Sequence[PlatformTarget | str],
) -> list[TransformationTask]:
    """Return one pending task per (content, platform) pair.

    Order is content-major, platform-minor, following the order of the inputs.
    Repeated content or platform ids are collapsed to their first occurrence.

    Raises:
        InvalidSelection: If either selection is empty or names an unknown platform.
    """
    if not contents:
        raise InvalidSelection("Select at least one content item")
    if not platforms:
        raise InvalidSelection("Select at least one platform")

    unique_contents: dict[str, ContentItem] = {}
    for item in contents:
        unique_contents.setdefault(item.id, item)

    unique_platforms: dict[str, PlatformTarget] = {}
    for platform in platforms:
        target = platform if isinstance(platform, PlatformTarget) else get_platform(platform)
        unique_platforms.setdefault(target.id, target)

    return [
        TransformationTask(task_id=task_id_for(item.id, target.id), content=item, platform=target)
        for item in unique_contents.values()
        for target in unique_platforms.values()
    ]
