"""CSV export of generated results."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable
from datetime import UTC, date, datetime
from pathlib import Path

from repurpose_orchestrator.models import TransformationResult

EXPORT_HEADER: tuple[str, ...] = ("Title", "Platform", "Content", "Status", "CreatedAt")
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _format_timestamp(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(UTC)
    return value.strftime(TIMESTAMP_FORMAT)


def render_results_csv(results: Iterable[TransformationResult]) -> str:
    """Render one row per result under :data:`EXPORT_HEADER`.

    Fields containing the delimiter, quotes or newlines are quoted with inner
    quotes doubled. Pass a snapshot (``BatchRun.results_snapshot()``) to
    export a run that is still in progress.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(EXPORT_HEADER)
    for result in results:
        writer.writerow(
            [
                result.content_title or "Unknown",
                result.platform,
                result.generated_text,
                result.status,
                _format_timestamp(result.created_at),
            ]
        )
    return buffer.getvalue()


def export_filename(day: date | None = None) -> str:
    day = day or datetime.now(tz=UTC).date()
    return f"bulk-repurposed-content-{day.isoformat()}.csv"


def write_results_csv(path: Path, results: Iterable[TransformationResult]) -> Path:
    """Write the export to ``path`` (a directory gets the dated default name)."""
    if path.is_dir():
        path = path / export_filename()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_results_csv(results), encoding="utf-8")
    return path
