"""CLI entrypoint: ``repurpose``.

Thin wrapper the surrounding application (or an operator) uses to import
content, list platforms, and run a bulk repurpose batch with CSV export.
"""

from __future__ import annotations

import argparse
import logging
import sys
import uuid
from pathlib import Path

from pydantic import ValidationError

from repurpose_orchestrator import __version__
from repurpose_orchestrator.batch.export import write_results_csv
from repurpose_orchestrator.batch.progress import CallbackProgressReporter
from repurpose_orchestrator.catalog import PLATFORMS, TONE_INSTRUCTIONS
from repurpose_orchestrator.core.config import RepurposeConfig
from repurpose_orchestrator.core.orchestrator import RepurposeOrchestrator
from repurpose_orchestrator.models import BatchRun, ContentItem, RunState
from repurpose_orchestrator.storage.content_store import ContentStore

logger = logging.getLogger(__name__)


def _parse_list(values: list[str] | None) -> list[str]:
    """Accept both repeated flags and comma-separated values."""
    if not values:
        return []
    parts = [p.strip() for value in values for p in value.split(",")]
    return [p for p in parts if p]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repurpose",
        description="Bulk-repurpose content for social platforms with a generative model",
    )
    parser.add_argument(
        "--version", action="version", version=f"repurpose-orchestrator {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("platforms", help="List supported target platforms")

    subparsers.add_parser("list-content", help="List stored content items")

    import_content = subparsers.add_parser(
        "import-content", help="Store a text file as a content item"
    )
    import_content.add_argument("--file", required=True, help="Text file holding the body")
    import_content.add_argument("--title", required=True, help="Content title")
    import_content.add_argument(
        "--content-type", default="article", help="Content type tag, e.g. article, video, podcast"
    )
    import_content.add_argument("--id", default=None, help="Content id (default: generated)")

    run = subparsers.add_parser(
        "run", help="Transform every selected content item for every selected platform"
    )
    run.add_argument(
        "--content",
        action="append",
        required=True,
        help="Content id; repeat or comma-separate for several",
    )
    run.add_argument(
        "--platform",
        action="append",
        required=True,
        help="Platform id (see `repurpose platforms`); repeat or comma-separate",
    )
    run.add_argument(
        "--export",
        default=None,
        help="Write a CSV of the generated posts to this file or directory",
    )
    run.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Parallel transformations (overrides REPURPOSE_RUNNER_CONCURRENCY)",
    )
    run.add_argument(
        "--timeout-seconds",
        type=float,
        default=None,
        help="Per-task timeout (overrides REPURPOSE_RUNNER_TASK_TIMEOUT_SECONDS)",
    )
    run.add_argument(
        "--tone",
        choices=sorted(TONE_INSTRUCTIONS),
        default=None,
        help="Tone of the generated posts",
    )

    return parser


def _apply_run_overrides(settings: RepurposeConfig, args: argparse.Namespace) -> RepurposeConfig:
    updates: dict[str, object] = {}
    if args.concurrency is not None:
        updates["concurrency"] = args.concurrency
    if args.timeout_seconds is not None:
        updates["task_timeout_seconds"] = args.timeout_seconds
    if args.tone is not None:
        updates["default_tone"] = args.tone
    if not updates:
        return settings
    runner = settings.runner.model_validate({**settings.runner.model_dump(), **updates})
    return settings.model_copy(update={"runner": runner})


def _print_summary(run: BatchRun) -> None:
    summary = run.summary()
    print(
        f"{summary.state.value}: {summary.succeeded} succeeded, {summary.failed} failed, "
        f"{summary.total} total"
    )
    if summary.unpersisted:
        print(f"{summary.unpersisted} result(s) generated but not saved (kept in export)")
    for failure in run.failures_snapshot():
        print(f"  FAILED {failure.task_id}: {failure.error_message}", file=sys.stderr)


def _run_batch(settings: RepurposeConfig, args: argparse.Namespace) -> int:
    settings = _apply_run_overrides(settings, args)
    orchestrator = RepurposeOrchestrator(settings)
    reporter = CallbackProgressReporter(
        lambda pct, text: print(f"[{pct:3d}%] {text}", flush=True)
    )

    try:
        try:
            run = orchestrator.run_batch(
                _parse_list(args.content), _parse_list(args.platform), reporter
            )
        except KeyboardInterrupt:
            orchestrator.cancel()
            current = orchestrator.current_run
            if current is None:
                return 5
            run = current
    finally:
        orchestrator.close()

    _print_summary(run)

    if args.export:
        path = write_results_csv(Path(args.export), run.results_snapshot())
        print(f"Exported {len(run.results)} row(s) to {path}")

    if run.state == RunState.CANCELLED:
        return 5
    summary = run.summary()
    if summary.failed or summary.unpersisted:
        return 4
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = RepurposeConfig()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    settings.setup_logging()

    try:
        if args.command == "platforms":
            for p in PLATFORMS:
                print(f"{p.id:<10} {p.name:<10} max {p.max_length:>5}  {p.description}")
            return 0

        if args.command == "list-content":
            for item in ContentStore(settings.storage.content_file).load():
                print(f"{item.id}  [{item.content_type}] {item.title} ({item.word_count} words)")
            return 0

        if args.command == "import-content":
            body = Path(args.file).read_text(encoding="utf-8")
            item = ContentItem(
                id=args.id or uuid.uuid4().hex,
                title=args.title,
                body=body,
                content_type=args.content_type,
                user_id=settings.runner.user_id,
                source_type="file",
            )
            ContentStore(settings.storage.content_file).add(item)
            logger.info(
                "Content stored",
                extra={"content_id": item.id, "path": str(settings.storage.content_file)},
            )
            print(f"Stored content {item.id}: {item.title} ({item.word_count} words)")
            return 0

        if args.command == "run":
            return _run_batch(settings, args)

        logger.error("Unknown command", extra={"command": args.command})
        return 2

    except ValueError as e:
        logger.warning(str(e))
        print(str(e), file=sys.stderr)
        return 2

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
