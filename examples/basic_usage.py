#!/usr/bin/env python3
"""Programmatic bulk repurpose example.

This demonstrates using the orchestrator components directly:

* load settings from `.env`
* pick stored content items and target platforms
* run the batch with a progress callback
* export the generated posts to CSV

Content ids and platforms are passed as arguments (not read from `.env`).
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from repurpose_orchestrator import RepurposeConfig, RepurposeOrchestrator
from repurpose_orchestrator.batch import CallbackProgressReporter, write_results_csv
from repurpose_orchestrator.models import InvalidSelection


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Bulk repurpose (programmatic example).")
    parser.add_argument("--content", required=True, help='Comma-separated content ids, e.g. "a1,b2"')
    parser.add_argument(
        "--platforms",
        default="twitter,linkedin",
        help='Comma-separated platform ids (default: "twitter,linkedin")',
    )
    parser.add_argument("--export", default="exports", help="Directory for the CSV export")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    content_ids = [c.strip() for c in args.content.split(",") if c.strip()]
    platform_ids = [p.strip() for p in args.platforms.split(",") if p.strip()]

    settings = RepurposeConfig()
    settings.setup_logging()

    orchestrator = RepurposeOrchestrator(settings)
    reporter = CallbackProgressReporter(lambda pct, text: print(f"{pct:3d}% {text}"))

    try:
        run = orchestrator.run_batch(content_ids, platform_ids, reporter)
    except InvalidSelection as exc:
        print(str(exc))
        return 2
    finally:
        orchestrator.close()

    summary = run.summary()
    print(f"{summary.succeeded} succeeded, {summary.failed} failed of {summary.total}")

    export_dir = Path(args.export)
    export_dir.mkdir(parents=True, exist_ok=True)
    path = write_results_csv(export_dir, run.results_snapshot())
    print(f"Exported to: {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
