"""Command-line interface for archive captioning.

Provides subcommands for batch runs over the configured storage, the
periodic watcher, and processing a single local archive or document.
"""

import argparse
import asyncio
import json
import sys
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, TypeVar

from zipmeta.exceptions import ArchiveError, StorageError
from zipmeta.pipeline.factory import Pipeline, build_pipeline
from zipmeta.pipeline.models import BatchReport, Entry
from zipmeta.pipeline.scheduler import run_forever
from zipmeta.utils.config import load_config
from zipmeta.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

T = TypeVar("T")


async def _run_and_close(pipeline: Pipeline, coro: Coroutine[Any, Any, T]) -> T:
    """Await one pipeline call, then release the pipeline's backend connections."""
    try:
        return await coro
    finally:
        await pipeline.aclose()


def run_batch(pipeline: Pipeline, only_new: bool) -> BatchReport:
    """Run one batch over the configured storage and print a summary.

    Args:
        pipeline: Wired pipeline.
        only_new: Skip archives that already have metadata.

    Returns:
        The batch report.
    """
    logger.info("Starting batch run (only_new=%s)", only_new)
    report = asyncio.run(
        _run_and_close(pipeline, pipeline.orchestrator.run_batch(only_new))
    )
    _print_summary(report)
    return report


def process_archive_file(pipeline: Pipeline, zip_path: Path) -> dict[str, object]:
    """Caption every entry of a local zip archive without persisting it.

    Args:
        pipeline: Wired pipeline.
        zip_path: Path to the archive.

    Returns:
        The metadata as a JSON-ready dict.
    """
    metadata = asyncio.run(
        _run_and_close(
            pipeline,
            pipeline.processor.process_archive(
                zip_path.read_bytes(), zip_path.name, persist=False
            ),
        )
    )
    return metadata.model_dump(by_alias=True)


def caption_file(pipeline: Pipeline, file_path: Path) -> dict[str, object]:
    """Produce the metadata record for one local document."""
    entry = Entry(name=file_path.name, data=file_path.read_bytes())
    record = asyncio.run(_run_and_close(pipeline, pipeline.worker.process(entry)))
    return record.model_dump(by_alias=True)


def _print_summary(report: BatchReport) -> None:
    """Print batch summary to stdout."""
    if report.skipped:
        print("Previous batch still running, nothing done.")
        return

    print(f"\n{'=' * 50}")
    print("Batch Processing Complete")
    print(f"{'=' * 50}")
    print(f"Archives:   {len(report.listed)}")
    print(f"Successful: {len(report.succeeded)}")
    print(f"Failed:     {len(report.failed)}")
    for key, message in report.failed.items():
        print(f"  {key}: {message}")


def _emit(result: dict[str, object], output: Path | None) -> None:
    output_str = json.dumps(result, ensure_ascii=False, indent=2)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(output_str, encoding="utf-8")
        print(f"Output written to {output}")
    else:
        print(output_str)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Zip archive OCR captioning",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-c", "--config", type=Path, help="Configuration file (default: configs/config.yaml)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Run one batch over storage")
    run_parser.add_argument(
        "--all",
        action="store_true",
        help="Also reprocess archives that already have metadata",
    )

    subparsers.add_parser("watch", help="Run batches periodically")

    archive_parser = subparsers.add_parser("archive", help="Process a local zip archive")
    archive_parser.add_argument("zip_file", type=Path, help="Zip archive to process")
    archive_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    caption_parser = subparsers.add_parser("caption", help="Caption a single document")
    caption_parser.add_argument("file", type=Path, help="Document file to caption")
    caption_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    config = load_config(args.config)
    setup_logging(config.log_level)

    try:
        pipeline = build_pipeline(config)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    if args.command == "run":
        only_new = config.batch.only_new and not args.all
        try:
            run_batch(pipeline, only_new)
        except StorageError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)
    elif args.command == "watch":
        try:
            asyncio.run(
                _run_and_close(
                    pipeline,
                    run_forever(
                        pipeline.orchestrator,
                        config.batch.interval_minutes,
                        config.batch.only_new,
                    ),
                )
            )
        except KeyboardInterrupt:
            print("Stopped")
    elif args.command == "archive":
        if not args.zip_file.is_file():
            print(f"Error: {args.zip_file} does not exist", file=sys.stderr)
            sys.exit(1)
        try:
            result = process_archive_file(pipeline, args.zip_file)
        except ArchiveError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)
        _emit(result, args.output)
    elif args.command == "caption":
        if not args.file.is_file():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        _emit(caption_file(pipeline, args.file), args.output)


if __name__ == "__main__":
    main()
