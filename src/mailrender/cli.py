"""Command-line entry point for mailrender."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from pydantic import ValidationError

from mailrender.calendar import CalendarSerializer
from mailrender.contacts import ContactSerializer
from mailrender.core import AppSettings, configure_logging, load_app_settings
from mailrender.core.interfaces import FatalExportError
from mailrender.export import DirectorySink, ItemExporter
from mailrender.ingestion import JsonItemSource
from mailrender.rendering import MessageAssembler, seed_process_random


def build_parser() -> argparse.ArgumentParser:
    """Create and configure the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Rebuild RFC822, vCard and iCalendar documents from mailbox items"
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file containing configuration overrides.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="info",
        choices=["info", "render"],
        help="Operation to execute.",
    )
    parser.add_argument(
        "input",
        nargs="?",
        type=Path,
        default=None,
        help="JSON item tree to render (required for the render command).",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Directory receiving the documents (default: configured directory).",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Do not print progress while rendering.",
    )
    return parser


def execute(args: argparse.Namespace, settings: AppSettings) -> int:
    """Execute the requested CLI command and return the exit status."""
    if args.command == "info":
        print("mailrender is ready. Pass 'render ITEMS.json' to export documents.")
        print(f"Output directory: {settings.output.directory}")
        print(f"Default charset: {settings.output.default_charset}")
        return 0
    if args.input is None:
        print("render: an input file is required", file=sys.stderr)
        return 2
    return _run_render(
        settings,
        args.input,
        output=args.output or settings.output.directory,
        quiet=args.quiet,
    )


def main() -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    settings = load_app_settings(env_file=args.env_file)
    configure_logging(settings.logging)
    sys.exit(execute(args, settings))


def _run_render(
    settings: AppSettings, source_path: Path, *, output: Path, quiet: bool
) -> int:
    """Render every item of ``source_path`` into ``output``."""
    try:
        source = JsonItemSource.from_path(source_path)
        root = source.root()
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        print(f"Unable to load {source_path}: {exc}", file=sys.stderr)
        return 1

    seed_process_random(settings.output.random_seed)
    calendar = CalendarSerializer(
        prodid=settings.output.prodid,
        fallback_charset=settings.output.default_charset,
    )
    assembler = MessageAssembler(
        settings.output, source=source, loader=source, calendar=calendar
    )
    exporter = ItemExporter(
        DirectorySink(output),
        assembler=assembler,
        contacts=ContactSerializer(settings.output),
        calendar=calendar,
        progress_callback=None if quiet else _print_progress,
    )
    try:
        report = exporter.run(root)
    except FatalExportError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(
        f"Wrote {report.documents} documents to {output} "
        f"({report.processed} items processed)."
    )
    return 0


def _print_progress(processed: int, total: int) -> None:
    suffix = f"/{total}" if total else ""
    print(f"Processed {processed}{suffix}", file=sys.stderr)


if __name__ == "__main__":
    main()
