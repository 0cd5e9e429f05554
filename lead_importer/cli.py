"""Command line interface for importing lead files."""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from .config import load_importer_config
from .ingestion import SpreadsheetReadError, UnsupportedFileTypeError
from .ingestion.exporters import export_leads
from .orchestrator import ImportOrchestrator
from .storage import InMemoryStorage


def build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Import leads from a CSV or Excel file, inferring the column layout",
    )
    parser.add_argument("input", help="Path to the lead file (CSV or XLSX)")
    parser.add_argument(
        "output",
        nargs="?",
        help="Optional path where the imported leads should be written (CSV or XLSX)",
    )
    parser.add_argument("--search-id", type=int, default=None, help="Id recorded on the search the leads belong to (default: the next free id)")
    parser.add_argument("--segment", default="import", help="Segment recorded on the new search")
    parser.add_argument("--config", help="Path to an importer configuration file (YAML or JSON)")
    parser.add_argument(
        "--no-dedupe",
        action="store_true",
        help="Import rows even when their phone was already imported for the search",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    config = load_importer_config(args.config)
    if args.no_dedupe:
        config = replace(config, deduplicate=False)

    input_path = Path(args.input)
    if not input_path.exists():
        logging.error("Input file %s does not exist", input_path)
        return 1

    storage = InMemoryStorage()
    orchestrator = ImportOrchestrator(storage, config)
    search = orchestrator.start_search(0, args.segment, search_id=args.search_id)

    try:
        result = orchestrator.import_into_search(search.id, input_path.name, input_path.read_bytes())
    except (UnsupportedFileTypeError, SpreadsheetReadError) as exc:
        logging.error("Could not import %s: %s", input_path, exc)
        return 1
    print(result.message)

    if args.output:
        destination = export_leads(storage.get_results_by_search(search.id), args.output)
        logging.info("Imported leads written to %s", destination.resolve())
    return 0 if result.imported_leads > 0 else 1


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
