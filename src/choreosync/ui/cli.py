from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from choreosync.app import (
    annotate_entity,
    insert_entity_from_file,
    parse_annotation_args,
    remove_entity,
    run_sync_once,
    serve,
)
from choreosync.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise OpenChoreo into the entity catalog")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log debug output",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("sync", help="Run one full sync")

    serve_parser = subparsers.add_parser("serve", help="Run the full sync on its schedule")
    serve_parser.add_argument(
        "--max-ticks",
        type=_positive_int,
        help="Stop after this many sync runs (default: run until interrupted)",
    )

    insert = subparsers.add_parser("insert", help="Insert or update one entity from a JSON file")
    insert.add_argument("file", type=str, help="Path to an entity JSON document")

    remove = subparsers.add_parser("remove", help="Remove one entity by reference")
    remove.add_argument("ref", type=str, help="Entity reference, e.g. component:default/api")

    annotate = subparsers.add_parser(
        "annotate", help="Set custom annotations that survive full syncs"
    )
    annotate.add_argument("ref", type=str, help="Entity reference, e.g. component:acme/web")
    annotate.add_argument(
        "annotations",
        nargs="+",
        metavar="KEY=VALUE|KEY-",
        help="Annotation to set, or KEY- to delete it",
    )

    return parser.parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if parsed_args.command == "sync":
            report = run_sync_once()
            if not report.applied:
                log.error("Sync was not applied: %s", report.error)
                sys.exit(1)
        elif parsed_args.command == "serve":
            serve(max_ticks=parsed_args.max_ticks)
        elif parsed_args.command == "insert":
            deferred = insert_entity_from_file(parsed_args.file)
            log.info("Inserted %s", deferred.entity.ref)
        elif parsed_args.command == "remove":
            ref = remove_entity(parsed_args.ref)
            log.info("Removed %s", ref)
        elif parsed_args.command == "annotate":
            stored = annotate_entity(
                parsed_args.ref, parse_annotation_args(parsed_args.annotations)
            )
            log.info("%s now has %s custom annotations", parsed_args.ref, len(stored))
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    signal(SIGINT, sigint_handler)
    main()
