"""CLI entry point for the booking pattern service.

Reads a booking history from a JSON file (a bare list, ``{"bookings": [...]}``,
``{"data": [...]}`` or a saved tool-call result) and prints JSON to stdout.
For the HTTP interface, use the FastAPI server (booking_patterns/server.py).

Usage:
    uv run python -m booking_patterns.main analyze bookings.json
    uv run python -m booking_patterns.main analyze bookings.json --strategy remote_model
    uv run python -m booking_patterns.main propose bookings.json --customer acme --date "next week" --time 2pm
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from booking_patterns.analysis import (
    RemoteAnalysisError,
    UnknownAnalyzerError,
    available_strategies,
    get_analyzer,
    normalize_records,
)
from booking_patterns.models import BookingRecord, Customization, ScheduleSpec, TemplateNotFound
from booking_patterns.services.payloads import extract_booking_payloads
from booking_patterns.synthesis import propose_booking

logger = logging.getLogger(__name__)


def _configure_logging(debug: bool = False) -> None:
    """Set up logging: WARNING by default, DEBUG when --debug is passed."""
    root_level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=root_level,
        format="%(asctime)s %(levelname)-8s %(name)s - %(message)s",
        stream=sys.stderr,
    )

    if not debug:
        # Silence chatty HTTP loggers even if root is WARNING
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.getLogger("booking_patterns").setLevel(logging.DEBUG if debug else logging.INFO)


def _load_records(path: str) -> list[BookingRecord]:
    text = Path(path).read_text(encoding="utf-8")
    raw = extract_booking_payloads(text)
    records = normalize_records(raw)
    logger.info("Loaded %d bookings from %s", len(records), path)
    return records


def _print_json(payload) -> None:
    print(json.dumps(payload, indent=2))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Booking pattern templates CLI")
    parser.add_argument(
        "--debug", action="store_true",
        help="Show all log messages including HTTP requests",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser("analyze", help="Print ranked booking templates")
    analyze_parser.add_argument("file", help="JSON file with raw bookings")
    analyze_parser.add_argument(
        "--strategy", choices=available_strategies(), default=None,
        help="Analyzer strategy (default: ANALYZER_STRATEGY)",
    )

    propose_parser = subparsers.add_parser(
        "propose", help="Print a booking request built from a customer's usual pattern",
    )
    propose_parser.add_argument("file", help="JSON file with raw bookings")
    propose_parser.add_argument("--customer", help="Customer name or fragment")
    propose_parser.add_argument("--surgeon", help="Surgeon name or fragment")
    propose_parser.add_argument("--date", help="ISO date or tomorrow / next week / next month / next year")
    propose_parser.add_argument("--time", help="Time of day, e.g. 2pm or 14:30")
    propose_parser.add_argument("--notes", help="Replace the default note")
    propose_parser.add_argument(
        "--final", action="store_true",
        help="Produce a final request instead of a draft",
    )
    propose_parser.add_argument(
        "--strategy", choices=available_strategies(), default=None,
        help="Analyzer strategy (default: ANALYZER_STRATEGY)",
    )
    return parser


def _analyze(args: argparse.Namespace) -> int:
    templates = get_analyzer(args.strategy).analyze(_load_records(args.file))
    _print_json([template.to_dict() for template in templates])
    return 0


def _propose(args: argparse.Namespace) -> int:
    if not args.customer and not args.surgeon:
        print("propose: pass --customer and/or --surgeon", file=sys.stderr)
        return 2

    templates = get_analyzer(args.strategy).analyze(_load_records(args.file))
    customization = Customization(
        date=ScheduleSpec(date=args.date, time=args.time) if args.date or args.time else None,
        notes=args.notes,
        is_draft=False if args.final else None,
    )
    result = propose_booking(
        templates,
        customer=args.customer,
        surgeon=args.surgeon,
        customization=customization,
    )
    _print_json(result.to_dict())
    return 1 if isinstance(result, TemplateNotFound) else 0


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return its exit code."""
    args = _build_parser().parse_args(argv)

    load_dotenv()
    _configure_logging(debug=args.debug)

    handlers = {"analyze": _analyze, "propose": _propose}
    try:
        return handlers[args.command](args)
    except (OSError, UnknownAnalyzerError, RemoteAnalysisError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
