"""Entry point for the OpenTable availability agent."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date as date_type
from typing import List, Optional

import structlog

from .config import Settings
from .errors import AvailabilityError
from .formatting import render
from .models import AvailabilityReport
from .pipeline import fetch_live_availability, read_har_availability


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure structlog + stdlib logging on stderr; stdout carries the results."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        stream=sys.stderr,
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(key_order=["timestamp", "level", "event"]),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


LOGGER = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """CLI argument parsing."""
    parser = argparse.ArgumentParser(
        description="Find OpenTable availability for a restaurant, date and party size.",
        epilog=(
            "Live: %(prog)s <restaurant_url> <YYYY-MM-DD> <party_size> [--no-headless] [--json]\n"
            "HAR:  %(prog)s --har PATH [--date YYYY-MM-DD] [--party N] [--json]"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("positionals", nargs="*", metavar="ARG", help="restaurant URL, date and party size")
    parser.add_argument("--har", dest="har_path", help="Read availability from a recorded HAR file.")
    parser.add_argument("--date", dest="filter_date", help="HAR mode: only use entries for this date.")
    parser.add_argument("--party", dest="filter_party", type=int, help="HAR mode: only use entries for this party size.")
    parser.add_argument("--no-headless", dest="headless", action="store_false", help="Show the browser window.")
    parser.add_argument("--json", dest="as_json", action="store_true", help="Print JSON instead of a table.")
    return parser


def parse_iso_date(value: str, parser: argparse.ArgumentParser) -> str:
    try:
        return date_type.fromisoformat(value).isoformat()
    except ValueError:
        parser.error(f"Invalid date: {value} (expected YYYY-MM-DD)")


def parse_party_size(value: str, parser: argparse.ArgumentParser) -> int:
    try:
        party_size = int(value)
    except ValueError:
        party_size = 0
    if party_size < 1:
        parser.error(f"Invalid party size: {value}")
    return party_size


def run(args: argparse.Namespace, parser: argparse.ArgumentParser, settings: Settings) -> List[AvailabilityReport]:
    """Dispatch to the offline or live pipeline."""
    if args.har_path:
        filter_date = parse_iso_date(args.filter_date, parser) if args.filter_date else None
        filter_party = args.filter_party if args.filter_party and args.filter_party > 0 else None
        return read_har_availability(settings, args.har_path, filter_date, filter_party)

    if len(args.positionals) < 3:
        parser.error("live mode needs <restaurant_url> <YYYY-MM-DD> <party_size>")
    url, raw_date, raw_party = args.positionals[:3]
    date_iso = parse_iso_date(raw_date, parser)
    party_size = parse_party_size(raw_party, parser)

    if not args.headless:
        settings = settings.model_copy(update={"headless": False})
    report = asyncio.run(fetch_live_availability(settings, url, date_iso, party_size))
    return [report]


def cli(argv: Optional[list[str]] = None) -> int:
    """Console script entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings()
    except Exception as exc:  # pragma: no cover - startup validation
        configure_logging()
        LOGGER.exception("settings.error", error=str(exc))
        return 2

    configure_logging(settings.log_level.upper())

    try:
        reports = run(args, parser, settings)
    except AvailabilityError as exc:
        LOGGER.error("agent.failed", error=str(exc), error_type=type(exc).__name__)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except Exception as exc:  # pragma: no cover - top level
        LOGGER.exception("agent.crashed", error=str(exc))
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    for report in reports:
        print(render(report, as_json=args.as_json))
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(cli())
