"""Command line entry point: ask one weather question and print the answer as JSON."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Optional, Sequence

from weatherchat.app import build_orchestrator
from weatherchat.errors import ConfigurationError, LocationRequired, WeatherUnavailable
from weatherchat.settings import get_settings
from weatherchat.stores import InMemoryLocationStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="weatherchat", description=__doc__)
    parser.add_argument("question", help="Weather question in natural language")
    parser.add_argument("--user", default="cli", help="User id owning the conversation")
    parser.add_argument("--location", help="Place name or 'lat, lon' overriding extraction")
    parser.add_argument(
        "--saved",
        action="append",
        default=[],
        metavar="NAME",
        help="Saved location for the user; the first one is active (repeatable)",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = get_settings()
    except ConfigurationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))

    locations = InMemoryLocationStore()
    for name in args.saved:
        locations.add_location(args.user, name)
    orchestrator = build_orchestrator(settings, locations=locations)

    try:
        answer = orchestrator.resolve_flexible_weather(args.question, args.user, location=args.location)
    except LocationRequired as exc:
        print(f"{exc.code}: {exc}", file=sys.stderr)
        return 1
    except WeatherUnavailable as exc:
        logger.error("Weather provider failed: %s", exc)
        print(f"{exc.code}: weather data is unavailable right now", file=sys.stderr)
        return 1

    payload = {"sessionId": answer.session_id, **answer.result.as_dict()}
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
