"""
cli.py — Command-line lookup: print the outlook report for one coordinate.
"""

from __future__ import annotations

import logging
import sys
from argparse import ArgumentParser

from pydantic import ValidationError

from spc_outlook.config import load_settings
from spc_outlook.loader import CatalogLoadError, load_catalog
from spc_outlook.models import Point
from spc_outlook.services import IntervalLine, format_report, format_timestamp, report


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="spc-outlook", description="Weather hazard status for a coordinate")
    parser.add_argument("--kml", help="name of kml file to process", required=True)
    parser.add_argument("--lat", help="latitude for weather status", type=float, default=0.0)
    parser.add_argument("--lng", help="longitude for weather status", type=float, default=0.0)
    parser.add_argument("--tz", help="time zone for displayed times (default: America/Chicago)",
                        required=False, dest="timezone")
    parser.add_argument("--time-format", help="'short' or a strftime pattern", required=False,
                        dest="time_format")
    parser.add_argument("--strict", help="exit with an error if any placemark failed to parse",
                        action="store_true")
    parser.add_argument("--log-level", help="logging level (default: INFO)", required=False,
                        dest="log_level")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(
            kml_path=args.kml,
            timezone=args.timezone,
            time_format=args.time_format,
            log_level=args.log_level,
        )
    except ValidationError as exc:
        print(f"Invalid settings: {exc}", file=sys.stderr)
        return 2

    logging.basicConfig(level=settings.log_level, format="%(levelname)s: %(message)s")

    if args.lat == 0:
        print("You forgot to specify --lat FLOAT")
    if args.lng == 0:
        print("You forgot to specify --lng FLOAT")

    try:
        result = load_catalog(settings.kml_path, settings.tzinfo())
    except CatalogLoadError as exc:
        print(f"Error opening KML file: {exc}")
        return 1

    if args.strict and not result.ok:
        for error in result.errors:
            print(f"Bad placemark {error.label!r} in {error.group!r}: {error.reason}", file=sys.stderr)
        return 1

    catalog = result.catalog
    if catalog.issued is not None:
        print(f"Issued: {format_timestamp(catalog.issued, settings.time_format)}")

    lines = report(Point(lat=args.lat, lng=args.lng), catalog)
    for line, text in zip(lines, format_report(lines, settings.time_format)):
        print(text)
        if isinstance(line, IntervalLine):
            print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
