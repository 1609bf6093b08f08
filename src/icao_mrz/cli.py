"""
Command line demo for MRZ parsing.

Examples:
  icao-mrz parse $'P<UTOERIKSSON<<ANNA<MARIA<<<<<<<<<<<<<<<<<<<\\nL898902C36UTO7408122F1204159ZE184226B<<<<<10'
  icao-mrz parse --json --format TD1 "$(cat id_card.txt)"
  icao-mrz check-digit 520727
"""

from __future__ import annotations

import argparse
import json
import logging
import re
import sys

from icao_mrz.config import get_settings
from icao_mrz.exceptions import MRZParseException
from icao_mrz.logging_config import setup_logging
from icao_mrz.models.mrz_types import MRZFormat
from icao_mrz.utils.mrz_formats import normalize_mrz, split_rows
from icao_mrz.utils.mrz_serializer import serialize
from icao_mrz.utils.mrz_utils import compute_check_digit_char, parse

logger = logging.getLogger(__name__)


_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def row_starts(text: str) -> list[int]:
    """Offsets in ``text`` where each MRZ row begins, as the parser splits it.

    Surrounding whitespace and any line-break convention are accounted for,
    and an unbroken line is cut at the same widths the parser uses.
    """
    lead = len(text) - len(text.lstrip())
    starts = [lead]
    starts.extend(lead + match.end() for match in _LINE_BREAK.finditer(text.strip()))
    if len(starts) == 1:
        rows = split_rows(normalize_mrz(text))
        for row in rows[:-1]:
            starts.append(starts[-1] + len(row))
    return starts


def to_position(col: int, row: int, text: str) -> int:
    """Translate a (column, row) grid position into an offset in ``text``; -1 for a missing row."""
    starts = row_starts(text)
    if row >= len(starts):
        return -1
    return starts[row] + col


def _parse_command(args: argparse.Namespace) -> int:
    mrz_format = MRZFormat(args.format) if args.format else None
    try:
        record = parse(args.mrz, mrz_format=mrz_format)
    except MRZParseException as e:
        print("Error")
        print(e.message)
        start = to_position(e.range.col_from, e.range.row, args.mrz)
        end = to_position(e.range.col_to, e.range.row, args.mrz)
        print(f"Error at position: {start} - {end}")
        return 1

    if args.json:
        print(json.dumps(record.to_dict(), indent=2))
    else:
        print(record)
    if args.regenerate:
        print(serialize(record))
    return 0 if record.is_valid else 2


def _check_digit_command(args: argparse.Namespace) -> int:
    print(compute_check_digit_char(args.data.upper()))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="icao-mrz",
        description="Parse and validate ICAO 9303 Machine Readable Zones",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--log-level", default=None, help="Override MRZ_LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_parser = subparsers.add_parser("parse", help="Parse MRZ text")
    parse_parser.add_argument("mrz", help="MRZ text, rows separated by newlines")
    parse_parser.add_argument(
        "--format", choices=[f.value for f in MRZFormat], default=None,
        help="Expected format, detected from the shape when omitted",
    )
    parse_parser.add_argument("--json", action="store_true", help="Print the record as JSON")
    parse_parser.add_argument(
        "--regenerate", action="store_true", help="Also print the MRZ rendered from the record"
    )
    parse_parser.set_defaults(handler=_parse_command)

    check_parser = subparsers.add_parser("check-digit", help="Compute an ICAO check digit")
    check_parser.add_argument("data", help="Characters to compute the check digit over")
    check_parser.set_defaults(handler=_check_digit_command)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = get_settings()
    setup_logging(
        service_name=settings.service_name,
        log_level=args.log_level or settings.log_level,
        log_format=settings.log_format,
    )
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
