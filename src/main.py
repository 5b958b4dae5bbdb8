import argparse
import csv
import logging
import os
import sys
from decimal import Decimal, ROUND_HALF_EVEN
from typing import Dict, List, Optional

from errors import PaymentsError
from models import Position, money_context
from payments_engine import PaymentsEngine

__version__ = "0.1.0"

EXIT_OK = 0
EXIT_USAGE = 64

OUTPUT_COLUMNS = ["client", "available", "held", "total", "locked"]
FOUR_PLACES = Decimal("0.0001")


class _UsageArgumentParser(argparse.ArgumentParser):
    def exit(self, status=0, message=None):
        if message:
            sys.stderr.write(message)
        sys.exit(EXIT_USAGE if status else status)


def configure_logging() -> None:
    level_name = os.getenv("PAYMENTS_LOG_LEVEL", "WARNING").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = _UsageArgumentParser(
        prog="payments-positions",
        description="Compute per-client positions from a CSV of transactions and write them to stdout as CSV.",
    )
    parser.add_argument("file", help="path to the input transactions CSV")
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def format_decimal(value: Decimal) -> str:
    """Format decimal with exactly 4 decimal places."""
    with money_context():
        return f"{value.quantize(FOUR_PLACES, rounding=ROUND_HALF_EVEN):f}"


def to_rows(positions: Dict[int, Position]) -> List[List[str]]:
    return [
        [
            str(client_id),
            format_decimal(position.available),
            format_decimal(position.held),
            format_decimal(position.total),
            str(position.locked).lower(),
        ]
        for client_id, position in sorted(positions.items())
    ]


def write_positions(positions: Dict[int, Position], stream) -> None:
    rows = to_rows(positions)
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_COLUMNS)
    writer.writerows(rows)


def main(argv: Optional[List[str]] = None) -> int:
    configure_logging()
    args = parse_args(argv)

    engine = PaymentsEngine()
    try:
        positions = engine.process_file(args.file)
    except PaymentsError as e:
        print(f"Error reading from file at {args.file}: {e}", file=sys.stderr)
        return EXIT_USAGE

    write_positions(positions, sys.stdout)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
