"""
TTDL plugin entry point.

TTDL writes one JSON record to stdin and reads the rewritten record from
stdout. Conversion problems are reported inside the record; only a record
that cannot be understood at all makes the process exit non-zero.
"""
import argparse
import logging
import os
import sys
from importlib.metadata import PackageNotFoundError, version
from typing import List, Optional, TextIO

from ttdl_lunar.errors import RecordFormatError
from ttdl_lunar.logging_setup import parse_level, setup_logging
from ttdl_lunar.top_flows import run

logger = logging.getLogger(__name__)

DISTRIBUTION_NAME = "ttdl-lunar-calendar"
LOG_LEVEL_ENV = "TTDL_LUNAR_CALENDAR_LOG_LEVEL"

EXIT_OK = 0
EXIT_BAD_RECORD = 1


def _package_version() -> str:
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return "unknown"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=DISTRIBUTION_NAME,
        description="Convert lunar dates listed in the !lunar-calendar tag of a TTDL record to solar dates",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv(LOG_LEVEL_ENV, "WARNING"),
        help=f"Logging level for stderr (default: ${LOG_LEVEL_ENV} or WARNING)",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write logs to this rotating file",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")
    return parser


def main(
    argv: Optional[List[str]] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        level = parse_level(args.log_level)
    except ValueError as exc:
        parser.error(str(exc))

    setup_logging(level=level, log_file=args.log_file)

    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout

    input_text = stdin.read()
    logger.debug("📥 read %s chars from stdin", len(input_text))

    try:
        output = run(input_text)
    except RecordFormatError as exc:
        logger.error("💥 Malformed TTDL record: %s", exc.message)
        return EXIT_BAD_RECORD

    stdout.write(output if output.endswith("\n") else output + "\n")
    stdout.flush()
    return EXIT_OK


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
