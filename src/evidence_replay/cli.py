"""
Evidence Replay CLI.

Auditor tool to import and verify evidence chain integrity.

Usage:
    evidence-replay verify <evidence-export.json>
    evidence-replay version
    evidence-replay help
"""

import argparse
import json
import logging
import sys
from typing import TextIO

from .config import get_settings
from .errors import ExportLoadError, ExportParseError
from .ingestion import parse_export, read_export_bytes
from .integrity import ChainVerifier
from .logging_config import setup_json_logging
from .reporting import ConsoleReporter
from .reporting.console import ANSI_COLORS, NO_COLORS

logger = logging.getLogger(__name__)

PROG = "evidence-replay"

# Flag-style spellings accepted in command position
COMMAND_ALIASES = {
    "--version": "version",
    "-v": "version",
    "--help": "help",
    "-h": "help",
}
COMMANDS = {"verify", "import", "version", "help"}

USAGE = """
{bold}{cyan}{app_name}{reset}
Auditor tool to verify evidence chain integrity

{bold}Usage:{reset}
  {prog} verify <evidence-export.json>  Import and verify evidence chain
  {prog} version                        Show version
  {prog} help                           Show this help

{bold}Verify options:{reset}
  --json              Print the verification result as JSON
  --no-color          Disable colored output
  --detail-limit N    Discrepancies shown in detail per check
  --log-level LEVEL   Log level for diagnostics on stderr

{bold}Examples:{reset}
  {prog} verify evidence-export-2026-02-03.json
  {prog} verify ./exports/chain-backup.json

"""


class UsageError(Exception):
    """Command line could not be parsed."""


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting with status 2."""

    def error(self, message: str):
        raise UsageError(message)


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be zero or greater, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for all commands."""
    parser = _ArgumentParser(prog=PROG, add_help=False)
    subparsers = parser.add_subparsers(dest="command")

    verify = subparsers.add_parser("verify", aliases=["import"], add_help=False)
    verify.add_argument("path", nargs="?", help="Evidence export JSON file")
    verify.add_argument("--json", action="store_true", dest="as_json")
    verify.add_argument("--no-color", action="store_true")
    verify.add_argument("--detail-limit", type=_non_negative_int, default=None)
    verify.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
    )

    subparsers.add_parser("version", add_help=False)
    subparsers.add_parser("help", add_help=False)

    return parser


def _colors(enabled: bool) -> dict[str, str]:
    return ANSI_COLORS if enabled else NO_COLORS


def print_usage(out: TextIO, color: bool = True) -> None:
    settings = get_settings()
    out.write(USAGE.format(prog=PROG, app_name=settings.app_name, **_colors(color)))


def print_version(out: TextIO, color: bool = True) -> None:
    settings = get_settings()
    c = _colors(color)
    out.write(f"{c['bold']}{c['cyan']}{settings.app_name}{c['reset']}\n")
    out.write(f"Version: {settings.version}\n")
    out.write(f"Build:   {settings.build_time}\n")


def print_error(out: TextIO, message: str, color: bool = True) -> None:
    c = _colors(color)
    out.write(f"{c['bold']}{c['red']}Error:{c['reset']} {message}\n")


def verify_as_json(path: str, out: TextIO) -> int:
    """Verify an export and print the structured result as JSON."""
    try:
        export = parse_export(read_export_bytes(path))
    except ExportLoadError as e:
        payload = {"status": "error", "error_type": "load", "error": str(e)}
        out.write(json.dumps(payload, indent=2) + "\n")
        return 1
    except ExportParseError as e:
        payload = {
            "status": "error",
            "error_type": "parse",
            "error": e.reason,
            "details": e.errors,
        }
        out.write(json.dumps(payload, indent=2) + "\n")
        return 1

    result = ChainVerifier().verify(export)
    out.write(json.dumps(result.to_dict(), indent=2) + "\n")
    return 0 if result.is_valid else 1


def verify_evidence(path: str, reporter: ConsoleReporter) -> int:
    """
    Load, parse and verify an export file, writing the phased report.

    Returns:
        Process exit status: 0 when verified, 1 otherwise
    """
    reporter.header()

    try:
        data = read_export_bytes(path)
    except ExportLoadError as e:
        reporter.load_failed(e)
        return 1
    reporter.load_succeeded(path, len(data))

    try:
        export = parse_export(data)
    except ExportParseError as e:
        reporter.parse_failed(e)
        return 1
    reporter.parse_succeeded(export)

    result = ChainVerifier().verify(export)
    reporter.verification(export, result)

    return 0 if result.is_valid else 1


def main(argv: list[str] | None = None, out: TextIO | None = None) -> int:
    """
    CLI entry point.

    Args:
        argv: Arguments without the program name (default: sys.argv[1:])
        out: Output stream (default: stdout)

    Returns:
        Process exit status
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    out = out or sys.stdout
    settings = get_settings()
    color = settings.color and "--no-color" not in argv

    if not argv:
        print_usage(out, color)
        return 1

    argv[0] = COMMAND_ALIASES.get(argv[0], argv[0])
    if argv[0] not in COMMANDS:
        print_error(out, f"Unknown command '{argv[0]}'", color)
        print_usage(out, color)
        return 1

    try:
        args = build_parser().parse_args(argv)
    except UsageError as e:
        print_error(out, str(e), color)
        print_usage(out, color)
        return 1

    if args.command == "version":
        print_version(out, color)
        return 0
    if args.command == "help":
        print_usage(out, color)
        return 0

    if not args.path:
        print_error(out, "Missing file path", color)
        out.write(f"Usage: {PROG} verify <evidence-export.json>\n")
        return 1

    setup_json_logging(args.log_level or settings.log_level, settings.json_logs)
    logger.debug("Verify command started", extra={"action": "cli_verify", "path": args.path})

    if args.as_json:
        return verify_as_json(args.path, out)

    reporter = ConsoleReporter(stream=out, color=color, detail_limit=args.detail_limit)
    return verify_evidence(args.path, reporter)


def run() -> None:
    """Console script wrapper."""
    sys.exit(main())


if __name__ == "__main__":
    run()
