"""Application entry point for the patternscope checker."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional, TextIO

from art import tprint

import settings
from adapters.console_reporter import ConsoleReporter
from adapters.file_loader import load_catalog, load_examples, read_source
from adapters.python_source import source_to_dict
from core.config import REPORT_FORMATS
from core.errors import MatchError, PatternScopeError
from core.processor import ExampleChecker

NAME = "PATTERNSCOPE"
FONT = "tarty-1"

EXIT_OK = 0
EXIT_UNMATCHED = 1
EXIT_INPUT_ERROR = 2

LOGGER = logging.getLogger(__name__)


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def _configure_logging(level_override: Optional[str] = None) -> None:
    config = dict(settings.LOGGING or {})
    if level_override:
        config["enabled"] = True
        config["level"] = level_override
    if not config.get("enabled", False):
        return

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        # stderr keeps the report on stdout machine-readable.
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/patternscope.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers, force=True)


def _check(args: argparse.Namespace, stdout: TextIO) -> int:
    catalog = load_catalog(args.catalog)
    examples = load_examples(args.examples)
    if not examples:
        LOGGER.warning("No examples to check")

    reporter = ConsoleReporter(stdout, mode=args.format, verbose=args.verbose)
    checker = ExampleChecker(catalog, reporter, max_bindings=settings.MATCHER.max_bindings)
    checker.run(examples)
    reporter.finish()
    return EXIT_UNMATCHED if checker.failed else EXIT_OK


def _describe(args: argparse.Namespace, stdout: TextIO) -> int:
    raw = source_to_dict(read_source(args.source), location=args.source)
    payload = json.dumps(raw, indent=2, ensure_ascii=True) + "\n"
    if args.output:
        try:
            with open(args.output, "w", encoding="utf-8") as handle:
                handle.write(payload)
        except OSError as exc:
            raise MatchError(args.output, f"cannot write file: {exc.strerror or exc}") from exc
        LOGGER.info("Descriptor for %s written to %s", args.source, args.output)
    else:
        stdout.write(payload)
    return EXIT_OK


def _list(args: argparse.Namespace, stdout: TextIO) -> int:
    catalog = load_catalog(args.catalog)
    for name, pattern in sorted(catalog.items()):
        roles = ", ".join(pattern.role_names)
        stdout.write(f"{name}: {roles} ({len(pattern.constraints)} constraints)\n")
    return EXIT_OK


def _browse(args: argparse.Namespace, stdout: TextIO) -> int:
    _print_banner()
    from frontend.app import CatalogBrowserApp

    CatalogBrowserApp(catalog_path=args.catalog, example_paths=args.examples).run()
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="patternscope",
        description="Check code examples against a catalog of design patterns.",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Enable console logging at this level (overrides config.json)",
    )
    subparsers = parser.add_subparsers(dest="command")

    check = subparsers.add_parser("check", help="Match examples against a catalog")
    check.add_argument("catalog", help="Path to the catalog JSON file")
    check.add_argument("examples", nargs="+", help="Descriptor .json files, Python sources or directories")
    check.add_argument("--format", choices=REPORT_FORMATS, default=settings.REPORT.format)
    check.add_argument(
        "--verbose",
        action="store_true",
        default=settings.REPORT.verbose,
        help="List every check and the role binding per example",
    )

    describe = subparsers.add_parser("describe", help="Print the descriptor built from a Python source file")
    describe.add_argument("source", help="Python source file")
    describe.add_argument("--output", help="Write the descriptor JSON to this file")

    listing = subparsers.add_parser("list", help="List the patterns of a catalog")
    listing.add_argument("catalog", nargs="?", default=settings.CATALOG_PATH)

    browse = subparsers.add_parser("browse", help="Launch the catalog browser TUI")
    browse.add_argument("catalog", nargs="?", default=settings.CATALOG_PATH)
    browse.add_argument("examples", nargs="*", default=[])

    return parser


COMMANDS = {
    "check": _check,
    "describe": _describe,
    "list": _list,
    "browse": _browse,
}


def main(argv: Optional[list[str]] = None, stdout: Optional[TextIO] = None, stderr: Optional[TextIO] = None) -> int:
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        _print_banner()
        parser.print_help(stdout)
        return EXIT_OK

    _configure_logging(args.log_level)
    try:
        if settings.CONFIG_ERROR is not None:
            raise settings.CONFIG_ERROR
        return COMMANDS[args.command](args, stdout)
    except PatternScopeError as exc:
        LOGGER.debug("Input error", exc_info=True)
        stderr.write(f"error: {exc}\n")
        return EXIT_INPUT_ERROR


if __name__ == "__main__":
    sys.exit(main())
