"""Application entry point for cookie-janitor.

Deletes Chrome cookies for hosts marked "delete" in the rule file and appends
hosts it has never seen before so they can be triaged later.

CHROME MUST NOT BE RUNNING: the browser locks its cookie database and may
write back rows deleted underneath it.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from art import tprint

import settings
from adapters.chrome_paths import list_profiles, resolve_cookies_path
from adapters.csv_rule_store import CsvRuleStore
from adapters.report_formatting import format_summary
from adapters.sqlite_cookie_store import SQLiteCookieStore
from core.config import ReconcileConfig
from core.errors import CookieJanitorError, MalformedRecordError, StorageConnectionError
from core.reconciler import Reconciler

NAME = "COOKIE JANITOR"
FONT = "tarty-1"

EXIT_OK = 0
EXIT_FAILURE = 1


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/cookie-janitor.log")
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

    logging.basicConfig(level=level, handlers=handlers)


def _run(args: argparse.Namespace) -> int:
    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)

    rules_path = args.rules or settings.RULES_PATH
    cookies_path = resolve_cookies_path(
        args.cookies or settings.COOKIES_PATH,
        args.profile or settings.BROWSER_PROFILE,
    )
    logger.info("Rules file: %s", rules_path)
    logger.info("Cookie database: %s (Chrome must be closed)", cookies_path)

    rule_store = CsvRuleStore(rules_path, strict=args.strict)
    config = ReconcileConfig(dry_run=args.dry_run)

    # The cookie store connects lazily, so a missing rule file stops the run
    # before the database is ever opened.
    with SQLiteCookieStore(cookies_path, query_timeout=settings.QUERY_TIMEOUT_SECONDS) as cookie_store:
        try:
            result = Reconciler(rule_store, cookie_store, config).run()
        except StorageConnectionError as exc:
            logger.error("Cookie store unavailable: %s", exc)
            print(exc, file=sys.stderr)
            return EXIT_FAILURE
        except MalformedRecordError as exc:
            logger.error("Malformed rule file %s: %s", rules_path, exc)
            print(f"Malformed rule file {rules_path}: {exc}", file=sys.stderr)
            return EXIT_FAILURE
        except CookieJanitorError as exc:
            logger.error("%s", exc)
            print(exc, file=sys.stderr)
            return EXIT_FAILURE

    print(format_summary(result))
    if result.append_error:
        return EXIT_FAILURE
    return EXIT_OK


def _profiles() -> int:
    _print_banner()
    profiles = list_profiles(Path.home(), sys.platform)
    if not profiles:
        print("No Chrome profiles with a cookie database were found.")
        return EXIT_OK

    for index, (name, path) in enumerate(profiles, start=1):
        print(f"{index}. {name} | {path}")
    return EXIT_OK


def _add_run_arguments(parser: argparse.ArgumentParser, **defaults) -> None:
    parser.add_argument("--rules", **defaults, help="Rule CSV file (default: from config)")
    parser.add_argument("--cookies", **defaults, help="Chrome Cookies database (default: derived from profile)")
    parser.add_argument("--profile", **defaults, help="Chrome profile directory name, e.g. 'Profile 2'")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        **defaults,
        help="Classify and report without deleting cookies or appending hosts",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        **defaults,
        help="Fail on malformed rule lines instead of skipping them",
    )


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="cookie-janitor")
    _add_run_arguments(parser)
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Reconcile cookies against the rule file")
    # Suppressed defaults keep "cookie-janitor --dry-run run" from being reset.
    _add_run_arguments(run_parser, default=argparse.SUPPRESS)
    subparsers.add_parser("profiles", help="List Chrome profiles that have a cookie database")

    args = parser.parse_args(argv)
    if args.command == "profiles":
        return _profiles()
    return _run(args)


if __name__ == "__main__":
    sys.exit(main())
