"""Command line interface for the faxsync service."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .alerts import build_alert_dispatcher
from .config import (
    DEFAULT_ACCOUNTS_FILENAME,
    DEFAULT_CONFIG_PATH,
    load_config,
    write_default_accounts,
    write_default_config,
)
from .logging_utils import configure_logging
from .scheduler import build_scheduler

LOGGER = logging.getLogger("faxsync")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="faxsync",
        description="Download SRFax inbox documents to local folders.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help="Path to the JSON configuration file.",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single cycle for every account and exit.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) logging output.",
    )
    parser.add_argument(
        "--write-config",
        action="store_true",
        help="Write the default configuration and accounts files, then exit.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def _write_defaults(config_path: Path) -> None:
    written = write_default_config(config_path)
    print(f"wrote default config to {written}")
    accounts_path = written.parent / DEFAULT_ACCOUNTS_FILENAME
    if not accounts_path.exists():
        print(f"wrote default accounts to {write_default_accounts(accounts_path)}")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    if args.write_config:
        _write_defaults(args.config)
        return 0

    if not args.config.expanduser().exists():
        print("config does not exist, writing defaults and exiting")
        _write_defaults(args.config)
        return 0

    config = load_config(args.config)
    if not config.accounts_path.exists():
        print("accounts file does not exist, writing defaults and exiting")
        write_default_accounts(config.accounts_path)
        return 0

    level = logging.DEBUG if args.verbose else config.log.level_number
    configure_logging(
        level,
        config.log.directory,
        stdout=config.log.stdout,
        keep_days=config.log.keep_days,
    )
    LOGGER.info("faxsync %s starting", __version__)

    with build_alert_dispatcher(config) as dispatcher:
        scheduler = build_scheduler(config, dispatcher)
        if args.once:
            reports = scheduler.run_once()
            downloaded = sum(len(report.downloaded) for report in reports)
            LOGGER.info("Downloaded %s fax(es)", downloaded)
            return 0
        try:
            scheduler.run_forever(config.tick_rate)
        except KeyboardInterrupt:
            LOGGER.info("Interrupted; stopping")
            scheduler.stop()
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
