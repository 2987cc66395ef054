"""
Main application entry point for txarchive.

Runs one transaction reconciliation for a bank:
- loads configuration from the environment (.env supported)
- loads the session left by the login helper
- reconciles remote download requests and merges exports into the archive
"""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from .archive.models import ReconcileReport
from .config import AppConfig, load_config
from .config.constants import BANK_CAISSE_EPARGNE, DEFAULT_LOG_FILE
from .connectors import available_banks, get_connector
from .exceptions import TxArchiveError, handle_unexpected_error


class TxArchiveApp:
    """Application wrapper: logging setup and command dispatch."""

    def __init__(self, config: AppConfig):
        self.config = config

        # File logging is optional (data directory may not be writable)
        log_handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
        try:
            log_path = config.log_file or config.archive.data_dir / DEFAULT_LOG_FILE
            log_path.parent.mkdir(parents=True, exist_ok=True)
            log_handlers.append(logging.FileHandler(str(log_path)))
        except OSError:
            pass

        logging.basicConfig(
            level=config.log_level.value,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=log_handlers,
        )
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)
        self.logger = logging.getLogger(__name__)

    async def download_transactions(self, bank_id: str) -> ReconcileReport:
        """
        Reconcile and archive transactions for one bank.

        Args:
            bank_id: Bank identifier

        Returns:
            Run report
        """
        connector = get_connector(bank_id, self.config)
        self.logger.info(f"Starting transaction download for {connector.display_name}")

        session = await connector.authenticate()
        report = await connector.reconcile_and_archive(session)

        if report.skipped:
            self.logger.info("Archive already up to date for today")
        else:
            self.logger.info(
                f"Run finished: {report.downloaded} downloaded, {report.failed} skipped/failed"
            )
        return report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="txarchive",
        description="Accumulate bank transaction exports into a local archive.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    transactions = subparsers.add_parser(
        "transactions", help="Download transactions and merge them into the archive"
    )
    transactions.add_argument(
        "--bank", default=BANK_CAISSE_EPARGNE, choices=available_banks(),
        help="Bank identifier (default: %(default)s)",
    )
    transactions.add_argument("--session", type=Path, help="Session snapshot file")
    transactions.add_argument("--data-dir", type=Path, help="Archive data directory")
    transactions.add_argument("--json", action="store_true", help="Print the run report as JSON")
    return parser


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Apply command-line overrides on top of the environment configuration."""
    if args.data_dir:
        config = replace(config, archive=replace(config.archive, data_dir=args.data_dir))
    if args.session:
        config = replace(
            config,
            caisse_epargne=replace(config.caisse_epargne, session_file=args.session),
        )
    return config


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit status."""
    args = build_parser().parse_args(argv)

    try:
        config = apply_overrides(load_config(), args)
    except TxArchiveError as e:
        print(f"Configuration error: {e.to_log_string()}", file=sys.stderr)
        return 1

    app = TxArchiveApp(config)

    try:
        report = await app.download_transactions(args.bank)
    except TxArchiveError as e:
        app.logger.error(f"Failed to get transactions: {e.to_log_string()}")
        return 1
    except Exception as e:
        error = handle_unexpected_error(e)
        app.logger.error(f"Failed to get transactions: {error.to_log_string()}", exc_info=True)
        return 1

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    elif report.skipped:
        print("Transactions already downloaded today. Nothing to do!")
    else:
        print(f"Downloaded {report.downloaded} account(s)")
    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
