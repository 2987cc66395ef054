"""
Reconciliation engine.

Freshness guard -> download-request reconciliation -> export fetch ->
archive merge, for one bank.
"""

import logging
from datetime import date, datetime
from typing import List, Optional

from ..archive.freshness import FreshnessGuard
from ..archive.models import Account, ReconcileReport, ReconciliationWindow
from ..archive.storage import ArchiveStorage
from ..archive.writer import ArchiveWriter
from ..config.settings import ReconcileSettings
from ..connectors.base import ExportService
from .fetcher import ExportFetcher
from .requests import DownloadRequestManager, Sleep

logger = logging.getLogger(__name__)


class ReconciliationEngine:
    """
    Accumulates a bank's bounded export window into an unbounded archive.

    The engine is source-agnostic: everything bank-specific sits behind
    the ExportService it is given.
    """

    def __init__(
        self,
        service: ExportService,
        settings: ReconcileSettings,
        storage: ArchiveStorage,
        today: Optional[date] = None,
        sleep: Optional[Sleep] = None,
    ):
        """
        Initialize the engine.

        Args:
            service: Remote export service
            settings: Lookback, delays and CSV delimiter
            storage: Archive layout
            today: Run date (default: local date when run() starts)
            sleep: Awaitable sleep used for fixed delays
        """
        self.service = service
        self.settings = settings
        self.storage = storage
        self.today = today
        self.guard = FreshnessGuard(storage)
        self.manager = DownloadRequestManager(service, settings, sleep=sleep)
        self.fetcher = ExportFetcher(service, ArchiveWriter(storage, settings.csv_delimiter))

    async def run(self, bank_id: str, accounts: List[Account]) -> ReconcileReport:
        """
        Run one reconciliation.

        Args:
            bank_id: Bank identifier used in archive paths
            accounts: Accounts from the session's account listing

        Returns:
            Run report

        Raises:
            AllRequestsFailedError: If no download request could be created;
                nothing is written in that case
        """
        today = self.today or date.today()
        window = ReconciliationWindow.for_today(today, self.settings.max_days_back)
        report = ReconcileReport(bank_id=bank_id, window=window)

        if self.guard.is_fresh(bank_id, [a.name for a in accounts], today):
            logger.info("Transactions already downloaded today. Nothing to do!")
            report.skipped = True
            report.completed_at = datetime.now()
            return report

        logger.info(f"Downloading transactions from {window.start_iso} to {window.end_iso}")

        plan = await self.manager.reconcile(accounts, window)
        report.reused = plan.reused
        report.created = plan.created
        report.accounts = plan.accounts

        report.downloaded = await self.fetcher.fetch_all(plan.accounts, bank_id, window)
        report.completed_at = datetime.now()

        logger.info(f"Downloaded {report.downloaded} account(s)")
        return report
