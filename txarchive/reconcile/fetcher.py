"""
Export retrieval for accounts with a ready download request.
"""

import logging
from typing import List

from ..archive.models import AccountPlan, AccountState, ReconciliationWindow
from ..archive.writer import ArchiveWriter
from ..connectors.base import ExportService
from ..exceptions import TxArchiveError

logger = logging.getLogger(__name__)


class ExportFetcher:
    """
    Turns ready download requests into archived CSV files.

    A failure on one account (bad prepare answer, failed fetch, write
    error) marks that account FAILED and moves on to the next.
    """

    def __init__(self, service: ExportService, writer: ArchiveWriter):
        self.service = service
        self.writer = writer

    async def fetch_all(
        self,
        plans: List[AccountPlan],
        bank_id: str,
        window: ReconciliationWindow,
    ) -> int:
        """
        Download and archive exports for every READY account.

        Args:
            plans: Account plans from the request manager
            bank_id: Bank identifier used in archive paths
            window: Window the exports cover

        Returns:
            Number of accounts downloaded and merged
        """
        downloaded = 0
        for plan in plans:
            if plan.state != AccountState.READY:
                continue
            if await self.fetch_one(plan, bank_id, window):
                downloaded += 1
        return downloaded

    async def fetch_one(
        self,
        plan: AccountPlan,
        bank_id: str,
        window: ReconciliationWindow,
    ) -> bool:
        """Download one account's export; returns True on success."""
        account = plan.account
        if not plan.request_id:
            plan.state = AccountState.FAILED
            logger.warning(f"No request id for {account.name!r}; skipping")
            return False

        try:
            export_url = await self.service.prepare_download(plan.request_id)
            content = await self.service.fetch_export(export_url)
        except TxArchiveError as e:
            plan.state = AccountState.FAILED
            logger.warning(f"Download failed for {account.name!r}: {e.to_log_string()}")
            return False

        account_name = account.name or f"Account_{account.account_id}"
        try:
            plan.archive_path = self.writer.save_transactions(
                bank_id, account_name, window.start, content
            )
        except (OSError, ValueError) as e:
            # ValueError covers an existing archive that isn't valid UTF-8
            plan.state = AccountState.FAILED
            logger.error(f"Failed to write archive for {account_name!r}: {e}")
            return False

        plan.state = AccountState.DOWNLOADED
        return True
