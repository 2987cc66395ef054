"""
Freshness guard: skip reconciliation when every archive was written today.
"""

import logging
from datetime import date
from typing import Iterable, Optional

from .storage import ArchiveStorage

logger = logging.getLogger(__name__)


class FreshnessGuard:
    """
    Decides whether a bank's archives already look reconciled today.

    Trusts filesystem modification times, which only holds while a single
    process writes the archive.
    """

    def __init__(self, storage: ArchiveStorage):
        self.storage = storage

    def is_fresh(
        self,
        bank_id: str,
        account_names: Iterable[str],
        today: Optional[date] = None,
    ) -> bool:
        """
        Check whether every account has an archive modified today.

        Args:
            bank_id: Bank identifier
            account_names: Display names of the accounts to check
            today: Calendar date to compare against (default: local today)

        Returns:
            True only if all accounts have an archive whose last-modified
            date equals today
        """
        today = today or date.today()

        for name in account_names:
            info = self.storage.latest_file(bank_id, name)
            if info is None:
                logger.debug(f"No archive yet for {bank_id}/{name}")
                return False
            if info.last_modified.date() != today:
                logger.debug(
                    f"Archive for {bank_id}/{name} last modified {info.last_modified.date()}"
                )
                return False

        return True
