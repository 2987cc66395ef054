"""
On-disk layout of transaction archives.

Directory structure::

    <data_dir>/
      transactions/
        <bank_id>/
          <sanitized-account-name>/
            history-from-YYYYMMDD.csv

The date in the filename is the archive's anchor: the earliest window start
ever merged into it.
"""

import logging
import re
import unicodedata
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from .models import ArchiveFileInfo

logger = logging.getLogger(__name__)

FILENAME_PATTERN = re.compile(r'^history-from-(\d{8})\.csv$')


def sanitize_name(name: str) -> str:
    """
    Turn an account name into a folder name.

    Accents are stripped, characters other than letters, digits, whitespace
    and ``-`` are removed, whitespace runs become ``_`` and the result is
    lowercased.

    >>> sanitize_name("Compte Courant")
    'compte_courant'
    >>> sanitize_name("Livret Épargne")
    'livret_epargne'
    """
    decomposed = unicodedata.normalize("NFD", name)
    without_accents = "".join(c for c in decomposed if not unicodedata.combining(c))
    cleaned = re.sub(r'[^a-zA-Z0-9\s-]', '', without_accents)
    return re.sub(r'\s+', '_', cleaned).lower().strip()


def transactions_filename(anchor: date) -> str:
    """Filename for an archive anchored at ``anchor``."""
    return f"history-from-{anchor.strftime('%Y%m%d')}.csv"


def parse_transactions_filename(filename: str) -> Optional[date]:
    """Anchor date encoded in an archive filename, or None if it doesn't match."""
    match = FILENAME_PATTERN.match(filename)
    if not match:
        return None
    try:
        return datetime.strptime(match.group(1), "%Y%m%d").date()
    except ValueError:
        return None


class ArchiveStorage:
    """
    Locates archive files for accounts of a bank.

    Read-only; writing is done by ArchiveWriter.
    """

    def __init__(self, transactions_root: Path):
        """
        Initialize storage.

        Args:
            transactions_root: Root directory holding one folder per bank
        """
        self.transactions_root = transactions_root

    def bank_dir(self, bank_id: str) -> Path:
        return self.transactions_root / bank_id

    def account_dir(self, bank_id: str, account_name: str) -> Path:
        return self.bank_dir(bank_id) / sanitize_name(account_name)

    def latest_file(self, bank_id: str, account_name: str) -> Optional[ArchiveFileInfo]:
        """
        Get the most recently modified archive file for an account.

        Args:
            bank_id: Bank identifier
            account_name: Display name of the account (sanitized here)

        Returns:
            File info, or None if the account has no archive or the latest
            file's name does not carry an anchor date
        """
        account_dir = self.account_dir(bank_id, account_name)
        if not account_dir.is_dir():
            return None

        latest_path: Optional[Path] = None
        latest_mtime: Optional[float] = None
        for path in account_dir.glob("*.csv"):
            mtime = path.stat().st_mtime
            if latest_mtime is None or mtime > latest_mtime:
                latest_mtime = mtime
                latest_path = path

        if latest_path is None or latest_mtime is None:
            return None

        anchor = parse_transactions_filename(latest_path.name)
        if anchor is None:
            logger.debug(f"Ignoring archive with unexpected name: {latest_path}")
            return None

        return ArchiveFileInfo(
            account_name=account_name,
            bank_id=bank_id,
            anchor_date=anchor,
            path=latest_path,
            last_modified=datetime.fromtimestamp(latest_mtime),
        )
