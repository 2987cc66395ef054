"""
Writes fetched exports into the per-account archive.
"""

import logging
from datetime import date
from pathlib import Path

from .merger import merge_csv
from .storage import ArchiveStorage, transactions_filename

logger = logging.getLogger(__name__)


class ArchiveWriter:
    """
    Persists exports, merging them into whatever archive already exists.

    The archive keeps the earliest anchor date it has ever seen, so history
    accumulates beyond the bank's lookback window.
    """

    def __init__(self, storage: ArchiveStorage, delimiter: str = ";"):
        """
        Initialize archive writer.

        Args:
            storage: Archive layout
            delimiter: CSV field delimiter used by the exports
        """
        self.storage = storage
        self.delimiter = delimiter

    def save_transactions(
        self,
        bank_id: str,
        account_name: str,
        window_start: date,
        content: str,
    ) -> Path:
        """
        Save an export for an account.

        Args:
            bank_id: Bank identifier
            account_name: Display name (sanitized for the folder)
            window_start: Start of the window the export covers
            content: Raw CSV export

        Returns:
            Path to the archive file
        """
        account_dir = self.storage.account_dir(bank_id, account_name)
        account_dir.mkdir(parents=True, exist_ok=True)

        existing = self.storage.latest_file(bank_id, account_name)
        anchor = window_start
        if existing is not None and existing.anchor_date < window_start:
            anchor = existing.anchor_date

        target = account_dir / transactions_filename(anchor)

        if existing is None:
            self._atomic_write(target, content)
            logger.info(f"Created archive: {target}")
            return target

        merged = merge_csv(existing.path.read_text(encoding="utf-8"), content, self.delimiter)
        self._atomic_write(target, merged)

        if existing.path != target:
            # Earlier anchor learned: the old file is superseded
            try:
                existing.path.unlink()
            except OSError as e:
                logger.warning(f"Could not remove superseded archive {existing.path}: {e}")
            else:
                logger.info(f"Re-anchored archive {existing.path.name} -> {target.name}")

        logger.info(f"Merged export into archive: {target}")
        return target

    def _atomic_write(self, path: Path, content: str) -> None:
        """Write atomically using rename."""
        tmp_path = path.with_suffix(".tmp")
        try:
            tmp_path.write_text(content, encoding="utf-8")
            tmp_path.replace(path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()
