"""
Local transaction archive.

One CSV per account, anchored at the earliest window start ever merged
into it, accumulating history beyond the bank's lookback limit.
"""

from .models import (
    Account,
    AccountPlan,
    AccountState,
    ArchiveFileInfo,
    DownloadRequest,
    ReconcileReport,
    ReconciliationWindow,
    RequestPlan,
)
from .storage import (
    ArchiveStorage,
    parse_transactions_filename,
    sanitize_name,
    transactions_filename,
)
from .freshness import FreshnessGuard
from .merger import merge_csv, parse_row_date
from .writer import ArchiveWriter

__all__ = [
    # Models
    "Account",
    "AccountPlan",
    "AccountState",
    "ArchiveFileInfo",
    "DownloadRequest",
    "ReconcileReport",
    "ReconciliationWindow",
    "RequestPlan",
    # Storage
    "ArchiveStorage",
    "parse_transactions_filename",
    "sanitize_name",
    "transactions_filename",
    # Guard
    "FreshnessGuard",
    # Merge
    "merge_csv",
    "parse_row_date",
    "ArchiveWriter",
]
