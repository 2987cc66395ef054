"""
Transaction archive reconciliation.
"""

from .engine import ReconciliationEngine
from .fetcher import ExportFetcher
from .requests import DownloadRequestManager

__all__ = [
    "ReconciliationEngine",
    "DownloadRequestManager",
    "ExportFetcher",
]
