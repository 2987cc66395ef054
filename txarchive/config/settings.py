"""
Configuration dataclasses for txarchive.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

from .constants import (
    CE_API_BASE,
    CE_LOGIN_URL,
    CE_SESSION_FILE,
    DEFAULT_CSV_DELIMITER,
    DEFAULT_DATA_DIR,
    DEFAULT_DOWNLOAD_WAIT_SECONDS,
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_MAX_DAYS_BACK,
    DEFAULT_REQUEST_DELAY_SECONDS,
    DEFAULT_REQUEST_TIMEOUT,
    TRANSACTIONS_DIR,
)


class LogLevel(Enum):
    """Supported log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class ArchiveConfig:
    """Where archives live on disk."""
    data_dir: Path = field(default_factory=lambda: Path(DEFAULT_DATA_DIR))

    @property
    def transactions_root(self) -> Path:
        return self.data_dir / TRANSACTIONS_DIR


@dataclass
class ReconcileSettings:
    """Windows, delays and timeouts used by the reconciliation engine."""
    max_days_back: int = DEFAULT_MAX_DAYS_BACK
    download_wait_seconds: float = DEFAULT_DOWNLOAD_WAIT_SECONDS
    request_delay_seconds: float = DEFAULT_REQUEST_DELAY_SECONDS
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    csv_delimiter: str = DEFAULT_CSV_DELIMITER


@dataclass
class CaisseEpargneConfig:
    """Endpoints and session location for the Caisse d'Epargne connector."""
    login_url: str = CE_LOGIN_URL
    api_base: str = CE_API_BASE
    session_file: Path = field(default_factory=lambda: Path(CE_SESSION_FILE))

    @property
    def origin(self) -> str:
        parts = urlsplit(self.login_url)
        return f"{parts.scheme}://{parts.netloc}"

    @property
    def last_download_history_url(self) -> str:
        return f"{self.api_base}/transactionDownload/v1/lastDownloadHistoryViews?userId=currentUser"

    @property
    def history_requests_url(self) -> str:
        return f"{self.api_base}/transactionDownload/v1/historyRequests"

    def prepare_download_url(self, request_id: str) -> str:
        return f"{self.history_requests_url}/{request_id}/prepareDownload"


@dataclass
class AppConfig:
    """Top-level configuration."""
    archive: ArchiveConfig = field(default_factory=ArchiveConfig)
    reconcile: ReconcileSettings = field(default_factory=ReconcileSettings)
    caisse_epargne: CaisseEpargneConfig = field(default_factory=CaisseEpargneConfig)
    log_level: LogLevel = LogLevel.INFO
    log_file: Optional[Path] = None
