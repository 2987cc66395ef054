"""
Environment variable handling for txarchive configuration.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from ..exceptions import ConfigurationError
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
)
from .settings import (
    AppConfig,
    ArchiveConfig,
    CaisseEpargneConfig,
    LogLevel,
    ReconcileSettings,
)


class EnvironmentLoader:
    """Loads configuration from environment variables."""

    @staticmethod
    def load_config(use_dotenv: bool = True) -> AppConfig:
        """Load configuration from environment variables."""
        if use_dotenv:
            # .env values win over the shell environment
            load_dotenv(override=True)

        archive = ArchiveConfig(
            data_dir=Path(os.getenv('TXARCHIVE_DATA_DIR', DEFAULT_DATA_DIR)),
        )

        reconcile = ReconcileSettings(
            max_days_back=EnvironmentLoader._get_int('TXARCHIVE_MAX_DAYS_BACK', DEFAULT_MAX_DAYS_BACK),
            download_wait_seconds=EnvironmentLoader._get_float(
                'TXARCHIVE_DOWNLOAD_WAIT', DEFAULT_DOWNLOAD_WAIT_SECONDS
            ),
            request_delay_seconds=EnvironmentLoader._get_float(
                'TXARCHIVE_REQUEST_DELAY', DEFAULT_REQUEST_DELAY_SECONDS
            ),
            request_timeout=EnvironmentLoader._get_float('TXARCHIVE_REQUEST_TIMEOUT', DEFAULT_REQUEST_TIMEOUT),
            fetch_timeout=EnvironmentLoader._get_float('TXARCHIVE_FETCH_TIMEOUT', DEFAULT_FETCH_TIMEOUT),
            csv_delimiter=os.getenv('TXARCHIVE_CSV_DELIMITER', DEFAULT_CSV_DELIMITER),
        )

        caisse_epargne = CaisseEpargneConfig(
            login_url=os.getenv('CE_LOGIN_URL', CE_LOGIN_URL),
            api_base=os.getenv('CE_API_BASE', CE_API_BASE).rstrip('/'),
            session_file=Path(os.getenv('CE_SESSION_FILE', CE_SESSION_FILE)),
        )

        log_level_str = os.getenv('LOG_LEVEL', 'INFO').upper()
        log_level = LogLevel.INFO
        try:
            log_level = LogLevel(log_level_str)
        except ValueError:
            pass  # Use default

        log_file: Optional[Path] = None
        if os.getenv('LOG_FILE'):
            log_file = Path(os.environ['LOG_FILE'])

        return AppConfig(
            archive=archive,
            reconcile=reconcile,
            caisse_epargne=caisse_epargne,
            log_level=log_level,
            log_file=log_file,
        )

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        value = os.getenv(key)
        if value is None or value == '':
            return default
        try:
            return int(value)
        except ValueError:
            raise ConfigurationError(f"{key} must be an integer, got {value!r}", [f"{key}={value}"])

    @staticmethod
    def _get_float(key: str, default: float) -> float:
        value = os.getenv(key)
        if value is None or value == '':
            return default
        try:
            return float(value)
        except ValueError:
            raise ConfigurationError(f"{key} must be a number, got {value!r}", [f"{key}={value}"])
