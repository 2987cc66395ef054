"""
Configuration validation for txarchive.
"""

import re
from typing import List

from .settings import AppConfig, CaisseEpargneConfig, ReconcileSettings


class ConfigValidator:
    """Validates configuration settings."""

    @staticmethod
    def validate_config(config: AppConfig) -> List[str]:
        """Validate the entire configuration and return every problem found."""
        errors = []

        errors.extend(ConfigValidator._validate_reconcile_settings(config.reconcile))
        errors.extend(ConfigValidator._validate_caisse_epargne(config.caisse_epargne))

        if not str(config.archive.data_dir).strip():
            errors.append("Data directory must not be empty")

        return errors

    @staticmethod
    def _validate_reconcile_settings(settings: ReconcileSettings) -> List[str]:
        """Validate windows, delays and timeouts."""
        errors = []

        if settings.max_days_back < 1:
            errors.append("Max days back must be at least 1")

        if settings.download_wait_seconds < 0:
            errors.append("Download wait cannot be negative")
        if settings.request_delay_seconds < 0:
            errors.append("Request delay cannot be negative")

        if settings.request_timeout <= 0:
            errors.append("Request timeout must be positive")
        if settings.fetch_timeout <= 0:
            errors.append("Fetch timeout must be positive")

        if len(settings.csv_delimiter) != 1:
            errors.append(f"CSV delimiter must be a single character, got {settings.csv_delimiter!r}")

        return errors

    @staticmethod
    def _validate_caisse_epargne(config: CaisseEpargneConfig) -> List[str]:
        """Validate Caisse d'Epargne endpoints."""
        errors = []

        if not ConfigValidator._is_valid_url(config.login_url):
            errors.append(f"Invalid login URL: {config.login_url}")
        if not ConfigValidator._is_valid_url(config.api_base):
            errors.append(f"Invalid API base URL: {config.api_base}")

        return errors

    @staticmethod
    def _is_valid_url(url: str) -> bool:
        """Basic http(s) URL check."""
        url_pattern = r'^https?://[a-zA-Z0-9.-]+(?::[0-9]+)?(?:/.*)?$'
        return bool(re.match(url_pattern, url))
