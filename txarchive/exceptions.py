"""
Exception hierarchy for txarchive.

Per-account problems are soft: they are caught where a single account is
processed and never abort a run. Only the errors raised before any archive
mutation (configuration, session, all download requests failed) are fatal.
"""

from typing import Any, Dict, List, Optional


class TxArchiveError(Exception):
    """Base exception for all txarchive errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "TXARCHIVE_ERROR",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}

    def to_log_string(self) -> str:
        """Single-line representation used in log records."""
        if self.context:
            details = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.error_code}] {self.message} ({details})"
        return f"[{self.error_code}] {self.message}"


class ConfigurationError(TxArchiveError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message, "CONFIGURATION_ERROR", {"errors": errors or []})
        self.errors = errors or []


class UnknownBankError(TxArchiveError):
    """Raised when no connector is registered for a bank id."""

    def __init__(self, bank_id: str):
        super().__init__(f"No connector registered for bank '{bank_id}'", "UNKNOWN_BANK", {"bank_id": bank_id})
        self.bank_id = bank_id


class SessionUnavailableError(TxArchiveError):
    """Raised when no authenticated session can be obtained."""

    def __init__(self, message: str, path: Optional[str] = None):
        context = {"path": path} if path else {}
        super().__init__(message, "SESSION_UNAVAILABLE", context)


class RemoteServiceError(TxArchiveError):
    """Raised when the remote service answers with something unusable."""

    def __init__(
        self,
        message: str,
        error_code: str = "REMOTE_SERVICE_ERROR",
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        context = dict(context or {})
        if status_code is not None:
            context["status_code"] = status_code
        super().__init__(message, error_code, context)
        self.status_code = status_code


class MalformedResponseError(RemoteServiceError):
    """Prepare-download answer is not JSON or lacks the export URL."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, "MALFORMED_RESPONSE", status_code)


class ExportFetchError(RemoteServiceError):
    """Fetching an export URL returned a non-success status."""

    def __init__(self, status_code: int):
        super().__init__(f"Export fetch failed with HTTP {status_code}", "EXPORT_FETCH_FAILED", status_code)


class AllRequestsFailedError(TxArchiveError):
    """Every create-request call failed; nothing can be exported this run."""

    def __init__(self, attempted: int):
        super().__init__(
            "Failed to create any download requests. Aborting.",
            "ALL_REQUESTS_FAILED",
            {"attempted": attempted},
        )
        self.attempted = attempted


def handle_unexpected_error(error: Exception) -> TxArchiveError:
    """Wrap a foreign exception so it can be logged uniformly."""
    if isinstance(error, TxArchiveError):
        return error
    return TxArchiveError(
        f"Unexpected error: {error}",
        "UNEXPECTED_ERROR",
        {"type": type(error).__name__},
    )
