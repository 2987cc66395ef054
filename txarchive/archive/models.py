"""
Data models for transaction archive reconciliation.

Accounts and download requests are observed on the remote service; archive
files are owned locally. Dates exchanged with the remote service are ISO
``YYYY-MM-DD`` strings.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


class AccountState(Enum):
    """Per-account state for the current run."""
    NEEDS_CHECK = "needs_check"
    REUSABLE = "reusable"
    NEEDS_CREATE = "needs_create"
    READY = "ready"
    UNAVAILABLE = "unavailable"
    DOWNLOADED = "downloaded"
    FAILED = "failed"


@dataclass(frozen=True)
class Account:
    """A remote contract identifier and its display name."""
    account_id: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"account_id": self.account_id, "name": self.name}


@dataclass(frozen=True)
class ReconciliationWindow:
    """The [start, end] range the engine wants exported for today's run."""
    start: date
    end: date

    @classmethod
    def for_today(cls, today: date, max_days_back: int) -> "ReconciliationWindow":
        return cls(start=today - timedelta(days=max_days_back), end=today)

    @property
    def start_iso(self) -> str:
        return self.start.isoformat()

    @property
    def end_iso(self) -> str:
        return self.end.isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {"start": self.start_iso, "end": self.end_iso}


@dataclass(frozen=True)
class DownloadRequest:
    """Server-owned export prepared for one account and window."""
    account_id: str
    request_id: Optional[str]
    window_start: Optional[str] = None
    window_end: Optional[str] = None
    prepared_at: Optional[str] = None

    def matches(self, window: ReconciliationWindow) -> bool:
        """True iff both bounds equal the window's bounds exactly."""
        return self.window_start == window.start_iso and self.window_end == window.end_iso

    def to_dict(self) -> Dict[str, Any]:
        return {
            "account_id": self.account_id,
            "request_id": self.request_id,
            "window_start": self.window_start,
            "window_end": self.window_end,
            "prepared_at": self.prepared_at,
        }


@dataclass
class ArchiveFileInfo:
    """An existing local archive file for one account."""
    account_name: str
    bank_id: str
    anchor_date: date
    path: Path
    last_modified: datetime


@dataclass
class AccountPlan:
    """Tracks one target account through a reconciliation run."""
    account: Account
    state: AccountState = AccountState.NEEDS_CHECK
    request: Optional[DownloadRequest] = None
    archive_path: Optional[Path] = None

    @property
    def request_id(self) -> Optional[str]:
        return self.request.request_id if self.request else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "account": self.account.to_dict(),
            "state": self.state.value,
            "request": self.request.to_dict() if self.request else None,
            "archive_path": str(self.archive_path) if self.archive_path else None,
        }


@dataclass
class RequestPlan:
    """Outcome of reconciling remote download requests."""
    window: ReconciliationWindow
    accounts: List[AccountPlan] = field(default_factory=list)
    reused: bool = False
    created: int = 0

    @property
    def ready(self) -> List[AccountPlan]:
        return [p for p in self.accounts if p.state == AccountState.READY]

    @property
    def unavailable(self) -> List[AccountPlan]:
        return [p for p in self.accounts if p.state == AccountState.UNAVAILABLE]


@dataclass
class ReconcileReport:
    """Summary of one run for one bank."""
    bank_id: str
    window: ReconciliationWindow
    skipped: bool = False
    reused: bool = False
    created: int = 0
    downloaded: int = 0
    accounts: List[AccountPlan] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    @property
    def failed(self) -> int:
        return sum(
            1 for p in self.accounts
            if p.state in (AccountState.FAILED, AccountState.UNAVAILABLE)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bank_id": self.bank_id,
            "window": self.window.to_dict(),
            "skipped": self.skipped,
            "reused": self.reused,
            "created": self.created,
            "downloaded": self.downloaded,
            "failed": self.failed,
            "accounts": [p.to_dict() for p in self.accounts],
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }
