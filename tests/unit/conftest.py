"""
Shared fixtures: an in-memory export service and a no-op sleep.
"""

from typing import Dict, List, Optional, Union

import pytest

from txarchive.archive.models import Account, DownloadRequest
from txarchive.connectors.base import ExportService
from txarchive.exceptions import MalformedResponseError


class FakeExportService(ExportService):
    """
    ExportService double that records every call.

    ``requests_after_create`` is what list_download_requests returns once at
    least one create call has been accepted.
    """

    def __init__(
        self,
        metadata: List[Account],
        requests: Optional[List[DownloadRequest]] = None,
        requests_after_create: Optional[List[DownloadRequest]] = None,
        create_results: Optional[Dict[str, Union[bool, Exception]]] = None,
        exports: Optional[Dict[str, Union[str, Exception]]] = None,
    ):
        self.metadata = metadata
        self.requests = list(requests or [])
        self.requests_after_create = requests_after_create
        self.create_results = create_results or {}
        self.exports = exports or {}
        self.calls: List[tuple] = []
        self._created = False

    def count(self, operation: str) -> int:
        return sum(1 for call in self.calls if call[0] == operation)

    async def get_last_export_metadata(self) -> List[Account]:
        self.calls.append(("metadata",))
        return list(self.metadata)

    async def list_download_requests(self) -> List[DownloadRequest]:
        self.calls.append(("list",))
        if self._created and self.requests_after_create is not None:
            return list(self.requests_after_create)
        return list(self.requests)

    async def create_download_request(self, account_id: str, window_start: str, window_end: str) -> bool:
        self.calls.append(("create", account_id, window_start, window_end))
        result = self.create_results.get(account_id, True)
        if isinstance(result, Exception):
            raise result
        if result:
            self._created = True
        return result

    async def prepare_download(self, request_id: str) -> str:
        self.calls.append(("prepare", request_id))
        if request_id not in self.exports:
            raise MalformedResponseError(f"no download URL for {request_id}")
        return f"https://export.test/{request_id}"

    async def fetch_export(self, export_url: str) -> str:
        self.calls.append(("fetch", export_url))
        content = self.exports[export_url.rsplit("/", 1)[1]]
        if isinstance(content, Exception):
            raise content
        return content


class RecordingSleep:
    """Awaitable stand-in for asyncio.sleep."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def fake_service():
    """Factory for FakeExportService instances."""
    return FakeExportService


@pytest.fixture
def no_sleep():
    return RecordingSleep()
