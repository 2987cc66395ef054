"""
Connector and remote service interfaces.

The reconciliation engine only talks to ``ExportService``; each bank ships
a ``BankConnector`` that logs in, lists accounts and drives the engine.
"""

from abc import ABC, abstractmethod
from typing import List

from ..archive.models import Account, DownloadRequest, ReconcileReport
from .session import AuthenticatedSession


class ExportService(ABC):
    """Remote download-request resource model of a bank."""

    @abstractmethod
    async def get_last_export_metadata(self) -> List[Account]:
        """
        List accounts known to the export service.

        Only used to discover per-account identifiers.

        Returns:
            Accounts (name may be empty when the service doesn't send one)
        """
        pass

    @abstractmethod
    async def list_download_requests(self) -> List[DownloadRequest]:
        """
        List existing download requests, most recent first.

        Returns:
            Download requests as listed by the service
        """
        pass

    @abstractmethod
    async def create_download_request(
        self,
        account_id: str,
        window_start: str,
        window_end: str,
    ) -> bool:
        """
        Ask the service to prepare an export.

        Args:
            account_id: Remote contract identifier
            window_start: ISO start date
            window_end: ISO end date

        Returns:
            True if the service accepted the request
        """
        pass

    @abstractmethod
    async def prepare_download(self, request_id: str) -> str:
        """
        Obtain a transient export URL for a prepared request.

        Args:
            request_id: Download request identifier

        Returns:
            Export URL

        Raises:
            MalformedResponseError: If the answer is not usable
        """
        pass

    @abstractmethod
    async def fetch_export(self, export_url: str) -> str:
        """
        Fetch export content.

        Args:
            export_url: URL from prepare_download

        Returns:
            Raw export text

        Raises:
            ExportFetchError: On a non-success response
        """
        pass


class BankConnector(ABC):
    """Abstract base class for bank connectors."""

    bank_id: str = ""
    display_name: str = ""

    @abstractmethod
    async def authenticate(self) -> AuthenticatedSession:
        """
        Obtain an authenticated session.

        Returns:
            Session with account listing and credentials

        Raises:
            SessionUnavailableError: If no session can be obtained
        """
        pass

    @abstractmethod
    def list_accounts(self, session: AuthenticatedSession) -> List[Account]:
        """
        Enumerate accounts from the session's account listing.

        Args:
            session: Authenticated session

        Returns:
            Accounts in listing order
        """
        pass

    @abstractmethod
    async def reconcile_and_archive(self, session: AuthenticatedSession) -> ReconcileReport:
        """
        Reconcile remote export state and merge exports into the archive.

        Args:
            session: Authenticated session

        Returns:
            Run report

        Raises:
            AllRequestsFailedError: If no download request could be created
        """
        pass
