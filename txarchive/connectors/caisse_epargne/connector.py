"""
Caisse d'Epargne connector.

Takes the session left by the login helper, resolves the Authorization
header and runs the reconciliation engine against the bank's download API.
"""

import logging
from datetime import date
from typing import List, Optional

import httpx

from ...archive.models import Account, ReconcileReport
from ...archive.storage import ArchiveStorage
from ...config.constants import BANK_CAISSE_EPARGNE
from ...config.settings import AppConfig
from ...credentials import CredentialResolver
from ...reconcile.engine import ReconciliationEngine
from ...reconcile.requests import Sleep
from ..base import BankConnector
from ..session import AuthenticatedSession
from .client import CaisseEpargneClient
from .parsing import extract_accounts

logger = logging.getLogger(__name__)


class CaisseEpargneConnector(BankConnector):
    """Connector for Caisse d'Epargne (Ile-de-France by default)."""

    bank_id = BANK_CAISSE_EPARGNE
    display_name = "Caisse d'Epargne"

    def __init__(
        self,
        config: AppConfig,
        resolver: Optional[CredentialResolver] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        today: Optional[date] = None,
        sleep: Optional[Sleep] = None,
    ):
        """
        Initialize the connector.

        Args:
            config: Application configuration
            resolver: Credential resolver (default chain if omitted)
            transport: Custom httpx transport for the API client
            today: Run date override
            sleep: Awaitable sleep override for fixed delays
        """
        self.config = config
        self.resolver = resolver or CredentialResolver()
        self._transport = transport
        self._today = today
        self._sleep = sleep

    async def authenticate(self) -> AuthenticatedSession:
        return AuthenticatedSession.load(self.config.caisse_epargne.session_file)

    def list_accounts(self, session: AuthenticatedSession) -> List[Account]:
        return extract_accounts(session.accounts_payload)

    def build_client(self, session: AuthenticatedSession) -> CaisseEpargneClient:
        """Create an API client carrying the session's credentials."""
        credential = self.resolver.resolve(
            session.captured_authorization, session.storage_entries
        )
        logger.debug(f"Authorization source: {credential.source}")
        return CaisseEpargneClient(
            self.config.caisse_epargne,
            self.config.reconcile,
            authorization=credential.header,
            user_agent=session.user_agent,
            cookies=session.cookies,
            transport=self._transport,
        )

    async def reconcile_and_archive(self, session: AuthenticatedSession) -> ReconcileReport:
        accounts = self.list_accounts(session)
        logger.info(f"{self.display_name}: {len(accounts)} account(s) in session")

        storage = ArchiveStorage(self.config.archive.transactions_root)
        async with self.build_client(session) as client:
            engine = ReconciliationEngine(
                client,
                self.config.reconcile,
                storage,
                today=self._today,
                sleep=self._sleep,
            )
            return await engine.run(self.bank_id, accounts)
