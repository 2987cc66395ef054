"""
Download-request reconciliation.

Decides whether the download requests already on the remote service can be
reused for today's window or must be recreated, and creates them when
needed. Per account::

    NEEDS_CHECK -> (REUSABLE | NEEDS_CREATE) -> READY | UNAVAILABLE

Reuse is all-or-nothing: if a single target account lacks a request for
exactly today's window, requests are recreated for every target. That costs
a few extra create calls and keeps the decision simple.

After creating, the manager waits a fixed delay for the service to prepare
the files and lists requests once more. There is no polling loop; accounts
whose request isn't listed by then are skipped for this run.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

from ..archive.models import (
    Account,
    AccountPlan,
    AccountState,
    DownloadRequest,
    ReconciliationWindow,
    RequestPlan,
)
from ..config.settings import ReconcileSettings
from ..connectors.base import ExportService
from ..exceptions import AllRequestsFailedError, TxArchiveError

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class DownloadRequestManager:
    """
    Reconciles remote download requests for a set of accounts.

    Accounts are processed sequentially in listing order.
    """

    def __init__(
        self,
        service: ExportService,
        settings: ReconcileSettings,
        sleep: Optional[Sleep] = None,
    ):
        """
        Initialize the manager.

        Args:
            service: Remote export service
            settings: Delays used between and after create calls
            sleep: Awaitable sleep (asyncio.sleep unless overridden)
        """
        self.service = service
        self.settings = settings
        self._sleep = sleep or asyncio.sleep

    async def reconcile(
        self,
        accounts: List[Account],
        window: ReconciliationWindow,
    ) -> RequestPlan:
        """
        Bring remote requests in line with today's window.

        Args:
            accounts: Accounts from the session's account listing
            window: Today's reconciliation window

        Returns:
            Plan with every target account READY or UNAVAILABLE

        Raises:
            AllRequestsFailedError: If requests had to be created and none
                of the create calls succeeded
        """
        targets = await self.discover_targets(accounts)
        plan = RequestPlan(window=window, accounts=[AccountPlan(account=a) for a in targets])

        if not plan.accounts:
            logger.warning("Export service lists no accounts; nothing to reconcile")

        existing = self.retain_latest(await self.service.list_download_requests(), targets)

        self.check_reuse(plan.accounts, existing, window)

        if all(p.state == AccountState.REUSABLE for p in plan.accounts):
            for account_plan in plan.accounts:
                account_plan.state = AccountState.READY
            plan.reused = True
            logger.info(f"Reusing prepared exports for {len(plan.accounts)} account(s)")
            return plan

        stale = sum(1 for p in plan.accounts if p.state == AccountState.NEEDS_CREATE)
        logger.info(
            f"{stale} account(s) lack an export for today's window; "
            f"recreating requests for all {len(plan.accounts)}"
        )
        for account_plan in plan.accounts:
            account_plan.request = None
            account_plan.state = AccountState.NEEDS_CREATE

        plan.created = await self._create_requests(plan.accounts, window)
        if plan.created == 0:
            logger.error("Failed to create any download requests")
            raise AllRequestsFailedError(len(plan.accounts))

        logger.info(f"Prepared {plan.created} account(s); waiting for the bank to build files")
        await self._sleep(self.settings.download_wait_seconds)

        refreshed = self.retain_latest(await self.service.list_download_requests(), targets)
        for account_plan in plan.accounts:
            request = refreshed.get(account_plan.account.account_id)
            if request is None:
                account_plan.state = AccountState.UNAVAILABLE
                logger.warning(
                    f"No download request listed for {account_plan.account.name!r}; skipping"
                )
            else:
                account_plan.request = request
                account_plan.state = AccountState.READY

        logger.info(
            f"{len(plan.ready)} export(s) ready, {len(plan.unavailable)} not listed yet"
        )
        return plan

    async def discover_targets(self, accounts: List[Account]) -> List[Account]:
        """
        Resolve target accounts from the last-export metadata.

        Identifiers come from the export service; display names come from
        the session's account listing.
        """
        names = {a.account_id: a.name for a in accounts}
        metadata = await self.service.get_last_export_metadata()

        targets: Dict[str, Account] = {}
        for item in metadata:
            if not item.account_id or item.account_id in targets:
                continue
            name = names.get(item.account_id) or item.name
            targets[item.account_id] = Account(account_id=item.account_id, name=name)

        return list(targets.values())

    @staticmethod
    def retain_latest(
        requests: Iterable[DownloadRequest],
        targets: Iterable[Account],
    ) -> Dict[str, DownloadRequest]:
        """Keep the first-listed request of each target account."""
        wanted = {a.account_id for a in targets}
        retained: Dict[str, DownloadRequest] = {}
        for request in requests:
            if request.account_id in wanted and request.account_id not in retained:
                retained[request.account_id] = request
        return retained

    @staticmethod
    def check_reuse(
        plans: List[AccountPlan],
        existing: Dict[str, DownloadRequest],
        window: ReconciliationWindow,
    ) -> None:
        """Mark each plan REUSABLE if its retained request covers exactly this window."""
        for account_plan in plans:
            request = existing.get(account_plan.account.account_id)
            if request is not None and request.matches(window):
                account_plan.request = request
                account_plan.state = AccountState.REUSABLE
            else:
                account_plan.state = AccountState.NEEDS_CREATE

    async def _create_requests(
        self,
        plans: List[AccountPlan],
        window: ReconciliationWindow,
    ) -> int:
        """Issue one create call per account; returns the number accepted."""
        success_count = 0

        for account_plan in plans:
            account = account_plan.account
            try:
                accepted = await self.service.create_download_request(
                    account.account_id, window.start_iso, window.end_iso
                )
            except TxArchiveError as e:
                logger.warning(f"Create request failed for {account.name!r}: {e.to_log_string()}")
                accepted = False

            if accepted:
                success_count += 1
                logger.debug(f"Download request accepted for {account.name!r}")
            else:
                logger.warning(f"Download request rejected for {account.name!r}")

            # Politeness pause between calls
            await self._sleep(self.settings.request_delay_seconds)

        return success_count
