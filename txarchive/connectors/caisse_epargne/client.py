"""
HTTP client for the Caisse d'Epargne transaction download API.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from ...archive.models import Account, DownloadRequest
from ...config.settings import CaisseEpargneConfig, ReconcileSettings
from ...exceptions import ExportFetchError, MalformedResponseError, RemoteServiceError
from ..base import ExportService
from .parsing import (
    build_history_request_payload,
    extract_download_url,
    parse_history_requests,
    parse_last_download_history,
)

logger = logging.getLogger(__name__)

JSON_ACCEPT = "application/json, text/plain, */*"
EXPORT_ACCEPT = "text/csv, application/octet-stream, */*"


class CaisseEpargneClient(ExportService):
    """
    ExportService backed by the bank's ``transactionDownload/v1`` API.

    Requests mimic the bank's web client: same Origin, Referer and
    User-Agent, plus the session's Authorization header when there is one.
    """

    def __init__(
        self,
        config: CaisseEpargneConfig,
        settings: ReconcileSettings,
        authorization: str = "",
        user_agent: str = "",
        cookies: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            config: Endpoints
            settings: Request and fetch timeouts
            authorization: Authorization header value (empty to omit)
            user_agent: User-Agent of the logged-in browser
            cookies: Session cookies
            transport: Custom httpx transport (tests)
        """
        self.config = config
        self.settings = settings
        self.authorization = authorization
        self.user_agent = user_agent
        self.cookies = cookies or {}
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.settings.request_timeout,
                cookies=self.cookies,
                transport=self._transport,
            )
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "CaisseEpargneClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _headers(self, accept: str = JSON_ACCEPT, json_body: bool = False) -> Dict[str, str]:
        headers = {
            "Accept": accept,
            "Origin": self.config.origin,
            "Referer": self.config.login_url,
        }
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        if json_body:
            headers["Content-Type"] = "application/json"
        if self.authorization:
            headers["Authorization"] = self.authorization
        return headers

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        client = await self._get_http_client()
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise RemoteServiceError(
                f"{method} {url} failed: {e}", "TRANSPORT_ERROR"
            ) from e
        logger.debug(f"{method} {url} -> HTTP {response.status_code}")
        return response

    async def _get_json(self, url: str) -> Any:
        response = await self._send("GET", url, headers=self._headers())
        if not response.is_success:
            raise RemoteServiceError(
                f"GET {url} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"GET {url} did not return JSON: {e}", response.status_code
            ) from e

    async def get_last_export_metadata(self) -> List[Account]:
        data = await self._get_json(self.config.last_download_history_url)
        return parse_last_download_history(data)

    async def list_download_requests(self) -> List[DownloadRequest]:
        data = await self._get_json(self.config.history_requests_url)
        return parse_history_requests(data)

    async def create_download_request(
        self,
        account_id: str,
        window_start: str,
        window_end: str,
    ) -> bool:
        response = await self._send(
            "POST",
            self.config.history_requests_url,
            json=build_history_request_payload(account_id, window_start, window_end),
            headers=self._headers(json_body=True),
        )
        if not response.is_success:
            logger.debug(f"Create request for {account_id} rejected: HTTP {response.status_code}")
        return response.is_success

    async def prepare_download(self, request_id: str) -> str:
        response = await self._send(
            "POST",
            self.config.prepare_download_url(request_id),
            json={"characteristics": {"historyRequestId": {"id": request_id}}},
            headers=self._headers(json_body=True),
        )

        content_type = response.headers.get("content-type", "")
        body = response.text
        if "application/json" not in content_type or not body:
            raise MalformedResponseError(
                f"prepareDownload for {request_id} did not return JSON", response.status_code
            )
        try:
            data = json.loads(body)
        except ValueError as e:
            raise MalformedResponseError(
                f"prepareDownload for {request_id} returned invalid JSON: {e}",
                response.status_code,
            ) from e

        url = extract_download_url(data)
        if not url:
            raise MalformedResponseError(
                f"prepareDownload for {request_id} has no download URL", response.status_code
            )
        return url

    async def fetch_export(self, export_url: str) -> str:
        response = await self._send(
            "GET",
            export_url,
            headers=self._headers(accept=EXPORT_ACCEPT),
            timeout=self.settings.fetch_timeout,
        )
        if not response.is_success:
            raise ExportFetchError(response.status_code)
        return response.text
