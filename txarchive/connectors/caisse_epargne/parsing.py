"""
Extraction helpers for Caisse d'Epargne API payloads.

The bank's responses are loosely shaped: contract ids show up as plain
values, as ``{"id": ...}`` objects or nested one level deeper depending on
the endpoint. Everything here tolerates missing keys and returns None or
empty lists rather than raising.
"""

from typing import Any, Dict, List, Optional

from ...archive.models import Account, DownloadRequest


def _as_id(value: Any) -> Optional[str]:
    """Plain string/integer id as text; anything else is not an id."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (str, int)):
        return str(value)
    return None


def _get(data: Any, *path: str) -> Any:
    """Walk nested dicts, returning None as soon as a level is missing."""
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _object_id(value: Any) -> Optional[str]:
    """Id from either a plain value or an ``{"id": ...}`` object."""
    direct = _as_id(value)
    if direct is not None:
        return direct
    if isinstance(value, dict) and value.get("id"):
        return str(value["id"])
    return None


def extract_pfm_contract_id(identity: Any) -> Optional[str]:
    """Contract id from a last-download-history identity block."""
    found = _object_id(_get(identity, "pfmContractId"))
    if found is not None:
        return found
    return _object_id(_get(identity, "contractPfmId"))


def extract_history_request_pfm_contract_id(identity: Any) -> Optional[str]:
    """Contract id from a history-request identity block (nested variant first)."""
    nested = _as_id(_get(identity, "pfmContractId", "pfmContractId"))
    if nested is not None:
        return nested
    return _object_id(_get(identity, "pfmContractId"))


def extract_accounts(api_data: Any) -> List[Account]:
    """
    Accounts from the account listing captured at login.

    Items without ``identification.contractPfmId`` are not downloadable and
    are left out. Unlabelled contracts are named ``Account <id>``.
    """
    accounts = []
    for item in _get(api_data, "items") or []:
        contract_id = _as_id(_get(item, "identification", "contractPfmId"))
        if not contract_id:
            continue
        label = _get(item, "identity", "contractLabel")
        name = label if isinstance(label, str) and label else f"Account {contract_id}"
        accounts.append(Account(account_id=contract_id, name=name))
    return accounts


def parse_last_download_history(data: Any) -> List[Account]:
    """Accounts listed by lastDownloadHistoryViews (names are not provided)."""
    accounts = []
    for item in _get(data, "operationIdResponseItem") or []:
        contract_id = extract_pfm_contract_id(_get(item, "identity"))
        if contract_id:
            accounts.append(Account(account_id=contract_id, name=""))
    return accounts


def parse_history_requests(data: Any) -> List[DownloadRequest]:
    """Download requests in the order the bank lists them."""
    requests = []
    for item in _get(data, "operationIdResponseItem") or []:
        identity = _get(item, "identity")
        contract_id = extract_history_request_pfm_contract_id(identity)
        if not contract_id:
            continue
        requests.append(DownloadRequest(
            account_id=contract_id,
            request_id=_as_id(_get(item, "identification", "historyRequestId", "id")),
            window_start=_get(identity, "startDate"),
            window_end=_get(identity, "endDate"),
            prepared_at=_get(identity, "downloadDate"),
        ))
    return requests


def extract_download_url(data: Any) -> Optional[str]:
    """Export URL from a prepareDownload answer."""
    url = _get(data, "prepareDownload", "characteristics", "downloadUrl")
    return url if isinstance(url, str) and url else None


def build_history_request_payload(
    contract_id: str,
    start_date: str,
    end_date: str,
) -> Dict[str, Any]:
    """
    Body of a create-history-request call.

    The codes are the ones the bank's web client sends for a CSV export
    without attachments.
    """
    return {
        "pfmContractId": {"id": contract_id},
        "idType": {"code": "0"},
        "contractRelationContext": {"code": "1"},
        "includeAttachment": False,
        "dateFormatType": {"code": "0"},
        "separateType": {"code": "3"},
        "decimalSeparateType": {"code": "0"},
        "startDate": start_date,
        "endDate": end_date,
        "fileType": {"code": "0"},
    }
