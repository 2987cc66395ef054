"""
Bank connectors.

Each bank is a self-contained subpackage implementing ``BankConnector``.
To add one, create the subpackage and register its id in ``get_connector``.
"""

from typing import List

from ..config.constants import BANK_CAISSE_EPARGNE, KNOWN_BANK_IDS
from ..config.settings import AppConfig
from ..exceptions import UnknownBankError
from .base import BankConnector, ExportService
from .session import AuthenticatedSession


def available_banks() -> List[str]:
    """Bank ids with a registered connector."""
    return list(KNOWN_BANK_IDS)


def get_connector(bank_id: str, config: AppConfig) -> BankConnector:
    """
    Create the connector for a bank.

    Args:
        bank_id: Bank identifier (e.g., "ce")
        config: Application configuration

    Returns:
        Connector instance

    Raises:
        UnknownBankError: If no connector is registered for bank_id
    """
    if bank_id == BANK_CAISSE_EPARGNE:
        # Imported here: connectors depend on the engine, which depends on base
        from .caisse_epargne import CaisseEpargneConnector
        return CaisseEpargneConnector(config)

    raise UnknownBankError(bank_id)


__all__ = [
    "BankConnector",
    "ExportService",
    "AuthenticatedSession",
    "available_banks",
    "get_connector",
]
