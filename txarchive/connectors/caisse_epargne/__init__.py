"""
Caisse d'Epargne connector.
"""

from .client import CaisseEpargneClient
from .connector import CaisseEpargneConnector

__all__ = [
    "CaisseEpargneClient",
    "CaisseEpargneConnector",
]
