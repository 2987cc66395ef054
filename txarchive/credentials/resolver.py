"""
Authorization resolver for outbound API calls.

Resolves the Authorization header value in this order:
1. Header captured on an in-flight request during login (authoritative)
2. Token found in session storage by the extraction chain
3. Nothing: calls go out without Authorization and will likely fail later
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .extractors import DEFAULT_CHAIN, TokenExtractor

logger = logging.getLogger(__name__)

StorageEntry = Tuple[str, str]


@dataclass
class ResolvedCredential:
    """Result of credential resolution."""
    header: str
    source: str  # "request", "storage:<key>" or "none"

    @property
    def found(self) -> bool:
        return bool(self.header)


def build_authorization_header(raw_token: Optional[str]) -> str:
    """Prefix a raw token with ``Bearer`` unless it already carries it."""
    if not raw_token:
        return ""
    if re.match(r'^Bearer\s+', raw_token, re.IGNORECASE):
        return raw_token
    return f"Bearer {raw_token}"


class CredentialResolver:
    """
    Produces the Authorization value used on API calls.

    Storage entries are visited in order; for each entry the extractors are
    tried in chain order and the first hit wins.
    """

    def __init__(self, chain: Optional[Sequence[TokenExtractor]] = None):
        """
        Initialize credential resolver.

        Args:
            chain: Extraction attempts in priority order (default chain if omitted)
        """
        self.chain: List[TokenExtractor] = list(chain if chain is not None else DEFAULT_CHAIN)

    def resolve(
        self,
        captured_header: Optional[str],
        storage_entries: Iterable[StorageEntry] = (),
    ) -> ResolvedCredential:
        """
        Resolve the Authorization header.

        Args:
            captured_header: Header seen on a request during login, if any
            storage_entries: Key/value pairs from the session's storage

        Returns:
            ResolvedCredential; an empty header means nothing was found
        """
        if captured_header:
            return ResolvedCredential(header=captured_header, source="request")

        found = self.extract_from_storage(storage_entries)
        if found is None:
            logger.warning(
                "No authorization value found; API calls will be sent without one"
            )
            return ResolvedCredential(header="", source="none")

        token, key, extractor = found
        logger.debug(f"Authorization taken from storage key {key!r} via {extractor}")
        return ResolvedCredential(
            header=build_authorization_header(token),
            source=f"storage:{key}",
        )

    def extract_from_storage(
        self,
        storage_entries: Iterable[StorageEntry],
    ) -> Optional[Tuple[str, str, str]]:
        """
        Run the extraction chain over storage entries.

        Returns:
            (token, storage key, extractor name) of the first match, or None
        """
        for key, value in storage_entries:
            if not value:
                continue
            for extractor in self.chain:
                token = extractor.extract(key, value)
                if token:
                    return token, key, extractor.name
        return None
