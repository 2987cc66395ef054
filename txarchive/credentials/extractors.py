"""
Token extraction attempts over session storage entries.

Each extractor looks at one ``(key, value)`` pair and either returns a raw
token or None. The resolver applies them in ``DEFAULT_CHAIN`` order:

1. ``BearerPatternExtractor`` - a ``Bearer <token>`` substring anywhere in
   the value
2. ``JsonTokenFieldExtractor`` - a JSON object carrying one of the
   conventional token fields
3. ``TokenLikeKeyExtractor`` - the key name mentions token/auth and the
   value is long enough to be one
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)

MIN_TOKEN_LENGTH = 10

BEARER_PATTERN = re.compile(r'Bearer\s+[A-Za-z0-9._-]+', re.IGNORECASE)
TOKEN_KEY_PATTERN = re.compile(r'token|auth', re.IGNORECASE)


class TokenExtractor(ABC):
    """One attempt at finding a token in a storage entry."""

    name: str = "extractor"

    @abstractmethod
    def extract(self, key: str, value: str) -> Optional[str]:
        """
        Try to extract a token.

        Args:
            key: Storage key
            value: Stored value

        Returns:
            Raw token or None
        """
        pass


class BearerPatternExtractor(TokenExtractor):
    """Finds a ``Bearer <token>`` substring."""

    name = "bearer_pattern"

    def extract(self, key: str, value: str) -> Optional[str]:
        match = BEARER_PATTERN.search(value)
        return match.group(0) if match else None


class JsonTokenFieldExtractor(TokenExtractor):
    """Reads a conventional token field out of a JSON object."""

    name = "json_token_field"
    fields: Sequence[str] = ("access_token", "token", "id_token", "authorization")

    def extract(self, key: str, value: str) -> Optional[str]:
        if not value.strip().startswith("{"):
            return None
        try:
            parsed = json.loads(value)
        except ValueError:
            return None
        if not isinstance(parsed, dict):
            return None

        # First truthy field decides, as with an `a or b or c` chain
        candidate = next((parsed[f] for f in self.fields if parsed.get(f)), None)
        if isinstance(candidate, str) and len(candidate) > MIN_TOKEN_LENGTH:
            return candidate
        return None


class TokenLikeKeyExtractor(TokenExtractor):
    """Takes the whole value when the key looks like a token entry."""

    name = "token_like_key"

    def extract(self, key: str, value: str) -> Optional[str]:
        if TOKEN_KEY_PATTERN.search(key) and len(value) > MIN_TOKEN_LENGTH:
            return value
        return None


DEFAULT_CHAIN: List[TokenExtractor] = [
    BearerPatternExtractor(),
    JsonTokenFieldExtractor(),
    TokenLikeKeyExtractor(),
]
