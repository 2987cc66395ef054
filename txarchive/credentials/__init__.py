"""
Authorization resolution for remote API calls.
"""

from .extractors import (
    DEFAULT_CHAIN,
    BearerPatternExtractor,
    JsonTokenFieldExtractor,
    TokenExtractor,
    TokenLikeKeyExtractor,
)
from .resolver import CredentialResolver, ResolvedCredential, build_authorization_header

__all__ = [
    "CredentialResolver",
    "ResolvedCredential",
    "build_authorization_header",
    "TokenExtractor",
    "BearerPatternExtractor",
    "JsonTokenFieldExtractor",
    "TokenLikeKeyExtractor",
    "DEFAULT_CHAIN",
]
