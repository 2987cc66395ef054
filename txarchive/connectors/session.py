"""
Authenticated session handed over by the login step.

Logging in (credential entry, 2FA) happens outside txarchive. The login
helper leaves a JSON snapshot behind::

    {
      "accounts_payload": {...},          # account listing returned at login
      "authorization": "Bearer ...",      # header captured on a request, optional
      "storage": [["key", "value"], ...], # local/session storage entries
      "user_agent": "Mozilla/5.0 ...",
      "cookies": {"name": "value"}
    }
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..exceptions import SessionUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)


@dataclass
class AuthenticatedSession:
    """What the engine needs from a logged-in session."""
    accounts_payload: Dict[str, Any] = field(default_factory=dict)
    captured_authorization: Optional[str] = None
    storage_entries: List[Tuple[str, str]] = field(default_factory=list)
    user_agent: str = DEFAULT_USER_AGENT
    cookies: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuthenticatedSession":
        storage = []
        for entry in data.get("storage", []):
            if isinstance(entry, (list, tuple)) and len(entry) == 2 and entry[1] is not None:
                storage.append((str(entry[0]), str(entry[1])))
        return cls(
            accounts_payload=data.get("accounts_payload") or {},
            captured_authorization=data.get("authorization") or None,
            storage_entries=storage,
            user_agent=data.get("user_agent") or DEFAULT_USER_AGENT,
            cookies={str(k): str(v) for k, v in (data.get("cookies") or {}).items()},
        )

    @classmethod
    def load(cls, path: Path) -> "AuthenticatedSession":
        """
        Load a session snapshot.

        Args:
            path: Snapshot file written by the login helper

        Returns:
            The session

        Raises:
            SessionUnavailableError: If the file is missing or not a JSON object
        """
        if not path.exists():
            raise SessionUnavailableError(
                "No session snapshot found; log in first", str(path)
            )
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise SessionUnavailableError(f"Unreadable session snapshot: {e}", str(path))
        if not isinstance(data, dict):
            raise SessionUnavailableError("Session snapshot is not a JSON object", str(path))

        session = cls.from_dict(data)
        logger.debug(
            f"Loaded session from {path} ({len(session.storage_entries)} storage entries)"
        )
        return session
