"""
Console session: holds the bearer credential for calls to the login and
workflow backends.

States are NO_TOKEN and AUTHENTICATED. A token arrives either once through a
bootstrap query parameter or from persisted storage; an unauthorized backend
response drops back to NO_TOKEN.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, Optional, Protocol

from workflow_center.core.security import bearer, redact_bearer

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "xzero_token"


class SessionState(str, Enum):
    NO_TOKEN = "no_token"
    AUTHENTICATED = "authenticated"


class BootstrapOutcome(str, Enum):
    CAPTURED = "captured"
    RESTORED = "restored"
    LOGIN_REQUIRED = "login_required"


class TokenStorage(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryTokenStorage:
    """Dict-backed storage, used by tests and scripts."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)


class SessionContext:
    """Token holder with the NO_TOKEN -> AUTHENTICATED -> NO_TOKEN lifecycle."""

    def __init__(
        self,
        storage: TokenStorage,
        storage_key: str = DEFAULT_STORAGE_KEY,
        on_unauthorized: Optional[Callable[[], None]] = None,
    ):
        self.storage = storage
        self.storage_key = storage_key
        self.on_unauthorized = on_unauthorized
        self._token: Optional[str] = None
        self.state = SessionState.NO_TOKEN

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED

    def authorization_header(self) -> Dict[str, str]:
        if not self._token:
            return {}
        return {"Authorization": bearer(self._token)}

    def bootstrap(self, bootstrap_token: Optional[str] = None) -> BootstrapOutcome:
        """Resolve the token at load time.

        A bootstrap token wins over storage and is persisted; the caller must then
        scrub it from the visible location (CAPTURED). Otherwise a stored token is
        restored. With neither, no protected call may be attempted.
        """
        candidate = (bootstrap_token or "").strip()
        if candidate:
            self.storage.set(self.storage_key, candidate)
            self._authenticate(candidate)
            logger.info("Session token captured from bootstrap parameter: %s", redact_bearer(bearer(candidate)))
            return BootstrapOutcome.CAPTURED

        stored = (self.storage.get(self.storage_key) or "").strip()
        if stored:
            self._authenticate(stored)
            logger.debug("Session token restored from storage")
            return BootstrapOutcome.RESTORED

        logger.info("No session token found, login required")
        return BootstrapOutcome.LOGIN_REQUIRED

    def expire(self) -> bool:
        """Clear the token after an unauthorized response.

        Returns True only on the AUTHENTICATED -> NO_TOKEN transition, so the
        unauthorized callback fires once however many calls fail.
        """
        if self.state is not SessionState.AUTHENTICATED:
            return False
        self.storage.delete(self.storage_key)
        self._token = None
        self.state = SessionState.NO_TOKEN
        logger.warning("Console session expired, token cleared")
        if self.on_unauthorized is not None:
            self.on_unauthorized()
        return True

    def _authenticate(self, token: str) -> None:
        self._token = token
        self.state = SessionState.AUTHENTICATED
