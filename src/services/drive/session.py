"""
Process-wide credential holder.

Exactly one Credential exists per process; a new sign-in replaces it for
every caller. Readers get an immutable snapshot, writers swap the whole value
under a lock, so a request never sees a half-written token pair.
"""

import hashlib
import threading
from collections import OrderedDict

from src.config.logging_config import setup_logger

from .models import AuthenticatedUser, Credential

logger = setup_logger(__name__)

_MAX_CONSUMED_CODES = 256


def _fingerprint(code: str) -> str:
    # Codes are secrets; keep only a digest of the ones already used.
    return hashlib.sha256(code.encode("utf-8")).hexdigest()


class SessionStore:
    """Single-tenant, atomically swappable Credential plus a consumed-code ledger."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._credential: Credential | None = None
        self._user: AuthenticatedUser | None = None
        self._consumed: OrderedDict[str, None] = OrderedDict()

    def get(self) -> Credential | None:
        with self._lock:
            return self._credential

    @property
    def has_token(self) -> bool:
        cred = self.get()
        return cred is not None and bool(cred.access_token)

    def replace(self, credential: Credential) -> None:
        """Install a freshly exchanged credential; cached identity belongs to the old one."""
        with self._lock:
            self._credential = credential
            self._user = None
        logger.info("Session credential replaced")

    def swap_if_current(self, expected: Credential, new: Credential) -> bool:
        """Replace only if nobody swapped in a different credential meanwhile (token refresh)."""
        with self._lock:
            if self._credential is not expected:
                return False
            self._credential = new
            return True

    def clear(self) -> None:
        with self._lock:
            self._credential = None
            self._user = None
        logger.info("Session cleared")

    # ------------------------------------------------------------------
    # Identity cache (valid only for the credential it was fetched with)
    # ------------------------------------------------------------------

    def cached_user(self, credential: Credential) -> AuthenticatedUser | None:
        with self._lock:
            return self._user if self._credential is credential else None

    def remember_user(self, credential: Credential, user: AuthenticatedUser) -> None:
        with self._lock:
            if self._credential is credential:
                self._user = user

    # ------------------------------------------------------------------
    # One-time authorization codes
    # ------------------------------------------------------------------

    def claim_code(self, code: str) -> bool:
        """Mark a code as used. Returns False if it had been claimed already."""
        key = _fingerprint(code)
        with self._lock:
            if key in self._consumed:
                return False
            self._consumed[key] = None
            while len(self._consumed) > _MAX_CONSUMED_CODES:
                self._consumed.popitem(last=False)
            return True
