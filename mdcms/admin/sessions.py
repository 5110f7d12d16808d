"""
Admin session store.

Sessions live in memory only; a restart logs every admin out.
"""
import logging
import secrets
import threading
import time
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


class SessionStore:
    """Thread-safe table of admin session tokens with sliding expiry."""

    def __init__(self, ttl_seconds: int = 3600, clock: Callable[[], float] = time.time):
        """Initialize the store.

        Args:
            ttl_seconds: Session lifetime, renewed on every authenticated request
            clock: Time source returning epoch seconds
        """
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        # Key: token, Value: expiry epoch seconds
        self._sessions: Dict[str, float] = {}

    def create(self) -> str:
        """Create a new session and return its token."""
        self.purge_expired()
        token = secrets.token_hex(32)
        with self._lock:
            self._sessions[token] = self._clock() + self.ttl_seconds
        logger.info("Admin session created")
        return token

    def validate(self, token: Optional[str]) -> bool:
        """Check a token and extend its expiry if it is still valid."""
        if not token:
            return False
        now = self._clock()
        with self._lock:
            expires = self._sessions.get(token)
            if expires is None:
                return False
            if now > expires:
                del self._sessions[token]
                return False
            self._sessions[token] = now + self.ttl_seconds
            return True

    def revoke(self, token: Optional[str]) -> None:
        if not token:
            return
        with self._lock:
            self._sessions.pop(token, None)

    def purge_expired(self) -> int:
        """Drop expired sessions, returning how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [token for token, expires in self._sessions.items() if now > expires]
            for token in expired:
                del self._sessions[token]
        if expired:
            logger.debug(f"Purged {len(expired)} expired admin sessions")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
