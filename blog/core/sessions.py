"""
Server-side session identity store.

One process-wide instance maps opaque session tokens to the authenticated
principal. A token is either Anonymous (no principal, ``get`` returns None)
or Authenticated(principal). Login calls ``set``, which replaces the cached
principal wholesale. Self-update calls ``replace``, which only swaps the
principal while the token is still bound to the same user. Logout calls
``invalidate``. Expired records are purged whenever a token is issued or set.

Concurrent requests bearing the same token race on ``set``/``get``; the last
``set`` wins.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from blog.core.security import generate_session_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """Immutable copy of the authenticated user's persisted fields."""
    id: int
    username: str
    password: str
    email: str

    @classmethod
    def from_user(cls, user) -> "Principal":
        return cls(id=user.id, username=user.username, password=user.password, email=user.email)


@dataclass
class _SessionRecord:
    principal: Optional[Principal]
    expires_at: datetime


class SessionIdentity:
    """Issue, resolve, replace and invalidate session principals."""

    def __init__(self, *, ttl: timedelta = timedelta(minutes=30)) -> None:
        self._ttl = ttl
        self._sessions: Dict[str, _SessionRecord] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    @property
    def cookie_max_age(self) -> int:
        return int(self._ttl.total_seconds())

    def store(self) -> str:
        """Issue a new anonymous token."""
        token = generate_session_token()
        now = self._now()
        with self._lock:
            self._purge_expired(now)
            self._sessions[token] = _SessionRecord(principal=None, expires_at=now + self._ttl)
        return token

    def get(self, token: Optional[str]) -> Optional[Principal]:
        """Return the principal bound to ``token``, or None when anonymous."""
        if not token:
            return None
        now = self._now()
        with self._lock:
            record = self._sessions.get(token)
            if record is None:
                return None
            if record.expires_at <= now:
                self._sessions.pop(token, None)
                logger.info("Session expired")
                return None
            record.expires_at = now + self._ttl
            return record.principal

    def set(self, token: str, principal: Principal) -> None:
        """Bind ``principal`` to ``token``, replacing any previous value."""
        if not isinstance(principal, Principal):
            principal = Principal.from_user(principal)
        now = self._now()
        with self._lock:
            self._purge_expired(now)
            self._sessions[token] = _SessionRecord(principal=principal, expires_at=now + self._ttl)

    def replace(self, token: Optional[str], principal: Principal) -> bool:
        """Swap in a refreshed copy of the principal already bound to ``token``.

        Only succeeds while the token is live and still bound to the same
        user id, so a logout that lands in between is never undone.
        """
        if not token:
            return False
        if not isinstance(principal, Principal):
            principal = Principal.from_user(principal)
        now = self._now()
        with self._lock:
            record = self._sessions.get(token)
            if record is None or record.expires_at <= now:
                return False
            if record.principal is None or record.principal.id != principal.id:
                return False
            record.principal = principal
            record.expires_at = now + self._ttl
            return True

    def invalidate(self, token: Optional[str]) -> None:
        """Drop the token entirely. Unknown tokens are ignored."""
        if not token:
            return
        with self._lock:
            self._sessions.pop(token, None)

    def is_live(self, token: Optional[str]) -> bool:
        """True when the token is known and not expired, authenticated or not."""
        if not token:
            return False
        with self._lock:
            record = self._sessions.get(token)
            return record is not None and record.expires_at > self._now()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _purge_expired(self, now: datetime) -> None:
        # Caller holds the lock
        expired = [token for token, record in self._sessions.items() if record.expires_at <= now]
        for token in expired:
            del self._sessions[token]
        if expired:
            logger.debug(f"Purged {len(expired)} expired sessions")

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)


__all__ = ["Principal", "SessionIdentity"]
