from __future__ import annotations

import secrets
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Optional

from portfolio.core.config import settings
from portfolio.core.security import utcnow


@dataclass(frozen=True)
class SessionData:
    token: str
    user_id: int
    username: str
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or utcnow()) >= self.expires_at


class SessionStore(ABC):
    """Maps opaque session tokens to the logged-in user.

    Handlers only talk to this interface (via the ``get_session_store``
    dependency), so the backing storage can be replaced without touching them.
    """

    @abstractmethod
    def create(self, user_id: int, username: str) -> SessionData:
        ...

    @abstractmethod
    def get(self, token: str) -> Optional[SessionData]:
        """Return the live session for ``token``; expired sessions count as absent."""

    @abstractmethod
    def delete(self, token: str) -> None:
        ...

    @abstractmethod
    def purge_expired(self) -> int:
        """Drop expired sessions and return how many were removed."""


class InMemorySessionStore(SessionStore):
    """Process-local session store.

    Entries expire a fixed TTL after creation. Expiry is checked lazily on
    ``get`` and in bulk by ``purge_expired`` (run by the scheduler).
    """

    def __init__(self, ttl: timedelta | None = None) -> None:
        self._ttl = ttl if ttl is not None else timedelta(hours=settings.SESSION_TTL_HOURS)
        self._entries: Dict[str, SessionData] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def create(self, user_id: int, username: str) -> SessionData:
        now = utcnow()
        session = SessionData(
            token=secrets.token_urlsafe(32),
            user_id=user_id,
            username=username,
            created_at=now,
            expires_at=now + self._ttl,
        )
        with self._lock:
            self._entries[session.token] = session
        return session

    def get(self, token: str) -> Optional[SessionData]:
        with self._lock:
            session = self._entries.get(token)
            if session is None:
                return None
            if session.is_expired():
                self._entries.pop(token, None)
                return None
            return session

    def delete(self, token: str) -> None:
        with self._lock:
            self._entries.pop(token, None)

    def purge_expired(self) -> int:
        now = utcnow()
        with self._lock:
            expired = [token for token, session in self._entries.items() if session.is_expired(now)]
            for token in expired:
                self._entries.pop(token, None)
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


session_store = InMemorySessionStore()
