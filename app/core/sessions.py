"""
Login session store.

A session is created at login and looked up on every authenticated request.
Entries expire together with the token that names them.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Optional, Protocol

from app.utils.time import utc_after, utc_now


@dataclass(frozen=True)
class LoginSession:
    session_id: str
    ip: str
    tab_id: str
    expires_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utc_now()) >= self.expires_at


class SessionStore(Protocol):
    """Interface for session storage backends."""

    def get(self, session_id: str) -> Optional[LoginSession]:
        ...

    def put(self, session: LoginSession) -> None:
        ...

    def delete(self, session_id: str) -> None:
        ...


class InMemorySessionStore:
    """Process-local store; expired entries are dropped on access."""

    def __init__(self):
        self._sessions: Dict[str, LoginSession] = {}

    def get(self, session_id: str) -> Optional[LoginSession]:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if session.is_expired():
            self._sessions.pop(session_id, None)
            return None
        return session

    def put(self, session: LoginSession) -> None:
        self.purge_expired()
        self._sessions[session.session_id] = session

    def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def purge_expired(self) -> int:
        now = utc_now()
        expired = [key for key, session in self._sessions.items() if session.is_expired(now)]
        for key in expired:
            del self._sessions[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)


def session_expiry(minutes: int) -> datetime:
    return utc_after(timedelta(minutes=minutes))


session_store = InMemorySessionStore()


def get_session_store() -> SessionStore:
    """Dependency returning the active session store."""
    return session_store
