"""
Authentication service for login and logout.
"""

import logging
import secrets
from dataclasses import dataclass
from typing import Optional

from app.core.config import settings
from app.core.jwt import create_access_token, decode_access_token
from app.core.security import verify_password
from app.core.sessions import LoginSession, SessionStore, session_expiry

logger = logging.getLogger(__name__)


class InvalidTokenError(Exception):
    """Token signature, format or expiry check failed."""


@dataclass
class LoginResult:
    token: str
    tab_id: str


class AuthService:
    """Service for authentication operations."""

    def __init__(self, store: SessionStore):
        self.store = store

    def authenticate(self, user_name: str, password: str) -> bool:
        """Check credentials against the configured back-office account."""
        if not user_name or user_name != settings.ADMIN_USER_NAME:
            return False
        return verify_password(password or "", settings.ADMIN_PASSWORD_HASH or "")

    def login(self, user_name: str, password: str, ip: str) -> Optional[LoginResult]:
        """
        Open a session and issue its token.

        Returns:
            LoginResult, or None when the credentials are wrong
        """
        if not self.authenticate(user_name, password):
            logger.warning("Failed login for user %r from %s", user_name, ip)
            return None

        session = LoginSession(
            session_id=secrets.token_urlsafe(16),
            ip=ip,
            tab_id=secrets.token_hex(5),
            expires_at=session_expiry(settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        )
        self.store.put(session)
        token = create_access_token(
            {"session_id": session.session_id, "ip": session.ip, "tab_id": session.tab_id}
        )
        logger.info("User %r logged in from %s", user_name, ip)
        return LoginResult(token=token, tab_id=session.tab_id)

    def logout(self, token: str) -> bool:
        """Close the session named by the token. False when the token is invalid."""
        payload = decode_access_token(token)
        if not payload or "session_id" not in payload:
            return False
        self.store.delete(payload["session_id"])
        return True

    def verify(self, token: str, ip: str, tab_cookie: Optional[str]) -> Optional[LoginSession]:
        """
        Resolve the session behind a token for an incoming request.

        A session is rejected only when both the client ip and the tab
        cookie differ from the ones recorded at login.
        """
        payload = decode_access_token(token)
        if not payload:
            raise InvalidTokenError()
        session = self.store.get(payload.get("session_id", ""))
        if session is None:
            return None
        if session.ip != ip and session.tab_id != tab_cookie:
            return None
        return session
