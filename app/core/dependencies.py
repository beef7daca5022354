"""
FastAPI dependencies for the application.
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import settings
from app.core.sessions import LoginSession, SessionStore, get_session_store
from app.db.session import get_db, get_session_factory  # noqa: F401  (re-exported for routers)
from app.services.auth_service import AuthService, InvalidTokenError

logger = logging.getLogger(__name__)

# auto_error=False so a missing token maps to 403, not FastAPI's default
security = HTTPBearer(auto_error=False)


def client_ip(request: Request) -> str:
    return request.client.host if request.client else ""


def get_auth_service(store: SessionStore = Depends(get_session_store)) -> AuthService:
    return AuthService(store)


async def get_current_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service),
) -> LoginSession:
    """
    Authenticate the request from its bearer token.

    Raises:
        403: missing token, invalid token, or unknown/foreign session
    """
    if credentials is None or not credentials.credentials:
        logger.error("No token provided. Access denied")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")

    try:
        session = auth_service.verify(
            credentials.credentials,
            ip=client_ip(request),
            tab_cookie=request.cookies.get(settings.SESSION_COOKIE_NAME),
        )
    except InvalidTokenError:
        logger.error("Invalid token")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid token")

    if session is None:
        logger.error("Invalid session. Access denied")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid session")

    return session
