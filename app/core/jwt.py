"""
JWT access tokens.

A token only names a login session (session id, client ip, tab id); the
session itself lives in the session store.
"""

from datetime import timedelta
from typing import Any, Dict, Optional

import jwt

from app.core.config import settings
from app.utils.time import utc_after


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Sign the claims with an expiry (ACCESS_TOKEN_EXPIRE_MINUTES by default)."""
    to_encode = dict(data)
    expire = utc_after(expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode["exp"] = expire
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the claims, or None for a bad signature, malformed or expired token."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.PyJWTError:
        return None
