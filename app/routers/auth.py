"""
Authentication router for login and logout.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials

from app.core.config import settings
from app.core.dependencies import client_ip, get_auth_service, security
from app.schemas.auth import LoginRequest, LoginResponse
from app.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    request: Request,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Authenticate and return a JWT access token.

    Also sets the http-only tab cookie bound to the new session.
    """
    result = auth_service.login(credentials.user_name, credentials.password, client_ip(request))

    if not result:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user name or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=result.tab_id,
        httponly=True,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    return LoginResponse(token=result.token)


@router.post("/logout")
async def logout(
    response: Response,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Close the caller's session."""
    if credentials is None or not auth_service.logout(credentials.credentials):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid token")

    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"message": "Logged out successfully"}
