"""
Authentication Pydantic schemas.
"""

from pydantic import BaseModel


class LoginRequest(BaseModel):
    """Schema for login request."""

    user_name: str
    password: str


class LoginResponse(BaseModel):
    """Schema for login response."""

    token: str
