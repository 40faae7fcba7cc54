"""Auth-related Pydantic schemas.

Schemas for registration, login, token refresh and admin user updates.
"""

from typing import Optional

from pydantic import EmailStr, Field

from core.models.common import CamelModel
from core.models.user import User, UserRole


class RegisterRequest(CamelModel):
    """Registration request schema."""

    username: str = Field(..., min_length=3, max_length=50, description="Username")
    email: EmailStr = Field(..., description="User email")
    password: str = Field(..., min_length=6, max_length=100, description="Password")


class LoginRequest(CamelModel):
    """Login request schema."""

    username: str = Field(..., min_length=1, description="Username")
    password: str = Field(..., min_length=1, description="Password")


class RefreshRequest(CamelModel):
    """Token refresh request schema."""

    refresh_token: Optional[str] = Field(None, description="Refresh token to rotate")


class AuthResponse(CamelModel):
    """Response to a successful registration or login."""

    user: User = Field(..., description="The authenticated user")
    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")


class UpdateUserRequest(CamelModel):
    """Admin user update request schema."""

    role: Optional[UserRole] = Field(None, description="New role")
    is_active: Optional[bool] = Field(None, description="Enable or disable the account")
