"""User and token models for authentication and authorization."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from core.models.common import CamelModel


class UserRole(str, Enum):
    """User roles for RBAC."""

    USER = "user"
    ADMIN = "admin"


class TokenType(str, Enum):
    """Kinds of signed token issued by the token service."""

    ACCESS = "access"
    REFRESH = "refresh"


class UserInDB(BaseModel):
    """User model as stored in the database."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="User UUID")
    username: str = Field(..., description="Username")
    email: EmailStr = Field(..., description="User email address")
    hashed_password: str = Field(..., description="bcrypt hash of the password")
    role: UserRole = Field(UserRole.USER, description="User role")
    is_active: bool = Field(True, description="Whether user may log in")
    refresh_token_version: int = Field(
        0, description="Refresh tokens minted with an older version are rejected"
    )
    created_at: datetime = Field(..., description="User creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")


class User(CamelModel):
    """Public user model (excludes the password hash)."""

    id: str = Field(..., description="User UUID")
    username: str = Field(..., description="Username")
    email: EmailStr = Field(..., description="User email address")
    role: UserRole = Field(UserRole.USER, description="User role")
    is_active: bool = Field(True, description="Whether user is active")
    created_at: datetime = Field(..., description="User creation timestamp")

    @classmethod
    def from_db(cls, user: UserInDB) -> "User":
        """Build the public view of a stored user, dropping the password hash."""
        return cls.model_validate(user.model_dump(exclude={"hashed_password"}))


class TokenClaims(BaseModel):
    """Verified claims carried by an access or refresh token."""

    user_id: str = Field(..., description="User ID (the `sub` claim)")
    username: str = Field(..., description="Username at issuance")
    role: UserRole = Field(..., description="Role at issuance")
    type: TokenType = Field(..., description="Token type")
    version: Optional[int] = Field(None, description="Refresh token version (refresh tokens only)")
    issued_at: Optional[datetime] = Field(None, description="Issued-at time")
    expires_at: Optional[datetime] = Field(None, description="Expiry time")


class TokenPair(CamelModel):
    """Access and refresh token returned together."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")


class AuthenticatedIdentity(BaseModel):
    """Identity established by the authentication gate for one request."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    username: str
    role: UserRole
