"""Core models module."""

from core.models.api_key import ApiKeyRecord, IssuedApiKey
from core.models.common import (
    CamelModel,
    ErrorResponse,
    utcnow,
)
from core.models.request_log import DashboardStats, RequestLog, RequestLogCreate
from core.models.service import Service, ServiceAuthType
from core.models.user import (
    AuthenticatedIdentity,
    TokenClaims,
    TokenPair,
    TokenType,
    User,
    UserInDB,
    UserRole,
)

__all__ = [
    # Common models
    "CamelModel",
    "ErrorResponse",
    "utcnow",
    # User models
    "AuthenticatedIdentity",
    "TokenClaims",
    "TokenPair",
    "TokenType",
    "User",
    "UserInDB",
    "UserRole",
    # API keys
    "ApiKeyRecord",
    "IssuedApiKey",
    # Services
    "Service",
    "ServiceAuthType",
    # Request logs
    "DashboardStats",
    "RequestLog",
    "RequestLogCreate",
]
