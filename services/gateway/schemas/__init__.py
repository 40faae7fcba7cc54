"""Pydantic schemas for the gateway's request and response bodies."""

from services.gateway.schemas.api_keys import ApiKeyCreatedResponse, CreateApiKeyRequest
from services.gateway.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    UpdateUserRequest,
)
from services.gateway.schemas.services import CreateServiceRequest, UpdateServiceRequest

__all__ = [
    # Auth schemas
    "AuthResponse",
    "LoginRequest",
    "RefreshRequest",
    "RegisterRequest",
    "UpdateUserRequest",
    # API key schemas
    "ApiKeyCreatedResponse",
    "CreateApiKeyRequest",
    # Service schemas
    "CreateServiceRequest",
    "UpdateServiceRequest",
]
