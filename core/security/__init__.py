"""Core security module."""

from core.security.api_keys import (
    API_KEY_LITERAL_PREFIX,
    api_key_prefix,
    generate_api_key,
    hash_api_key,
)
from core.security.deps import (
    RoleChecker,
    get_current_identity,
    get_token_service,
    require_admin,
)
from core.security.jwt import TokenService
from core.security.password import hash_password, verify_password

__all__ = [
    # Password
    "verify_password",
    "hash_password",
    # API keys
    "API_KEY_LITERAL_PREFIX",
    "api_key_prefix",
    "generate_api_key",
    "hash_api_key",
    # JWT
    "TokenService",
    # Dependencies
    "get_current_identity",
    "get_token_service",
    "RoleChecker",
    "require_admin",
]
