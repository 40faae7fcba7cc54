"""FastAPI dependencies for callers authenticating with an API key."""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import APIKeyHeader

from core.models.api_key import ApiKeyRecord
from services.gateway.api_key_registry import ApiKeyRegistry, get_api_key_registry
from services.gateway.middleware.rate_limit import enforce_api_key_rate_limit

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def get_api_key(
    request: Request,
    raw_key: Optional[str] = Depends(api_key_header),
    registry: ApiKeyRegistry = Depends(get_api_key_registry),
) -> ApiKeyRecord:
    """
    Authenticate the request from its ``X-API-Key`` header.

    The key must exist, be active and unexpired, and have allowance left in
    its rate limit window.

    Raises:
        AuthenticationError: If the key is missing, unknown, revoked or expired
        RateLimitExceededError: If the key's allowance is used up
    """
    record = await registry.authenticate(raw_key)
    request.state.api_key_id = record.id
    await enforce_api_key_rate_limit(record)
    return record
