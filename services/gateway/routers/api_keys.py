"""API key router.

Endpoints:
- GET /api/api-keys - List the caller's keys
- POST /api/api-keys - Issue a key (raw key returned once)
- GET /api/api-keys/self - Describe the key presented in X-API-Key
- DELETE /api/api-keys/{key_id} - Revoke one of the caller's keys
"""

from fastapi import APIRouter, Depends, Response, status

from core.models.api_key import ApiKeyRecord
from core.models.user import AuthenticatedIdentity
from core.security.deps import get_current_identity
from services.gateway.api_key_registry import ApiKeyRegistry, get_api_key_registry
from services.gateway.dependencies import get_api_key
from services.gateway.schemas import ApiKeyCreatedResponse, CreateApiKeyRequest

router = APIRouter(prefix="/api/api-keys", tags=["api-keys"])


@router.get("", response_model=list[ApiKeyRecord])
async def list_api_keys(
    identity: AuthenticatedIdentity = Depends(get_current_identity),
    registry: ApiKeyRegistry = Depends(get_api_key_registry),
) -> list[ApiKeyRecord]:
    """List the caller's API keys, newest first. Hashes are never returned."""
    return await registry.list_by_owner(identity.user_id)


@router.post("", response_model=ApiKeyCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_api_key(
    data: CreateApiKeyRequest,
    identity: AuthenticatedIdentity = Depends(get_current_identity),
    registry: ApiKeyRegistry = Depends(get_api_key_registry),
) -> ApiKeyCreatedResponse:
    """
    Issue a new API key for the caller.

    The response carries the raw key; this is the only time it is shown.

    Raises:
        ValidationError: If no name is given
    """
    issued = await registry.issue(
        owner_id=identity.user_id,
        name=data.name or "",
        rate_limit=data.rate_limit,
        expires_in_days=data.expires_in_days,
        permissions=data.permissions,
    )
    return ApiKeyCreatedResponse.from_issued(issued)


@router.get("/self", response_model=ApiKeyRecord)
async def get_own_api_key(api_key: ApiKeyRecord = Depends(get_api_key)) -> ApiKeyRecord:
    """Return the record of the API key used to make this request."""
    return api_key


@router.delete("/{key_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_api_key(
    key_id: str,
    identity: AuthenticatedIdentity = Depends(get_current_identity),
    registry: ApiKeyRegistry = Depends(get_api_key_registry),
) -> Response:
    """
    Revoke one of the caller's API keys.

    Raises:
        NotFoundError: If the key does not exist or is owned by someone else
    """
    await registry.revoke(key_id, identity.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
