"""Admin router for account management. Every route requires the admin role.

Endpoints:
- GET /api/admin/users - List all users
- PATCH /api/admin/users/{user_id} - Change a user's role or active flag
"""

import logging

from fastapi import APIRouter, Depends

from core.exceptions import NotFoundError
from core.models.user import AuthenticatedIdentity, User
from core.security.deps import require_admin
from services.gateway.database.accounts import AccountDirectory, get_account_directory
from services.gateway.schemas import UpdateUserRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/users", response_model=list[User])
async def list_users(
    _: AuthenticatedIdentity = Depends(require_admin),
    directory: AccountDirectory = Depends(get_account_directory),
) -> list[User]:
    """List all users, newest first."""
    return [User.from_db(user) for user in await directory.list_users()]


@router.patch("/users/{user_id}", response_model=User)
async def update_user(
    user_id: str,
    data: UpdateUserRequest,
    admin: AuthenticatedIdentity = Depends(require_admin),
    directory: AccountDirectory = Depends(get_account_directory),
) -> User:
    """
    Update a user's role and/or active flag.

    Demoting or deactivating a user does not revoke access tokens already
    issued to them; those stay valid until they expire.

    Raises:
        NotFoundError: If the user does not exist
    """
    fields = data.model_dump(exclude_none=True)
    if fields:
        user = await directory.update_user(user_id, **fields)
    else:
        user = await directory.get_user_by_id(user_id)

    if user is None:
        raise NotFoundError("User not found")

    if fields:
        logger.info(f"Admin {admin.username} updated user {user_id}: {sorted(fields)}")
    return User.from_db(user)
