"""Authentication router: registration, login, token refresh and current user.

Endpoints:
- POST /api/register - Create an account and return a token pair
- POST /api/login - Exchange credentials for a token pair
- POST /api/refresh - Rotate a refresh token
- GET /api/user - The authenticated user
"""

import logging

from fastapi import APIRouter, Depends

from core.exceptions import AuthenticationError, NotFoundError, ValidationError
from core.models.user import AuthenticatedIdentity, TokenPair, TokenType, User
from core.security.deps import get_current_identity, get_token_service
from core.security.jwt import TokenService
from core.security.password import hash_password, verify_password
from services.gateway.database.accounts import AccountDirectory, get_account_directory
from services.gateway.schemas import (
    AuthResponse,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/register", response_model=AuthResponse)
async def register(
    data: RegisterRequest,
    directory: AccountDirectory = Depends(get_account_directory),
    token_service: TokenService = Depends(get_token_service),
) -> AuthResponse:
    """
    Create a user account and log it in.

    Raises:
        DuplicateUsernameError: If the username is taken
        DuplicateEmailError: If the email is taken
    """
    user = await directory.create_user(
        username=data.username,
        email=str(data.email),
        hashed_password=hash_password(data.password),
    )
    logger.info(f"Registered user {user.id} ({user.username})")

    tokens = token_service.issue_token_pair(user)
    return AuthResponse(
        user=User.from_db(user),
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    data: LoginRequest,
    directory: AccountDirectory = Depends(get_account_directory),
    token_service: TokenService = Depends(get_token_service),
) -> AuthResponse:
    """
    Authenticate a user and return an access/refresh token pair.

    Raises:
        AuthenticationError: If the credentials are wrong or the account is
            deactivated
    """
    user = await directory.get_user_by_username(data.username)

    if user is None:
        raise AuthenticationError("Invalid credentials", reason="user_not_found")

    if not verify_password(data.password, user.hashed_password):
        raise AuthenticationError("Invalid credentials", reason="invalid_password")

    if not user.is_active:
        raise AuthenticationError("Account is deactivated", reason="inactive_user")

    tokens = token_service.issue_token_pair(user)
    return AuthResponse(
        user=User.from_db(user),
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
    )


@router.post("/refresh", response_model=TokenPair)
async def refresh(
    data: RefreshRequest,
    directory: AccountDirectory = Depends(get_account_directory),
    token_service: TokenService = Depends(get_token_service),
) -> TokenPair:
    """
    Rotate a refresh token.

    The presented token must be a valid refresh token for an active user,
    minted at the user's current refresh version. Rotation advances that
    version, so the presented token cannot be used again.

    Raises:
        ValidationError: If no refresh token was sent
        AuthenticationError: If the token is invalid, already rotated, or
            its user is missing or inactive
    """
    if not data.refresh_token:
        raise ValidationError("Refresh token required")

    claims = token_service.verify(data.refresh_token, expected_type=TokenType.REFRESH)
    if claims is None:
        raise AuthenticationError("Invalid refresh token", reason="invalid_refresh_token")

    user = await directory.get_user_by_id(claims.user_id)
    if user is None or not user.is_active:
        raise AuthenticationError("User not found or inactive", reason="user_not_found_or_inactive")

    new_version = await directory.rotate_refresh_token_version(user.id, claims.version)
    if new_version is None:
        raise AuthenticationError("Invalid refresh token", reason="revoked_refresh_token")

    rotated = user.model_copy(update={"refresh_token_version": new_version})
    return token_service.issue_token_pair(rotated)


@router.get("/user", response_model=User)
async def get_user(
    identity: AuthenticatedIdentity = Depends(get_current_identity),
    directory: AccountDirectory = Depends(get_account_directory),
) -> User:
    """
    Return the authenticated user.

    Raises:
        NotFoundError: If the account behind the token no longer exists
    """
    user = await directory.get_user_by_id(identity.user_id)
    if user is None:
        raise NotFoundError("User not found")
    return User.from_db(user)
