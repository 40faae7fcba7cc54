"""FastAPI dependencies for authentication and authorization."""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from core.exceptions import AuthenticationError, AuthorizationError
from core.models.user import AuthenticatedIdentity, TokenType, UserRole
from core.security.jwt import TokenService

# OAuth2 scheme for extracting token from Authorization header.
# Missing headers are reported by get_current_identity, not the scheme.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/login", auto_error=False)


def get_token_service(request: Request) -> TokenService:
    """Return the token service built at application startup."""
    return request.app.state.token_service


async def get_current_identity(
    token: Optional[str] = Depends(oauth2_scheme),
    token_service: TokenService = Depends(get_token_service),
) -> AuthenticatedIdentity:
    """
    Authenticate the request from its bearer access token.

    Args:
        token: Bearer token from the Authorization header, if any
        token_service: Token service used to verify the token

    Returns:
        The identity carried by the access token

    Raises:
        AuthenticationError: If the header is missing or malformed, or the
            token is invalid, expired or not an access token
    """
    if not token:
        raise AuthenticationError("No token provided", reason="missing_token")

    claims, reason = token_service.inspect(token, expected_type=TokenType.ACCESS)
    if claims is None:
        raise AuthenticationError("Invalid or expired token", reason=reason or "invalid_token")

    return AuthenticatedIdentity(
        user_id=claims.user_id,
        username=claims.username,
        role=claims.role,
    )


class RoleChecker:
    """Dependency requiring an exact role match on the authenticated identity."""

    def __init__(self, required_role: UserRole):
        """
        Initialize RoleChecker.

        Args:
            required_role: The only role allowed through; there is no hierarchy
        """
        self.required_role = UserRole(required_role)

    def __call__(
        self, identity: AuthenticatedIdentity = Depends(get_current_identity)
    ) -> AuthenticatedIdentity:
        """
        Check that the identity holds the required role.

        Raises:
            AuthorizationError: If the role differs
        """
        if identity.role != self.required_role:
            raise AuthorizationError("Insufficient permissions")
        return identity


require_admin = RoleChecker(UserRole.ADMIN)
