"""JWT access/refresh token creation and verification using python-jose."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import ValidationError as PydanticValidationError

from core.config.settings import Settings
from core.models.user import TokenClaims, TokenPair, TokenType, UserInDB

logger = logging.getLogger(__name__)


class TokenService:
    """Issues and verifies signed, time-bounded tokens.

    The signing key is supplied once at construction and never read from
    ambient state afterwards.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        access_token_ttl: timedelta = timedelta(hours=24),
        refresh_token_ttl: timedelta = timedelta(days=7),
    ):
        """
        Initialize the token service.

        Args:
            secret_key: Key used to sign and verify tokens
            algorithm: JWS algorithm
            access_token_ttl: Lifetime of access tokens
            refresh_token_ttl: Lifetime of refresh tokens

        Raises:
            ValueError: If the secret key is empty
        """
        if not secret_key:
            raise ValueError("A JWT signing secret is required")
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.access_token_ttl = access_token_ttl
        self.refresh_token_ttl = refresh_token_ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        """Build a token service from application settings."""
        return cls(
            secret_key=settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
            access_token_ttl=timedelta(minutes=settings.access_token_expire_minutes),
            refresh_token_ttl=timedelta(days=settings.refresh_token_expire_days),
        )

    def _encode(self, user: UserInDB, token_type: TokenType, ttl: timedelta) -> str:
        now = datetime.now(timezone.utc)
        to_encode: dict[str, Any] = {
            "sub": user.id,
            "username": user.username,
            "role": user.role.value,
            "type": token_type.value,
            "iat": now,
            "exp": now + ttl,
        }
        if token_type is TokenType.REFRESH:
            to_encode["ver"] = user.refresh_token_version

        return jwt.encode(to_encode, self._secret_key, algorithm=self.algorithm)

    def issue_access_token(self, user: UserInDB) -> str:
        """Create a short-lived access token for the user."""
        return self._encode(user, TokenType.ACCESS, self.access_token_ttl)

    def issue_refresh_token(self, user: UserInDB) -> str:
        """Create a long-lived refresh token bound to the user's refresh version."""
        return self._encode(user, TokenType.REFRESH, self.refresh_token_ttl)

    def issue_token_pair(self, user: UserInDB) -> TokenPair:
        """Create an access token and a refresh token together."""
        return TokenPair(
            access_token=self.issue_access_token(user),
            refresh_token=self.issue_refresh_token(user),
        )

    def inspect(
        self, token: str, expected_type: Optional[TokenType] = None
    ) -> tuple[Optional[TokenClaims], Optional[str]]:
        """
        Verify a token and report why verification failed.

        Args:
            token: The encoded JWT
            expected_type: When given, tokens of any other type are rejected

        Returns:
            ``(claims, None)`` on success, ``(None, reason)`` on failure
        """
        if not token:
            return None, "missing_token"

        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            return None, "expired_token"
        except JWTError:
            return None, "invalid_token"

        try:
            claims = TokenClaims(
                user_id=payload["sub"],
                username=payload["username"],
                role=payload["role"],
                type=payload["type"],
                version=payload.get("ver"),
                issued_at=_from_timestamp(payload.get("iat")),
                expires_at=_from_timestamp(payload.get("exp")),
            )
        except (KeyError, TypeError, PydanticValidationError):
            return None, "malformed_claims"

        if expected_type is not None and claims.type is not expected_type:
            return None, "wrong_token_type"

        if claims.type is TokenType.REFRESH and claims.version is None:
            return None, "malformed_claims"

        return claims, None

    def verify(
        self, token: str, expected_type: Optional[TokenType] = None
    ) -> Optional[TokenClaims]:
        """
        Verify and decode a token.

        Args:
            token: The encoded JWT
            expected_type: When given, tokens of any other type are rejected

        Returns:
            TokenClaims if valid, None if expired, malformed, badly signed or
            of the wrong type
        """
        claims, reason = self.inspect(token, expected_type)
        if claims is None:
            logger.debug(f"Token rejected: {reason}")
        return claims


def _from_timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)
