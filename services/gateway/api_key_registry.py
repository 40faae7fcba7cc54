"""API key registry: issuance, revocation, listing and authentication.

Raw keys exist only in the value returned from ``issue``; everything that
persists is the SHA-256 hash and the 12-character display prefix.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from core.config.settings import get_settings
from core.exceptions import AuthenticationError, NotFoundError, ValidationError
from core.models.api_key import (
    MAX_EXPIRES_IN_DAYS,
    MAX_RATE_LIMIT,
    ApiKeyRecord,
    IssuedApiKey,
)
from core.models.common import utcnow
from core.security.api_keys import (
    API_KEY_LITERAL_PREFIX,
    api_key_prefix,
    generate_api_key,
    hash_api_key,
)
from services.gateway import prometheus
from services.gateway.database.api_keys import ApiKeyStore, api_key_store

logger = logging.getLogger(__name__)


class ApiKeyRegistry:
    """Issues and verifies API keys on top of an ``ApiKeyStore``."""

    def __init__(self, store: ApiKeyStore, default_rate_limit: int = 1000):
        self._store = store
        self.default_rate_limit = default_rate_limit

    async def issue(
        self,
        owner_id: str,
        name: str,
        rate_limit: Optional[int] = None,
        expires_in_days: Optional[int] = None,
        permissions: Optional[list[str]] = None,
    ) -> IssuedApiKey:
        """
        Issue a new API key.

        Not idempotent: every call creates a distinct key.

        Args:
            owner_id: User who owns the key
            name: Human-readable name
            rate_limit: Requests per hour, defaults to the registry default
            expires_in_days: Lifetime in days, None for a key that never expires
            permissions: Service IDs or "*"; stored for callers to consult

        Returns:
            The stored record and the raw key, which must be shown to the
            caller now and is not retrievable later

        Raises:
            ValidationError: If the name is blank or a numeric argument is out of range
        """
        if not name or not name.strip():
            raise ValidationError("Name is required")
        if rate_limit is not None and not 1 <= rate_limit <= MAX_RATE_LIMIT:
            raise ValidationError(f"Rate limit must be between 1 and {MAX_RATE_LIMIT}")
        if expires_in_days is not None and not 1 <= expires_in_days <= MAX_EXPIRES_IN_DAYS:
            raise ValidationError(
                f"expiresInDays must be between 1 and {MAX_EXPIRES_IN_DAYS}"
            )

        raw_key = generate_api_key()
        expires_at = (
            utcnow() + timedelta(days=expires_in_days) if expires_in_days else None
        )

        record = await self._store.create(
            user_id=owner_id,
            name=name.strip(),
            key_hash=hash_api_key(raw_key),
            key_prefix=api_key_prefix(raw_key),
            rate_limit=rate_limit or self.default_rate_limit,
            permissions=list(permissions or []),
            expires_at=expires_at,
        )

        prometheus.record_api_key_issued()
        logger.info(f"Issued API key {record.id} ({record.key_prefix}...) for user {owner_id}")

        return IssuedApiKey(record=record, raw_key=raw_key)

    async def revoke(self, key_id: str, requesting_user_id: str) -> None:
        """
        Soft-revoke a key owned by the requesting user.

        Raises:
            NotFoundError: If the key does not exist or belongs to another user
        """
        if not await self._store.deactivate(key_id, requesting_user_id):
            raise NotFoundError("API key not found")

        prometheus.record_api_key_revoked()
        logger.info(f"Revoked API key {key_id} for user {requesting_user_id}")

    async def list_by_owner(self, user_id: str) -> list[ApiKeyRecord]:
        """List a user's keys, newest first."""
        return await self._store.list_by_owner(user_id)

    async def authenticate(
        self, raw_key: Optional[str], now: Optional[datetime] = None
    ) -> ApiKeyRecord:
        """
        Resolve a raw key presented by a caller.

        Args:
            raw_key: The key from the request
            now: Evaluation time, defaults to the current UTC time

        Returns:
            The key's record, with ``last_used_at`` set to ``now``

        Raises:
            AuthenticationError: If the key is missing, unknown, revoked or expired
        """
        if not raw_key:
            raise AuthenticationError("API key required", reason="missing_api_key")
        if not raw_key.startswith(API_KEY_LITERAL_PREFIX):
            raise AuthenticationError("Invalid API key", reason="invalid_api_key")

        record = await self._store.get_by_hash(hash_api_key(raw_key))
        if record is None:
            raise AuthenticationError("Invalid API key", reason="invalid_api_key")
        if not record.is_active:
            raise AuthenticationError("API key has been revoked", reason="revoked_api_key")

        now = now or utcnow()
        if record.is_expired(now):
            raise AuthenticationError("API key has expired", reason="expired_api_key")

        await self._store.touch_last_used(record.id, now)
        return record.model_copy(update={"last_used_at": now})


async def get_api_key_registry() -> ApiKeyRegistry:
    """Get the API key registry backed by the shared store."""
    return ApiKeyRegistry(
        api_key_store,
        default_rate_limit=get_settings().api_key_default_rate_limit,
    )
