"""API key persistence using SQLAlchemy async."""

from datetime import datetime
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.models.api_key import ApiKeyRecord
from services.gateway.database.models import ApiKey
from services.gateway.database.session import DatabaseManager, db_manager


class ApiKeyStore:
    """Async store for API key records. Raw keys never reach this layer."""

    def __init__(self, manager: DatabaseManager = db_manager):
        self._db = manager

    async def create(
        self,
        user_id: str,
        name: str,
        key_hash: str,
        key_prefix: str,
        rate_limit: int,
        permissions: list[str],
        expires_at: Optional[datetime],
    ) -> ApiKeyRecord:
        """Insert an active API key record."""
        async with self._db.session() as s:
            row = ApiKey(
                user_id=user_id,
                name=name,
                key_hash=key_hash,
                key_prefix=key_prefix,
                rate_limit=rate_limit,
                permissions=permissions,
                is_active=True,
                expires_at=expires_at,
            )
            s.add(row)
            await s.flush()
            await s.refresh(row)
            return ApiKeyRecord.model_validate(row)

    async def get_by_hash(self, key_hash: str) -> Optional[ApiKeyRecord]:
        """Get an API key by the hash of its raw value."""
        async with self._db.session() as s:
            result = await s.execute(select(ApiKey).where(ApiKey.key_hash == key_hash))
            row = result.scalar_one_or_none()
            return ApiKeyRecord.model_validate(row) if row else None

    async def list_by_owner(self, user_id: str) -> list[ApiKeyRecord]:
        """List a user's keys, newest first, revoked keys included."""
        async with self._db.session() as s:
            result = await s.execute(
                select(ApiKey)
                .where(ApiKey.user_id == user_id)
                .order_by(ApiKey.created_at.desc())
            )
            return [ApiKeyRecord.model_validate(row) for row in result.scalars().all()]

    async def deactivate(self, key_id: str, owner_id: str) -> bool:
        """
        Soft-revoke a key owned by ``owner_id``.

        Returns:
            False if no key with that ID belongs to the owner
        """
        async with self._db.session() as s:
            result = await s.execute(
                update(ApiKey)
                .where(ApiKey.id == key_id, ApiKey.user_id == owner_id)
                .values(is_active=False)
                .returning(ApiKey.id)
            )
            return result.scalar_one_or_none() is not None

    async def touch_last_used(self, key_id: str, used_at: datetime) -> None:
        """Record a successful use of the key."""
        async with self._db.session() as s:
            await s.execute(
                update(ApiKey).where(ApiKey.id == key_id).values(last_used_at=used_at)
            )

    async def count_active(self, session: Optional[AsyncSession] = None) -> int:
        """Count keys that have not been revoked."""
        async with self._db.use_session(session) as s:
            result = await s.execute(
                select(func.count()).select_from(ApiKey).where(ApiKey.is_active.is_(True))
            )
            return int(result.scalar_one())


# Global API key store instance
api_key_store = ApiKeyStore()
