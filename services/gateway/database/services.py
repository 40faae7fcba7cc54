"""Backend service registry persistence using SQLAlchemy async."""

from typing import Any, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import DuplicateServiceNameError
from core.models.service import Service as ServiceModel
from services.gateway.database.models import Service
from services.gateway.database.session import DatabaseManager, db_manager

UPDATABLE_FIELDS = frozenset(
    {"name", "base_url", "description", "is_active", "health_check_path", "auth_type"}
)


class ServiceRegistry:
    """Async store for registered backend services."""

    def __init__(self, manager: DatabaseManager = db_manager):
        self._db = manager

    async def list_services(self) -> list[ServiceModel]:
        """List all services, newest first."""
        async with self._db.session() as s:
            result = await s.execute(select(Service).order_by(Service.created_at.desc()))
            return [ServiceModel.model_validate(row) for row in result.scalars().all()]

    async def get_service(self, service_id: str) -> Optional[ServiceModel]:
        """Get a service by ID."""
        async with self._db.session() as s:
            row = await s.get(Service, service_id)
            return ServiceModel.model_validate(row) if row else None

    async def _name_taken(
        self, s: AsyncSession, name: str, exclude_id: Optional[str] = None
    ) -> bool:
        query = select(Service.id).where(Service.name == name)
        if exclude_id:
            query = query.where(Service.id != exclude_id)
        result = await s.execute(query)
        return result.first() is not None

    async def create_service(self, **fields: Any) -> ServiceModel:
        """
        Register a new service.

        Raises:
            DuplicateServiceNameError: If the name is already registered
        """
        name = fields["name"]
        async with self._db.session() as s:
            if await self._name_taken(s, name):
                raise DuplicateServiceNameError(name)

            row = Service(**fields)
            s.add(row)
            try:
                await s.flush()
            except IntegrityError:
                raise DuplicateServiceNameError(name)

            await s.refresh(row)
            return ServiceModel.model_validate(row)

    async def update_service(self, service_id: str, **fields: Any) -> Optional[ServiceModel]:
        """
        Update a service.

        Returns:
            The updated service, or None if no such service exists

        Raises:
            DuplicateServiceNameError: If renamed to a name already in use
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update service fields: {', '.join(sorted(unknown))}")

        async with self._db.session() as s:
            row = await s.get(Service, service_id)
            if row is None:
                return None

            if "name" in fields and await self._name_taken(s, fields["name"], service_id):
                raise DuplicateServiceNameError(fields["name"])

            for name, value in fields.items():
                setattr(row, name, value)

            try:
                await s.flush()
            except IntegrityError:
                if "name" not in fields:
                    raise
                raise DuplicateServiceNameError(fields["name"])

            await s.refresh(row)
            return ServiceModel.model_validate(row)

    async def delete_service(self, service_id: str) -> bool:
        """Delete a service. Returns False if it did not exist."""
        async with self._db.session() as s:
            result = await s.execute(
                delete(Service).where(Service.id == service_id).returning(Service.id)
            )
            return result.scalar_one_or_none() is not None

    async def count_active(self, session: Optional[AsyncSession] = None) -> int:
        """Count services that are enabled."""
        async with self._db.use_session(session) as s:
            result = await s.execute(
                select(func.count()).select_from(Service).where(Service.is_active.is_(True))
            )
            return int(result.scalar_one())


# Global service registry instance
service_registry = ServiceRegistry()


async def get_service_registry() -> ServiceRegistry:
    """Get the service registry instance."""
    return service_registry
