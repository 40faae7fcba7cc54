"""Common test fixtures: constants, sample records and in-memory stores.

The in-memory stores mirror the async interfaces of the SQLAlchemy stores in
``services.gateway.database`` so routes can be exercised without PostgreSQL.
"""

import uuid
from typing import Any, Optional

from core.exceptions import (
    DuplicateEmailError,
    DuplicateServiceNameError,
    DuplicateUsernameError,
)
from core.models import (
    ApiKeyRecord,
    DashboardStats,
    RequestLog,
    RequestLogCreate,
    Service,
    UserInDB,
    UserRole,
    utcnow,
)
from core.security.password import hash_password


# Test user data
TEST_USER_ID = "12345678-1234-1234-1234-123456789012"
TEST_USERNAME = "testuser"
TEST_EMAIL = "testuser@example.com"
TEST_PASSWORD = "SecureP@ssw0rd!"

TEST_ADMIN_ID = "87654321-4321-4321-4321-210987654321"
TEST_ADMIN_USERNAME = "adminuser"
TEST_ADMIN_EMAIL = "admin@example.com"

TEST_SECRET_KEY = "test-secret-key-do-not-use-in-production"

# Real bcrypt hash of TEST_PASSWORD
TEST_HASHED_PASSWORD = hash_password(TEST_PASSWORD)


def make_user(**overrides: Any) -> UserInDB:
    """Build a stored user, defaulting to the standard test user."""
    data: dict[str, Any] = {
        "id": TEST_USER_ID,
        "username": TEST_USERNAME,
        "email": TEST_EMAIL,
        "hashed_password": TEST_HASHED_PASSWORD,
        "role": UserRole.USER,
        "is_active": True,
        "refresh_token_version": 0,
        "created_at": utcnow(),
    }
    data.update(overrides)
    return UserInDB(**data)


def make_admin(**overrides: Any) -> UserInDB:
    """Build a stored admin user."""
    data: dict[str, Any] = {
        "id": TEST_ADMIN_ID,
        "username": TEST_ADMIN_USERNAME,
        "email": TEST_ADMIN_EMAIL,
        "role": UserRole.ADMIN,
    }
    data.update(overrides)
    return make_user(**data)


class InMemoryAccountDirectory:
    """Dict-backed stand-in for ``AccountDirectory``."""

    def __init__(self):
        self.users: dict[str, UserInDB] = {}

    def add(self, user: UserInDB) -> UserInDB:
        self.users[user.id] = user
        return user

    async def get_user_by_id(self, user_id: str, session=None) -> Optional[UserInDB]:
        return self.users.get(user_id)

    async def get_user_by_username(self, username: str, session=None) -> Optional[UserInDB]:
        return next((u for u in self.users.values() if u.username == username), None)

    async def get_user_by_email(self, email: str, session=None) -> Optional[UserInDB]:
        return next((u for u in self.users.values() if u.email == email), None)

    async def create_user(
        self,
        username: str,
        email: str,
        hashed_password: str,
        role: UserRole = UserRole.USER,
    ) -> UserInDB:
        if await self.get_user_by_username(username):
            raise DuplicateUsernameError(username)
        if await self.get_user_by_email(email):
            raise DuplicateEmailError(email)
        return self.add(
            UserInDB(
                id=str(uuid.uuid4()),
                username=username,
                email=email,
                hashed_password=hashed_password,
                role=role,
                is_active=True,
                created_at=utcnow(),
            )
        )

    async def update_user(self, user_id: str, **fields: Any) -> Optional[UserInDB]:
        user = self.users.get(user_id)
        if user is None:
            return None
        return self.add(user.model_copy(update=fields))

    async def rotate_refresh_token_version(
        self, user_id: str, expected_version: int
    ) -> Optional[int]:
        user = self.users.get(user_id)
        if user is None or user.refresh_token_version != expected_version:
            return None
        new_version = expected_version + 1
        self.add(user.model_copy(update={"refresh_token_version": new_version}))
        return new_version

    async def list_users(self) -> list[UserInDB]:
        return list(reversed(self.users.values()))


class InMemoryApiKeyStore:
    """Dict-backed stand-in for ``ApiKeyStore``."""

    def __init__(self):
        self.keys: dict[str, ApiKeyRecord] = {}
        self.ids_by_hash: dict[str, str] = {}

    async def create(
        self,
        user_id: str,
        name: str,
        key_hash: str,
        key_prefix: str,
        rate_limit: int,
        permissions: list[str],
        expires_at=None,
    ) -> ApiKeyRecord:
        record = ApiKeyRecord(
            id=str(uuid.uuid4()),
            user_id=user_id,
            name=name,
            key_prefix=key_prefix,
            permissions=permissions,
            rate_limit=rate_limit,
            is_active=True,
            expires_at=expires_at,
            created_at=utcnow(),
        )
        self.keys[record.id] = record
        self.ids_by_hash[key_hash] = record.id
        return record

    async def get_by_hash(self, key_hash: str) -> Optional[ApiKeyRecord]:
        key_id = self.ids_by_hash.get(key_hash)
        return self.keys.get(key_id) if key_id else None

    async def list_by_owner(self, user_id: str) -> list[ApiKeyRecord]:
        return [k for k in reversed(self.keys.values()) if k.user_id == user_id]

    async def deactivate(self, key_id: str, owner_id: str) -> bool:
        record = self.keys.get(key_id)
        if record is None or record.user_id != owner_id:
            return False
        self.keys[key_id] = record.model_copy(update={"is_active": False})
        return True

    async def touch_last_used(self, key_id: str, used_at) -> None:
        record = self.keys[key_id]
        self.keys[key_id] = record.model_copy(update={"last_used_at": used_at})

    async def count_active(self, session=None) -> int:
        return sum(1 for k in self.keys.values() if k.is_active)


class InMemoryServiceRegistry:
    """Dict-backed stand-in for ``ServiceRegistry``."""

    def __init__(self):
        self.services: dict[str, Service] = {}

    def _name_taken(self, name: str, exclude_id: Optional[str] = None) -> bool:
        return any(s.name == name and s.id != exclude_id for s in self.services.values())

    async def list_services(self) -> list[Service]:
        return list(reversed(self.services.values()))

    async def get_service(self, service_id: str) -> Optional[Service]:
        return self.services.get(service_id)

    async def create_service(self, **fields: Any) -> Service:
        if self._name_taken(fields["name"]):
            raise DuplicateServiceNameError(fields["name"])
        now = utcnow()
        service = Service(id=str(uuid.uuid4()), created_at=now, updated_at=now, **fields)
        self.services[service.id] = service
        return service

    async def update_service(self, service_id: str, **fields: Any) -> Optional[Service]:
        service = self.services.get(service_id)
        if service is None:
            return None
        if "name" in fields and self._name_taken(fields["name"], service_id):
            raise DuplicateServiceNameError(fields["name"])
        updated = Service.model_validate({**service.model_dump(), **fields, "updated_at": utcnow()})
        self.services[service_id] = updated
        return updated

    async def delete_service(self, service_id: str) -> bool:
        return self.services.pop(service_id, None) is not None

    async def count_active(self, session=None) -> int:
        return sum(1 for s in self.services.values() if s.is_active)


class InMemoryRequestLogStore:
    """List-backed stand-in for ``RequestLogStore``."""

    def __init__(self, api_keys: InMemoryApiKeyStore, services: InMemoryServiceRegistry):
        self.entries: list[RequestLog] = []
        self._api_keys = api_keys
        self._services = services

    async def record(self, entry: RequestLogCreate) -> RequestLog:
        log = RequestLog(id=str(uuid.uuid4()), created_at=utcnow(), **entry.model_dump())
        self.entries.append(log)
        return log

    async def list_logs(self, limit: int = 100, offset: int = 0) -> list[RequestLog]:
        newest_first = list(reversed(self.entries))
        return newest_first[offset:offset + limit]

    async def dashboard_stats(self) -> DashboardStats:
        total = len(self.entries)
        errors = sum(1 for e in self.entries if (e.status_code or 0) >= 400)
        times = [e.response_time for e in self.entries if e.response_time is not None]
        return DashboardStats(
            total_requests=total,
            active_services=await self._services.count_active(),
            active_api_keys=await self._api_keys.count_active(),
            error_rate=(errors / total) * 100 if total else 0.0,
            avg_response_time=int(sum(times) / len(times)) if times else 0,
        )
