"""Account directory backed by SQLAlchemy async.

Persists and queries user records. Passwords arrive here already hashed;
the directory never hashes.
"""

from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import DuplicateEmailError, DuplicateUsernameError
from core.models.user import UserInDB, UserRole
from services.gateway.database.models import User
from services.gateway.database.session import DatabaseManager, db_manager

UPDATABLE_FIELDS = frozenset({"role", "is_active"})


class AccountDirectory:
    """Async store for user accounts."""

    def __init__(self, manager: DatabaseManager = db_manager):
        self._db = manager

    async def get_user_by_id(
        self, user_id: str, session: Optional[AsyncSession] = None
    ) -> Optional[UserInDB]:
        """Get a user by ID, or None if absent."""
        async with self._db.use_session(session) as s:
            row = await s.get(User, user_id)
            return UserInDB.model_validate(row) if row else None

    async def get_user_by_username(
        self, username: str, session: Optional[AsyncSession] = None
    ) -> Optional[UserInDB]:
        """Get a user by exact username, or None if absent."""
        async with self._db.use_session(session) as s:
            result = await s.execute(select(User).where(User.username == username))
            row = result.scalar_one_or_none()
            return UserInDB.model_validate(row) if row else None

    async def get_user_by_email(
        self, email: str, session: Optional[AsyncSession] = None
    ) -> Optional[UserInDB]:
        """Get a user by exact email address, or None if absent."""
        async with self._db.use_session(session) as s:
            result = await s.execute(select(User).where(User.email == email))
            row = result.scalar_one_or_none()
            return UserInDB.model_validate(row) if row else None

    async def create_user(
        self,
        username: str,
        email: str,
        hashed_password: str,
        role: UserRole = UserRole.USER,
    ) -> UserInDB:
        """
        Create a new user.

        Args:
            username: Unique username
            email: Unique email address
            hashed_password: Password hash produced by the caller
            role: Initial role

        Returns:
            Created UserInDB

        Raises:
            DuplicateUsernameError: If the username is taken
            DuplicateEmailError: If the email is taken
        """
        async with self._db.session() as s:
            if await self.get_user_by_username(username, session=s):
                raise DuplicateUsernameError(username)
            if await self.get_user_by_email(email, session=s):
                raise DuplicateEmailError(email)

            user = User(
                username=username,
                email=email,
                hashed_password=hashed_password,
                role=role.value,
                is_active=True,
            )
            s.add(user)
            try:
                await s.flush()
            except IntegrityError:
                # Concurrent registration with the same username or email
                await s.rollback()
                if await self.get_user_by_username(username, session=s):
                    raise DuplicateUsernameError(username)
                raise DuplicateEmailError(email)

            await s.refresh(user)
            return UserInDB.model_validate(user)

    async def update_user(self, user_id: str, **fields) -> Optional[UserInDB]:
        """
        Update mutable account fields.

        Args:
            user_id: The user UUID
            **fields: Any of ``role`` and ``is_active``

        Returns:
            The updated user, or None if no such user exists
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update user fields: {', '.join(sorted(unknown))}")

        async with self._db.session() as s:
            row = await s.get(User, user_id)
            if row is None:
                return None

            for name, value in fields.items():
                if name == "role":
                    value = UserRole(value).value
                setattr(row, name, value)

            await s.flush()
            await s.refresh(row)
            return UserInDB.model_validate(row)

    async def rotate_refresh_token_version(
        self, user_id: str, expected_version: int
    ) -> Optional[int]:
        """
        Advance the user's refresh token version if it still matches.

        The compare-and-increment is a single UPDATE, so two concurrent
        rotations of the same refresh token cannot both succeed.

        Returns:
            The new version, or None if the user is missing or the version
            has already moved on
        """
        async with self._db.session() as s:
            result = await s.execute(
                update(User)
                .where(
                    User.id == user_id,
                    User.refresh_token_version == expected_version,
                )
                .values(refresh_token_version=User.refresh_token_version + 1)
                .returning(User.refresh_token_version)
            )
            return result.scalar_one_or_none()

    async def list_users(self) -> list[UserInDB]:
        """List all users, newest first."""
        async with self._db.session() as s:
            result = await s.execute(select(User).order_by(User.created_at.desc()))
            return [UserInDB.model_validate(row) for row in result.scalars().all()]


# Global account directory instance
account_directory = AccountDirectory()


async def get_account_directory() -> AccountDirectory:
    """Get the account directory instance."""
    return account_directory
