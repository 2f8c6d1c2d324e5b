"""
User repository for database operations.
Handles user lookups, account creation and privacy setting updates.
"""
from typing import Optional, Dict, List

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.base import BaseRepository
from app.utils.datetime_utils import utc_now


class UserRepository(BaseRepository[User]):
    """Repository for user database operations."""

    def __init__(self, db: AsyncSession):
        """Initialize user repository."""
        super().__init__(User, db)

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address (case-insensitive).

        Args:
            email: User email

        Returns:
            User instance or None
        """
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Optional[User]:
        """Get user by username."""
        result = await self.db.execute(
            select(User).where(User.username == username)
        )
        return result.scalar_one_or_none()

    async def get_map(self, user_ids: List[str]) -> Dict[str, User]:
        """
        Load several users keyed by ID.

        Args:
            user_ids: User IDs (duplicates allowed)

        Returns:
            Dict of user ID to User for the IDs that exist

        Example:
            ```python
            users = await user_repo.get_map([m.sender_id for m in messages])
            ```
        """
        users = await self.get_many(list(set(user_ids)))
        return {user.id: user for user in users}

    async def update_last_login(self, user_id: str) -> None:
        await self.update(user_id, last_login_at=utc_now())

    async def update_who_can_message(self, user_id: str, who_can_message: str) -> Optional[User]:
        """Persist the messaging privacy setting."""
        return await self.update(user_id, who_can_message=who_can_message, updated_at=utc_now())

    async def username_taken(self, username: str, exclude_user_id: Optional[str] = None) -> bool:
        """Whether another user already holds ``username``."""
        query = select(func.count()).select_from(User).where(User.username == username)
        if exclude_user_id is not None:
            query = query.where(User.id != exclude_user_id)
        result = await self.db.execute(query)
        return result.scalar() > 0

    async def update_profile(self, user_id: str, **fields) -> Optional[User]:
        """Persist profile field changes (names, username, bio, avatar)."""
        return await self.update(user_id, **fields, updated_at=utc_now())
