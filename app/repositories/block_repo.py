"""
Block repository for user blocking.
"""
from typing import List, Optional, Set, Tuple

from sqlalchemy import select, delete, func, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.blocked_user import BlockedUser
from app.models.user import User
from app.repositories.base import BaseRepository


class BlockRepository(BaseRepository[BlockedUser]):
    """Repository for block edges."""

    def __init__(self, db: AsyncSession):
        """Initialize block repository."""
        super().__init__(BlockedUser, db)

    async def block(self, blocker_id: str, blocked_id: str, reason: Optional[str] = None) -> bool:
        """
        Block a user. Blocking an already blocked user is a no-op.

        Args:
            blocker_id: User doing the blocking
            blocked_id: User being blocked
            reason: Optional reason; blank strings are stored as NULL

        Returns:
            True if a new block was created
        """
        return await self.insert_ignore(
            ["blocker_id", "blocked_id"],
            blocker_id=blocker_id,
            blocked_id=blocked_id,
            reason=reason or None,
        )

    async def unblock(self, blocker_id: str, blocked_id: str) -> bool:
        """
        Remove a block.

        Returns:
            False if no such block existed
        """
        result = await self.db.execute(
            delete(BlockedUser).where(
                BlockedUser.blocker_id == blocker_id,
                BlockedUser.blocked_id == blocked_id
            )
        )
        await self.db.flush()
        return result.rowcount > 0

    async def is_blocked(self, user_a: str, user_b: str) -> bool:
        """True if either user has blocked the other."""
        result = await self.db.execute(
            select(func.count()).select_from(BlockedUser).where(
                or_(
                    and_(BlockedUser.blocker_id == user_a, BlockedUser.blocked_id == user_b),
                    and_(BlockedUser.blocker_id == user_b, BlockedUser.blocked_id == user_a),
                )
            )
        )
        return result.scalar() > 0

    async def is_user_blocked(self, blocker_id: str, blocked_id: str) -> bool:
        """True if ``blocker_id`` has blocked ``blocked_id`` (one direction only)."""
        result = await self.db.execute(
            select(func.count()).select_from(BlockedUser).where(
                BlockedUser.blocker_id == blocker_id,
                BlockedUser.blocked_id == blocked_id
            )
        )
        return result.scalar() > 0

    async def list_blocked(self, blocker_id: str) -> List[Tuple[BlockedUser, User]]:
        """
        Users blocked by ``blocker_id``, most recent block first.

        Returns:
            List of (block, blocked user) pairs
        """
        result = await self.db.execute(
            select(BlockedUser, User)
            .join(User, User.id == BlockedUser.blocked_id)
            .where(BlockedUser.blocker_id == blocker_id)
            .order_by(BlockedUser.created_at.desc(), BlockedUser.id.desc())
        )
        return [(block, user) for block, user in result.all()]

    async def related_user_ids(self, user_id: str) -> Set[str]:
        """
        IDs of users with a block in either direction with ``user_id``.

        Lets list endpoints flag blocked conversations without a query per row.
        """
        result = await self.db.execute(
            select(BlockedUser.blocker_id, BlockedUser.blocked_id).where(
                or_(BlockedUser.blocker_id == user_id, BlockedUser.blocked_id == user_id)
            )
        )
        related = set()
        for blocker_id, blocked_id in result.all():
            related.add(blocked_id if blocker_id == user_id else blocker_id)
        return related
