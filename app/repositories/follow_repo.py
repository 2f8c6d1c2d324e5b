"""
Follow repository for the social graph.
"""
from typing import Iterable, List, Set, Tuple

from sqlalchemy import select, delete, func
from sqlalchemy.orm import aliased
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.follow import Follow
from app.models.user import User
from app.repositories.base import BaseRepository


class FollowRepository(BaseRepository[Follow]):
    """Repository for follow edges."""

    def __init__(self, db: AsyncSession):
        """Initialize follow repository."""
        super().__init__(Follow, db)

    async def follow(self, follower_id: str, following_id: str) -> bool:
        """
        Create a follow edge. Following twice is a no-op.

        Args:
            follower_id: User who follows
            following_id: User being followed

        Returns:
            True if a new edge was created
        """
        return await self.insert_ignore(
            ["follower_id", "following_id"],
            follower_id=follower_id,
            following_id=following_id,
        )

    async def unfollow(self, follower_id: str, following_id: str) -> bool:
        """Remove a follow edge. Returns False when it did not exist."""
        result = await self.db.execute(
            delete(Follow).where(
                Follow.follower_id == follower_id,
                Follow.following_id == following_id
            )
        )
        await self.db.flush()
        return result.rowcount > 0

    async def is_following(self, follower_id: str, following_id: str) -> bool:
        result = await self.db.execute(
            select(func.count()).select_from(Follow).where(
                Follow.follower_id == follower_id,
                Follow.following_id == following_id
            )
        )
        return result.scalar() > 0

    async def get_followers(
        self,
        user_id: str,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[User], int]:
        """
        Get users following the given user, newest follow first.

        Returns:
            Tuple of (users, total)
        """
        query = (
            select(User)
            .join(Follow, Follow.follower_id == User.id)
            .where(Follow.following_id == user_id)
            .order_by(Follow.created_at.desc(), Follow.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(query)
        total = await self.count(following_id=user_id)
        return list(result.scalars().all()), total

    async def get_following(
        self,
        user_id: str,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[User], int]:
        """
        Get users the given user follows, newest follow first.

        Returns:
            Tuple of (users, total)
        """
        query = (
            select(User)
            .join(Follow, Follow.following_id == User.id)
            .where(Follow.follower_id == user_id)
            .order_by(Follow.created_at.desc(), Follow.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(query)
        total = await self.count(follower_id=user_id)
        return list(result.scalars().all()), total

    async def following_among(self, follower_id: str, user_ids: Iterable[str]) -> Set[str]:
        """
        Subset of ``user_ids`` that ``follower_id`` follows.

        Used to flag "follow back" on follower and following lists with one
        query per page.
        """
        user_ids = list(user_ids)
        if not user_ids:
            return set()

        result = await self.db.execute(
            select(Follow.following_id).where(
                Follow.follower_id == follower_id,
                Follow.following_id.in_(user_ids)
            )
        )
        return set(result.scalars().all())

    def _mutual_query(self, user_a: str, user_b: str):
        theirs = aliased(Follow)
        return (
            select(Follow.following_id)
            .join(theirs, theirs.following_id == Follow.following_id)
            .where(
                Follow.follower_id == user_a,
                theirs.follower_id == user_b,
                Follow.following_id.not_in([user_a, user_b])
            )
        )

    async def mutual_count(self, user_a: str, user_b: str) -> int:
        """Number of users both ``user_a`` and ``user_b`` follow."""
        mutual = self._mutual_query(user_a, user_b).subquery()
        result = await self.db.execute(select(func.count()).select_from(mutual))
        return result.scalar()

    async def get_mutual(
        self,
        user_a: str,
        user_b: str,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[User], int]:
        """
        Users both ``user_a`` and ``user_b`` follow, ordered by username.

        Returns:
            Tuple of (users, total)
        """
        mutual = self._mutual_query(user_a, user_b)
        result = await self.db.execute(
            select(User)
            .where(User.id.in_(mutual))
            .order_by(User.username, User.id)
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all()), await self.mutual_count(user_a, user_b)
