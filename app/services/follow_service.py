"""
Follow service for the social graph.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import BadRequestError, NotFoundError
from app.models.user import User
from app.repositories.follow_repo import FollowRepository
from app.repositories.user_repo import UserRepository
from app.utils.helpers import build_pagination, build_user_basic_info
from app.utils.validators import normalize_pagination

logger = logging.getLogger(__name__)

FOLLOW_DEFAULT_LIMIT = 20
FOLLOW_MAX_LIMIT = 50


class FollowService:
    """Service for following users."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.follow_repo = FollowRepository(db)
        self.user_repo = UserRepository(db)

    async def _require_user(self, user_id: str) -> None:
        if not await self.user_repo.exists(user_id):
            raise NotFoundError("user not found")

    async def follow(self, follower_id: str, following_id: str) -> None:
        """
        Follow a user. Following someone twice is a no-op.

        Raises:
            BadRequestError: Following yourself
            NotFoundError: Target user does not exist
        """
        if follower_id == following_id:
            raise BadRequestError("cannot follow yourself")

        await self._require_user(following_id)

        if await self.follow_repo.follow(follower_id, following_id):
            logger.info("User %s followed %s", follower_id, following_id)
        await self.db.commit()

    async def unfollow(self, follower_id: str, following_id: str) -> None:
        """
        Stop following a user.

        Raises:
            NotFoundError: Target user does not exist
        """
        await self._require_user(following_id)

        if await self.follow_repo.unfollow(follower_id, following_id):
            logger.info("User %s unfollowed %s", follower_id, following_id)
        await self.db.commit()

    async def is_following(self, follower_id: str, following_id: str) -> bool:
        return await self.follow_repo.is_following(follower_id, following_id)

    async def _list_items(self, users: List[User], viewer_id: Optional[str]) -> List[Dict[str, Any]]:
        followed = set()
        if viewer_id is not None:
            followed = await self.follow_repo.following_among(viewer_id, [user.id for user in users])

        return [
            {
                **build_user_basic_info(user),
                "first_name": user.first_name,
                "last_name": user.last_name,
                "is_followed_by_me": user.id in followed,
            }
            for user in users
        ]

    async def get_followers(
        self,
        user_id: str,
        page: Optional[int] = 1,
        limit: Optional[int] = FOLLOW_DEFAULT_LIMIT,
        viewer_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Page of users following ``user_id``.

        Each entry says whether ``viewer_id`` follows that user, so clients
        can offer "follow back".
        """
        await self._require_user(user_id)
        page, limit = normalize_pagination(page, limit, FOLLOW_DEFAULT_LIMIT, FOLLOW_MAX_LIMIT)

        users, total = await self.follow_repo.get_followers(user_id, limit=limit, offset=(page - 1) * limit)
        return {
            "users": await self._list_items(users, viewer_id),
            "pagination": build_pagination(page, limit, total),
        }

    async def get_following(
        self,
        user_id: str,
        page: Optional[int] = 1,
        limit: Optional[int] = FOLLOW_DEFAULT_LIMIT,
        viewer_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Page of users ``user_id`` follows."""
        await self._require_user(user_id)
        page, limit = normalize_pagination(page, limit, FOLLOW_DEFAULT_LIMIT, FOLLOW_MAX_LIMIT)

        users, total = await self.follow_repo.get_following(user_id, limit=limit, offset=(page - 1) * limit)
        return {
            "users": await self._list_items(users, viewer_id),
            "pagination": build_pagination(page, limit, total),
        }

    async def get_follow_stats(self, user_id: str) -> Dict[str, int]:
        await self._require_user(user_id)
        return {
            "followers_count": await self.follow_repo.count(following_id=user_id),
            "following_count": await self.follow_repo.count(follower_id=user_id),
        }
