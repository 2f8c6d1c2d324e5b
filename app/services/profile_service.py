"""
Profile service: profile views, profile edits, privacy settings and
mutual connections.
"""
import logging
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import BadRequestError, ConflictError, NotFoundError
from app.models.user import User
from app.repositories.follow_repo import FollowRepository
from app.repositories.user_repo import UserRepository
from app.utils.datetime_utils import ensure_utc
from app.utils.helpers import build_pagination, build_user_basic_info
from app.utils.validators import normalize_pagination, validate_who_can_message

logger = logging.getLogger(__name__)

MUTUAL_DEFAULT_LIMIT = 20
MUTUAL_MAX_LIMIT = 50

EDITABLE_PROFILE_FIELDS = ("first_name", "last_name", "username", "bio", "avatar_url")


class ProfileService:
    """Service for reading and updating profiles and their settings."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_repo = UserRepository(db)
        self.follow_repo = FollowRepository(db)

    async def _require_user(self, user_id: str) -> User:
        user = await self.user_repo.get(user_id)
        if user is None:
            raise NotFoundError("user not found")
        return user

    async def _stats(self, user_id: str) -> Dict[str, int]:
        return {
            "followers_count": await self.follow_repo.count(following_id=user_id),
            "following_count": await self.follow_repo.count(follower_id=user_id),
        }

    @staticmethod
    def _public_fields(user: User) -> Dict[str, Any]:
        return {
            "id": user.id,
            "username": user.username,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "full_name": user.full_name,
            "avatar_url": user.avatar_url,
            "bio": user.bio,
            "created_at": ensure_utc(user.created_at),
        }

    # ========================================================================
    # Profiles
    # ========================================================================

    async def get_own_profile(self, user_id: str) -> Dict[str, Any]:
        """The user's full profile with follow stats and privacy settings."""
        user = await self._require_user(user_id)
        return {
            **self._public_fields(user),
            "email": user.email,
            "email_verified": user.email_verified,
            "stats": await self._stats(user.id),
            "privacy_settings": {"who_can_message": user.who_can_message},
        }

    async def get_user_profile(self, user_id: str, viewer_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Another user's profile as seen by ``viewer_id``.

        Relationship fields (``is_following``, ``is_followed_by`` and
        ``mutual_connections_count``) are only filled in when the viewer
        looks at someone else; on their own profile they stay false/zero.

        Raises:
            NotFoundError: User does not exist
        """
        user = await self._require_user(user_id)

        profile = {
            **self._public_fields(user),
            "stats": await self._stats(user.id),
            "is_following": False,
            "is_followed_by": False,
            "mutual_connections_count": 0,
        }

        if viewer_id and viewer_id != user_id:
            profile["is_following"] = await self.follow_repo.is_following(viewer_id, user_id)
            profile["is_followed_by"] = await self.follow_repo.is_following(user_id, viewer_id)
            profile["mutual_connections_count"] = await self.follow_repo.mutual_count(viewer_id, user_id)

        return profile

    async def update_profile(self, user_id: str, **changes: Optional[str]) -> Dict[str, Any]:
        """
        Edit the user's own profile.

        Fields passed as None are left unchanged.

        Args:
            user_id: User editing their profile
            **changes: Any of first_name, last_name, username, bio, avatar_url

        Returns:
            The updated own-profile dict

        Raises:
            BadRequestError: No fields to update
            ConflictError: Username held by another user
            NotFoundError: User does not exist
        """
        updates = {
            field: value
            for field, value in changes.items()
            if field in EDITABLE_PROFILE_FIELDS and value is not None
        }
        if not updates:
            raise BadRequestError("no fields to update")

        await self._require_user(user_id)

        username = updates.get("username")
        if username and await self.user_repo.username_taken(username, exclude_user_id=user_id):
            raise ConflictError("username already taken")

        await self.user_repo.update_profile(user_id, **updates)
        await self.db.commit()

        logger.info("User %s updated profile fields %s", user_id, sorted(updates))
        return await self.get_own_profile(user_id)

    # ========================================================================
    # Privacy settings
    # ========================================================================

    async def get_privacy_settings(self, user_id: str) -> Dict[str, str]:
        user = await self._require_user(user_id)
        return {"who_can_message": user.who_can_message}

    async def update_privacy_settings(self, user_id: str, who_can_message: str) -> Dict[str, str]:
        """
        Change who may start new conversations with the user.

        Conversations that already exist are not affected.

        Args:
            user_id: User whose setting changes
            who_can_message: 'everyone', 'followers' or 'none'

        Returns:
            The stored setting

        Raises:
            BadRequestError: Unknown setting
            NotFoundError: User does not exist
        """
        who_can_message = validate_who_can_message(who_can_message)

        user: User | None = await self.user_repo.update_who_can_message(user_id, who_can_message)
        if user is None:
            raise NotFoundError("user not found")

        await self.db.commit()
        logger.info("User %s set who_can_message=%s", user_id, who_can_message)
        return {"who_can_message": user.who_can_message}

    # ========================================================================
    # Mutual connections
    # ========================================================================

    async def _check_mutual_target(self, viewer_id: str, target_id: str) -> None:
        if viewer_id == target_id:
            raise BadRequestError("cannot compare connections with yourself")
        await self._require_user(target_id)

    async def get_mutual_connections(
        self,
        viewer_id: str,
        target_id: str,
        page: Optional[int] = 1,
        limit: Optional[int] = MUTUAL_DEFAULT_LIMIT
    ) -> Dict[str, Any]:
        """Page of users both the viewer and ``target_id`` follow."""
        await self._check_mutual_target(viewer_id, target_id)
        page, limit = normalize_pagination(page, limit, MUTUAL_DEFAULT_LIMIT, MUTUAL_MAX_LIMIT)

        users, total = await self.follow_repo.get_mutual(
            viewer_id, target_id, limit=limit, offset=(page - 1) * limit
        )
        return {
            "mutual_connections": [build_user_basic_info(user) for user in users],
            "pagination": build_pagination(page, limit, total),
        }

    async def get_mutual_connections_count(self, viewer_id: str, target_id: str) -> Dict[str, Any]:
        await self._check_mutual_target(viewer_id, target_id)
        return {
            "user_id": target_id,
            "mutual_connections_count": await self.follow_repo.mutual_count(viewer_id, target_id),
        }
