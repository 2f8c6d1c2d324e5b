"""
User API endpoints.
Provides profiles, privacy settings, blocking, the privacy gate check,
the follow graph and mutual connections.
"""
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.block import BlockUserRequest, BlockedUsersListResponse, CanMessageResponse
from app.schemas.common import ActionResponse
from app.schemas.user import (
    FollowStatsResponse,
    FollowStatusResponse,
    MutualConnectionsCountResponse,
    MutualConnectionsResponse,
    OwnProfileResponse,
    PrivacySettingsResponse,
    ProfileResponse,
    UpdatePrivacyRequest,
    UpdateProfileRequest,
    UserListResponse,
    UserResponse
)
from app.services.follow_service import FollowService
from app.services.messaging_service import MessagingService
from app.services.profile_service import ProfileService

router = APIRouter()


# ============================================================================
# Current user
# ============================================================================

@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get the authenticated user's profile."""
    return current_user


@router.get("/me/profile", response_model=OwnProfileResponse)
async def get_own_profile(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Your profile with follow stats and privacy settings."""
    service = ProfileService(db)
    return await service.get_own_profile(current_user.id)


@router.put("/me/profile", response_model=OwnProfileResponse)
async def update_profile(
    profile_data: UpdateProfileRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Edit your profile.

    - **first_name**, **last_name**: 1-100 characters
    - **username**: 3-50 letters, digits, "_" or "."; must be unused
    - **bio**: up to 500 characters
    - **avatar_url**: http(s) URL of an already uploaded image

    Omitted fields are left unchanged.
    """
    service = ProfileService(db)
    return await service.update_profile(current_user.id, **profile_data.model_dump(exclude_none=True))


@router.get("/me/privacy", response_model=PrivacySettingsResponse)
async def get_privacy_settings(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = ProfileService(db)
    return await service.get_privacy_settings(current_user.id)


@router.put("/me/privacy", response_model=PrivacySettingsResponse)
async def update_privacy_settings(
    privacy_data: UpdatePrivacyRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Update who can start new conversations with you.

    - **who_can_message**: 'everyone', 'followers' or 'none'

    Existing conversations keep working regardless of this setting.
    """
    service = ProfileService(db)
    return await service.update_privacy_settings(current_user.id, privacy_data.who_can_message)


# ============================================================================
# Blocking
# ============================================================================

# Declared before /{user_id} routes so "blocked" is not taken as an ID
@router.get("/blocked", response_model=BlockedUsersListResponse)
async def get_blocked_users(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Users you have blocked, most recent first."""
    service = MessagingService(db)
    return await service.get_blocked_users(current_user.id)


@router.post("/{user_id}/block", response_model=ActionResponse)
async def block_user(
    user_id: str,
    block_data: Optional[BlockUserRequest] = Body(default=None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Block a user.

    Neither of you can send new messages to the other while the block
    exists. Existing history stays visible.
    """
    service = MessagingService(db)
    reason = block_data.reason if block_data else None
    await service.block_user(current_user.id, user_id, reason)
    return {"success": True, "message": "user blocked successfully"}


@router.delete("/{user_id}/block", response_model=ActionResponse)
async def unblock_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = MessagingService(db)
    await service.unblock_user(current_user.id, user_id)
    return {"success": True, "message": "user unblocked successfully"}


@router.get("/{user_id}/can-message", response_model=CanMessageResponse)
async def can_message(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Check whether you may message a user, and why not if you can't."""
    service = MessagingService(db)
    return await service.can_message(current_user.id, user_id)


# ============================================================================
# Follow graph
# ============================================================================

@router.post("/{user_id}/follow", response_model=ActionResponse)
async def follow_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = FollowService(db)
    await service.follow(current_user.id, user_id)
    return {"success": True, "message": "user followed successfully"}


@router.delete("/{user_id}/follow", response_model=ActionResponse)
async def unfollow_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = FollowService(db)
    await service.unfollow(current_user.id, user_id)
    return {"success": True, "message": "user unfollowed successfully"}


@router.get("/{user_id}/follow", response_model=FollowStatusResponse)
async def get_follow_status(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Whether you follow the given user."""
    service = FollowService(db)
    return {"user_id": user_id, "is_following": await service.is_following(current_user.id, user_id)}


@router.get("/{user_id}/followers", response_model=UserListResponse)
async def get_followers(
    user_id: str,
    page: int = Query(default=1, description="Page number (1-based)"),
    limit: int = Query(default=20, description="Users per page (max 50)"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = FollowService(db)
    return await service.get_followers(user_id, page=page, limit=limit, viewer_id=current_user.id)


@router.get("/{user_id}/following", response_model=UserListResponse)
async def get_following(
    user_id: str,
    page: int = Query(default=1, description="Page number (1-based)"),
    limit: int = Query(default=20, description="Users per page (max 50)"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = FollowService(db)
    return await service.get_following(user_id, page=page, limit=limit, viewer_id=current_user.id)


@router.get("/{user_id}/follow-stats", response_model=FollowStatsResponse)
async def get_follow_stats(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = FollowService(db)
    return await service.get_follow_stats(user_id)


# ============================================================================
# Profiles and mutual connections
# ============================================================================

@router.get("/{user_id}/profile", response_model=ProfileResponse)
async def get_user_profile(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """A user's profile, with your follow relationship to them."""
    service = ProfileService(db)
    return await service.get_user_profile(user_id, viewer_id=current_user.id)


@router.get("/{user_id}/mutual-connections", response_model=MutualConnectionsResponse)
async def get_mutual_connections(
    user_id: str,
    page: int = Query(default=1, description="Page number (1-based)"),
    limit: int = Query(default=20, description="Users per page (max 50)"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Users that both you and the given user follow."""
    service = ProfileService(db)
    return await service.get_mutual_connections(current_user.id, user_id, page=page, limit=limit)


@router.get("/{user_id}/mutual-connections/count", response_model=MutualConnectionsCountResponse)
async def get_mutual_connections_count(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = ProfileService(db)
    return await service.get_mutual_connections_count(current_user.id, user_id)
