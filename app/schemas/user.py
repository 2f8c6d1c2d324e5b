"""
User schemas for API request/response validation.
Covers account and profile views, privacy settings and the follow graph.
"""
from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.schemas.common import PaginationMetadata, UserBasicInfo


class UserResponse(BaseModel):
    """The authenticated user's own profile."""

    id: str
    email: EmailStr
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    who_can_message: str
    is_active: bool
    email_verified: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PrivacySettingsResponse(BaseModel):
    """Messaging privacy setting."""

    who_can_message: str


class UpdatePrivacyRequest(BaseModel):
    """
    Schema for updating the messaging privacy setting.

    The value is checked by the profile service so an invalid setting is
    reported as a 400 with a readable message.
    """

    who_can_message: str = Field(..., description="'everyone', 'followers' or 'none'")

    class Config:
        json_schema_extra = {
            "example": {
                "who_can_message": "followers"
            }
        }


class FollowStatsResponse(BaseModel):
    followers_count: int
    following_count: int


class FollowStatusResponse(BaseModel):
    """Whether the current user follows a given user."""

    user_id: str
    is_following: bool


class UserListItem(UserBasicInfo):
    """Entry in a follower or following list."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_followed_by_me: bool = Field(False, description="Whether the viewer follows this user (for 'follow back')")


class UserListResponse(BaseModel):
    """Page of users (followers or following)."""

    users: List[UserListItem]
    pagination: PaginationMetadata


# ============================================================================
# Profiles
# ============================================================================

class ProfileStats(BaseModel):
    followers_count: int
    following_count: int


class ProfileResponse(BaseModel):
    """Another user's profile as seen by the viewer."""

    id: str
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    stats: ProfileStats
    is_following: bool = Field(False, description="Viewer follows this user")
    is_followed_by: bool = Field(False, description="This user follows the viewer")
    mutual_connections_count: int = Field(0, description="Users both the viewer and this user follow")
    created_at: datetime


class OwnProfileResponse(BaseModel):
    """The authenticated user's profile, including private fields."""

    id: str
    email: EmailStr
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    stats: ProfileStats
    privacy_settings: PrivacySettingsResponse
    email_verified: bool
    created_at: datetime


class UpdateProfileRequest(BaseModel):
    """
    Schema for editing the current user's profile.

    Omitted fields are left unchanged; at least one field must be given.
    """

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    username: Optional[str] = Field(None, min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.]+$")
    bio: Optional[str] = Field(None, max_length=500)
    avatar_url: Optional[str] = Field(None, max_length=500, pattern=r"^https?://\S+$")

    class Config:
        json_schema_extra = {
            "example": {
                "first_name": "Jane",
                "bio": "Coffee, climbing and compilers"
            }
        }


class MutualConnectionsResponse(BaseModel):
    mutual_connections: List[UserBasicInfo]
    pagination: PaginationMetadata


class MutualConnectionsCountResponse(BaseModel):
    user_id: str
    mutual_connections_count: int
