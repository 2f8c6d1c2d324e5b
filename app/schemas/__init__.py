"""
Pydantic schema exports.
Provides request/response models for API endpoints.
"""
from app.schemas.auth import (
    SignupRequest,
    LoginRequest,
    RefreshRequest,
    TokenResponse,
    AuthResponse
)
from app.schemas.block import (
    BlockUserRequest,
    BlockedUserResponse,
    BlockedUsersListResponse,
    CanMessageResponse
)
from app.schemas.common import ActionResponse, PaginationMetadata, UserBasicInfo
from app.schemas.conversation import (
    ConversationCreate,
    ConversationResponse,
    ConversationListResponse,
    ConversationPagination,
    LastMessageInfo,
    UnreadCountResponse
)
from app.schemas.message import (
    AttachmentMetadata,
    MessageCreate,
    MessageResponse,
    MessageListResponse
)
from app.schemas.user import (
    UserResponse,
    PrivacySettingsResponse,
    UpdatePrivacyRequest,
    FollowStatsResponse,
    FollowStatusResponse,
    UserListItem,
    UserListResponse,
    ProfileStats,
    ProfileResponse,
    OwnProfileResponse,
    UpdateProfileRequest,
    MutualConnectionsResponse,
    MutualConnectionsCountResponse
)

__all__ = [
    "SignupRequest",
    "LoginRequest",
    "RefreshRequest",
    "TokenResponse",
    "AuthResponse",
    "BlockUserRequest",
    "BlockedUserResponse",
    "BlockedUsersListResponse",
    "CanMessageResponse",
    "ActionResponse",
    "PaginationMetadata",
    "UserBasicInfo",
    "ConversationCreate",
    "ConversationResponse",
    "ConversationListResponse",
    "ConversationPagination",
    "LastMessageInfo",
    "UnreadCountResponse",
    "AttachmentMetadata",
    "MessageCreate",
    "MessageResponse",
    "MessageListResponse",
    "UserResponse",
    "PrivacySettingsResponse",
    "UpdatePrivacyRequest",
    "FollowStatsResponse",
    "FollowStatusResponse",
    "UserListItem",
    "UserListResponse",
    "ProfileStats",
    "ProfileResponse",
    "OwnProfileResponse",
    "UpdateProfileRequest",
    "MutualConnectionsResponse",
    "MutualConnectionsCountResponse",
]
