"""
Pydantic schemas for blocking and the privacy gate.
"""
from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field


class BlockUserRequest(BaseModel):
    """Optional body when blocking a user."""

    reason: Optional[str] = Field(None, max_length=500, description="Why the user is blocked")


class BlockedUserResponse(BaseModel):
    """A blocked user with the time of the block."""

    id: str
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    blocked_at: datetime


class BlockedUsersListResponse(BaseModel):
    blocked_users: List[BlockedUserResponse]


class CanMessageResponse(BaseModel):
    """Result of the privacy gate."""

    can_message: bool
    reason: str = ""
