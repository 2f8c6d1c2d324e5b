"""
Pydantic schemas for conversation requests and responses.
Handles validation for conversation-related API endpoints.
"""
from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field, field_validator

from app.schemas.common import PaginationMetadata, UserBasicInfo


# ============================================================================
# Request Schemas
# ============================================================================

class ConversationCreate(BaseModel):
    """Schema for opening (or reopening) a conversation."""

    recipient_id: str = Field(..., min_length=1, description="User to start a conversation with")

    @field_validator("recipient_id")
    @classmethod
    def strip_recipient_id(cls, v: str) -> str:
        return v.strip()

    class Config:
        json_schema_extra = {
            "example": {
                "recipient_id": "123e4567-e89b-12d3-a456-426614174000"
            }
        }


# ============================================================================
# Response Schemas
# ============================================================================

class LastMessageInfo(BaseModel):
    """Denormalized preview of a conversation's most recent message."""

    id: str
    content: str = ""
    sender_id: Optional[str] = None
    created_at: Optional[datetime] = None


class ConversationResponse(BaseModel):
    """Conversation as seen by one participant."""

    id: str
    participant: UserBasicInfo = Field(..., description="The other participant")
    last_message: Optional[LastMessageInfo] = None
    unread_count: int = 0
    is_blocked: bool = False
    created_at: datetime
    updated_at: datetime


class ConversationPagination(PaginationMetadata):
    """Pagination metadata for the conversation list."""

    total_unread: int = Field(0, description="Unread messages across all conversations")


class ConversationListResponse(BaseModel):
    """Page of conversations."""

    conversations: List[ConversationResponse]
    pagination: ConversationPagination


class UnreadCountResponse(BaseModel):
    """Unread totals for the badge."""

    total_unread: int
    unread_conversations: int
