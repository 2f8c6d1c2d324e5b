"""
Pydantic schemas for message requests and responses.
Handles validation for message-related API endpoints.
"""
from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field

from app.schemas.common import PaginationMetadata, UserBasicInfo


class AttachmentMetadata(BaseModel):
    """Metadata of an uploaded file attached to a message."""

    id: Optional[str] = None
    type: str = Field("file", description="'image' or 'file'")
    url: str = Field(..., min_length=1, description="Public URL of the file")
    thumbnail_url: Optional[str] = None
    filename: Optional[str] = None
    original_filename: Optional[str] = None
    size: Optional[int] = Field(None, ge=0, description="Size in bytes")
    mime_type: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    uploaded_at: Optional[datetime] = None


# ============================================================================
# Request Schemas
# ============================================================================

class MessageCreate(BaseModel):
    """
    Schema for sending a message.

    Type-specific rules (text needs content, image/file need attachments)
    are enforced by the messaging service so they share its error format.
    """

    message_type: str = Field(default="text", description="Message type: 'text', 'image' or 'file'")
    content: Optional[str] = Field(None, description="Message text or caption")
    attachments: List[AttachmentMetadata] = Field(default_factory=list, description="Uploaded attachments")

    class Config:
        json_schema_extra = {
            "example": {
                "message_type": "text",
                "content": "Hello, how are you?",
                "attachments": []
            }
        }


# ============================================================================
# Response Schemas
# ============================================================================

class MessageResponse(BaseModel):
    """Message with its sender's public info."""

    id: str
    conversation_id: str
    sender: UserBasicInfo
    message_type: str
    content: Optional[str] = None
    attachments: List[AttachmentMetadata] = Field(default_factory=list)
    status: str
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime


class MessageListResponse(BaseModel):
    """Page of messages, newest first."""

    messages: List[MessageResponse]
    pagination: PaginationMetadata
