"""
Shared response schemas.
"""
from typing import Optional

from pydantic import BaseModel, Field


class UserBasicInfo(BaseModel):
    """Public identity of a user shown next to messages and conversations."""

    id: str
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


class PaginationMetadata(BaseModel):
    """Page-number pagination metadata."""

    page: int = Field(..., description="Current page (1-based)")
    limit: int = Field(..., description="Page size")
    total: int = Field(..., description="Total matching items")
    total_pages: int = Field(..., description="ceil(total / limit)")
    has_more: bool = Field(..., description="Whether a later page exists")


class ActionResponse(BaseModel):
    """Response for operations that return no resource."""

    success: bool = True
    message: str
