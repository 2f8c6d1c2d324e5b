"""
Conversation API routes.
Provides endpoints for opening, listing, reading and deleting conversations.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.common import ActionResponse
from app.schemas.conversation import (
    ConversationCreate,
    ConversationResponse,
    ConversationListResponse,
    UnreadCountResponse
)
from app.services.messaging_service import MessagingService

router = APIRouter()


@router.post(
    "",
    response_model=ConversationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open a conversation",
    description="Create the conversation with a user, or return it if it already exists."
)
async def create_conversation(
    conversation_data: ConversationCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Create or get a one-to-one conversation.

    - **recipient_id**: User to talk to

    Subject to the recipient's privacy setting and blocks; an existing
    conversation is always returned.
    """
    service = MessagingService(db)
    return await service.create_or_get_conversation(current_user.id, conversation_data.recipient_id)


@router.get(
    "",
    response_model=ConversationListResponse,
    summary="Get user's conversations",
    description="Get the current user's conversations, most recently active first."
)
async def get_conversations(
    page: int = Query(default=1, description="Page number (1-based)"),
    limit: int = Query(default=20, description="Conversations per page (max 50)"),
    unread_only: bool = Query(default=False, description="Only conversations with unread messages"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = MessagingService(db)
    return await service.get_conversations(current_user.id, page=page, limit=limit, unread_only=unread_only)


# Declared before /{conversation_id} so "unread-count" is not taken as an ID
@router.get(
    "/unread-count",
    response_model=UnreadCountResponse,
    summary="Get unread counts"
)
async def get_unread_count(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Total unread messages and the number of conversations holding them."""
    service = MessagingService(db)
    return await service.get_unread_count(current_user.id)


@router.get(
    "/{conversation_id}",
    response_model=ConversationResponse,
    summary="Get a conversation"
)
async def get_conversation(
    conversation_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = MessagingService(db)
    return await service.get_conversation(conversation_id, current_user.id)


@router.delete(
    "/{conversation_id}",
    response_model=ActionResponse,
    summary="Delete a conversation",
    description="Remove the conversation and its current history from your own view."
)
async def delete_conversation(
    conversation_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = MessagingService(db)
    await service.delete_conversation(conversation_id, current_user.id)
    return {"success": True, "message": "conversation deleted successfully"}


@router.post(
    "/{conversation_id}/read",
    response_model=ActionResponse,
    summary="Mark conversation as read"
)
async def mark_conversation_as_read(
    conversation_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = MessagingService(db)
    await service.mark_conversation_as_read(conversation_id, current_user.id)
    return {"success": True, "message": "conversation marked as read"}
