"""
Message API routes.
Provides endpoints for sending, listing, deleting and reading messages.
"""
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.database import get_db
from app.core.rate_limit import limiter
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.common import ActionResponse
from app.schemas.message import MessageCreate, MessageResponse, MessageListResponse
from app.services.messaging_service import MessagingService

router = APIRouter()


@router.post(
    "/conversations/{conversation_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send a message"
)
@limiter.limit(settings.send_message_rate_limit)
async def send_message(
    request: Request,
    conversation_id: str,
    message_data: MessageCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Send a message in a conversation.

    - **message_type**: 'text', 'image' or 'file'
    - **content**: Required for text (max 10,000 characters), optional caption otherwise
    - **attachments**: 1-5 attachments for image and file messages

    **Errors:**
    - 400: Invalid payload
    - 403: Not a participant, or blocked
    - 404: Conversation not found
    """
    service = MessagingService(db)
    return await service.send_message(conversation_id, current_user.id, message_data)


@router.get(
    "/conversations/{conversation_id}/messages",
    response_model=MessageListResponse,
    summary="Get conversation messages",
    description="Get messages in a conversation, newest first."
)
async def get_messages(
    conversation_id: str,
    page: int = Query(default=1, description="Page number (1-based)"),
    limit: int = Query(default=50, description="Messages per page (max 100)"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = MessagingService(db)
    return await service.get_messages(conversation_id, current_user.id, page=page, limit=limit)


@router.delete(
    "/messages/{message_id}",
    response_model=ActionResponse,
    summary="Delete a message",
    description="Soft delete one of your own messages."
)
async def delete_message(
    message_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = MessagingService(db)
    await service.delete_message(message_id, current_user.id)
    return {"success": True, "message": "message deleted successfully"}


@router.post(
    "/messages/{message_id}/read",
    response_model=ActionResponse,
    summary="Mark message as read"
)
async def mark_message_as_read(
    message_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = MessagingService(db)
    await service.mark_message_as_read(message_id, current_user.id)
    return {"success": True, "message": "message marked as read"}
