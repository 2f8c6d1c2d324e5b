"""
Messaging service containing business logic for direct messages.
Handles conversations, messages, read state, blocking and the privacy gate.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import BadRequestError, ForbiddenError, NotFoundError
from app.models.conversation import Conversation
from app.models.message import Message, MessageStatus, MessageType
from app.models.user import User
from app.repositories.block_repo import BlockRepository
from app.repositories.conversation_repo import ConversationRepository
from app.repositories.message_repo import MessageRepository
from app.repositories.user_repo import UserRepository
from app.schemas.message import MessageCreate
from app.services.privacy_service import PrivacyChecker
from app.utils.datetime_utils import ensure_utc, utc_now
from app.utils.helpers import (
    build_pagination,
    build_user_basic_info,
    first_attachment_filename,
    truncate_text,
)
from app.utils.validators import normalize_pagination, validate_message_payload

logger = logging.getLogger(__name__)

CONVERSATIONS_DEFAULT_LIMIT = 20
CONVERSATIONS_MAX_LIMIT = 50
MESSAGES_DEFAULT_LIMIT = 50
MESSAGES_MAX_LIMIT = 100
PREVIEW_LENGTH = 100


def build_last_message_text(
    message_type: str,
    content: Optional[str],
    attachments: Optional[List[Dict[str, Any]]]
) -> str:
    """
    Preview text stored on the conversation for its latest message.

    Args:
        message_type: 'text', 'image' or 'file'
        content: Message text or caption
        attachments: Attachment metadata list

    Returns:
        Preview string

    Example:
        >>> build_last_message_text("image", None, [{"url": "..."}])
        '📷 Photo'
    """
    if message_type == MessageType.TEXT.value:
        return truncate_text(content or "", PREVIEW_LENGTH)

    if message_type == MessageType.IMAGE.value:
        return f"📷 {content}" if content else "📷 Photo"

    if message_type == MessageType.FILE.value:
        filename = first_attachment_filename(attachments)
        return f"📎 {filename}" if filename else "📎 File"

    return ""


class MessagingService:
    """Service for direct messaging with business logic."""

    def __init__(self, db: AsyncSession):
        """
        Initialize messaging service.

        Args:
            db: Database session
        """
        self.db = db
        self.conversation_repo = ConversationRepository(db)
        self.message_repo = MessageRepository(db)
        self.block_repo = BlockRepository(db)
        self.user_repo = UserRepository(db)
        self.privacy = PrivacyChecker(db)

    # ========================================================================
    # Helpers
    # ========================================================================

    async def _get_conversation_for(self, conversation_id: str, user_id: str) -> Conversation:
        """
        Load a conversation and verify the user takes part in it.

        Raises:
            NotFoundError: If the conversation does not exist
            ForbiddenError: If the user is not a participant
        """
        conversation = await self.conversation_repo.get(conversation_id)
        if conversation is None:
            raise NotFoundError("conversation not found")

        if not conversation.is_participant(user_id):
            raise ForbiddenError("you are not a participant in this conversation")

        return conversation

    @staticmethod
    def _last_message_info(conversation: Conversation) -> Optional[Dict[str, Any]]:
        if not conversation.last_message_id:
            return None
        return {
            "id": conversation.last_message_id,
            "content": conversation.last_message_text or "",
            "sender_id": conversation.last_message_sender_id,
            "created_at": ensure_utc(conversation.last_message_at),
        }

    def _conversation_dict(
        self,
        conversation: Conversation,
        participant: User,
        unread_count: int,
        is_blocked: bool
    ) -> Dict[str, Any]:
        return {
            "id": conversation.id,
            "participant": build_user_basic_info(participant),
            "last_message": self._last_message_info(conversation),
            "unread_count": unread_count,
            "is_blocked": is_blocked,
            "created_at": ensure_utc(conversation.created_at),
            "updated_at": ensure_utc(conversation.updated_at),
        }

    async def _conversation_response(
        self,
        conversation: Conversation,
        current_user_id: str,
        participant: Optional[User] = None
    ) -> Dict[str, Any]:
        recipient_id = conversation.get_recipient_id(current_user_id)

        if participant is None:
            participant = await self.user_repo.get(recipient_id)
            if participant is None:
                raise NotFoundError("recipient not found")

        unread_count = await self.message_repo.conversation_unread_count(conversation.id, current_user_id)
        is_blocked = await self.block_repo.is_blocked(current_user_id, recipient_id)
        return self._conversation_dict(conversation, participant, unread_count, is_blocked)

    async def _refresh_last_message(self, conversation_id: str) -> None:
        """Rebuild the last-message cache from the newest remaining message."""
        latest = await self.message_repo.get_latest(conversation_id)
        if latest is None:
            await self.conversation_repo.update_last_message(
                conversation_id, None, None, None, None, touch=False
            )
            return

        await self.conversation_repo.update_last_message(
            conversation_id,
            latest.id,
            build_last_message_text(
                MessageType(latest.message_type).value, latest.content, latest.attachments
            ),
            latest.sender_id,
            latest.created_at,
            touch=False,
        )

    @staticmethod
    def _message_dict(message: Message, sender: User) -> Dict[str, Any]:
        return {
            "id": message.id,
            "conversation_id": message.conversation_id,
            "sender": build_user_basic_info(sender),
            "message_type": MessageType(message.message_type).value,
            "content": message.content,
            "attachments": message.attachments or [],
            "status": MessageStatus(message.status).value,
            "is_read": message.is_read,
            "read_at": ensure_utc(message.read_at),
            "created_at": ensure_utc(message.created_at),
        }

    # ========================================================================
    # Conversations
    # ========================================================================

    async def create_or_get_conversation(
        self,
        current_user_id: str,
        recipient_id: str
    ) -> Dict[str, Any]:
        """
        Open the conversation with a recipient, creating it on first contact.

        Reopening a conversation the caller deleted puts it back in their
        list; messages from before the deletion stay hidden from them.

        Args:
            current_user_id: Requesting user
            recipient_id: User to talk to

        Returns:
            Conversation response dict

        Raises:
            BadRequestError: Empty IDs or messaging yourself
            NotFoundError: Recipient does not exist
            ForbiddenError: The privacy gate denied the contact
        """
        if not current_user_id or not recipient_id:
            raise BadRequestError("user IDs cannot be empty")

        if current_user_id == recipient_id:
            raise BadRequestError("cannot create conversation with yourself")

        recipient = await self.user_repo.get(recipient_id)
        if recipient is None:
            raise NotFoundError("recipient not found")

        existing = await self.conversation_repo.get_by_participants(current_user_id, recipient_id)

        allowed, reason = await self.privacy.can_message(
            current_user_id, recipient_id, existing is not None
        )
        if not allowed:
            raise ForbiddenError(reason)

        conversation = existing
        if conversation is None:
            conversation = await self.conversation_repo.create_or_get(current_user_id, recipient_id)
            await self.db.commit()
            logger.info("Conversation %s opened between %s and %s", conversation.id, current_user_id, recipient_id)
        elif conversation.is_hidden_for(current_user_id):
            await self.conversation_repo.restore_for(conversation, current_user_id)
            await self.db.commit()
            logger.info("Conversation %s reopened by %s", conversation.id, current_user_id)

        return await self._conversation_response(conversation, current_user_id, participant=recipient)

    async def get_conversations(
        self,
        user_id: str,
        page: Optional[int] = 1,
        limit: Optional[int] = CONVERSATIONS_DEFAULT_LIMIT,
        unread_only: bool = False
    ) -> Dict[str, Any]:
        """
        Get a page of the user's conversations, most recently active first.

        The unread_only filter is applied to the fetched page, so a page may
        hold fewer items than ``limit`` while pagination totals still count
        every visible conversation.

        Args:
            user_id: Requesting user
            page: Page number (values below 1 become 1)
            limit: Page size (default 20, max 50)
            unread_only: Only return conversations with unread messages

        Returns:
            Dict with ``conversations`` and ``pagination`` (including total_unread)
        """
        page, limit = normalize_pagination(page, limit, CONVERSATIONS_DEFAULT_LIMIT, CONVERSATIONS_MAX_LIMIT)

        conversations, total = await self.conversation_repo.list_for_user(
            user_id, limit=limit, offset=(page - 1) * limit
        )
        total_unread = await self.message_repo.unread_count(user_id)

        participants = await self.user_repo.get_map(
            [conversation.get_recipient_id(user_id) for conversation in conversations]
        )
        unread_counts = await self.message_repo.unread_counts_by_conversation(
            [conversation.id for conversation in conversations], user_id
        )
        blocked_ids = await self.block_repo.related_user_ids(user_id)

        items = []
        for conversation in conversations:
            recipient_id = conversation.get_recipient_id(user_id)
            participant = participants.get(recipient_id)
            if participant is None:
                continue

            unread_count = unread_counts.get(conversation.id, 0)
            if unread_only and unread_count == 0:
                continue

            items.append(
                self._conversation_dict(
                    conversation, participant, unread_count, recipient_id in blocked_ids
                )
            )

        return {
            "conversations": items,
            "pagination": build_pagination(page, limit, total, total_unread=total_unread),
        }

    async def get_conversation(self, conversation_id: str, user_id: str) -> Dict[str, Any]:
        """Get one conversation as seen by a participant."""
        conversation = await self._get_conversation_for(conversation_id, user_id)
        return await self._conversation_response(conversation, user_id)

    async def delete_conversation(self, conversation_id: str, user_id: str) -> None:
        """
        Delete a conversation for one participant.

        The conversation leaves the user's list until a newer message
        arrives, and messages sent before the deletion stay hidden from that
        user. The other participant is unaffected.

        Raises:
            NotFoundError: Conversation does not exist
            ForbiddenError: User is not a participant
        """
        conversation = await self._get_conversation_for(conversation_id, user_id)

        await self.message_repo.mark_conversation_read(conversation.id, user_id)
        await self.conversation_repo.mark_deleted_for(conversation, user_id, utc_now())
        await self.db.commit()

        logger.info("Conversation %s deleted by %s", conversation.id, user_id)

    # ========================================================================
    # Messages
    # ========================================================================

    async def send_message(
        self,
        conversation_id: str,
        sender_id: str,
        request: MessageCreate
    ) -> Dict[str, Any]:
        """
        Send a message in a conversation.

        The message row and the conversation's last-message cache are written
        in one transaction: if either write fails neither is kept.

        Args:
            conversation_id: Target conversation
            sender_id: Sending user
            request: Message payload

        Returns:
            Message response dict with sender info

        Raises:
            BadRequestError: Invalid payload for the message type
            NotFoundError: Conversation does not exist
            ForbiddenError: Sender is not a participant or the gate denies
        """
        attachments = [
            attachment.model_dump(mode="json", exclude_none=True)
            for attachment in request.attachments
        ]
        message_type = validate_message_payload(request.message_type, request.content, attachments)

        conversation = await self._get_conversation_for(conversation_id, sender_id)
        recipient_id = conversation.get_recipient_id(sender_id)

        allowed, reason = await self.privacy.can_message(sender_id, recipient_id, True)
        if not allowed:
            raise ForbiddenError(reason)

        try:
            message = await self.message_repo.create(
                conversation_id=conversation.id,
                sender_id=sender_id,
                message_type=message_type,
                content=request.content or None,
                attachments=attachments,
                status=MessageStatus.SENT,
                is_read=False,
            )
            await self.conversation_repo.update_last_message(
                conversation.id,
                message.id,
                build_last_message_text(message_type.value, request.content, attachments),
                sender_id,
                message.created_at,
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        sender = await self.user_repo.get(sender_id)
        if sender is None:
            raise NotFoundError("user not found")

        logger.info("Message %s sent in conversation %s by %s", message.id, conversation.id, sender_id)
        return self._message_dict(message, sender)

    async def get_messages(
        self,
        conversation_id: str,
        user_id: str,
        page: Optional[int] = 1,
        limit: Optional[int] = MESSAGES_DEFAULT_LIMIT
    ) -> Dict[str, Any]:
        """
        Get a page of messages, newest first.

        Args:
            conversation_id: Conversation ID
            user_id: Requesting participant
            page: Page number (values below 1 become 1)
            limit: Page size (default 50, max 100)

        Returns:
            Dict with ``messages`` and ``pagination``
        """
        page, limit = normalize_pagination(page, limit, MESSAGES_DEFAULT_LIMIT, MESSAGES_MAX_LIMIT)

        conversation = await self._get_conversation_for(conversation_id, user_id)

        messages, total = await self.message_repo.list_for_conversation(
            conversation.id,
            limit=limit,
            offset=(page - 1) * limit,
            visible_after=conversation.deleted_at_for(user_id),
        )
        senders = await self.user_repo.get_map([message.sender_id for message in messages])

        items = [
            self._message_dict(message, senders[message.sender_id])
            for message in messages
            if message.sender_id in senders
        ]

        return {
            "messages": items,
            "pagination": build_pagination(page, limit, total),
        }

    async def delete_message(self, message_id: str, user_id: str) -> None:
        """
        Soft delete a message. Only its sender may delete it.

        If the message was the conversation's cached last message, the cache
        is rebuilt from the newest remaining message.

        Raises:
            NotFoundError: Message missing or already deleted
            ForbiddenError: User is not the sender
        """
        message = await self.message_repo.get_by_id(message_id)
        if message is None:
            raise NotFoundError("message not found")

        if message.sender_id != user_id:
            raise ForbiddenError("you can only delete your own messages")

        if not await self.message_repo.soft_delete(message_id, user_id):
            raise NotFoundError("message not found")

        conversation = await self.conversation_repo.get(message.conversation_id)
        if conversation is not None and conversation.last_message_id == message_id:
            await self._refresh_last_message(conversation.id)

        await self.db.commit()
        logger.info("Message %s deleted by %s", message_id, user_id)

    # ========================================================================
    # Read state
    # ========================================================================

    async def mark_conversation_as_read(self, conversation_id: str, user_id: str) -> int:
        """
        Mark all messages from the other participant as read.

        Returns:
            Number of messages that changed state
        """
        conversation = await self._get_conversation_for(conversation_id, user_id)
        updated = await self.message_repo.mark_conversation_read(conversation.id, user_id)
        await self.db.commit()
        return updated

    async def mark_message_as_read(self, message_id: str, user_id: str) -> None:
        """
        Mark a single received message as read.

        Raises:
            NotFoundError: Message or conversation missing
            BadRequestError: The user sent the message
            ForbiddenError: User is not a participant
        """
        message = await self.message_repo.get_by_id(message_id)
        if message is None:
            raise NotFoundError("message not found")

        if message.sender_id == user_id:
            raise BadRequestError("cannot mark your own message as read")

        await self._get_conversation_for(message.conversation_id, user_id)

        await self.message_repo.mark_read(message_id, user_id)
        await self.db.commit()

    async def get_unread_count(self, user_id: str) -> Dict[str, int]:
        """Unread totals across all of the user's conversations."""
        return {
            "total_unread": await self.message_repo.unread_count(user_id),
            "unread_conversations": await self.message_repo.unread_conversations_count(user_id),
        }

    # ========================================================================
    # Privacy and blocking
    # ========================================================================

    async def can_message(self, sender_id: str, recipient_id: str) -> Dict[str, Any]:
        """
        Ask the privacy gate whether sender may message recipient.

        Raises:
            NotFoundError: Recipient does not exist
        """
        if await self.user_repo.get(recipient_id) is None:
            raise NotFoundError("user not found")

        existing = await self.conversation_repo.get_by_participants(sender_id, recipient_id)
        allowed, reason = await self.privacy.can_message(sender_id, recipient_id, existing is not None)
        return {"can_message": allowed, "reason": reason}

    async def block_user(self, blocker_id: str, blocked_id: str, reason: Optional[str] = None) -> None:
        """
        Block a user. Blocking twice is a no-op.

        Existing conversations and messages are left untouched; only future
        sends in either direction are denied.

        Raises:
            BadRequestError: Empty IDs or blocking yourself
            NotFoundError: Target user does not exist
        """
        if not blocker_id or not blocked_id:
            raise BadRequestError("user IDs cannot be empty")

        if blocker_id == blocked_id:
            raise BadRequestError("cannot block yourself")

        if await self.user_repo.get(blocked_id) is None:
            raise NotFoundError("user not found")

        created = await self.block_repo.block(blocker_id, blocked_id, reason.strip() if reason else None)
        await self.db.commit()

        if created:
            logger.info("User %s blocked %s", blocker_id, blocked_id)

    async def unblock_user(self, blocker_id: str, blocked_id: str) -> None:
        """
        Remove a block.

        Raises:
            BadRequestError: Empty IDs
            NotFoundError: No such block
        """
        if not blocker_id or not blocked_id:
            raise BadRequestError("user IDs cannot be empty")

        if not await self.block_repo.unblock(blocker_id, blocked_id):
            raise NotFoundError("block relationship not found")

        await self.db.commit()
        logger.info("User %s unblocked %s", blocker_id, blocked_id)

    async def get_blocked_users(self, blocker_id: str) -> Dict[str, Any]:
        """Users blocked by ``blocker_id``, most recent first."""
        rows = await self.block_repo.list_blocked(blocker_id)
        return {
            "blocked_users": [
                {
                    "id": user.id,
                    "username": user.username,
                    "full_name": user.full_name,
                    "avatar_url": user.avatar_url,
                    "blocked_at": ensure_utc(block.created_at),
                }
                for block, user in rows
            ]
        }
