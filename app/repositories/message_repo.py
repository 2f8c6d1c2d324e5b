"""
Message repository for database operations.
Handles message listing, read state, soft delete and unread counts.
"""
from datetime import datetime
from typing import Optional, List, Dict, Tuple

from sqlalchemy import select, update, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.conversation import Conversation
from app.models.message import Message, MessageStatus
from app.repositories.base import BaseRepository
from app.utils.datetime_utils import utc_now


class MessageRepository(BaseRepository[Message]):
    """Repository for message database operations."""

    def __init__(self, db: AsyncSession):
        """Initialize message repository."""
        super().__init__(Message, db)

    async def get_by_id(self, message_id: str) -> Optional[Message]:
        """
        Get a message that has not been deleted.

        Args:
            message_id: Message ID

        Returns:
            Message instance, or None if missing or soft-deleted
        """
        result = await self.db.execute(
            select(Message).where(
                Message.id == message_id,
                Message.is_deleted.is_(False)
            )
        )
        return result.scalar_one_or_none()

    async def list_for_conversation(
        self,
        conversation_id: str,
        limit: int = 50,
        offset: int = 0,
        visible_after: Optional[datetime] = None
    ) -> Tuple[List[Message], int]:
        """
        Get a page of messages, newest first, excluding deleted ones.

        Args:
            conversation_id: Conversation ID
            limit: Page size
            offset: Rows to skip
            visible_after: Only include messages created after this instant
                (used to hide history a participant deleted)

        Returns:
            Tuple of (messages, total)

        Example:
            ```python
            messages, total = await message_repo.list_for_conversation(conv.id, limit=50)
            ```
        """
        conditions = [
            Message.conversation_id == conversation_id,
            Message.is_deleted.is_(False),
        ]
        if visible_after is not None:
            conditions.append(Message.created_at > visible_after)

        result = await self.db.execute(
            select(Message)
            .where(*conditions)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .limit(limit)
            .offset(offset)
        )
        messages = list(result.scalars().all())

        total_result = await self.db.execute(
            select(func.count()).select_from(Message).where(*conditions)
        )
        return messages, total_result.scalar()

    async def get_latest(self, conversation_id: str) -> Optional[Message]:
        """Get the newest non-deleted message in a conversation."""
        result = await self.db.execute(
            select(Message)
            .where(
                Message.conversation_id == conversation_id,
                Message.is_deleted.is_(False)
            )
            .order_by(Message.created_at.desc(), Message.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def soft_delete(self, message_id: str, user_id: str) -> bool:
        """
        Soft delete a message on behalf of its sender.

        Args:
            message_id: Message ID
            user_id: Requesting user; must be the sender

        Returns:
            True if the message was deleted, False if it does not belong to
            the user or was already deleted
        """
        now = utc_now()
        result = await self.db.execute(
            update(Message)
            .where(
                Message.id == message_id,
                Message.sender_id == user_id,
                Message.is_deleted.is_(False)
            )
            .values(is_deleted=True, deleted_at=now, deleted_by=user_id, updated_at=now)
            .execution_options(synchronize_session="fetch")
        )
        await self.db.flush()
        return result.rowcount > 0

    async def mark_read(self, message_id: str, reader_id: str) -> bool:
        """
        Mark a single message read by the recipient.

        The sender's own reads and repeated reads change nothing.

        Returns:
            True if the message transitioned from unread to read
        """
        now = utc_now()
        result = await self.db.execute(
            update(Message)
            .where(
                Message.id == message_id,
                Message.sender_id != reader_id,
                Message.is_read.is_(False),
                Message.is_deleted.is_(False)
            )
            .values(is_read=True, read_at=now, status=MessageStatus.READ, updated_at=now)
            .execution_options(synchronize_session="fetch")
        )
        await self.db.flush()
        return result.rowcount > 0

    async def mark_conversation_read(self, conversation_id: str, reader_id: str) -> int:
        """
        Mark every unread message from the other participant as read.

        Returns:
            Number of messages updated
        """
        now = utc_now()
        result = await self.db.execute(
            update(Message)
            .where(
                Message.conversation_id == conversation_id,
                Message.sender_id != reader_id,
                Message.is_read.is_(False),
                Message.is_deleted.is_(False)
            )
            .values(is_read=True, read_at=now, status=MessageStatus.READ, updated_at=now)
            .execution_options(synchronize_session="fetch")
        )
        await self.db.flush()
        return result.rowcount

    def _unread_for(self, user_id: str):
        return (
            Message.sender_id != user_id,
            Message.is_read.is_(False),
            Message.is_deleted.is_(False),
        )

    async def conversation_unread_count(self, conversation_id: str, user_id: str) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(Message)
            .where(Message.conversation_id == conversation_id, *self._unread_for(user_id))
        )
        return result.scalar()

    async def unread_counts_by_conversation(
        self,
        conversation_ids: List[str],
        user_id: str
    ) -> Dict[str, int]:
        """
        Unread counts for several conversations in one query.

        Returns:
            Dict of conversation ID to unread count (missing IDs have zero)
        """
        if not conversation_ids:
            return {}

        result = await self.db.execute(
            select(Message.conversation_id, func.count())
            .where(Message.conversation_id.in_(conversation_ids), *self._unread_for(user_id))
            .group_by(Message.conversation_id)
        )
        return {conversation_id: count for conversation_id, count in result.all()}

    async def unread_count(self, user_id: str) -> int:
        """
        Total unread messages across all of the user's conversations.

        Never includes the user's own messages or deleted ones.
        """
        result = await self.db.execute(
            select(func.count())
            .select_from(Message)
            .join(Conversation, Conversation.id == Message.conversation_id)
            .where(
                or_(Conversation.user1_id == user_id, Conversation.user2_id == user_id),
                *self._unread_for(user_id)
            )
        )
        return result.scalar()

    async def unread_conversations_count(self, user_id: str) -> int:
        """Number of conversations with at least one unread message."""
        result = await self.db.execute(
            select(func.count(func.distinct(Message.conversation_id)))
            .select_from(Message)
            .join(Conversation, Conversation.id == Message.conversation_id)
            .where(
                or_(Conversation.user1_id == user_id, Conversation.user2_id == user_id),
                *self._unread_for(user_id)
            )
        )
        return result.scalar()
