"""
Conversation repository for database operations.
Handles canonical pair lookup, listing, and the last-message cache.
"""
from datetime import datetime
from typing import Optional, List, Tuple

from sqlalchemy import select, update, func, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.conversation import Conversation, order_user_ids
from app.repositories.base import BaseRepository


class ConversationRepository(BaseRepository[Conversation]):
    """Repository for conversation database operations."""

    def __init__(self, db: AsyncSession):
        """Initialize conversation repository."""
        super().__init__(Conversation, db)

    async def create_or_get(self, user_a: str, user_b: str) -> Conversation:
        """
        Return the conversation between two users, creating it if needed.

        The pair is canonicalized before the insert, and concurrent callers
        are arbitrated by the unique constraint on (user1_id, user2_id), so
        ``create_or_get(a, b)`` and ``create_or_get(b, a)`` always return the
        same row.

        Args:
            user_a: One participant
            user_b: The other participant

        Returns:
            Conversation instance

        Example:
            ```python
            conv = await conversation_repo.create_or_get(me.id, other.id)
            ```
        """
        user1_id, user2_id = order_user_ids(user_a, user_b)
        await self.insert_ignore(
            ["user1_id", "user2_id"],
            user1_id=user1_id,
            user2_id=user2_id,
        )
        return await self.get_by_participants(user1_id, user2_id)

    async def get_by_participants(self, user_a: str, user_b: str) -> Optional[Conversation]:
        """
        Find the conversation between two users.

        Args:
            user_a: One participant (order does not matter)
            user_b: The other participant

        Returns:
            Conversation instance or None if the pair has never talked
        """
        user1_id, user2_id = order_user_ids(user_a, user_b)
        result = await self.db.execute(
            select(Conversation).where(
                Conversation.user1_id == user1_id,
                Conversation.user2_id == user2_id
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _visible_to(user_id: str):
        """
        Filter for conversations shown in a user's list.

        A conversation the user deleted reappears once they reopen it or a
        message newer than the deletion arrives.
        """
        def side(participant_col, hidden_col, deleted_col):
            return and_(
                participant_col == user_id,
                or_(
                    hidden_col.is_(False),
                    and_(
                        Conversation.last_message_at.is_not(None),
                        Conversation.last_message_at > deleted_col
                    )
                )
            )

        return or_(
            side(Conversation.user1_id, Conversation.user1_hidden, Conversation.user1_deleted_at),
            side(Conversation.user2_id, Conversation.user2_hidden, Conversation.user2_deleted_at),
        )

    async def list_for_user(
        self,
        user_id: str,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Conversation], int]:
        """
        Get a page of the user's conversations, most recently active first.

        Args:
            user_id: Participant ID
            limit: Page size
            offset: Rows to skip

        Returns:
            Tuple of (conversations, total visible conversations)
        """
        visible = self._visible_to(user_id)

        result = await self.db.execute(
            select(Conversation)
            .where(visible)
            .order_by(Conversation.updated_at.desc(), Conversation.id.desc())
            .limit(limit)
            .offset(offset)
        )
        conversations = list(result.scalars().all())

        total_result = await self.db.execute(
            select(func.count()).select_from(Conversation).where(visible)
        )
        return conversations, total_result.scalar()

    async def update_last_message(
        self,
        conversation_id: str,
        message_id: Optional[str],
        text: Optional[str],
        sender_id: Optional[str],
        sent_at: Optional[datetime],
        touch: bool = True
    ) -> None:
        """
        Write the denormalized last-message fields.

        Runs in the caller's transaction, so a send that fails here rolls
        back the message insert as well.

        Args:
            conversation_id: Conversation to update
            message_id: Latest message ID (None clears the cache)
            text: Preview text
            sender_id: Latest message sender
            sent_at: Latest message timestamp
            touch: Move the conversation to the top of both lists
        """
        values = {
            "last_message_id": message_id,
            "last_message_text": text,
            "last_message_sender_id": sender_id,
            "last_message_at": sent_at,
        }
        if touch:
            values["updated_at"] = sent_at
        else:
            values["updated_at"] = Conversation.updated_at

        await self.db.execute(
            update(Conversation)
            .where(Conversation.id == conversation_id)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        await self.db.flush()

    async def mark_deleted_for(
        self,
        conversation: Conversation,
        user_id: str,
        deleted_at: datetime
    ) -> None:
        """
        Hide the conversation and its current history from one participant.

        The other participant's view is untouched, including the list order.
        """
        side = "user1" if user_id == conversation.user1_id else "user2"
        await self.db.execute(
            update(Conversation)
            .where(Conversation.id == conversation.id)
            .values({
                f"{side}_deleted_at": deleted_at,
                f"{side}_hidden": True,
                "updated_at": Conversation.updated_at,
            })
            .execution_options(synchronize_session="fetch")
        )
        await self.db.flush()
        await self.db.refresh(conversation)

    async def restore_for(self, conversation: Conversation, user_id: str) -> None:
        """
        Put a deleted conversation back in one participant's list.

        The deletion timestamp is kept, so messages from before the deletion
        stay hidden from that participant.
        """
        column = "user1_hidden" if user_id == conversation.user1_id else "user2_hidden"
        await self.db.execute(
            update(Conversation)
            .where(Conversation.id == conversation.id)
            .values({column: False, "updated_at": Conversation.updated_at})
            .execution_options(synchronize_session="fetch")
        )
        await self.db.flush()
        await self.db.refresh(conversation)
