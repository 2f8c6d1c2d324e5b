"""
Conversation model.

A conversation is a one-to-one thread keyed by its participant pair.
The pair is stored smaller ID first so each pair maps to a single row.
"""
from datetime import datetime
from typing import Tuple

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    false,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, UUIDMixin, TimestampMixin


def order_user_ids(user_a: str, user_b: str) -> Tuple[str, str]:
    """Return the pair with the smaller ID first."""
    if user_a < user_b:
        return user_a, user_b
    return user_b, user_a


class Conversation(Base, UUIDMixin, TimestampMixin):
    """
    Conversation model for direct messages.

    Carries a denormalized copy of the latest message so conversation lists
    render without touching the messages table, plus a per-participant
    deletion timestamp.
    """

    __tablename__ = "conversations"
    __table_args__ = (
        UniqueConstraint("user1_id", "user2_id", name="uq_conversations_participants"),
        CheckConstraint("user1_id < user2_id", name="ck_conversations_ordered_participants"),
    )

    user1_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        doc="Participant with the smaller ID"
    )

    user2_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        doc="Participant with the larger ID"
    )

    # Last message cache
    last_message_id: Mapped[str | None] = mapped_column(
        String(36),
        nullable=True,
        doc="Most recent message"
    )

    last_message_text: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        doc="Preview text of the most recent message"
    )

    last_message_sender_id: Mapped[str | None] = mapped_column(
        String(36),
        nullable=True,
        doc="Sender of the most recent message"
    )

    last_message_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        doc="When the most recent message was sent"
    )

    # Per-participant deletion
    user1_deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        doc="When user1 deleted the conversation from their list"
    )

    user2_deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        doc="When user2 deleted the conversation from their list"
    )

    # Cleared when the participant reopens the conversation; the deletion
    # timestamps above still bound the history that participant sees.
    user1_hidden: Mapped[bool] = mapped_column(
        default=False,
        server_default=false(),
        nullable=False,
        doc="Conversation is hidden from user1's list"
    )

    user2_hidden: Mapped[bool] = mapped_column(
        default=False,
        server_default=false(),
        nullable=False,
        doc="Conversation is hidden from user2's list"
    )

    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.user1_id, self.user2_id)

    def get_recipient_id(self, current_user_id: str) -> str:
        """Return the other participant's ID."""
        if current_user_id == self.user1_id:
            return self.user2_id
        return self.user1_id

    def deleted_at_for(self, user_id: str) -> datetime | None:
        """Return when the given participant deleted this conversation, if ever."""
        if user_id == self.user1_id:
            return self.user1_deleted_at
        if user_id == self.user2_id:
            return self.user2_deleted_at
        return None

    def is_hidden_for(self, user_id: str) -> bool:
        if user_id == self.user1_id:
            return self.user1_hidden
        if user_id == self.user2_id:
            return self.user2_hidden
        return False

    def __repr__(self) -> str:
        return f"<Conversation(id={self.id}, user1_id={self.user1_id}, user2_id={self.user2_id})>"


# Indexes for performance
Index("idx_conversations_user1", Conversation.user1_id)
Index("idx_conversations_user2", Conversation.user2_id)
Index("idx_conversations_updated_at", Conversation.updated_at)
