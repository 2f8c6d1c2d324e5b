"""
Message model.

Handles text, image and file messages with inline attachment metadata,
read state, and sender-only soft deletion.
"""
import enum
from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    JSON,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, UUIDMixin, TimestampMixin


class MessageType(str, enum.Enum):
    """Enum for message types."""
    TEXT = "text"
    IMAGE = "image"
    FILE = "file"


class MessageStatus(str, enum.Enum):
    """Enum for message delivery status."""
    SENT = "sent"
    READ = "read"


def _enum_values(enum_cls) -> List[str]:
    return [member.value for member in enum_cls]


class Message(Base, UUIDMixin, TimestampMixin):
    """
    Message model.

    Attachments are stored as a JSON list of attachment metadata objects;
    they are not separate rows.
    """

    __tablename__ = "messages"

    # References
    conversation_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
        doc="Conversation this message belongs to"
    )

    sender_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        doc="User who sent the message"
    )

    # Message content
    message_type: Mapped[MessageType] = mapped_column(
        SQLEnum(
            MessageType,
            name="message_type",
            native_enum=False,
            length=20,
            values_callable=_enum_values,
        ),
        default=MessageType.TEXT,
        nullable=False,
        doc="Message type: 'text', 'image' or 'file'"
    )

    content: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        doc="Message text (caption for image/file messages)"
    )

    attachments: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
        doc="Attachment metadata list"
    )

    # Read state
    status: Mapped[MessageStatus] = mapped_column(
        SQLEnum(
            MessageStatus,
            name="message_status",
            native_enum=False,
            length=20,
            values_callable=_enum_values,
        ),
        default=MessageStatus.SENT,
        nullable=False,
        doc="Delivery status: 'sent' or 'read'"
    )

    is_read: Mapped[bool] = mapped_column(default=False, nullable=False)

    read_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        doc="When the recipient read the message"
    )

    # Soft delete
    is_deleted: Mapped[bool] = mapped_column(default=False, nullable=False)

    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        doc="When the sender deleted the message"
    )

    deleted_by: Mapped[str | None] = mapped_column(
        String(36),
        nullable=True,
        doc="User who deleted the message"
    )

    def __repr__(self) -> str:
        return f"<Message(id={self.id}, conversation_id={self.conversation_id}, type={self.message_type})>"


# Indexes for performance
Index("idx_messages_conversation_created", Message.conversation_id, Message.created_at)
Index("idx_messages_sender", Message.sender_id)
Index("idx_messages_unread", Message.conversation_id, Message.is_read, Message.is_deleted)
