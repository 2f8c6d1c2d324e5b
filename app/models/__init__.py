"""
SQLAlchemy models for the messaging application.

All models must be imported here for Alembic auto-generation to work.
"""

# Import Base first
from app.models.base import Base, TimestampMixin, UUIDMixin

# Import all models
from app.models.user import User, WhoCanMessage
from app.models.follow import Follow
from app.models.conversation import Conversation, order_user_ids
from app.models.message import Message, MessageStatus, MessageType
from app.models.blocked_user import BlockedUser

# Export all models and enums
__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    # Users
    "User",
    "WhoCanMessage",
    "Follow",
    # Conversations
    "Conversation",
    "order_user_ids",
    # Messages
    "Message",
    "MessageStatus",
    "MessageType",
    # User blocking
    "BlockedUser",
]
