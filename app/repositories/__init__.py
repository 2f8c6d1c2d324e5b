"""
Repository layer exports.
Provides database access layer for the application.
"""
from app.repositories.base import BaseRepository
from app.repositories.block_repo import BlockRepository
from app.repositories.conversation_repo import ConversationRepository
from app.repositories.follow_repo import FollowRepository
from app.repositories.message_repo import MessageRepository
from app.repositories.user_repo import UserRepository

__all__ = [
    "BaseRepository",
    "BlockRepository",
    "ConversationRepository",
    "FollowRepository",
    "MessageRepository",
    "UserRepository",
]
