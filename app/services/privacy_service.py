"""
Privacy gate deciding whether one user may message another.
"""
import logging
from typing import Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError
from app.models.user import WhoCanMessage
from app.repositories.block_repo import BlockRepository
from app.repositories.follow_repo import FollowRepository
from app.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)

REASON_SELF = "Cannot message yourself"
REASON_BLOCKED_BY_RECIPIENT = "You have been blocked by this user"
REASON_BLOCKED_RECIPIENT = "You have blocked this user"
REASON_FOLLOWERS_ONLY = "Only followers can message this user"
REASON_MESSAGES_DISABLED = "This user has disabled new messages"


class PrivacyChecker:
    """
    Combines blocks, existing threads and the recipient's privacy setting.

    Rules are applied in order and the first one that decides wins:

    1. Nobody can message themselves.
    2. A block in either direction denies, with a reason that tells the
       sender which side blocked.
    3. An existing conversation is always allowed, even if the recipient
       has since tightened their setting.
    4. Otherwise the recipient's ``who_can_message`` decides.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize privacy checker.

        Args:
            db: Database session
        """
        self.db = db
        self.user_repo = UserRepository(db)
        self.block_repo = BlockRepository(db)
        self.follow_repo = FollowRepository(db)

    async def can_message(
        self,
        sender_id: str,
        recipient_id: str,
        has_existing_conversation: bool
    ) -> Tuple[bool, str]:
        """
        Decide whether ``sender_id`` may message ``recipient_id``.

        Args:
            sender_id: User who wants to send
            recipient_id: Target user
            has_existing_conversation: Whether the pair already has a thread

        Returns:
            Tuple of (allowed, reason); reason is empty when allowed

        Raises:
            NotFoundError: If the recipient needs to be consulted and does not exist
        """
        if sender_id == recipient_id:
            return False, REASON_SELF

        if await self.block_repo.is_blocked(sender_id, recipient_id):
            if await self.block_repo.is_user_blocked(recipient_id, sender_id):
                return False, REASON_BLOCKED_BY_RECIPIENT
            return False, REASON_BLOCKED_RECIPIENT

        if has_existing_conversation:
            return True, ""

        recipient = await self.user_repo.get(recipient_id)
        if recipient is None:
            raise NotFoundError("recipient not found")

        setting = recipient.who_can_message
        if setting == WhoCanMessage.EVERYONE.value:
            return True, ""

        if setting == WhoCanMessage.FOLLOWERS.value:
            if await self.follow_repo.is_following(sender_id, recipient_id):
                return True, ""
            return False, REASON_FOLLOWERS_ONLY

        if setting == WhoCanMessage.NONE.value:
            return False, REASON_MESSAGES_DISABLED

        logger.warning(
            "Unknown who_can_message value %r for user %s; allowing message",
            setting,
            recipient_id,
        )
        return True, ""
