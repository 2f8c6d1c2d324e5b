"""
Unit tests for PrivacyChecker.
Covers rule ordering: self, blocks, existing threads, then the recipient setting.
"""
import logging

import pytest

from app.core.errors import NotFoundError
from app.models.blocked_user import BlockedUser
from app.models.follow import Follow
from app.services.privacy_service import (
    PrivacyChecker,
    REASON_BLOCKED_BY_RECIPIENT,
    REASON_BLOCKED_RECIPIENT,
    REASON_FOLLOWERS_ONLY,
    REASON_MESSAGES_DISABLED,
    REASON_SELF,
)


async def _block(db_session, blocker, blocked):
    db_session.add(BlockedUser(blocker_id=blocker.id, blocked_id=blocked.id))
    await db_session.commit()


async def _follow(db_session, follower, following):
    db_session.add(Follow(follower_id=follower.id, following_id=following.id))
    await db_session.commit()


class TestPrivacyChecker:
    """Test cases for the messaging privacy gate."""

    async def test_everyone_allows_strangers(self, db_session, user_a, user_b):
        checker = PrivacyChecker(db_session)

        allowed, reason = await checker.can_message(user_a.id, user_b.id, False)

        assert allowed is True
        assert reason == ""

    async def test_cannot_message_yourself(self, db_session, user_a):
        checker = PrivacyChecker(db_session)

        allowed, reason = await checker.can_message(user_a.id, user_a.id, True)

        assert allowed is False
        assert reason == REASON_SELF

    async def test_recipient_blocked_sender(self, db_session, user_a, user_b):
        """The sender learns they were blocked by the other side."""
        await _block(db_session, user_b, user_a)
        checker = PrivacyChecker(db_session)

        allowed, reason = await checker.can_message(user_a.id, user_b.id, False)

        assert allowed is False
        assert reason == REASON_BLOCKED_BY_RECIPIENT

    async def test_sender_blocked_recipient(self, db_session, user_a, user_b):
        await _block(db_session, user_a, user_b)
        checker = PrivacyChecker(db_session)

        allowed, reason = await checker.can_message(user_a.id, user_b.id, False)

        assert allowed is False
        assert reason == REASON_BLOCKED_RECIPIENT

    async def test_block_overrides_existing_conversation(self, db_session, user_a, user_b):
        await _block(db_session, user_b, user_a)
        checker = PrivacyChecker(db_session)

        allowed, _ = await checker.can_message(user_a.id, user_b.id, True)

        assert allowed is False

    async def test_followers_only_denies_non_follower(self, db_session, make_user, user_a):
        recipient = await make_user(email="private@example.com", who_can_message="followers")
        checker = PrivacyChecker(db_session)

        allowed, reason = await checker.can_message(user_a.id, recipient.id, False)

        assert allowed is False
        assert reason == REASON_FOLLOWERS_ONLY

    async def test_followers_only_allows_follower(self, db_session, make_user, user_a):
        recipient = await make_user(email="private@example.com", who_can_message="followers")
        await _follow(db_session, user_a, recipient)
        checker = PrivacyChecker(db_session)

        allowed, reason = await checker.can_message(user_a.id, recipient.id, False)

        assert allowed is True
        assert reason == ""

    async def test_follow_direction_matters(self, db_session, make_user, user_a):
        """Being followed by the recipient does not count."""
        recipient = await make_user(email="private@example.com", who_can_message="followers")
        await _follow(db_session, recipient, user_a)
        checker = PrivacyChecker(db_session)

        allowed, _ = await checker.can_message(user_a.id, recipient.id, False)

        assert allowed is False

    async def test_none_denies_new_conversations(self, db_session, make_user, user_a):
        recipient = await make_user(email="closed@example.com", who_can_message="none")
        checker = PrivacyChecker(db_session)

        allowed, reason = await checker.can_message(user_a.id, recipient.id, False)

        assert allowed is False
        assert reason == REASON_MESSAGES_DISABLED

    async def test_existing_conversation_is_grandfathered(self, db_session, make_user, user_a):
        recipient = await make_user(email="closed@example.com", who_can_message="none")
        checker = PrivacyChecker(db_session)

        allowed, reason = await checker.can_message(user_a.id, recipient.id, True)

        assert allowed is True
        assert reason == ""

    async def test_unknown_setting_allows_and_warns(self, db_session, make_user, user_a, caplog):
        recipient = await make_user(email="legacy@example.com", who_can_message="friends_of_friends")
        checker = PrivacyChecker(db_session)

        with caplog.at_level(logging.WARNING, logger="app.services.privacy_service"):
            allowed, reason = await checker.can_message(user_a.id, recipient.id, False)

        assert allowed is True
        assert reason == ""
        assert "friends_of_friends" in caplog.text

    async def test_missing_recipient_raises(self, db_session, user_a):
        checker = PrivacyChecker(db_session)

        with pytest.raises(NotFoundError):
            await checker.can_message(user_a.id, "00000000-0000-0000-0000-000000000000", False)
