"""
Repository tests against SQLite.
Cover the constraint-backed behaviour services rely on.
"""
import pytest

from app.models.conversation import order_user_ids
from app.models.message import Message, MessageType
from app.models.user import User
from app.repositories.block_repo import BlockRepository
from app.repositories.conversation_repo import ConversationRepository
from app.repositories.follow_repo import FollowRepository
from app.repositories.message_repo import MessageRepository
from app.utils.datetime_utils import utc_now


class TestConversationRepository:
    """Canonical participant pairs."""

    def test_order_user_ids(self):
        assert order_user_ids("b", "a") == ("a", "b")
        assert order_user_ids("a", "b") == ("a", "b")

    async def test_create_or_get_stores_smaller_id_first(self, db_session, user_a, user_b):
        repo = ConversationRepository(db_session)

        conv = await repo.create_or_get(user_b.id, user_a.id)

        assert conv.user1_id < conv.user2_id
        assert {conv.user1_id, conv.user2_id} == {user_a.id, user_b.id}

    async def test_create_or_get_returns_existing_row(self, db_session, user_a, user_b):
        repo = ConversationRepository(db_session)

        first = await repo.create_or_get(user_a.id, user_b.id)
        second = await repo.create_or_get(user_b.id, user_a.id)

        assert first.id == second.id
        assert await repo.count() == 1

    async def test_get_by_participants_any_order(self, db_session, user_a, user_b, conversation):
        repo = ConversationRepository(db_session)

        found = await repo.get_by_participants(user_b.id, user_a.id)

        assert found.id == conversation.id

    async def test_recipient_and_participant_helpers(self, user_a, user_b, user_c, conversation):
        assert conversation.get_recipient_id(user_a.id) == user_b.id
        assert conversation.get_recipient_id(user_b.id) == user_a.id
        assert conversation.is_participant(user_a.id)
        assert not conversation.is_participant(user_c.id)

    async def test_restore_for_keeps_deletion_timestamp(self, db_session, user_a, conversation):
        repo = ConversationRepository(db_session)
        deleted_at = utc_now()
        await repo.mark_deleted_for(conversation, user_a.id, deleted_at)
        assert conversation.is_hidden_for(user_a.id) is True

        await repo.restore_for(conversation, user_a.id)

        assert conversation.is_hidden_for(user_a.id) is False
        assert conversation.deleted_at_for(user_a.id) is not None
        conversations, total = await repo.list_for_user(user_a.id)
        assert [c.id for c in conversations] == [conversation.id]
        assert total == 1

    async def test_count_rejects_unknown_column(self, db_session, conversation):
        repo = ConversationRepository(db_session)

        with pytest.raises(AttributeError):
            await repo.count(user_one_id=conversation.user1_id)


class TestMessageRepository:
    """Read state transitions."""

    async def test_mark_read_by_recipient(self, db_session, user_a, message_from_b):
        repo = MessageRepository(db_session)

        assert await repo.mark_read(message_from_b.id, user_a.id) is True
        # Second read changes nothing
        assert await repo.mark_read(message_from_b.id, user_a.id) is False

    async def test_mark_read_by_sender_is_noop(self, db_session, user_b, message_from_b):
        repo = MessageRepository(db_session)

        assert await repo.mark_read(message_from_b.id, user_b.id) is False

        await db_session.refresh(message_from_b)
        assert message_from_b.is_read is False

    async def test_soft_delete_requires_sender(self, db_session, user_a, user_b, message_from_b):
        repo = MessageRepository(db_session)

        assert await repo.soft_delete(message_from_b.id, user_a.id) is False
        assert await repo.soft_delete(message_from_b.id, user_b.id) is True
        assert await repo.get_by_id(message_from_b.id) is None

    async def test_unread_counts_by_conversation(self, db_session, user_a, user_b, conversation):
        repo = MessageRepository(db_session)
        for content in ("a", "b"):
            db_session.add(
                Message(
                    conversation_id=conversation.id,
                    sender_id=user_b.id,
                    message_type=MessageType.TEXT,
                    content=content,
                )
            )
        await db_session.commit()

        counts = await repo.unread_counts_by_conversation([conversation.id, "other"], user_a.id)

        assert counts == {conversation.id: 2}
        assert await repo.unread_counts_by_conversation([], user_a.id) == {}


class TestBlockRepository:
    """Block edges."""

    async def test_is_blocked_checks_both_directions(self, db_session, user_a, user_b):
        repo = BlockRepository(db_session)
        await repo.block(user_a.id, user_b.id)

        assert await repo.is_blocked(user_a.id, user_b.id) is True
        assert await repo.is_blocked(user_b.id, user_a.id) is True
        assert await repo.is_user_blocked(user_a.id, user_b.id) is True
        assert await repo.is_user_blocked(user_b.id, user_a.id) is False

    async def test_block_twice_creates_one_row(self, db_session, user_a, user_b):
        repo = BlockRepository(db_session)

        assert await repo.block(user_a.id, user_b.id, "spam") is True
        assert await repo.block(user_a.id, user_b.id) is False
        assert await repo.count(blocker_id=user_a.id) == 1

    async def test_blank_reason_is_stored_as_null(self, db_session, user_a, user_b):
        repo = BlockRepository(db_session)
        await repo.block(user_a.id, user_b.id, "")

        [(block, blocked_user)] = await repo.list_blocked(user_a.id)

        assert block.reason is None
        assert blocked_user.id == user_b.id

    async def test_related_user_ids(self, db_session, user_a, user_b, user_c):
        repo = BlockRepository(db_session)
        await repo.block(user_a.id, user_b.id)
        await repo.block(user_c.id, user_a.id)

        assert await repo.related_user_ids(user_a.id) == {user_b.id, user_c.id}
        assert await repo.related_user_ids(user_b.id) == {user_a.id}


class TestFollowRepository:
    """Follow edges and mutual connections."""

    async def test_count_by_column(self, db_session, user_a, user_b, user_c):
        repo = FollowRepository(db_session)
        await repo.follow(user_a.id, user_b.id)
        await repo.follow(user_c.id, user_b.id)

        assert await repo.count(follower_id=user_a.id) == 1
        assert await repo.count(following_id=user_b.id) == 2

        with pytest.raises(AttributeError):
            await repo.count(folower_id=user_a.id)

    async def test_following_among(self, db_session, user_a, user_b, user_c):
        repo = FollowRepository(db_session)
        await repo.follow(user_a.id, user_b.id)

        assert await repo.following_among(user_a.id, [user_b.id, user_c.id]) == {user_b.id}
        assert await repo.following_among(user_a.id, []) == set()

    async def test_mutual_excludes_the_pair_itself(self, db_session, user_a, user_b, user_c, make_user):
        repo = FollowRepository(db_session)
        dave = await make_user(email="dave@example.com", username="dave")
        for follower in (user_a, user_b):
            await repo.follow(follower.id, user_c.id)
            await repo.follow(follower.id, dave.id)
        await repo.follow(user_a.id, user_b.id)
        await repo.follow(user_b.id, user_a.id)

        users, total = await repo.get_mutual(user_a.id, user_b.id)

        assert [user.username for user in users] == ["carol", "dave"]
        assert total == 2
        assert await repo.mutual_count(user_b.id, user_a.id) == 2


class TestSchema:
    """Table definitions."""

    def test_username_is_indexed_only_by_its_unique_constraint(self):
        assert User.__table__.c.username.unique is True
        assert [index.name for index in User.__table__.indexes if "username" in index.columns] == []
