"""
Unit tests for AuthService, FollowService and ProfileService.
"""
from datetime import timedelta

import pytest

from app.core.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError, UnauthorizedError
from app.core.security import TokenService
from app.services.auth_service import AuthService
from app.services.follow_service import FollowService
from app.services.profile_service import ProfileService


class TestAuthService:
    """Test cases for AuthService."""

    async def test_signup_creates_user_and_tokens(self, db_session):
        service = AuthService(db_session)

        result = await service.signup(
            email="Erin@Example.com",
            password="s3cret-password",
            username="erin",
            first_name="Erin",
        )

        user = result["user"]
        assert user.email == "erin@example.com"
        assert user.password_hash != "s3cret-password"
        assert user.who_can_message == "everyone"
        assert result["token_type"] == "bearer"
        assert result["expires_in"] == 15 * 60

        payload = TokenService().decode_access_token(result["access_token"])
        assert payload["user_id"] == user.id
        assert payload["username"] == "erin"

    async def test_signup_duplicate_email(self, db_session, user_a):
        service = AuthService(db_session)

        with pytest.raises(ConflictError):
            await service.signup(email="ALICE@example.com", password="another-password")

    async def test_signup_duplicate_username(self, db_session, user_a):
        service = AuthService(db_session)

        with pytest.raises(ConflictError):
            await service.signup(email="new@example.com", password="another-password", username="alice")

    async def test_login_success_updates_last_login(self, db_session, user_a, test_password):
        service = AuthService(db_session)

        result = await service.login("alice@example.com", test_password)

        assert result["user"].id == user_a.id
        await db_session.refresh(user_a)
        assert user_a.last_login_at is not None

    async def test_login_wrong_password(self, db_session, user_a):
        service = AuthService(db_session)

        with pytest.raises(UnauthorizedError):
            await service.login("alice@example.com", "wrong-password")

    async def test_login_unknown_email(self, db_session, test_password):
        service = AuthService(db_session)

        with pytest.raises(UnauthorizedError):
            await service.login("nobody@example.com", test_password)

    async def test_login_disabled_account(self, db_session, make_user, test_password):
        await make_user(email="gone@example.com", is_active=False)
        service = AuthService(db_session)

        with pytest.raises(ForbiddenError):
            await service.login("gone@example.com", test_password)

    async def test_refresh_issues_new_pair(self, db_session, user_a):
        service = AuthService(db_session)
        refresh_token = service.tokens.create_refresh_token(user_a.id, user_a.email)

        result = await service.refresh(refresh_token)

        assert service.tokens.decode_access_token(result["access_token"])["user_id"] == user_a.id

    async def test_refresh_rejects_access_token(self, db_session, user_a):
        service = AuthService(db_session)
        access_token = service.tokens.create_access_token(user_a.id, user_a.email)

        with pytest.raises(UnauthorizedError):
            await service.refresh(access_token)


class TestTokenService:
    """Token signing and verification."""

    def test_expired_token(self):
        tokens = TokenService()
        token = tokens.create_access_token("user-1", "u@example.com", expires_delta=timedelta(seconds=-1))

        with pytest.raises(UnauthorizedError) as exc_info:
            tokens.decode_access_token(token)

        assert exc_info.value.message == "Token has expired"

    def test_refresh_token_is_not_an_access_token(self):
        tokens = TokenService()
        token = tokens.create_refresh_token("user-1", "u@example.com")

        with pytest.raises(UnauthorizedError) as exc_info:
            tokens.decode_access_token(token)

        assert exc_info.value.message == "Invalid token"

    def test_garbage_token(self):
        with pytest.raises(UnauthorizedError):
            TokenService().decode_access_token("not-a-jwt")


class TestFollowService:
    """Test cases for FollowService."""

    async def test_follow_and_stats(self, db_session, user_a, user_b, user_c):
        service = FollowService(db_session)
        await service.follow(user_a.id, user_b.id)
        await service.follow(user_c.id, user_b.id)
        await service.follow(user_b.id, user_a.id)

        stats = await service.get_follow_stats(user_b.id)

        assert stats == {"followers_count": 2, "following_count": 1}
        assert await service.is_following(user_a.id, user_b.id) is True
        assert await service.is_following(user_b.id, user_c.id) is False

    async def test_follow_twice_is_noop(self, db_session, user_a, user_b):
        service = FollowService(db_session)
        await service.follow(user_a.id, user_b.id)
        await service.follow(user_a.id, user_b.id)

        stats = await service.get_follow_stats(user_b.id)

        assert stats["followers_count"] == 1

    async def test_follow_yourself(self, db_session, user_a):
        service = FollowService(db_session)

        with pytest.raises(BadRequestError):
            await service.follow(user_a.id, user_a.id)

    async def test_follow_unknown_user(self, db_session, user_a):
        service = FollowService(db_session)

        with pytest.raises(NotFoundError):
            await service.follow(user_a.id, "00000000-0000-0000-0000-000000000000")

    async def test_unfollow(self, db_session, user_a, user_b):
        service = FollowService(db_session)
        await service.follow(user_a.id, user_b.id)

        await service.unfollow(user_a.id, user_b.id)

        assert await service.is_following(user_a.id, user_b.id) is False

    async def test_followers_page_newest_first(self, db_session, user_a, user_b, user_c):
        service = FollowService(db_session)
        await service.follow(user_b.id, user_a.id)
        await service.follow(user_c.id, user_a.id)

        result = await service.get_followers(user_a.id, page=1, limit=1)

        assert [user["id"] for user in result["users"]] == [user_c.id]
        assert result["pagination"]["total"] == 2
        assert result["pagination"]["has_more"] is True

    async def test_following_page(self, db_session, user_a, user_b):
        service = FollowService(db_session)
        await service.follow(user_a.id, user_b.id)

        result = await service.get_following(user_a.id)

        assert [user["username"] for user in result["users"]] == ["bob"]

    async def test_lists_flag_users_the_viewer_follows(self, db_session, user_a, user_b, user_c):
        service = FollowService(db_session)
        await service.follow(user_b.id, user_a.id)
        await service.follow(user_c.id, user_a.id)
        await service.follow(user_a.id, user_b.id)

        result = await service.get_followers(user_a.id, viewer_id=user_a.id)

        flags = {user["username"]: user["is_followed_by_me"] for user in result["users"]}
        assert flags == {"bob": True, "carol": False}
        bob = next(user for user in result["users"] if user["id"] == user_b.id)
        assert bob["first_name"] == "Bob"

    async def test_lists_without_viewer_flag_nobody(self, db_session, user_a, user_b):
        service = FollowService(db_session)
        await service.follow(user_a.id, user_b.id)

        result = await service.get_following(user_a.id)

        assert result["users"][0]["is_followed_by_me"] is False


class TestProfileService:
    """Test cases for ProfileService."""

    async def test_default_privacy(self, db_session, user_a):
        service = ProfileService(db_session)

        assert await service.get_privacy_settings(user_a.id) == {"who_can_message": "everyone"}

    async def test_update_privacy(self, db_session, user_a):
        service = ProfileService(db_session)

        result = await service.update_privacy_settings(user_a.id, "followers")

        assert result == {"who_can_message": "followers"}
        assert await service.get_privacy_settings(user_a.id) == {"who_can_message": "followers"}

    async def test_update_privacy_rejects_unknown_value(self, db_session, user_a):
        service = ProfileService(db_session)

        with pytest.raises(BadRequestError):
            await service.update_privacy_settings(user_a.id, "friends")

    async def test_update_privacy_unknown_user(self, db_session):
        service = ProfileService(db_session)

        with pytest.raises(NotFoundError):
            await service.update_privacy_settings("00000000-0000-0000-0000-000000000000", "none")

    async def test_own_profile(self, db_session, user_a, user_b):
        await FollowService(db_session).follow(user_b.id, user_a.id)
        service = ProfileService(db_session)

        profile = await service.get_own_profile(user_a.id)

        assert profile["email"] == "alice@example.com"
        assert profile["full_name"] == "Alice Archer"
        assert profile["stats"] == {"followers_count": 1, "following_count": 0}
        assert profile["privacy_settings"] == {"who_can_message": "everyone"}

    async def test_user_profile_relationship(self, db_session, user_a, user_b, user_c):
        follows = FollowService(db_session)
        await follows.follow(user_a.id, user_b.id)
        await follows.follow(user_a.id, user_c.id)
        await follows.follow(user_b.id, user_c.id)
        service = ProfileService(db_session)

        profile = await service.get_user_profile(user_b.id, viewer_id=user_a.id)

        assert profile["is_following"] is True
        assert profile["is_followed_by"] is False
        assert profile["mutual_connections_count"] == 1
        assert profile["stats"] == {"followers_count": 1, "following_count": 1}
        assert "email" not in profile

    async def test_viewing_own_public_profile_has_no_relationship(self, db_session, user_a):
        service = ProfileService(db_session)

        profile = await service.get_user_profile(user_a.id, viewer_id=user_a.id)

        assert profile["is_following"] is False
        assert profile["mutual_connections_count"] == 0

    async def test_user_profile_unknown_user(self, db_session, user_a):
        service = ProfileService(db_session)

        with pytest.raises(NotFoundError):
            await service.get_user_profile("00000000-0000-0000-0000-000000000000", viewer_id=user_a.id)

    async def test_update_profile(self, db_session, user_a):
        service = ProfileService(db_session)

        profile = await service.update_profile(
            user_a.id,
            bio="Climbs on weekends",
            avatar_url="https://cdn.example.com/alice.png",
            last_name=None,
        )

        assert profile["bio"] == "Climbs on weekends"
        assert profile["avatar_url"] == "https://cdn.example.com/alice.png"
        assert profile["last_name"] == "Archer"

    async def test_update_profile_requires_a_field(self, db_session, user_a):
        service = ProfileService(db_session)

        with pytest.raises(BadRequestError):
            await service.update_profile(user_a.id, bio=None)

    async def test_update_profile_username_taken(self, db_session, user_a, user_b):
        service = ProfileService(db_session)

        with pytest.raises(ConflictError):
            await service.update_profile(user_a.id, username="bob")

    async def test_update_profile_keeps_own_username(self, db_session, user_a):
        service = ProfileService(db_session)

        profile = await service.update_profile(user_a.id, username="alice", first_name="Ally")

        assert profile["username"] == "alice"
        assert profile["first_name"] == "Ally"

    async def test_mutual_connections(self, db_session, user_a, user_b, user_c):
        follows = FollowService(db_session)
        await follows.follow(user_a.id, user_c.id)
        await follows.follow(user_b.id, user_c.id)
        service = ProfileService(db_session)

        result = await service.get_mutual_connections(user_a.id, user_b.id)
        count = await service.get_mutual_connections_count(user_a.id, user_b.id)

        assert [user["id"] for user in result["mutual_connections"]] == [user_c.id]
        assert result["pagination"]["total"] == 1
        assert count == {"user_id": user_b.id, "mutual_connections_count": 1}

    async def test_mutual_connections_with_yourself(self, db_session, user_a):
        service = ProfileService(db_session)

        with pytest.raises(BadRequestError):
            await service.get_mutual_connections_count(user_a.id, user_a.id)
