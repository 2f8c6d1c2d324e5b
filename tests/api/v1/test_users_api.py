"""
Integration tests for User API endpoints.
Covers profile, privacy settings, blocking and the follow graph.
"""


class TestProfileAPI:
    """Current user and privacy settings."""

    async def test_get_me(self, client, user_a):
        response = await client.get("/v1/users/me")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == user_a.id
        assert data["email"] == "alice@example.com"
        assert data["full_name"] == "Alice Archer"
        assert "password_hash" not in data

    async def test_privacy_roundtrip(self, client):
        initial = await client.get("/v1/users/me/privacy")
        assert initial.json() == {"who_can_message": "everyone"}

        updated = await client.put("/v1/users/me/privacy", json={"who_can_message": "followers"})
        assert updated.status_code == 200
        assert updated.json() == {"who_can_message": "followers"}

    async def test_privacy_invalid_value(self, client):
        response = await client.put("/v1/users/me/privacy", json={"who_can_message": "friends"})

        assert response.status_code == 400
        assert response.json()["detail"] == "who_can_message must be 'everyone', 'followers', or 'none'"

    async def test_privacy_setting_applies_to_new_conversations(self, client, as_user, user_a, user_b):
        as_user(user_b)
        await client.put("/v1/users/me/privacy", json={"who_can_message": "none"})

        as_user(user_a)
        response = await client.get(f"/v1/users/{user_b.id}/can-message")

        assert response.json() == {"can_message": False, "reason": "This user has disabled new messages"}

    async def test_own_profile_roundtrip(self, client, user_a):
        updated = await client.put(
            "/v1/users/me/profile",
            json={"bio": "Climbs on weekends", "avatar_url": "https://cdn.example.com/alice.png"}
        )
        assert updated.status_code == 200

        response = await client.get("/v1/users/me/profile")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == user_a.id
        assert data["bio"] == "Climbs on weekends"
        assert data["avatar_url"] == "https://cdn.example.com/alice.png"
        assert data["stats"] == {"followers_count": 0, "following_count": 0}
        assert data["privacy_settings"] == {"who_can_message": "everyone"}

    async def test_update_profile_empty_body(self, client):
        response = await client.put("/v1/users/me/profile", json={})

        assert response.status_code == 400
        assert response.json()["detail"] == "no fields to update"

    async def test_update_profile_invalid_username(self, client):
        response = await client.put("/v1/users/me/profile", json={"username": "no spaces"})

        assert response.status_code == 422

    async def test_update_profile_username_taken(self, client, user_b):
        response = await client.put("/v1/users/me/profile", json={"username": "bob"})

        assert response.status_code == 409
        assert response.json()["error_kind"] == "conflict"

    async def test_user_profile(self, client, user_a, user_b, user_c, as_user):
        await client.post(f"/v1/users/{user_c.id}/follow")
        as_user(user_b)
        await client.post(f"/v1/users/{user_c.id}/follow")
        await client.post(f"/v1/users/{user_a.id}/follow")

        as_user(user_a)
        response = await client.get(f"/v1/users/{user_b.id}/profile")

        assert response.status_code == 200
        data = response.json()
        assert data["username"] == "bob"
        assert data["is_following"] is False
        assert data["is_followed_by"] is True
        assert data["mutual_connections_count"] == 1
        assert data["stats"] == {"followers_count": 0, "following_count": 2}
        assert "email" not in data

    async def test_user_profile_not_found(self, client):
        response = await client.get("/v1/users/00000000-0000-0000-0000-000000000000/profile")

        assert response.status_code == 404

    async def test_mutual_connections(self, client, user_a, user_b, user_c, as_user):
        await client.post(f"/v1/users/{user_c.id}/follow")
        as_user(user_b)
        await client.post(f"/v1/users/{user_c.id}/follow")

        as_user(user_a)
        listing = await client.get(f"/v1/users/{user_b.id}/mutual-connections")
        count = await client.get(f"/v1/users/{user_b.id}/mutual-connections/count")

        assert [u["username"] for u in listing.json()["mutual_connections"]] == ["carol"]
        assert count.json() == {"user_id": user_b.id, "mutual_connections_count": 1}


class TestBlockAPI:
    """Blocking endpoints."""

    async def test_block_with_reason_and_list(self, client, user_b):
        response = await client.post(f"/v1/users/{user_b.id}/block", json={"reason": "spam"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "user blocked successfully"}

        listing = await client.get("/v1/users/blocked")
        blocked = listing.json()["blocked_users"]
        assert [item["id"] for item in blocked] == [user_b.id]
        assert blocked[0]["username"] == "bob"
        assert blocked[0]["blocked_at"]

    async def test_block_without_body(self, client, user_b):
        response = await client.post(f"/v1/users/{user_b.id}/block")

        assert response.status_code == 200

    async def test_block_yourself(self, client, user_a):
        response = await client.post(f"/v1/users/{user_a.id}/block")

        assert response.status_code == 400

    async def test_unblock(self, client, user_b):
        await client.post(f"/v1/users/{user_b.id}/block")

        response = await client.delete(f"/v1/users/{user_b.id}/block")

        assert response.status_code == 200
        listing = await client.get("/v1/users/blocked")
        assert listing.json()["blocked_users"] == []

    async def test_unblock_without_block(self, client, user_b):
        response = await client.delete(f"/v1/users/{user_b.id}/block")

        assert response.status_code == 404
        assert response.json()["detail"] == "block relationship not found"

    async def test_can_message(self, client, user_b):
        response = await client.get(f"/v1/users/{user_b.id}/can-message")

        assert response.status_code == 200
        assert response.json() == {"can_message": True, "reason": ""}

    async def test_can_message_unknown_user(self, client):
        response = await client.get("/v1/users/00000000-0000-0000-0000-000000000000/can-message")

        assert response.status_code == 404


class TestFollowAPI:
    """Follow graph endpoints."""

    async def test_follow_flow(self, client, user_a, user_b):
        response = await client.post(f"/v1/users/{user_b.id}/follow")
        assert response.status_code == 200

        status = await client.get(f"/v1/users/{user_b.id}/follow")
        assert status.json() == {"user_id": user_b.id, "is_following": True}

        followers = await client.get(f"/v1/users/{user_b.id}/followers")
        assert [u["id"] for u in followers.json()["users"]] == [user_a.id]

        following = await client.get(f"/v1/users/{user_a.id}/following")
        assert [u["id"] for u in following.json()["users"]] == [user_b.id]
        assert following.json()["users"][0]["is_followed_by_me"] is True

        stats = await client.get(f"/v1/users/{user_b.id}/follow-stats")
        assert stats.json() == {"followers_count": 1, "following_count": 0}

        unfollow = await client.delete(f"/v1/users/{user_b.id}/follow")
        assert unfollow.status_code == 200
        status = await client.get(f"/v1/users/{user_b.id}/follow")
        assert status.json()["is_following"] is False

    async def test_follow_yourself(self, client, user_a):
        response = await client.post(f"/v1/users/{user_a.id}/follow")

        assert response.status_code == 400

    async def test_follow_unlocks_followers_only_user(self, client, make_user):
        private = await make_user(email="private@example.com", who_can_message="followers")

        denied = await client.post("/v1/conversations", json={"recipient_id": private.id})
        assert denied.status_code == 403
        assert denied.json()["detail"] == "Only followers can message this user"

        await client.post(f"/v1/users/{private.id}/follow")
        allowed = await client.post("/v1/conversations", json={"recipient_id": private.id})
        assert allowed.status_code == 201
