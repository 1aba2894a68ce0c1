"""
End-to-end tests through the FastAPI app.
"""

import pytest

from conftest import ADMIN_ID, ALICE_ID, BOB_ID, OWNER_ID, PASSWORD


async def login(client, identifier="alice", password=PASSWORD):
    return await client.post("/auth/login", json={"identifier": identifier, "password": password})


# =============================================================================
# Health
# =============================================================================


@pytest.mark.asyncio
async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


# =============================================================================
# Auth
# =============================================================================


class TestAuth:
    @pytest.mark.asyncio
    async def test_login_then_me(self, client):
        r = await login(client, "alice@example.com")
        assert r.status_code == 200
        body = r.json()
        assert body["token_type"] == "bearer"

        r = await client.get("/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert r.status_code == 200
        me = r.json()
        assert me["id"] == ALICE_ID
        assert me["username"] == "alice"
        assert "password_hash" not in me

    @pytest.mark.asyncio
    @pytest.mark.parametrize("identifier,password", [
        ("alice", "wrong-password"),
        ("nobody", PASSWORD),
    ])
    async def test_login_rejected(self, client, identifier, password):
        r = await login(client, identifier, password)
        assert r.status_code == 401
        assert r.json()["error"]["message"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_me_without_token(self, client):
        r = await client.get("/auth/me")
        assert r.status_code == 401
        body = r.json()
        assert body["success"] is False
        assert body["error"]["status"] == 401
        assert body["error"]["message"] == "Access token is required"
        assert "timestamp" in body["error"]

    @pytest.mark.asyncio
    async def test_me_with_garbage_token(self, client):
        r = await client.get("/auth/me", headers={"Authorization": "Bearer nope"})
        assert r.status_code == 401
        assert r.json()["error"]["message"] == "Invalid token"

    @pytest.mark.asyncio
    async def test_forgot_and_reset(self, client, app, sender):
        r = await client.post(
            "/auth/forgot-password",
            json={"email": "alice@example.com", "username": "alice"},
        )
        assert r.status_code == 200
        generic = r.json()["message"]

        r = await client.post(
            "/auth/forgot-password",
            json={"email": "nobody@example.com", "username": "nobody"},
        )
        assert r.json()["message"] == generic

        await app.state.reset_flow.drain()
        [(email, token)] = sender.sent
        assert email == "alice@example.com"

        r = await client.post(
            "/auth/reset-password",
            json={"token": token, "new_password": "fresh-password-1"},
        )
        assert r.status_code == 200
        assert r.json()["message"] == "Password reset successfully"

        assert (await login(client, "alice", PASSWORD)).status_code == 401
        assert (await login(client, "alice", "fresh-password-1")).status_code == 200

        r = await client.post(
            "/auth/reset-password",
            json={"token": token, "new_password": "another-password"},
        )
        assert r.status_code == 400
        assert r.json()["success"] is False

    @pytest.mark.asyncio
    async def test_change_password(self, client, auth_header):
        r = await client.post(
            "/auth/change-password",
            json={"current_password": PASSWORD, "new_password": "changed-password"},
            headers=auth_header(ALICE_ID),
        )
        assert r.status_code == 200
        assert (await login(client, "alice", "changed-password")).status_code == 200


# =============================================================================
# Connections
# =============================================================================


class TestConnections:
    @pytest.mark.asyncio
    async def test_request_accept_remove(self, client, auth_header):
        alice, bob = auth_header(ALICE_ID), auth_header(BOB_ID)

        r = await client.post("/connections/request", json={"addressee_id": BOB_ID}, headers=alice)
        assert r.status_code == 200
        connection_id = r.json()["connection"]["id"]

        r = await client.get("/connections/pending", headers=bob)
        [pending] = r.json()["pendingConnections"]
        assert pending["other_user_id"] == ALICE_ID
        assert pending["direction"] == "incoming"

        # The requester cannot accept their own request
        r = await client.post(f"/connections/accept/{connection_id}", headers=alice)
        assert r.status_code == 404

        r = await client.post(f"/connections/accept/{connection_id}", headers=bob)
        assert r.status_code == 200
        assert r.json()["connection"]["status"] == "accepted"

        r = await client.get(f"/connections/check/{BOB_ID}", headers=alice)
        assert r.json() == {"connected": True, "status": "accepted"}

        r = await client.get("/connections", headers=bob)
        assert [c["other_user_id"] for c in r.json()["connections"]] == [ALICE_ID]

        r = await client.post("/connections/request", json={"addressee_id": ALICE_ID}, headers=bob)
        assert r.status_code == 400

        r = await client.delete(f"/connections/{connection_id}", headers=bob)
        assert r.status_code == 200
        r = await client.get(f"/connections/check/{BOB_ID}", headers=alice)
        assert r.json() == {"connected": False, "status": None}

    @pytest.mark.asyncio
    async def test_self_request(self, client, auth_header):
        r = await client.post(
            "/connections/request", json={"addressee_id": ALICE_ID}, headers=auth_header(ALICE_ID)
        )
        assert r.status_code == 400

    @pytest.mark.asyncio
    async def test_requires_auth(self, client):
        assert (await client.get("/connections")).status_code == 401


# =============================================================================
# Privacy settings
# =============================================================================


class TestPrivacySettings:
    @pytest.mark.asyncio
    async def test_owner_reads_and_updates(self, client, auth_header):
        owner = auth_header(OWNER_ID)
        r = await client.get(f"/users/{OWNER_ID}/privacy", headers=owner)
        assert r.status_code == 200
        assert set(r.json().values()) == {"everyone"}

        r = await client.put(
            f"/users/{OWNER_ID}/privacy",
            json={"community_posts_visibility": "connections"},
            headers=owner,
        )
        assert r.status_code == 200
        assert r.json()["community_posts_visibility"] == "connections"
        assert r.json()["posts_on_profile_visibility"] == "everyone"

    @pytest.mark.asyncio
    async def test_other_user_forbidden(self, client, auth_header):
        r = await client.get(f"/users/{OWNER_ID}/privacy", headers=auth_header(ALICE_ID))
        assert r.status_code == 403
        assert r.json()["success"] is False

    @pytest.mark.asyncio
    async def test_admin_bypass(self, client, auth_header):
        r = await client.put(
            f"/users/{OWNER_ID}/privacy",
            json={"posts_on_profile_visibility": "none"},
            headers=auth_header(ADMIN_ID),
        )
        assert r.status_code == 200
        assert r.json()["posts_on_profile_visibility"] == "none"
