"""Auth and health endpoints."""

import pytest

from src.notelink.security import jwt as jwt_module


class MemoryBlacklist:
    """Stands in for the Redis client on the blacklist paths."""

    def __init__(self):
        self.keys = {}

    async def add_to_blacklist(self, token_jti, expire=900):
        self.keys[token_jti] = expire
        return True

    async def is_token_blacklisted(self, token_jti):
        return token_jti in self.keys


@pytest.fixture
def blacklist(monkeypatch):
    store = MemoryBlacklist()
    monkeypatch.setattr(jwt_module, "get_redis_client", lambda: store)
    return store


REGISTER = {
    "username": "carol",
    "email": "carol@example.com",
    "password": "CarolPass123!",
    "confirm_password": "CarolPass123!",
}


async def test_register_login_me_logout(async_client, blacklist):
    registered = await async_client.post("/api/auth/register", json=REGISTER)
    assert registered.status_code == 201

    login = await async_client.post("/api/auth/login", json={"username": "carol", "password": "CarolPass123!"})
    assert login.status_code == 200
    headers = {"Authorization": f"Bearer {login.json()['access_token']}"}

    me = await async_client.get("/api/auth/me", headers=headers)
    assert me.json()["username"] == "carol"

    logout = await async_client.post("/api/auth/logout", headers=headers)
    assert logout.json() == {"message": "Logged out successfully"}
    assert len(blacklist.keys) == 1

    after = await async_client.get("/api/auth/me", headers=headers)
    assert after.status_code == 403


async def test_bad_login(async_client, alice):
    response = await async_client.post("/api/auth/login", json={"username": "alice", "password": "not-the-one"})
    assert response.status_code == 401


async def test_garbage_token(async_client):
    response = await async_client.get("/api/auth/me", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 403


async def test_liveness_and_index(async_client):
    assert (await async_client.get("/health")).json() == {"status": "ok"}
    index = (await async_client.get("/api/")).json()
    assert index["endpoints"]["chat"] == "/api/chat/"
    assert index["realtime"]["socketio_path"] == "/socket.io"


async def test_health_endpoint(async_client):
    response = await async_client.get("/api/health/")
    assert response.status_code == 200
    body = response.json()
    assert body["checks"]["database"]["connected"] is True
    assert body["status"] in ("healthy", "degraded")

    realtime = await async_client.get("/api/health/realtime")
    assert set(realtime.json()) == {"node_id", "connections", "online_users", "backplane"}
