"""Tests for AuthService."""

import uuid
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException

from src.notelink.core.schemas.auth import LoginRequest, RegisterRequest
from src.notelink.core.services import auth_service as auth_module
from src.notelink.core.services.auth_service import AuthService
from src.notelink.security.jwt import decode_access_token
from src.notelink.security.password import pwd_context


@pytest.fixture
def service(test_session):
    return AuthService(test_session)


def _register(**overrides):
    data = {
        "username": "newbie",
        "email": "newbie@example.com",
        "password": "Sup3rSecret!",
        "confirm_password": "Sup3rSecret!",
        "full_name": "New Bie",
    }
    data.update(overrides)
    return RegisterRequest(**data)


async def test_register_then_login(service):
    user = await service.register_user(_register())
    assert user.username == "newbie"
    assert user.is_active is True

    token = await service.authenticate_user(LoginRequest(username="newbie", password="Sup3rSecret!"))

    assert token.token_type == "bearer"
    assert token.user.id == user.id
    assert token.expires_in == service.settings.access_token_expire_minutes * 60
    payload = await decode_access_token(token.access_token)
    assert payload["sub"] == str(user.id)


async def test_duplicate_username(service, alice):
    with pytest.raises(HTTPException) as exc:
        await service.register_user(_register(username="alice"))
    assert exc.value.status_code == 400


async def test_duplicate_email_is_case_insensitive(service, alice):
    with pytest.raises(HTTPException) as exc:
        await service.register_user(_register(email="ALICE@example.com"))
    assert exc.value.status_code == 400
    assert exc.value.detail == "Email already registered"


async def test_wrong_password(service, alice):
    with pytest.raises(HTTPException) as exc:
        await service.authenticate_user(LoginRequest(username="alice", password="wrong-password"))
    assert exc.value.status_code == 401


async def test_inactive_user_cannot_login(service, make_user):
    await make_user("sleepy", is_active=False)
    with pytest.raises(HTTPException) as exc:
        await service.authenticate_user(LoginRequest(username="sleepy", password="TestPassword123!"))
    assert exc.value.status_code == 401


async def test_get_current_user(service, alice):
    assert (await service.get_current_user(alice.id)).username == "alice"
    with pytest.raises(HTTPException) as exc:
        await service.get_current_user(uuid.uuid4())
    assert exc.value.status_code == 404


async def test_logout_blacklists_token(service, monkeypatch):
    blacklist = AsyncMock(return_value=True)
    monkeypatch.setattr(auth_module, "blacklist_token", blacklist)

    assert await service.logout_user("some.jwt.token") is True
    blacklist.assert_awaited_once_with("some.jwt.token")


def test_register_rejects_mismatched_passwords():
    with pytest.raises(ValueError):
        _register(confirm_password="Different1!")


async def test_login_upgrades_legacy_hash(service, make_user, test_session):
    user = await make_user("oldtimer")
    user.password_hash = pwd_context.handler("bcrypt").using(rounds=4).hash("FromNode123!")
    await test_session.commit()

    token = await service.authenticate_user(LoginRequest(username="oldtimer", password="FromNode123!"))

    assert token.user.id == user.id
    await test_session.refresh(user)
    assert user.password_hash.startswith("$bcrypt-sha256$")
    # the upgraded hash still logs in
    again = await service.authenticate_user(LoginRequest(username="oldtimer", password="FromNode123!"))
    assert again.user.id == user.id
