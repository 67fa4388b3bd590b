"""User repository tests."""

import pytest

from src.notelink.core.repositories.user_repository import UserRepository


@pytest.fixture
def repo(test_session):
    return UserRepository(test_session)


async def test_lookup_by_username_and_email(repo, alice):
    assert (await repo.get_by_username("alice")).id == alice.id
    assert (await repo.get_by_email("Alice@Example.com")).id == alice.id
    assert await repo.get_by_username("nobody") is None
    assert await repo.is_username_taken("alice") is True


async def test_chat_users_exclude_caller_and_unavailable(repo, alice, bob, make_user):
    await make_user("inactive", is_active=False)
    await make_user("pending", is_verified=False)
    await make_user("zoe", full_name="Zoe Lab Partner")

    users = await repo.list_chat_users(alice.id)

    assert [u.username for u in users] == ["bob", "zoe"]


@pytest.mark.parametrize("search, expected", [("ZO", ["zoe"]), ("partner", ["zoe"]), ("  ", ["bob", "zoe"])])
async def test_chat_user_search(repo, alice, bob, make_user, search, expected):
    await make_user("zoe", full_name="Zoe Lab Partner")

    users = await repo.list_chat_users(alice.id, search=search)

    assert [u.username for u in users] == expected
